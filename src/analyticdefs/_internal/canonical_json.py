"""Centralized canonical JSON serialization of canonical value trees.

Canonical values may hold ``ReferenceExpression`` objects. In JSON they are
written as ``{"$ref": "<full element id>"}`` and read back the same way, so
a fetched instance can be stored, diffed and fed back into a deploy.
"""

import json
from typing import Any

from analyticdefs.kernel.elements import ElemID, ReferenceExpression

REF_KEY = "$ref"


def to_jsonable(obj: Any) -> Any:
    """Replace references by their ``$ref`` form, recursively."""
    if isinstance(obj, ReferenceExpression):
        return {REF_KEY: obj.full_name}
    if isinstance(obj, dict):
        return {key: to_jsonable(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    return obj


def from_jsonable(obj: Any) -> Any:
    """Inverse of ``to_jsonable``."""
    if isinstance(obj, dict):
        if set(obj) == {REF_KEY} and isinstance(obj[REF_KEY], str):
            return ReferenceExpression(ElemID.from_full_name(obj[REF_KEY]))
        return {key: from_jsonable(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [from_jsonable(item) for item in obj]
    return obj


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization for byte-stable artifacts.

    Rules:
    - UTF-8 encoding
    - Sorted keys
    - Stable separators (",", ":")
    - References written as {"$ref": ...}

    Args:
        obj: Canonical value tree to serialize

    Returns:
        Canonical JSON string (UTF-8 encoded)
    """
    return json.dumps(
        to_jsonable(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False  # UTF-8 encoding
    )


def pretty_dumps(obj: Any) -> str:
    """Indented, key-ordered JSON for human-facing output."""
    return json.dumps(to_jsonable(obj), indent=2, ensure_ascii=False)
