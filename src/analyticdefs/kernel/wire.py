"""Wire vocabulary of parsed analytic definitions.

The XML encodes types informally. Two kinds of wrapper objects carry them:

- sentinel wrappers: ``{"@_type": "array", "_ITEM_": [...]}``,
  ``{"@_type": "boolean", "#text": "true"}``, ``{"@_type": "string", "#text": "12"}``
  and ``{"@_type": "null"}``
- tagged unions: ``{"_T_": "fieldReference", "id": ..., "label": ...}``, the
  variant name next to the variant's own fields

This module holds the keys and the pure encode/decode helpers for both. The
schema-guided walks live in ``normalize`` and ``denormalize``.
"""

import re
from enum import Enum
from typing import Any, Dict, Iterable, List

T = "_T_"
ATTRIBUTE_PREFIX = "@_"
TYPE = f"{ATTRIBUTE_PREFIX}type"
ITEM = "_ITEM_"
TEXT = "#text"

XML_TYPE = "xmlType"  # where an unexpected `_T_` is exposed in canonical values
REFERENCE_FIELD = "translationScriptId"


class VirtualType(str, Enum):
    ARRAY = "array"
    BOOLEAN = "boolean"
    STRING = "string"
    NULL = "null"


VIRTUAL_TYPES = frozenset(t.value for t in VirtualType)

# JavaScript's Number() is what the serializer uses to decide whether text
# "looks numeric"; this mirrors the literals it accepts.
_NUMBER_STR = re.compile(
    r"^\s*(?:"
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
    r"|[+-]?Infinity"
    r"|0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+"
    r")?\s*$"
)


def is_number_str(value: str) -> bool:
    """True if the serializer would read ``value`` as a number (the empty string included)."""
    return _NUMBER_STR.match(value) is not None


def to_text(value: Any) -> str:
    """Text form of a scalar as the XML layer writes it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return to_text(value).strip().lower() == "true"


def null_sentinel() -> Dict[str, str]:
    return {TYPE: VirtualType.NULL.value}


def array_sentinel(items: List[Any] | None = None) -> Dict[str, Any]:
    sentinel: Dict[str, Any] = {TYPE: VirtualType.ARRAY.value}
    if items is not None:
        sentinel[ITEM] = items
    return sentinel


def is_empty_sentinel(value: Any) -> bool:
    """True for a bare null sentinel or an item-less array sentinel."""
    return value == null_sentinel() or value == array_sentinel()


def sentinel_type(value: Any) -> str | None:
    """The virtual type named by a sentinel wrapper, or None if ``value`` is not one."""
    if isinstance(value, dict):
        virtual_type = value.get(TYPE)
        if isinstance(virtual_type, str) and virtual_type in VIRTUAL_TYPES:
            return virtual_type
    return None


def decode_sentinel(value: Dict[str, Any]) -> Any:
    """Decode a sentinel wrapper into its canonical value.

    - null    -> {}
    - array   -> list (absent payload -> [], single item -> [item])
    - boolean -> bool
    - string  -> str
    """
    virtual_type = sentinel_type(value)
    if virtual_type == VirtualType.NULL:
        return {}
    if virtual_type == VirtualType.ARRAY:
        items = value.get(ITEM)
        if items is None:
            return []
        return list(items) if isinstance(items, list) else [items]
    if virtual_type == VirtualType.BOOLEAN:
        return to_bool(value.get(TEXT))
    if virtual_type == VirtualType.STRING:
        return to_text(value.get(TEXT))
    raise ValueError(f"Not a sentinel wrapper: {value!r}")


def wrap_scalar(value: Any) -> Any:
    """Encode a canonical value into a sentinel wrapper where the wire needs one.

    Lists become array sentinels, booleans become boolean sentinels and
    numeric-looking strings become string sentinels, so the serializer does
    not read them back as numbers. Everything else is returned as is.
    """
    if isinstance(value, list):
        return array_sentinel(value)
    if isinstance(value, bool):
        return {TYPE: VirtualType.BOOLEAN.value, TEXT: to_text(value)}
    if isinstance(value, str) and is_number_str(value):
        return {TYPE: VirtualType.STRING.value, TEXT: value}
    return value


def has_discriminator(value: Any) -> bool:
    return isinstance(value, dict) and T in value


def without(value: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    return {k: v for k, v in value.items() if k not in keys}


def expand_tagged_union(value: Dict[str, Any], ignored: Iterable[str]) -> Dict[str, Any]:
    """``{_T_: tag, **fields}`` -> ``{tag: fields}``; ignored tags just lose ``_T_``."""
    tag = value[T]
    rest = without(value, T)
    if tag in ignored:
        return rest
    return {tag: rest}


def expose_discriminator(value: Dict[str, Any]) -> Dict[str, Any]:
    """``{_T_: tag, **fields}`` -> ``{xmlType: tag, **fields}`` for unexpected unions."""
    return {XML_TYPE: value[T], **without(value, T)}


def collapse_tagged_union(key: Any, value: Any, discriminated_keys: Iterable[str]) -> Any:
    """Re-encode the canonical child ``value`` stored under ``key`` as a tagged union.

    Shapes, in order:

    1. ``key`` is a discriminated key (``formula``): its tag was dropped on
       fetch, so it is restored from the key.
    2. ``{xmlType: tag, ...}``: an unexpected union exposed on fetch.
    3. ``{_T_: tag, tag: {...}}``: a single variant marked during field
       completion; the variant's fields are merged up next to ``_T_``.

    Anything else is returned unchanged.
    """
    if not isinstance(value, dict):
        return value
    if isinstance(key, str) and key in discriminated_keys and sentinel_type(value) is None:
        return {T: key, **without(value, T)}
    if XML_TYPE in value:
        return {T: value[XML_TYPE], **without(value, XML_TYPE)}
    if len(value) == 2 and T in value:
        tag = value[T]
        inner_key = next(k for k in value if k != T)
        inner = value[inner_key]
        if isinstance(inner, dict):
            return {T: tag, **inner}
    return value
