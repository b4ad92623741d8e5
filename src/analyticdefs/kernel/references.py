"""Translation-collection references.

Definitions point at translated strings with ``<collectionId>.<stringId>``,
e.g. ``custcollectiontranslations_wb.greeting``. On fetch such a string
becomes a ``ReferenceExpression`` to

    netsuite.translationcollection.instance.<collectionId>.strings.string.<stringId>.scriptid

when the collection is known and holds that string. On deploy the reference
is turned back into ``<collectionId>.<stringId>``. Both directions are pure;
an unresolvable string or a reference of another shape never raises.
"""

import logging
import re
from typing import Any, Dict, Iterable, Optional

from analyticdefs.kernel.elements import (
    INSTANCE,
    NETSUITE,
    ElemID,
    ElementsSource,
    InstanceElement,
    ReferenceExpression,
)
from analyticdefs.kernel.raw import DEFAULT_TRANSLATION_PREFIX, split_translation_string

logger = logging.getLogger(__name__)

TRANSLATION_COLLECTION = "translationcollection"

_TRANSLATION_REFERENCE = re.compile(
    rf"^{NETSUITE}\.{TRANSLATION_COLLECTION}\.{INSTANCE}\.(?P<collection>\w+)"
    r"\.strings\.string\.(?P<string>\w+)\.scriptid$"
)


class ElementLookup:
    """Finds elements in the in-flight working set first, then in the elements source.

    The working set is indexed once on construction and never modified.
    """

    def __init__(
        self,
        elements: Iterable[Any] = (),
        elements_source: Optional[ElementsSource] = None,
    ):
        self._working_set: Dict[str, Any] = {}
        for element in elements:
            elem_id = getattr(element, "elem_id", None)
            if elem_id is not None:
                self._working_set.setdefault(elem_id.get_full_name(), element)
        self._elements_source = elements_source

    def get(self, elem_id: ElemID) -> Optional[Any]:
        element = self._working_set.get(elem_id.get_full_name())
        if element is None and self._elements_source is not None:
            element = self._elements_source.get(elem_id)
        return element


def translation_collection_id(collection_id: str) -> ElemID:
    return ElemID(NETSUITE, TRANSLATION_COLLECTION, INSTANCE, (collection_id,))


def translation_string_id(collection_id: str, string_id: str) -> ElemID:
    return translation_collection_id(collection_id).create_nested_id(
        "strings", "string", string_id, "scriptid"
    )


def _string_scriptid(instance: InstanceElement, string_id: str) -> Any:
    strings = (instance.value or {}).get("strings")
    if not isinstance(strings, dict):
        return None
    entries = strings.get("string")
    if not isinstance(entries, dict):
        return None
    entry = entries.get(string_id)
    if not isinstance(entry, dict):
        return None
    return entry.get("scriptid")


def to_reference(
    value: Any,
    lookup: Optional[ElementLookup],
    prefix: str = DEFAULT_TRANSLATION_PREFIX,
) -> Optional[ReferenceExpression]:
    """Reference for a ``<collectionId>.<stringId>`` string, or None if it cannot be resolved."""
    parts = split_translation_string(value, prefix)
    if parts is None or lookup is None:
        return None
    collection_id, string_id = parts
    instance = lookup.get(translation_collection_id(collection_id))
    if not isinstance(instance, InstanceElement):
        logger.debug("translation collection %s not found for %r", collection_id, value)
        return None
    scriptid = _string_scriptid(instance, string_id)
    if scriptid is None:
        logger.debug("translation string %s missing in collection %s", string_id, collection_id)
        return None
    return ReferenceExpression(translation_string_id(collection_id, string_id), scriptid)


def is_translation_reference(ref: Any) -> bool:
    return (
        isinstance(ref, ReferenceExpression)
        and _TRANSLATION_REFERENCE.match(ref.full_name) is not None
    )


def from_reference(ref: ReferenceExpression) -> str:
    """``<collectionId>.<stringId>`` for a translation string reference, else its full name."""
    match = _TRANSLATION_REFERENCE.match(ref.full_name)
    if match is None:
        return ref.full_name
    return f"{match.group('collection')}.{match.group('string')}"
