"""Raw document nodes and the shape recognizers applied to them.

A parsed definition is a tree of three node kinds: scalars, sequences and
mappings. Which *wire shape* a node has (sentinel, tagged union, translation
string, ...) is decided by ``recognize_shape``, which evaluates a fixed list
of predicates in priority order and returns the first match:

1. null sentinel      ``{"@_type": "null"}``
2. array sentinel     ``{"@_type": "array", ...}``
3. boolean sentinel   ``{"@_type": "boolean", "#text": ...}``
4. string sentinel    ``{"@_type": "string", "#text": ...}``
5. tagged union       any other mapping holding ``_T_``
6. plain mapping
7. sequence
8. translation string ``"<translation prefix>...<.>..."`` with exactly one dot
9. scalar

A mapping that is both a sentinel and carries ``_T_`` is a sentinel.
"""

from enum import Enum
from typing import Any, Callable, Tuple

from analyticdefs.kernel.wire import VirtualType, has_discriminator, sentinel_type

DEFAULT_TRANSLATION_PREFIX = "custcollectiontranslations"


class RawKind(str, Enum):
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class Shape(str, Enum):
    NULL_SENTINEL = "null_sentinel"
    ARRAY_SENTINEL = "array_sentinel"
    BOOLEAN_SENTINEL = "boolean_sentinel"
    STRING_SENTINEL = "string_sentinel"
    TAGGED_UNION = "tagged_union"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    TRANSLATION_STRING = "translation_string"
    SCALAR = "scalar"


SENTINEL_SHAPES = frozenset({
    Shape.NULL_SENTINEL,
    Shape.ARRAY_SENTINEL,
    Shape.BOOLEAN_SENTINEL,
    Shape.STRING_SENTINEL,
})


def classify(value: Any) -> RawKind:
    if isinstance(value, dict):
        return RawKind.MAPPING
    if isinstance(value, (list, tuple)):
        return RawKind.SEQUENCE
    return RawKind.SCALAR


def split_translation_string(value: Any, prefix: str = DEFAULT_TRANSLATION_PREFIX) -> Tuple[str, str] | None:
    """``"custcollectiontranslations_x.greeting"`` -> ``("custcollectiontranslations_x", "greeting")``."""
    if not isinstance(value, str) or not value.startswith(prefix):
        return None
    parts = value.split(".")
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


def _is_sentinel(virtual_type: VirtualType) -> Callable[[Any, str], bool]:
    return lambda value, _prefix: sentinel_type(value) == virtual_type.value


_RECOGNIZERS: Tuple[Tuple[Shape, Callable[[Any, str], bool]], ...] = (
    (Shape.NULL_SENTINEL, _is_sentinel(VirtualType.NULL)),
    (Shape.ARRAY_SENTINEL, _is_sentinel(VirtualType.ARRAY)),
    (Shape.BOOLEAN_SENTINEL, _is_sentinel(VirtualType.BOOLEAN)),
    (Shape.STRING_SENTINEL, _is_sentinel(VirtualType.STRING)),
    (Shape.TAGGED_UNION, lambda value, _prefix: has_discriminator(value)),
    (Shape.MAPPING, lambda value, _prefix: classify(value) == RawKind.MAPPING),
    (Shape.SEQUENCE, lambda value, _prefix: classify(value) == RawKind.SEQUENCE),
    (Shape.TRANSLATION_STRING, lambda value, prefix: split_translation_string(value, prefix) is not None),
)


def recognize_shape(value: Any, translation_prefix: str = DEFAULT_TRANSLATION_PREFIX) -> Shape:
    for shape, predicate in _RECOGNIZERS:
        if predicate(value, translation_prefix):
            return shape
    return Shape.SCALAR
