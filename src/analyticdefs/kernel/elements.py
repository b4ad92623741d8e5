"""Host element model: element ids, references, instances and changes.

This is the slice of the configuration-management host that the analytic
definition transforms need. Instances own their value trees; everything else
here is an immutable identifier or a read-only lookup.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Literal, Optional, Protocol, Tuple

NETSUITE = "netsuite"
INSTANCE = "instance"
TYPE_ID = "type"


@dataclass(frozen=True)
class ElemID:
    """Dotted element identifier, e.g. ``netsuite.workbook.instance.custworkbook1``.

    Type ids carry no name parts (``netsuite.dataset_column``). Instance ids
    carry the instance name followed by any nested path inside its value.
    """
    adapter: str
    type_name: str
    id_type: str = TYPE_ID
    name_parts: Tuple[str, ...] = ()

    @classmethod
    def from_full_name(cls, full_name: str) -> "ElemID":
        parts = full_name.split(".")
        if len(parts) < 2:
            raise ValueError(f"Invalid element id '{full_name}': expected '<adapter>.<type>[...]'")
        if len(parts) == 2:
            return cls(parts[0], parts[1])
        return cls(parts[0], parts[1], parts[2], tuple(parts[3:]))

    def get_full_name(self) -> str:
        parts = [self.adapter, self.type_name]
        if self.id_type != TYPE_ID or self.name_parts:
            parts.append(self.id_type)
            parts.extend(self.name_parts)
        return ".".join(parts)

    @property
    def name(self) -> str:
        """Instance name for instance ids, type name for type ids."""
        return self.name_parts[0] if self.name_parts else self.type_name

    @property
    def depth(self) -> int:
        """Number of dot-separated segments in the full name."""
        return len(self.get_full_name().split("."))

    def create_nested_id(self, *parts: str) -> "ElemID":
        return replace(self, name_parts=self.name_parts + tuple(str(p) for p in parts))

    def create_top_level_parent_id(self) -> "ElemID":
        if self.id_type == TYPE_ID:
            return replace(self, name_parts=())
        return replace(self, name_parts=self.name_parts[:1])

    def __str__(self) -> str:
        return self.get_full_name()


@dataclass(frozen=True)
class ReferenceExpression:
    """A structured pointer to a value inside another element."""
    elem_id: ElemID
    value: Any = field(default=None, compare=False)

    @property
    def full_name(self) -> str:
        return self.elem_id.get_full_name()


@dataclass
class InstanceElement:
    """A configuration instance: a typed, named value tree."""
    name: str
    type_name: str
    value: Dict[str, Any] = field(default_factory=dict)
    path: Optional[Tuple[str, ...]] = None
    annotations: Dict[str, Any] = field(default_factory=dict)
    adapter: str = NETSUITE

    @property
    def elem_id(self) -> ElemID:
        return ElemID(self.adapter, self.type_name, INSTANCE, (self.name,))


@dataclass
class Change:
    """A pending change to a single instance."""
    action: Literal["add", "modify", "remove"]
    before: Optional[InstanceElement] = None
    after: Optional[InstanceElement] = None

    @property
    def data(self) -> InstanceElement:
        """The instance the change applies: ``after`` unless it is a removal."""
        data = self.before if self.action == "remove" else self.after
        if data is None:
            raise ValueError(f"Change of type '{self.action}' has no instance data")
        return data


def get_change_data(change: Change) -> InstanceElement:
    return change.data


class ElementsSource(Protocol):
    """Read-only lookup of persisted elements by id."""

    def get(self, elem_id: ElemID) -> Optional[Any]:
        ...


class InMemoryElementsSource:
    """ElementsSource over a fixed collection of elements, keyed by full name."""

    def __init__(self, elements: Iterable[Any] = ()):
        self._elements: Dict[str, Any] = {}
        for element in elements:
            self._elements[element.elem_id.get_full_name()] = element

    def get(self, elem_id: ElemID) -> Optional[Any]:
        return self._elements.get(elem_id.get_full_name())

    def __len__(self) -> int:
        return len(self._elements)
