"""Schema model for analytic definitions.

A schema is a graph of named type nodes:

- ``PrimitiveType``: string, number, boolean, serviceid or unknown
- ``ListType``: a list of another node, referenced by name
- ``ObjectType``: an ordered mapping of field name -> ``FieldDef``

Fields and list items refer to other nodes by *name*, so two object types may
refer to each other (a formula holds a list of field-or-formula values, one
variant of which is a formula again). ``SchemaBuilder`` declares all nodes
first, wires fields second and then returns an immutable ``SchemaGraph``;
nothing is patched after ``build()``.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from analyticdefs.errors import DanglingTypeReferenceError, SchemaError
from analyticdefs.kernel.elements import NETSUITE, ElemID


class PrimitiveKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SERVICE_ID = "serviceid"
    UNKNOWN = "unknown"


# Type reference names of the builtin primitives
STRING = PrimitiveKind.STRING.value
NUMBER = PrimitiveKind.NUMBER.value
BOOLEAN = PrimitiveKind.BOOLEAN.value
SERVICE_ID = PrimitiveKind.SERVICE_ID.value
UNKNOWN = PrimitiveKind.UNKNOWN.value

_LIST_REF = re.compile(r"^List<(?P<inner>.+)>$")


def list_of(inner: str) -> str:
    """Type reference to a list of ``inner``."""
    return f"List<{inner}>"


class Restriction(BaseModel):
    """Value restriction carried as a field annotation (descriptive only)."""
    values: Optional[Tuple[str, ...]] = None
    regex: Optional[str] = None
    max_length: Optional[int] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class FieldAnnotations(BaseModel):
    """Per-field annotations.

    ``default_value`` is tracked by presence rather than by value, so ``None``
    and ``False`` are legitimate defaults. Use ``has_default``.
    """
    default_value: Any = None
    omit_on_reconstruct: bool = False
    required: bool = False
    is_attribute: bool = False
    restriction: Optional[Restriction] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def has_default(self) -> bool:
        return "default_value" in self.model_fields_set


@dataclass(frozen=True)
class PrimitiveType:
    name: str
    kind: PrimitiveKind


@dataclass(frozen=True)
class ListType:
    inner: str  # type reference of the items

    @property
    def name(self) -> str:
        return list_of(self.inner)


@dataclass(frozen=True)
class FieldDef:
    name: str
    type_ref: str
    annotations: FieldAnnotations = field(default_factory=FieldAnnotations)


@dataclass(frozen=True)
class ObjectType:
    name: str
    fields: Mapping[str, FieldDef]
    is_tagged_union: bool = False  # encoded as a single-variant `_T_` union on the wire
    ignore_discriminator: bool = False  # the `_T_` tag is dropped instead of nesting the variant

    @property
    def elem_id(self) -> ElemID:
        return ElemID(NETSUITE, self.name)


SchemaNode = Union[PrimitiveType, ListType, ObjectType]

BUILTIN_TYPES: Mapping[str, PrimitiveType] = MappingProxyType(
    {kind.value: PrimitiveType(kind.value, kind) for kind in PrimitiveKind}
)


def is_primitive(node: Optional[SchemaNode]) -> bool:
    return isinstance(node, PrimitiveType)


def is_list(node: Optional[SchemaNode]) -> bool:
    return isinstance(node, ListType)


def is_object(node: Optional[SchemaNode]) -> bool:
    return isinstance(node, ObjectType)


def is_string_type(node: Optional[SchemaNode]) -> bool:
    return isinstance(node, PrimitiveType) and node.kind == PrimitiveKind.STRING


class SchemaGraph:
    """Immutable, fully-wired schema for one document kind."""

    def __init__(self, root: str, objects: Dict[str, ObjectType]):
        self._root = root
        self._objects: Mapping[str, ObjectType] = MappingProxyType(dict(objects))

    @property
    def root(self) -> ObjectType:
        return self._objects[self._root]

    @property
    def objects(self) -> Mapping[str, ObjectType]:
        return self._objects

    def inner_types(self) -> List[ObjectType]:
        """All object types except the root, in declaration order."""
        return [obj for name, obj in self._objects.items() if name != self._root]

    def resolve(self, ref: str) -> SchemaNode:
        """Resolve a type reference to its node."""
        if ref in BUILTIN_TYPES:
            return BUILTIN_TYPES[ref]
        match = _LIST_REF.match(ref)
        if match:
            return ListType(match.group("inner"))
        if ref in self._objects:
            return self._objects[ref]
        raise KeyError(ref)

    def field_type(self, node: Optional[SchemaNode], field_name: str) -> Optional[SchemaNode]:
        """Declared type of ``node.field_name``, or None if the node has no such field."""
        if not isinstance(node, ObjectType):
            return None
        field_def = node.fields.get(field_name)
        if field_def is None:
            return None
        return self.resolve(field_def.type_ref)

    def item_type(self, node: Optional[SchemaNode]) -> Optional[SchemaNode]:
        """Item type of a list node, or None for anything else."""
        if not isinstance(node, ListType):
            return None
        return self.resolve(node.inner)

    def describe(self) -> Dict[str, Any]:
        """JSON-ready description of every object type, root first."""
        types = {}
        for obj in [self.root, *self.inner_types()]:
            types[obj.name] = {
                "is_tagged_union": obj.is_tagged_union,
                "ignore_discriminator": obj.ignore_discriminator,
                "fields": {
                    name: {
                        "type": field_def.type_ref,
                        **field_def.annotations.model_dump(mode="json", exclude_unset=True),
                    }
                    for name, field_def in obj.fields.items()
                },
            }
        return {"root": self._root, "types": types}


class SchemaBuilder:
    """Two-phase builder: declare every object type, then add fields, then build."""

    def __init__(self):
        self._declared: Dict[str, Dict[str, Any]] = {}
        self._fields: Dict[str, Dict[str, FieldDef]] = {}

    def declare(self, name: str, is_tagged_union: bool = False, ignore_discriminator: bool = False) -> str:
        """Declare an object type and return its type reference."""
        if name in self._declared or name in BUILTIN_TYPES:
            raise SchemaError(f"Type '{name}' declared twice")
        self._declared[name] = {
            "is_tagged_union": is_tagged_union,
            "ignore_discriminator": ignore_discriminator,
        }
        self._fields[name] = {}
        return name

    def add_field(self, owner: str, name: str, type_ref: str, **annotations: Any) -> None:
        if owner not in self._declared:
            raise SchemaError(f"Cannot add field '{name}' to undeclared type '{owner}'")
        if name in self._fields[owner]:
            raise SchemaError(f"Field '{owner}.{name}' declared twice")
        self._fields[owner][name] = FieldDef(name, type_ref, FieldAnnotations(**annotations))

    def add_fields(self, owner: str, fields: Mapping[str, Any]) -> None:
        """Add several fields; values are a type reference or ``(type_ref, annotations)``."""
        for name, declaration in fields.items():
            if isinstance(declaration, tuple):
                type_ref, annotations = declaration
                self.add_field(owner, name, type_ref, **annotations)
            else:
                self.add_field(owner, name, declaration)

    def _check_ref(self, owner: str, ref: str) -> None:
        match = _LIST_REF.match(ref)
        if match:
            self._check_ref(owner, match.group("inner"))
            return
        if ref not in BUILTIN_TYPES and ref not in self._declared:
            raise DanglingTypeReferenceError(owner, ref)

    def build(self, root: str) -> SchemaGraph:
        if root not in self._declared:
            raise SchemaError(f"Root type '{root}' was never declared")
        objects: Dict[str, ObjectType] = {}
        for name, flags in self._declared.items():
            for field_def in self._fields[name].values():
                self._check_ref(name, field_def.type_ref)
            objects[name] = ObjectType(
                name=name,
                fields=MappingProxyType(dict(self._fields[name])),
                **flags,
            )
        return SchemaGraph(root, objects)
