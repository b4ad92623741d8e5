"""Deploy-time denormalization: canonical value tree -> wire shape.

Two passes, in order:

1. Field completion (schema-guided). Every declared field the target
   requires but the canonical tree lacks is put back, either from the
   field's default or as an empty placeholder. Existing values are never
   touched.
2. Wire re-encoding (schema-free). Tagged unions are collapsed back to
   ``_T_`` form, references rendered as text, and lists, booleans and
   numeric-looking strings wrapped in sentinels.
"""

import copy
from typing import Any, Dict, FrozenSet, List, NamedTuple, Optional

from analyticdefs.config import DEFAULT_CONFIG, TransformConfig
from analyticdefs.kernel.elements import ElemID, ReferenceExpression
from analyticdefs.kernel.references import from_reference, is_translation_reference
from analyticdefs.kernel.schema import (
    FieldDef,
    ObjectType,
    SchemaGraph,
    SchemaNode,
    is_list,
    is_object,
    is_primitive,
)
from analyticdefs.kernel.transform import ROOT_PATH_DEPTH, TransformArgs, transform_values
from analyticdefs.kernel.wire import (
    ATTRIBUTE_PREFIX,
    REFERENCE_FIELD,
    T,
    TEXT,
    TYPE,
    array_sentinel,
    collapse_tagged_union,
    is_empty_sentinel,
    null_sentinel,
    wrap_scalar,
)


class Placeholder(NamedTuple):
    value: Any
    is_empty: bool  # an empty sentinel; a parent made only of these collapses to null


def build_placeholder(
    graph: SchemaGraph,
    node: SchemaNode,
    _stack: FrozenSet[str] = frozenset(),
) -> Placeholder:
    """Empty value shaped like ``node``, built bottom-up.

    - list                                    -> array sentinel
    - primitive, or a union keeping its tag    -> null sentinel
    - object                                  -> its fields' placeholders, or a
      null sentinel when every one of them is an empty sentinel
    """
    if is_list(node):
        return Placeholder(array_sentinel(), True)
    if is_primitive(node) or (node.is_tagged_union and not node.ignore_discriminator):
        return Placeholder(null_sentinel(), True)
    if node.name in _stack:
        return Placeholder(null_sentinel(), True)

    children = {
        name: field_placeholder(graph, field_def, _stack | {node.name})
        for name, field_def in node.fields.items()
        if not field_def.annotations.omit_on_reconstruct
    }
    if all(child.is_empty for child in children.values()):
        return Placeholder(null_sentinel(), True)
    return Placeholder({name: child.value for name, child in children.items()}, False)


def field_placeholder(
    graph: SchemaGraph,
    field_def: FieldDef,
    _stack: FrozenSet[str] = frozenset(),
) -> Placeholder:
    if field_def.annotations.has_default:
        default = copy.deepcopy(field_def.annotations.default_value)
        return Placeholder(default, is_empty_sentinel(default))
    return build_placeholder(graph, graph.resolve(field_def.type_ref), _stack)


class FieldCompleter:
    """Transform function adding the fields a definition object is missing."""

    def __init__(self, graph: SchemaGraph):
        self.graph = graph

    def complete(self, value: Any, node: Optional[SchemaNode], path: ElemID) -> Any:
        if path.depth == ROOT_PATH_DEPTH:
            node = self.graph.root
        if not (is_object(node) and isinstance(value, dict) and TYPE not in value):
            return value
        if node.is_tagged_union and not node.ignore_discriminator and len(value) == 1:
            # single variant: mark it so the encoder can collapse it
            (variant,) = value
            return {**value, T: variant}
        return self._add_missing_fields(value, node)

    def _add_missing_fields(self, value: Dict[str, Any], node: ObjectType) -> Dict[str, Any]:
        completed = dict(value)
        for name, field_def in node.fields.items():
            if name in completed or field_def.annotations.omit_on_reconstruct:
                continue
            completed[name] = field_placeholder(self.graph, field_def).value
        return completed

    def __call__(self, args: TransformArgs) -> Any:
        return self.complete(args.value, args.node, args.path)


def complete_fields(values: dict, graph: SchemaGraph, path_id: ElemID) -> dict:
    """Field completion pass. Empty containers are kept; they encode as sentinels."""
    completed = transform_values(
        values=values,
        graph=graph,
        transform_func=FieldCompleter(graph),
        path_id=path_id,
        allow_empty=True,
    )
    return completed if completed is not None else {}


def _is_wire_key(key: Any) -> bool:
    """Attribute and text-content keys hold raw XML text and are never wrapped."""
    return isinstance(key, str) and (key.startswith(ATTRIBUTE_PREFIX) or key == TEXT)


def render_reference(value: Any) -> Any:
    # applied under every key, not only translationScriptId
    if isinstance(value, ReferenceExpression):
        return from_reference(value)
    return value


class WireEncoder:
    """Re-encodes a completed canonical tree into the parser's wire shape.

    For every mapping, each entry is first collapsed back into a tagged union
    where its shape says so and has its references (``translationScriptId``
    values, and any other reference) rendered as text. Unless the mapping is
    itself a sentinel, each entry is then wrapped in a sentinel where needed.
    Sequence items get the same treatment. The result is encoded recursively.
    """

    def __init__(self, config: TransformConfig = DEFAULT_CONFIG):
        self.config = config

    def encode(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self._encode_mapping(value)
        if isinstance(value, list):
            return self._encode_sequence(value)
        return render_reference(value)

    def _prepare(self, key: Any, value: Any) -> Any:
        value = collapse_tagged_union(key, value, self.config.discriminated_keys)
        return render_reference(value)

    def _encode_mapping(self, value: Dict[str, Any]) -> Dict[str, Any]:
        entries = {key: self._prepare(key, child) for key, child in value.items()}
        if TYPE not in value:
            entries = {
                key: child if _is_wire_key(key) else wrap_scalar(child)
                for key, child in entries.items()
            }
        return {key: self.encode(child) for key, child in entries.items()}

    def _encode_sequence(self, items: List[Any]) -> List[Any]:
        return [self.encode(wrap_scalar(self._prepare(index, item))) for index, item in enumerate(items)]


def denormalize_definition(
    values: dict,
    graph: SchemaGraph,
    path_id: ElemID,
    config: TransformConfig = DEFAULT_CONFIG,
) -> dict:
    """Field completion followed by wire re-encoding. The input is not modified."""
    return WireEncoder(config).encode(complete_fields(values, graph, path_id))


def definition_name(name: Any) -> Any:
    """The ``name`` written back into a definition.

    A name whose text is a translation reference becomes
    ``{translationScriptId: "<collectionId>.<stringId>"}``; other references
    are rendered as text; anything else is kept as is.
    """
    text = name.get(TEXT) if isinstance(name, dict) else name
    if is_translation_reference(text):
        return {REFERENCE_FIELD: from_reference(text)}
    if isinstance(text, ReferenceExpression):
        return {**name, TEXT: from_reference(text)} if isinstance(name, dict) else from_reference(text)
    return name


# (collection in the definition, variant tag, summary field, summary item)
SUMMARY_ARRAYS = (
    ("pivots", "pivot", "pivots", "pivot"),
    ("charts", "chart", "charts", "chart"),
    ("dataViews", "dataView", "tables", "table"),
)


def summary_array(value: Dict[str, Any], collection: str, variant: str) -> List[Dict[str, Any]]:
    """``[{scriptid: ...}]`` for every ``collection`` item whose variant has a scriptId."""
    records = []
    for item in value.get(collection) or []:
        if not isinstance(item, dict):
            continue
        inner = item.get(variant)
        if not isinstance(inner, dict):
            continue
        script_id = inner.get("scriptId")
        if script_id is not None:
            records.append({"scriptid": script_id})
    return records


def build_summary_arrays(value: Dict[str, Any]) -> Dict[str, Any]:
    return {
        summary_field: {summary_item: summary_array(value, collection, variant)}
        for collection, variant, summary_field, summary_item in SUMMARY_ARRAYS
    }
