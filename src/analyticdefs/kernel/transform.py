"""Schema-guided transformation of value trees.

``transform_values`` calls a transform function on a value, then descends
into whatever the function returned: mapping entries get the declared type
of the matching field, list items get the list's item type. Values with no
declared type (unknown fields, items of a non-list) are still visited, with
``node=None``.

Empty results are dropped from their parent unless ``allow_empty`` is set,
so a null sentinel decoded to ``{}`` disappears from the canonical tree.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from analyticdefs.kernel.elements import ElemID
from analyticdefs.kernel.schema import SchemaGraph, SchemaNode

# `netsuite.<type>.instance.<name>`: the path of a definition's root value
ROOT_PATH_DEPTH = 4


@dataclass(frozen=True)
class TransformArgs:
    value: Any
    node: Optional[SchemaNode]
    path: ElemID


TransformFunc = Callable[[TransformArgs], Any]


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (dict, list)) and len(value) == 0)


class _Walker:
    def __init__(self, graph: SchemaGraph, func: TransformFunc, allow_empty: bool):
        self.graph = graph
        self.func = func
        self.allow_empty = allow_empty

    def _keep(self, value: Any) -> bool:
        if value is None:
            return False
        return self.allow_empty or not _is_empty(value)

    def walk(self, value: Any, node: Optional[SchemaNode], path: ElemID) -> Any:
        new_value = self.func(TransformArgs(value, node, path))
        if isinstance(new_value, list):
            item_node = self.graph.item_type(node)
            items = []
            for index, item in enumerate(new_value):
                result = self.walk(item, item_node, path.create_nested_id(str(index)))
                if self._keep(result):
                    items.append(result)
            return items
        if isinstance(new_value, dict):
            result_map = {}
            for key, child in new_value.items():
                result = self.walk(child, self.graph.field_type(node, key), path.create_nested_id(key))
                if self._keep(result):
                    result_map[key] = result
            return result_map
        return new_value


def transform_values(
    values: dict,
    graph: SchemaGraph,
    transform_func: TransformFunc,
    path_id: ElemID,
    allow_empty: bool = False,
) -> Optional[dict]:
    """Transform a definition's root values against ``graph``.

    Args:
        values: Root mapping of the definition
        graph: Schema of the document kind; its root types ``values``
        transform_func: Called top-down on every value
        path_id: Element id of the owning instance, used as the root path
        allow_empty: Keep empty mappings and lists instead of dropping them

    Returns:
        The transformed mapping, or None if nothing is left
    """
    result = _Walker(graph, transform_func, allow_empty).walk(values, graph.root, path_id)
    if result is None or (not allow_empty and _is_empty(result)):
        return None
    return result
