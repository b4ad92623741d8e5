"""Fetch-time normalization: raw parsed definition -> canonical value tree."""

import logging
from typing import Any, Optional

from analyticdefs.config import DEFAULT_CONFIG, TransformConfig
from analyticdefs.kernel.elements import ElemID, ReferenceExpression
from analyticdefs.kernel.raw import SENTINEL_SHAPES, RawKind, Shape, classify, recognize_shape
from analyticdefs.kernel.references import ElementLookup, to_reference
from analyticdefs.kernel.schema import SchemaGraph, SchemaNode, is_object, is_string_type
from analyticdefs.kernel.transform import ROOT_PATH_DEPTH, TransformArgs, transform_values
from analyticdefs.kernel.wire import (
    decode_sentinel,
    expand_tagged_union,
    expose_discriminator,
    to_text,
)

logger = logging.getLogger(__name__)


class FetchNormalizer:
    """Transform function decoding one raw value against its declared type."""

    def __init__(
        self,
        graph: SchemaGraph,
        lookup: Optional[ElementLookup] = None,
        config: TransformConfig = DEFAULT_CONFIG,
    ):
        self.graph = graph
        self.lookup = lookup
        self.config = config

    def _declared_type(self, node: Optional[SchemaNode], path: ElemID) -> Optional[SchemaNode]:
        # the parser wraps the definition in a synthetic root; re-anchor typing there
        if path.depth == ROOT_PATH_DEPTH:
            return self.graph.root
        return node

    def normalize(self, value: Any, node: Optional[SchemaNode], path: ElemID) -> Any:
        node = self._declared_type(node, path)
        if node is None:
            logger.debug("unexpected path in analytics type. Path: %s", path.get_full_name())

        shape = recognize_shape(value, self.config.translation_prefix)
        if shape in SENTINEL_SHAPES:
            return decode_sentinel(value)
        if shape == Shape.TAGGED_UNION:
            if not (is_object(node) and node.is_tagged_union):
                logger.debug("unexpected _T_ field in analytic instance. Path: %s", path.get_full_name())
                return expose_discriminator(value)
            return expand_tagged_union(value, self.config.ignored_discriminators)
        if shape in (Shape.MAPPING, Shape.SEQUENCE):
            return value
        if shape == Shape.TRANSLATION_STRING:
            reference = to_reference(value, self.lookup, self.config.translation_prefix)
            if reference is not None:
                return reference
        if (
            is_string_type(node)
            and value is not None
            and classify(value) == RawKind.SCALAR
            and not isinstance(value, ReferenceExpression)
        ):
            return to_text(value)
        return value

    def __call__(self, args: TransformArgs) -> Any:
        return self.normalize(args.value, args.node, args.path)


def normalize_definition(
    values: dict,
    graph: SchemaGraph,
    path_id: ElemID,
    lookup: Optional[ElementLookup] = None,
    config: TransformConfig = DEFAULT_CONFIG,
) -> Optional[dict]:
    """Normalize a parsed definition root into its canonical value tree.

    Returns None if nothing is left after dropping empty values.
    """
    return transform_values(
        values=values,
        graph=graph,
        transform_func=FetchNormalizer(graph, lookup, config),
        path_id=path_id,
        allow_empty=False,
    )
