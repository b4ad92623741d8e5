"""Fetch and pre-deploy hooks for workbook and dataset analytic definitions.

On fetch, every workbook/dataset instance has its XML ``definition`` parsed,
normalized against the kind's schema and merged into the instance value;
the kind's schema types are registered alongside. Before deploy, changed
instances are turned back into ``scriptid``/``name``/``dependencies``/
``definition`` (plus summary arrays for workbooks).
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from analyticdefs._internal.xml_codec import parse_definition, serialize_definition
from analyticdefs.config import DEFAULT_CONFIG, TransformConfig
from analyticdefs.errors import DefinitionParseError, UnsupportedDocumentKindError
from analyticdefs.kernel.dataset_schema import DATASET, dataset_schema
from analyticdefs.kernel.denormalize import (
    SUMMARY_ARRAYS,
    build_summary_arrays,
    definition_name,
    denormalize_definition,
)
from analyticdefs.kernel.elements import Change, ElementsSource, InstanceElement, get_change_data
from analyticdefs.kernel.normalize import normalize_definition
from analyticdefs.kernel.references import ElementLookup
from analyticdefs.kernel.schema import ObjectType, SchemaGraph
from analyticdefs.kernel.wire import T, without
from analyticdefs.kernel.workbook_schema import WORKBOOK, workbook_schema

logger = logging.getLogger(__name__)

ORIGINAL_FIELDS = ("scriptid", "name", "definition", "dependencies")
SUMMARY_FIELDS = tuple(summary_field for _, _, summary_field, _ in SUMMARY_ARRAYS)


@dataclass(frozen=True)
class DocumentKind:
    """A supported analytic definition kind."""
    name: str
    schema_factory: Callable[[], SchemaGraph]
    root_discriminator: str  # `_T_` value of the definition root
    discriminated_field: Optional[str]  # root child carrying `_T_`, None for the root itself
    has_summary_arrays: bool

    @property
    def schema(self) -> SchemaGraph:
        return self.schema_factory()

    def tag_root(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Put the root discriminator back where this kind's wire format expects it."""
        if self.discriminated_field is None:
            return {T: self.root_discriminator, **without(values, T)}
        header = values.get(self.discriminated_field)
        if not isinstance(header, dict):
            header = {}
        return {
            **values,
            self.discriminated_field: {T: self.root_discriminator, **without(header, T)},
        }


WORKBOOK_KIND = DocumentKind(
    name=WORKBOOK,
    schema_factory=workbook_schema,
    root_discriminator="workbook",
    discriminated_field="Workbook",
    has_summary_arrays=True,
)
DATASET_KIND = DocumentKind(
    name=DATASET,
    schema_factory=dataset_schema,
    root_discriminator="dataSet",
    discriminated_field=None,
    has_summary_arrays=False,
)
DOCUMENT_KINDS: Dict[str, DocumentKind] = {kind.name: kind for kind in (WORKBOOK_KIND, DATASET_KIND)}


def get_document_kind(type_name: str) -> DocumentKind:
    try:
        return DOCUMENT_KINDS[type_name]
    except KeyError:
        raise UnsupportedDocumentKindError(type_name, list(DOCUMENT_KINDS)) from None


def retype_instance(instance: InstanceElement, kind: DocumentKind) -> InstanceElement:
    """A new instance of ``kind`` sharing the original's name, value, path and annotations."""
    return InstanceElement(
        name=instance.name,
        type_name=kind.name,
        value=instance.value,
        path=instance.path,
        annotations=instance.annotations,
        adapter=instance.adapter,
    )


def parse_instance(
    instance: InstanceElement,
    kind: DocumentKind,
    lookup: Optional[ElementLookup] = None,
    config: TransformConfig = DEFAULT_CONFIG,
) -> InstanceElement:
    """Replace the instance's XML definition by its normalized values.

    Raises:
        DefinitionParseError: If the definition is not well-formed XML
    """
    definition = instance.value.get("definition")
    if not isinstance(definition, str):
        logger.debug("%s has no definition to parse", instance.elem_id.get_full_name())
        return instance

    raw_values = without(parse_definition(definition), "name")
    normalized = normalize_definition(raw_values, kind.schema, instance.elem_id, lookup, config)
    if normalized is not None:
        base = without(instance.value, "definition", *(SUMMARY_FIELDS if kind.has_summary_arrays else ()))
        instance.value = {**base, **without(normalized, "name")}
    return instance


def to_deployable_value(
    instance: InstanceElement,
    kind: DocumentKind,
    config: TransformConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """The instance value the target expects: original fields, XML definition, summaries."""
    definition_values = without(instance.value, *ORIGINAL_FIELDS)
    encoded = kind.tag_root(
        denormalize_definition(definition_values, kind.schema, instance.elem_id, config)
    )
    name = instance.value.get("name")
    if name is not None:
        encoded["name"] = definition_name(name)

    deployable = {
        "name": name,
        "scriptid": instance.value.get("scriptid"),
        "dependencies": instance.value.get("dependencies"),
        "definition": serialize_definition(encoded, config.pretty_xml, config.xml_indent),
    }
    deployable = {key: value for key, value in deployable.items() if value is not None}
    if kind.has_summary_arrays:
        deployable.update(build_summary_arrays(instance.value))
    return deployable


def _is_kind_type(element: Any, kind: DocumentKind) -> bool:
    return isinstance(element, ObjectType) and element.name.startswith(kind.name)


class AnalyticsFilter:
    """Host lifecycle hooks for workbook and dataset instances."""

    name = "parseAnalytics"

    def __init__(
        self,
        elements_source: Optional[ElementsSource] = None,
        config: TransformConfig = DEFAULT_CONFIG,
    ):
        self.elements_source = elements_source
        self.config = config

    def _fetch_kind(self, elements: List[Any], kind: DocumentKind) -> None:
        graph = kind.schema
        instances = [
            element for element in elements
            if isinstance(element, InstanceElement) and element.type_name == kind.name
        ]
        remaining = [
            element for element in elements
            if not _is_kind_type(element, kind)
            and not (isinstance(element, InstanceElement) and element.type_name == kind.name)
        ]
        lookup = ElementLookup(remaining, self.elements_source)

        parsed = []
        for instance in instances:
            clone = retype_instance(instance, kind)
            try:
                parsed.append(parse_instance(clone, kind, lookup, self.config))
            except DefinitionParseError as e:
                logger.warning("keeping %s unparsed: %s", clone.elem_id.get_full_name(), e)
                parsed.append(clone)

        elements[:] = [*remaining, graph.root, *graph.inner_types(), *parsed]
        logger.info("parsed %d %s definitions", len(parsed), kind.name)

    def on_fetch(self, elements: List[Any]) -> None:
        """Parse every workbook and dataset instance in ``elements``, in place."""
        self._fetch_kind(elements, WORKBOOK_KIND)
        self._fetch_kind(elements, DATASET_KIND)

    def pre_deploy(self, changes: Iterable[Change]) -> None:
        """Turn changed workbook and dataset instances back into their deployable shape."""
        count = 0
        for change in changes:
            instance = get_change_data(change)
            kind = DOCUMENT_KINDS.get(instance.type_name)
            if kind is None:
                continue
            if isinstance(instance.value.get("definition"), str):
                logger.warning(
                    "%s was never parsed, deploying its definition unchanged",
                    instance.elem_id.get_full_name(),
                )
                continue
            instance.value = to_deployable_value(instance, kind, self.config)
            count += 1
        logger.info("prepared %d analytic definitions for deploy", count)
