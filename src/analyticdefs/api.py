"""Public API for the analyticdefs package.

High-level functions over plain instance values. Hosts embedding the
transforms in a fetch/deploy lifecycle use ``AnalyticsFilter`` instead.
"""

import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from analyticdefs.analytics import (
    get_document_kind,
    parse_instance,
    to_deployable_value,
)
from analyticdefs.config import DEFAULT_CONFIG, TransformConfig
from analyticdefs.contracts import ChangeError
from analyticdefs.kernel.elements import Change, ElementsSource, InstanceElement
from analyticdefs.kernel.references import TRANSLATION_COLLECTION, ElementLookup
from analyticdefs.validators import unsupported_workbooks_validator


def _instance(value: Mapping[str, Any], kind: str, name: Optional[str]) -> InstanceElement:
    document_kind = get_document_kind(kind)
    instance_name = name or value.get("scriptid") or document_kind.name
    return InstanceElement(name=str(instance_name), type_name=document_kind.name, value=copy.deepcopy(dict(value)))


def translation_collection(name: str, value: Mapping[str, Any]) -> InstanceElement:
    """A translation collection instance, e.g. ``{"strings": {"string": {"greeting": {"scriptid": ...}}}}``."""
    return InstanceElement(name=name, type_name=TRANSLATION_COLLECTION, value=dict(value))


def fetch_definition(
    instance_value: Mapping[str, Any],
    kind: str,
    name: Optional[str] = None,
    elements: Iterable[Any] = (),
    elements_source: Optional[ElementsSource] = None,
    config: TransformConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """Canonical value of a fetched workbook or dataset.

    Args:
        instance_value: ``scriptid``, ``name``, ``dependencies`` and the XML ``definition``
        kind: ``workbook`` or ``dataset``
        name: Instance name (defaults to the scriptid)
        elements: In-flight elements searched first for translation collections
        elements_source: Persisted elements searched next
        config: Transform settings

    Returns:
        The instance value with the definition parsed and merged in

    Raises:
        UnsupportedDocumentKindError: If kind is not a supported document kind
        DefinitionParseError: If the definition is not well-formed XML
    """
    instance = _instance(instance_value, kind, name)
    lookup = ElementLookup(elements, elements_source)
    return parse_instance(instance, get_document_kind(kind), lookup, config).value


def deploy_definition(
    value: Mapping[str, Any],
    kind: str,
    name: Optional[str] = None,
    config: TransformConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """Deployable value (XML definition included) of a canonical workbook or dataset value.

    Raises:
        UnsupportedDocumentKindError: If kind is not a supported document kind
    """
    instance = _instance(value, kind, name)
    return to_deployable_value(instance, get_document_kind(kind), config)


def validate_changes(changes: Iterable[Change]) -> List[ChangeError]:
    """Change errors for a batch of pending changes."""
    return unsupported_workbooks_validator(changes)


class RoundTripResult(BaseModel):
    """Result of fetching a definition and deploying it straight back."""
    canonical: Dict[str, Any]  # canonical value after fetch
    deployed: Dict[str, Any]  # deployable value rebuilt from the canonical value
    stable: bool  # fetching the rebuilt definition yields the same canonical value

    model_config = ConfigDict(arbitrary_types_allowed=True)


def roundtrip_definition(
    instance_value: Mapping[str, Any],
    kind: str,
    name: Optional[str] = None,
    elements: Iterable[Any] = (),
    elements_source: Optional[ElementsSource] = None,
    config: TransformConfig = DEFAULT_CONFIG,
) -> RoundTripResult:
    """Fetch, deploy and fetch again, reporting whether the canonical value is stable."""
    elements = list(elements)
    canonical = fetch_definition(instance_value, kind, name, elements, elements_source, config)
    deployed = deploy_definition(canonical, kind, name, config)
    refetched = fetch_definition(
        {**instance_value, **deployed}, kind, name, elements, elements_source, config
    )
    return RoundTripResult(canonical=canonical, deployed=deployed, stable=refetched == canonical)
