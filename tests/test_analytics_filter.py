"""Tests for the fetch and pre-deploy hooks."""

import logging

import pytest

from analyticdefs._internal.xml_codec import parse_definition
from analyticdefs.analytics import (
    DATASET_KIND,
    WORKBOOK_KIND,
    AnalyticsFilter,
    get_document_kind,
    retype_instance,
)
from analyticdefs.errors import UnsupportedDocumentKindError
from analyticdefs.kernel.elements import Change, InMemoryElementsSource, InstanceElement, ReferenceExpression
from analyticdefs.kernel.schema import ObjectType
from analyticdefs.kernel.wire import T


def _instances(elements, type_name):
    return [e for e in elements if isinstance(e, InstanceElement) and e.type_name == type_name]


def _types(elements):
    return {e.name for e in elements if isinstance(e, ObjectType)}


@pytest.fixture
def elements(workbook_instance, dataset_instance, translations):
    stale = [
        ObjectType(name="workbook", fields={}),
        ObjectType(name="workbook_legacyColumn", fields={}),
        ObjectType(name="dataset", fields={}),
        ObjectType(name="customrecordtype", fields={}),
    ]
    return [*stale, *translations, workbook_instance, dataset_instance]


class TestOnFetch:
    def test_instances_parsed(self, elements):
        AnalyticsFilter().on_fetch(elements)

        (workbook,) = _instances(elements, "workbook")
        assert "definition" not in workbook.value
        assert workbook.value["Workbook"]["scriptId"] == "custworkbook1"
        assert isinstance(workbook.value["Workbook"]["name"]["translationScriptId"], ReferenceExpression)

        (dataset,) = _instances(elements, "dataset")
        assert "definition" not in dataset.value
        assert dataset.value["baseRecord"] == {"id": "customer", "label": "Customer"}

    def test_types_replaced(self, elements):
        AnalyticsFilter().on_fetch(elements)
        types = _types(elements)

        assert "workbook_legacyColumn" not in types
        assert "customrecordtype" in types
        assert {obj.name for obj in WORKBOOK_KIND.schema.objects.values()} <= types
        assert {obj.name for obj in DATASET_KIND.schema.objects.values()} <= types
        registered = [e for e in elements if isinstance(e, ObjectType) and e.name == "workbook"]
        assert registered == [WORKBOOK_KIND.schema.root]

    def test_other_elements_kept(self, elements, translations):
        AnalyticsFilter().on_fetch(elements)
        assert all(collection in elements for collection in translations)

    def test_persisted_collections(self, workbook_instance, translations):
        elements = [workbook_instance]
        AnalyticsFilter(InMemoryElementsSource(translations)).on_fetch(elements)

        (workbook,) = _instances(elements, "workbook")
        assert isinstance(workbook.value["Workbook"]["name"]["translationScriptId"], ReferenceExpression)

    def test_malformed_definition_kept(self, caplog):
        broken = InstanceElement(
            name="custdataset9",
            type_name="dataset",
            value={"scriptid": "custdataset9", "definition": "<root><a></root>"},
        )
        elements = [broken]
        with caplog.at_level(logging.WARNING, logger="analyticdefs.analytics"):
            AnalyticsFilter().on_fetch(elements)

        (dataset,) = _instances(elements, "dataset")
        assert dataset.value["definition"] == "<root><a></root>"
        assert "custdataset9" in caplog.text

    def test_summary_fields_replaced(self, workbook_instance):
        workbook_instance.value["tables"] = {"table": [{"scriptid": "stale"}]}
        workbook_instance.value["pivots"] = {"pivot": [{"scriptid": "stale"}]}
        elements = [workbook_instance]
        AnalyticsFilter().on_fetch(elements)

        (workbook,) = _instances(elements, "workbook")
        assert "tables" not in workbook.value
        assert workbook.value["pivots"][0]["pivot"]["scriptId"] == "custpivot1"


class TestPreDeploy:
    def test_changed_instances_rebuilt(self, elements):
        hooks = AnalyticsFilter()
        hooks.on_fetch(elements)
        (workbook,) = _instances(elements, "workbook")
        (dataset,) = _instances(elements, "dataset")
        other = InstanceElement(name="customrecord1", type_name="customrecordtype", value={"scriptid": "customrecord1"})

        hooks.pre_deploy([
            Change(action="modify", before=workbook, after=workbook),
            Change(action="add", after=dataset),
            Change(action="add", after=other),
        ])

        assert set(workbook.value) == {"name", "scriptid", "dependencies", "definition", "pivots", "charts", "tables"}
        assert parse_definition(workbook.value["definition"])["Workbook"][T] == "workbook"
        assert set(dataset.value) == {"name", "scriptid", "definition"}
        assert parse_definition(dataset.value["definition"])[T] == "dataSet"
        assert other.value == {"scriptid": "customrecord1"}

    def test_unparsed_definition_deployed_unchanged(self, caplog):
        """A definition that failed to parse on fetch keeps its XML on deploy."""
        broken_xml = "<root><a></root>"
        elements = [
            InstanceElement(
                name="custdataset9",
                type_name="dataset",
                value={"scriptid": "custdataset9", "name": "Broken", "definition": broken_xml},
            )
        ]
        hooks = AnalyticsFilter()
        hooks.on_fetch(elements)
        (kept,) = _instances(elements, "dataset")

        with caplog.at_level(logging.WARNING, logger="analyticdefs.analytics"):
            hooks.pre_deploy([Change(action="modify", after=kept)])

        assert kept.value == {"scriptid": "custdataset9", "name": "Broken", "definition": broken_xml}
        assert "never parsed" in caplog.text

    def test_removal_uses_before(self, elements):
        hooks = AnalyticsFilter()
        hooks.on_fetch(elements)
        (dataset,) = _instances(elements, "dataset")

        hooks.pre_deploy([Change(action="remove", before=dataset)])
        assert "definition" in dataset.value

    def test_fetch_after_deploy_restores_canonical_value(self, elements, translations):
        hooks = AnalyticsFilter()
        hooks.on_fetch(elements)
        (workbook,) = _instances(elements, "workbook")
        canonical = dict(workbook.value)

        hooks.pre_deploy([Change(action="modify", after=workbook)])
        refetched = [*translations, workbook]
        hooks.on_fetch(refetched)

        (workbook_again,) = _instances(refetched, "workbook")
        assert workbook_again.value == canonical


class TestDocumentKinds:
    def test_lookup(self):
        assert get_document_kind("workbook") is WORKBOOK_KIND
        assert get_document_kind("dataset") is DATASET_KIND

    def test_unsupported(self):
        with pytest.raises(UnsupportedDocumentKindError) as excinfo:
            get_document_kind("savedsearch")
        assert "dataset, workbook" in str(excinfo.value)

    def test_retype(self, workbook_instance):
        clone = retype_instance(workbook_instance, DATASET_KIND)
        assert clone is not workbook_instance
        assert clone.type_name == "dataset"
        assert clone.value is workbook_instance.value
        assert clone.elem_id.get_full_name() == "netsuite.dataset.instance.custworkbook1"

    def test_tag_root(self):
        assert DATASET_KIND.tag_root({"a": 1}) == {T: "dataSet", "a": 1}
        assert WORKBOOK_KIND.tag_root({"Workbook": {"a": 1}}) == {"Workbook": {T: "workbook", "a": 1}}
        assert WORKBOOK_KIND.tag_root({}) == {"Workbook": {T: "workbook"}}
