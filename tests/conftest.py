"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed analyticdefs package.
"""

import json
import os
import pytest
from pathlib import Path

from analyticdefs.api import translation_collection
from analyticdefs.kernel.elements import INSTANCE, NETSUITE, ElemID, InstanceElement

FIXTURES = Path(__file__).resolve().parent / "fixtures"

TRANSLATION_COLLECTION_NAME = "custcollectiontranslations123"


@pytest.fixture
def workbook_xml() -> str:
    return (FIXTURES / "workbook_definition.xml").read_text(encoding="utf-8")


@pytest.fixture
def dataset_xml() -> str:
    return (FIXTURES / "dataset_definition.xml").read_text(encoding="utf-8")


@pytest.fixture
def translations() -> list:
    """Translation collection instances holding the `greeting` and `dataset_name` strings."""
    data = json.loads((FIXTURES / "translations.json").read_text(encoding="utf-8"))
    return [translation_collection(name, value) for name, value in data.items()]


@pytest.fixture
def workbook_id() -> ElemID:
    return ElemID(NETSUITE, "workbook", INSTANCE, ("custworkbook1",))


@pytest.fixture
def dataset_id() -> ElemID:
    return ElemID(NETSUITE, "dataset", INSTANCE, ("custdataset1",))


@pytest.fixture
def workbook_instance(workbook_xml) -> InstanceElement:
    return InstanceElement(
        name="custworkbook1",
        type_name="workbook",
        value={
            "scriptid": "custworkbook1",
            "name": "Customer workbook",
            "dependencies": {"dependency": ["custdataset1"]},
            "definition": workbook_xml,
        },
    )


@pytest.fixture
def dataset_instance(dataset_xml) -> InstanceElement:
    return InstanceElement(
        name="custdataset1",
        type_name="dataset",
        value={
            "scriptid": "custdataset1",
            "name": "Customers",
            "definition": dataset_xml,
        },
    )


def pytest_sessionfinish(session, exitstatus):
    """Best-effort cleanup for basetemp on Windows without patching pytest internals."""
    if os.name != "nt":
        return
    basetemp = getattr(session.config.option, "basetemp", None)
    if not basetemp:
        return
    basetemp_path = Path(basetemp)
    if not basetemp_path.exists():
        return
    try:
        import shutil
        shutil.rmtree(basetemp_path)
    except (PermissionError, OSError):
        # If cleanup fails, let it surface as a warning rather than masking errors.
        import warnings
        warnings.warn(f"Could not remove basetemp: {basetemp_path}")
