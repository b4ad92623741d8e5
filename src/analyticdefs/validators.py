"""Change validation for analytic definitions."""

from typing import Iterable, List

from analyticdefs.codes import ChangeCode, Severity
from analyticdefs.contracts import ChangeError
from analyticdefs.kernel.elements import Change, InstanceElement, get_change_data
from analyticdefs.kernel.workbook_schema import WORKBOOK

# Workbook content the target does not deploy
UNSUPPORTED_WORKBOOK_FIELDS = ("charts", "pivots", "datasetLinks", "dsLinks")

UNSUPPORTED_WORKBOOK_MESSAGE = (
    "The deployment of this workbook will probably not have an effect on the target "
    "environment as this workbook contains pivots, charts, or data links."
)
UNSUPPORTED_WORKBOOK_DETAILS = (
    "Deployment of workbooks that contain pivots, charts, or data links is not supported"
)


def check_workbook_validity(instance: InstanceElement) -> bool:
    """True if the workbook holds none of the content the target ignores."""
    return not any(instance.value.get(field) for field in UNSUPPORTED_WORKBOOK_FIELDS)


def unsupported_workbooks_validator(changes: Iterable[Change]) -> List[ChangeError]:
    """Warn about workbook additions and modifications that will not take effect."""
    errors = []
    for change in changes:
        if change.action == "remove":
            continue
        instance = get_change_data(change)
        if instance.type_name != WORKBOOK or check_workbook_validity(instance):
            continue
        errors.append(ChangeError(
            elem_id=instance.elem_id.get_full_name(),
            severity=Severity.WARNING,
            code=ChangeCode.UNSUPPORTED_WORKBOOK_CONTENT,
            message=UNSUPPORTED_WORKBOOK_MESSAGE,
            detailed_message=UNSUPPORTED_WORKBOOK_DETAILS,
        ))
    return errors
