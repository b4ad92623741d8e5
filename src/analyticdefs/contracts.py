"""Public result models for analyticdefs."""

from pydantic import BaseModel, ConfigDict

from analyticdefs.codes import ChangeCode, Severity


class ChangeError(BaseModel):
    """An issue found in a pending change before it is deployed."""
    elem_id: str  # full element id, e.g. "netsuite.workbook.instance.custworkbook1"
    severity: Severity
    code: ChangeCode
    message: str
    detailed_message: str

    model_config = ConfigDict(frozen=True)
