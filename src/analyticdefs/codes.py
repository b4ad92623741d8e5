"""Code constants for analyticdefs.

These constants prevent stringly-typed severities and change codes and
ensure client code matches on the values the validators actually emit.
"""

from enum import Enum


class Severity(str, Enum):
    """Change error severities, ordered from least to most blocking."""

    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


class ChangeCode(str, Enum):
    """Codes attached to change errors."""

    # Warnings (non-blocking)
    UNSUPPORTED_WORKBOOK_CONTENT = "UNSUPPORTED_WORKBOOK_CONTENT"
