"""analyticdefs: schema-driven transforms for NetSuite workbook and dataset definitions."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("analyticdefs")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from analyticdefs.analytics import AnalyticsFilter
from analyticdefs.api import deploy_definition, fetch_definition, validate_changes, RoundTripResult
from analyticdefs.config import TransformConfig
from analyticdefs.contracts import ChangeError
from analyticdefs.codes import ChangeCode, Severity

__all__ = [
    "__version__",
    "AnalyticsFilter",
    "fetch_definition",
    "deploy_definition",
    "validate_changes",
    "RoundTripResult",
    "TransformConfig",
    "ChangeError",
    "ChangeCode",
    "Severity",
]
