"""find-license: look up licenses of Go module dependencies on pkg.go.dev."""

from find_license.core import LicenseFinder
from find_license.types import LicenseFailure, LicenseFound, LicenseResult, Module

__version__ = "0.1.0"

__all__ = [
    "LicenseFailure",
    "LicenseFinder",
    "LicenseFound",
    "LicenseResult",
    "Module",
    "__version__",
]
