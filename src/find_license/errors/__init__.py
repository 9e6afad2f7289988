"""Error handling: exception hierarchy for lookups and module loading."""

from find_license.errors.exceptions import (
    BadStatusError,
    FindLicenseError,
    HTMLParseError,
    LookupCancelledError,
    ModuleLoadError,
    RequestBuildError,
    TransportError,
)

__all__ = [
    "FindLicenseError",
    "RequestBuildError",
    "TransportError",
    "LookupCancelledError",
    "BadStatusError",
    "HTMLParseError",
    "ModuleLoadError",
]
