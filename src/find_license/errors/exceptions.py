"""Custom exception hierarchy for find-license."""

from __future__ import annotations


class FindLicenseError(Exception):
    """Base exception for all find-license errors."""

    def __init__(self, message: str = "", original: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original = original


class RequestBuildError(FindLicenseError):
    """The lookup request could not be constructed (e.g. invalid URL)."""


class TransportError(FindLicenseError):
    """Network failure or total request timeout.

    Examples: DNS failure, TLS handshake failure, connection reset, timeout.
    """

    def __init__(
        self,
        message: str = "",
        original: BaseException | None = None,
        timed_out: bool = False,
    ) -> None:
        super().__init__(message, original=original)
        self.timed_out = timed_out


class LookupCancelledError(FindLicenseError):
    """The cancellation event fired before the response arrived."""


class BadStatusError(FindLicenseError):
    """The lookup service answered with a status other than 200."""

    def __init__(self, message: str = "", status_code: int = 0) -> None:
        super().__init__(message or f"status not ok {status_code}")
        self.status_code = status_code


class HTMLParseError(FindLicenseError):
    """The response body could not be parsed as HTML."""


class ModuleLoadError(FindLicenseError):
    """Enumerating the project's modules failed."""
