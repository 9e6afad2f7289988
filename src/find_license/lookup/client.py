"""Async lookup client scraping module licenses from pkg.go.dev."""

from __future__ import annotations

import asyncio
import logging
import ssl
from urllib.parse import urlsplit

import httpx

from find_license.config.defaults import DEFAULT_BASE_URL, DEFAULT_REQUEST_TIMEOUT
from find_license.errors.exceptions import (
    BadStatusError,
    FindLicenseError,
    LookupCancelledError,
    RequestBuildError,
    TransportError,
)
from find_license.lookup.extract import extract_license_fields
from find_license.types import LicenseFailure, LicenseFound, LicenseResult, Module

LICENSES_QUERY = "?tab=licenses"

DEFAULT_HEADERS = {"User-Agent": "find-license (+https://pkg.go.dev)"}


def licenses_url(module: Module, base_url: str = DEFAULT_BASE_URL) -> str:
    """Return ``<base>/<path>[@<version>]?tab=licenses`` for ``module``."""
    url = f"{base_url.rstrip('/')}/{module.path}"
    if module.version:
        url += f"@{module.version}"
    return url + LICENSES_QUERY


def build_tls_context() -> ssl.SSLContext:
    """Default verifying context that refuses anything older than TLS 1.3."""
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_3
    return context


def build_http_client(timeout: float = DEFAULT_REQUEST_TIMEOUT) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        verify=build_tls_context(),
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers=DEFAULT_HEADERS,
    )


class LookupClient:
    """Fetches one module's licenses page and turns it into a LicenseResult.

    ``fetch`` never raises for per-module problems: request construction,
    transport, cancellation, status and parse errors all come back as a
    ``LicenseFailure``. Each module is attempted exactly once.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._base_url = base_url
        self._host = urlsplit(base_url).hostname or ""
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client if client is not None else build_http_client(timeout)
        self._logger = logger or logging.getLogger(__name__)

    @property
    def base_url(self) -> str:
        return self._base_url

    def licenses_url(self, module: Module) -> str:
        return licenses_url(module, self._base_url)

    async def fetch(self, module: Module, cancel: asyncio.Event | None = None) -> LicenseResult:
        """Look up ``module`` once and classify the outcome."""
        url = self.licenses_url(module)
        self._logger.info("Fetch %s", url)

        try:
            body = await self._get(url, cancel)
            fields = await asyncio.to_thread(extract_license_fields, body)
        except FindLicenseError as exc:
            self._logger.debug("Lookup failed for %s: %s", url, exc)
            return LicenseFailure(module=module, uri=url, error=exc)

        return LicenseFound(
            module=module,
            uri=url,
            source=fields.source,
            content=fields.content,
            license_type=fields.license_type,
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, url: str, cancel: asyncio.Event | None) -> str:
        if cancel is not None and cancel.is_set():
            raise LookupCancelledError("do http req: cancelled before start")

        try:
            request = self._client.build_request(
                "GET",
                url,
                extensions={"sni_hostname": self._host} if self._host else None,
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError, TypeError) as exc:
            raise RequestBuildError(f"new http req {exc}", original=exc) from exc

        response = await self._send_cancellable(request, cancel)
        if response.status_code != httpx.codes.OK:
            raise BadStatusError(status_code=response.status_code)
        return response.text

    async def _send_cancellable(
        self,
        request: httpx.Request,
        cancel: asyncio.Event | None,
    ) -> httpx.Response:
        send = asyncio.ensure_future(self._send(request))
        if cancel is None:
            return await send

        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({send, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            send.cancel()
            raise
        finally:
            waiter.cancel()

        if send in done:
            return send.result()

        send.cancel()
        try:
            await send
        except asyncio.CancelledError:
            # Only the abandoned request's cancellation is expected here.
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
        except FindLicenseError:
            pass
        raise LookupCancelledError("do http req: cancelled")

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send with one deadline covering connect, headers and body."""
        try:
            async with asyncio.timeout(self._timeout):
                return await self._client.send(request)
        except TimeoutError as exc:
            raise TransportError(
                f"do http req: timed out after {self._timeout}s", original=exc, timed_out=True
            ) from exc
        except httpx.TimeoutException as exc:
            raise TransportError(f"do http req {exc}", original=exc, timed_out=True) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"do http req {exc}", original=exc) from exc
