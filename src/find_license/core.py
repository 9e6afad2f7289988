"""Top-level entry point: LicenseFinder."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

import httpx

from find_license.concurrency.dispatcher import Dispatcher
from find_license.concurrency.gate import ConcurrencyGate
from find_license.concurrency.rate_limiter import RateLimiter
from find_license.concurrency.stream import ResultStream
from find_license.config.schema import FetcherSettings
from find_license.lookup.client import LookupClient
from find_license.types import LicenseResult, Module


class LicenseFinder:
    """Looks up license metadata for a batch of modules.

    Every call to ``fetch_licenses`` gets its own rate limiter, gate and
    dispatcher; the HTTP client is shared across calls until ``close``.
    """

    def __init__(
        self,
        settings: FetcherSettings | None = None,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings or FetcherSettings()
        self._logger = logger or logging.getLogger(__name__)
        self._lookup = LookupClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout,
            client=client,
            logger=self._logger,
        )
        self._last_dispatcher: Dispatcher | None = None

    @property
    def settings(self) -> FetcherSettings:
        return self._settings

    @property
    def lookup(self) -> LookupClient:
        return self._lookup

    @property
    def last_dispatcher(self) -> Dispatcher | None:
        """Dispatcher of the most recent ``fetch_licenses`` call."""
        return self._last_dispatcher

    def fetch_licenses(
        self,
        modules: Sequence[Module],
        cancel: asyncio.Event | None = None,
    ) -> ResultStream:
        """Start looking up ``modules``; results arrive in completion order."""
        self._logger.info("Start fetch %d licenses", len(modules))
        dispatcher = Dispatcher(
            fetch=self._lookup.fetch,
            url_for=self._lookup.licenses_url,
            rate_limiter=RateLimiter(rate=self._settings.rate, burst=self._settings.burst),
            gate=ConcurrencyGate(self._settings.concurrency),
            stream_capacity=self._settings.stream_capacity,
            logger=self._logger,
        )
        self._last_dispatcher = dispatcher
        return dispatcher.run(modules, cancel)

    async def collect(
        self,
        modules: Sequence[Module],
        cancel: asyncio.Event | None = None,
    ) -> list[LicenseResult]:
        return await self.fetch_licenses(modules, cancel).collect()

    async def close(self) -> None:
        await self._lookup.close()

    async def __aenter__(self) -> LicenseFinder:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
