"""Rate-limited, bounded-concurrency dispatcher for license lookups."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from find_license.concurrency.gate import ConcurrencyGate
from find_license.concurrency.join import CountedJoin
from find_license.concurrency.rate_limiter import RateLimiter
from find_license.concurrency.stream import ResultStream
from find_license.errors.exceptions import FindLicenseError
from find_license.types import DispatchState, LicenseFailure

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from find_license.types import LicenseResult, Module

    FetchFn = Callable[[Module, asyncio.Event | None], Awaitable[LicenseResult]]
    UrlFn = Callable[[Module], str]


class Dispatcher:
    """Fan modules out to lookup workers and fan results into one stream.

    Per module, in input order: take a gate slot, then a rate permit, then
    launch a worker. Each worker pushes exactly one result. The stream is
    closed once the input is exhausted and every launched worker is done.
    """

    def __init__(
        self,
        fetch: FetchFn,
        url_for: UrlFn,
        rate_limiter: RateLimiter | None = None,
        gate: ConcurrencyGate | None = None,
        stream_capacity: int = 4,
        logger: logging.Logger | None = None,
    ) -> None:
        self._fetch = fetch
        self._url_for = url_for
        self._rate_limiter = rate_limiter or RateLimiter()
        self._gate = gate or ConcurrencyGate()
        self._stream_capacity = stream_capacity
        self._logger = logger or logging.getLogger(__name__)

        self._state = DispatchState.IDLE
        self._join = CountedJoin()
        self._workers: set[asyncio.Task[None]] = set()
        self._dispatch_task: asyncio.Task[None] | None = None
        self._launched = 0
        self._cancelled_dispatch = False

    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def launched(self) -> int:
        """Number of workers started so far."""
        return self._launched

    @property
    def cancelled_dispatch(self) -> bool:
        """True if cancellation stopped the loop before the input was exhausted."""
        return self._cancelled_dispatch

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def gate(self) -> ConcurrencyGate:
        return self._gate

    def run(
        self,
        modules: Iterable[Module],
        cancel: asyncio.Event | None = None,
    ) -> ResultStream:
        """Start dispatching in the background and return the result stream.

        Must be called from a running event loop. A dispatcher runs once.
        """
        if self._state != DispatchState.IDLE:
            raise RuntimeError(f"Dispatcher already used (state: {self._state})")

        stream = ResultStream(self._stream_capacity)
        self._state = DispatchState.DISPATCHING
        self._dispatch_task = asyncio.create_task(self._dispatch(list(modules), cancel, stream))
        return stream

    async def wait_closed(self) -> None:
        """Wait until the dispatch task has closed the stream."""
        if self._dispatch_task is not None:
            await self._dispatch_task

    async def _dispatch(
        self,
        modules: list[Module],
        cancel: asyncio.Event | None,
        stream: ResultStream,
    ) -> None:
        try:
            for module in modules:
                # Permit taken with the slot held: starts stay one interval apart.
                await self._gate.acquire()
                if not await self._rate_limiter.acquire(cancel):
                    self._gate.release()
                    self._cancelled_dispatch = True
                    self._logger.info(
                        "Dispatch cancelled after %d of %d lookups started",
                        self._launched,
                        len(modules),
                    )
                    break

                self._join.add()
                self._launched += 1
                task = asyncio.create_task(self._work(module, cancel, stream))
                self._workers.add(task)
                task.add_done_callback(self._workers.discard)
        finally:
            self._state = DispatchState.DRAINING
            self._logger.debug("Draining %d in-flight lookups", self._join.pending)
            await self._join.wait()
            await stream.close()
            self._state = DispatchState.CLOSED
            self._logger.debug("Result stream closed after %d results", stream.emitted)

    async def _work(
        self,
        module: Module,
        cancel: asyncio.Event | None,
        stream: ResultStream,
    ) -> None:
        try:
            try:
                result = await self._fetch(module, cancel)
            except Exception as exc:
                self._logger.error("Lookup for %s raised unexpectedly: %s", module.path, exc)
                result = LicenseFailure(
                    module=module,
                    uri=self._url_for(module),
                    error=FindLicenseError(f"unexpected lookup error: {exc}", original=exc),
                )
            await stream.put(result)
        finally:
            self._join.done()
            self._gate.release()
