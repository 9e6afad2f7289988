"""Bounded async result stream, ordered by completion."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from find_license.types import LicenseResult

_CLOSED = object()


class ResultStream:
    """Bounded channel of license results with an explicit close.

    Iteration yields results until the producer calls ``close``; a full
    stream blocks ``put`` so a slow consumer throttles the producers.
    """

    def __init__(self, capacity: int = 4) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self._exhausted = False
        self._emitted = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def emitted(self) -> int:
        """Number of results pushed so far."""
        return self._emitted

    async def put(self, result: LicenseResult) -> None:
        if self._closed:
            raise RuntimeError("cannot put into a closed ResultStream")
        await self._queue.put(result)
        self._emitted += 1

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_CLOSED)

    def __aiter__(self) -> ResultStream:
        return self

    async def __anext__(self) -> LicenseResult:
        if self._exhausted:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._exhausted = True
            raise StopAsyncIteration
        return item  # type: ignore[return-value]

    async def collect(self) -> list[LicenseResult]:
        """Drain the stream into a list (returns once the stream closes)."""
        return [result async for result in self]
