"""Counted join: wait until every registered worker has finished."""

from __future__ import annotations

import asyncio


class CountedJoin:
    """A wait-group. ``add`` before launching, ``done`` when finished, ``wait`` for zero."""

    def __init__(self) -> None:
        self._pending = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def pending(self) -> int:
        return self._pending

    def add(self, count: int = 1) -> None:
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")
        self._pending += count
        self._idle.clear()

    def done(self) -> None:
        if self._pending <= 0:
            raise RuntimeError("CountedJoin.done() called with no pending workers")
        self._pending -= 1
        if self._pending == 0:
            self._idle.set()

    async def wait(self) -> None:
        await self._idle.wait()
