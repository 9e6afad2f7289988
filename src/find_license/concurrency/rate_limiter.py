"""Token-bucket rate limiter bounding how fast lookups may start."""

from __future__ import annotations

import asyncio
import logging
import time

logger = logging.getLogger(__name__)


class RateLimiter:
    """Single token-bucket rate limiter with cancellable waits.

    The bucket holds at most ``burst`` tokens and refills continuously at
    ``rate`` tokens per second. It starts full.
    """

    def __init__(self, rate: float = 1.0, burst: int = 1) -> None:
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")

        self._rate = rate
        self._burst = burst

        # Bucket state
        self._tokens = float(burst)
        self._last_refill = time.monotonic()

        self._lock = asyncio.Lock()

        # Stats
        self._total_acquired = 0
        self._total_wait_seconds = 0.0

    @property
    def interval(self) -> float:
        """Seconds between two permits once the burst is spent."""
        return 1.0 / self._rate

    async def acquire(self, cancel: asyncio.Event | None = None) -> bool:
        """Wait until a token is available, then take it.

        Returns False without consuming a token if ``cancel`` is set before
        a token could be taken.
        """
        wait_total = 0.0

        async with self._lock:
            while True:
                if cancel is not None and cancel.is_set():
                    self._total_wait_seconds += wait_total
                    return False

                self._refill()
                if self._tokens >= 1:
                    self._tokens -= 1
                    self._total_acquired += 1
                    break

                wait_time = max((1 - self._tokens) / self._rate, 0.001)
                wait_total += wait_time

                # Release lock during sleep so other coroutines aren't blocked
                self._lock.release()
                try:
                    await _sleep_or_cancel(wait_time, cancel)
                finally:
                    await self._lock.acquire()

        self._total_wait_seconds += wait_total
        if wait_total:
            logger.debug("Rate limiter waited %.3fs", wait_total)
        return True

    @property
    def stats(self) -> dict:
        """Return current rate limiter statistics."""
        self._refill()
        return {
            "tokens_available": self._tokens,
            "total_acquired": self._total_acquired,
            "total_wait_seconds": self._total_wait_seconds,
        }

    def reset(self) -> None:
        """Reset all state (for testing)."""
        self._tokens = float(self._burst)
        self._last_refill = time.monotonic()
        self._total_acquired = 0
        self._total_wait_seconds = 0.0

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._last_refill = now
        self._tokens = min(float(self._burst), self._tokens + elapsed * self._rate)


async def _sleep_or_cancel(seconds: float, cancel: asyncio.Event | None) -> None:
    """Sleep for ``seconds`` or until ``cancel`` is set, whichever is first."""
    if cancel is None:
        await asyncio.sleep(seconds)
        return
    try:
        await asyncio.wait_for(cancel.wait(), timeout=seconds)
    except TimeoutError:
        pass
