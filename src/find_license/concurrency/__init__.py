"""Concurrency: rate limiting, gating and dispatch for batch lookups."""

from find_license.concurrency.dispatcher import Dispatcher
from find_license.concurrency.gate import ConcurrencyGate
from find_license.concurrency.join import CountedJoin
from find_license.concurrency.rate_limiter import RateLimiter
from find_license.concurrency.stream import ResultStream

__all__ = ["ConcurrencyGate", "CountedJoin", "Dispatcher", "RateLimiter", "ResultStream"]
