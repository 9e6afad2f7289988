"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# Lookup service
DEFAULT_BASE_URL = "https://pkg.go.dev"
DEFAULT_REQUEST_TIMEOUT = 5.0

# Default concurrency settings
DEFAULT_RATE = 1.0
DEFAULT_BURST = 1
DEFAULT_CONCURRENCY = 2
DEFAULT_STREAM_CAPACITY = 4

# Log level
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_DEBUG = False


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "base_url": DEFAULT_BASE_URL,
        "timeout": DEFAULT_REQUEST_TIMEOUT,
        "rate": DEFAULT_RATE,
        "burst": DEFAULT_BURST,
        "concurrency": DEFAULT_CONCURRENCY,
        "stream_capacity": DEFAULT_STREAM_CAPACITY,
        "log_level": DEFAULT_LOG_LEVEL,
        "debug": DEFAULT_DEBUG,
    }
