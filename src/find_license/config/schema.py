"""Pydantic model validating the merged fetcher configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from find_license.config.defaults import (
    DEFAULT_BASE_URL,
    DEFAULT_BURST,
    DEFAULT_CONCURRENCY,
    DEFAULT_DEBUG,
    DEFAULT_LOG_LEVEL,
    DEFAULT_RATE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_STREAM_CAPACITY,
)


class FetcherSettings(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    rate: float = Field(default=DEFAULT_RATE, gt=0)
    burst: int = Field(default=DEFAULT_BURST, ge=1)
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)
    stream_capacity: int = Field(default=DEFAULT_STREAM_CAPACITY, ge=1)
    log_level: str = DEFAULT_LOG_LEVEL
    debug: bool = DEFAULT_DEBUG

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> FetcherSettings:
        """Validate a merged config dict; unknown keys are ignored."""
        return cls.model_validate({k: v for k, v in config.items() if k in cls.model_fields})
