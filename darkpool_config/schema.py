"""
Configuration schema (``darkpool_config.schema``).

``PoolConfig`` is the single configuration structure passed explicitly to
the intake service, the batch selector, the dispatcher, and the scheduler.
No component reads environment variables or files on its own.
"""

from __future__ import annotations

from dataclasses import dataclass

from darkpool_kernel.domain.fees import DEFAULT_PREMIUM_PERCENT
from darkpool_kernel.exceptions import ConfigurationError

DEFAULT_MAX_BATCH_SIZE = 10
DEFAULT_BATCH_WINDOW_SECONDS = 30
DEFAULT_DISPATCH_TIMEOUT_SECONDS = 30.0
DEFAULT_DATABASE_URL = "sqlite:///darkpool.db"
DEFAULT_SERVICE_NAME = "agent-dark-pool"


@dataclass(frozen=True)
class PoolConfig:
    """Process-wide settings, read at cycle/request time."""

    privacy_premium_percent: int = DEFAULT_PREMIUM_PERCENT
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE
    batch_window_seconds: int = DEFAULT_BATCH_WINDOW_SECONDS
    dispatch_timeout_seconds: float = DEFAULT_DISPATCH_TIMEOUT_SECONDS
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    service_name: str = DEFAULT_SERVICE_NAME

    def __post_init__(self) -> None:
        if self.privacy_premium_percent < 0:
            raise ConfigurationError(
                "privacy_premium_percent", self.privacy_premium_percent,
                "must be >= 0",
            )
        if self.max_batch_size < 1:
            raise ConfigurationError(
                "max_batch_size", self.max_batch_size, "must be >= 1",
            )
        if self.batch_window_seconds < 1:
            raise ConfigurationError(
                "batch_window_seconds", self.batch_window_seconds, "must be >= 1",
            )
        if self.dispatch_timeout_seconds <= 0:
            raise ConfigurationError(
                "dispatch_timeout_seconds", self.dispatch_timeout_seconds,
                "must be > 0",
            )
