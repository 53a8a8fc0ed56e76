r"""Core configuration and validation shared by the sync and async
clients."""

from __future__ import annotations

__all__ = [
    "BACKOFF_COEFFICIENT",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RETRY_INTERVAL",
    "DEFAULT_TIMEOUT",
    "RETRY_HEADER",
    "ClientConfig",
    "validate_retry_params",
    "validate_timeout",
]

from arelay.core.config import (
    BACKOFF_COEFFICIENT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_INTERVAL,
    DEFAULT_TIMEOUT,
    RETRY_HEADER,
    ClientConfig,
)
from arelay.core.validation import validate_retry_params, validate_timeout
