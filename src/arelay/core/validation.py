r"""Parameter validation utilities for the client configuration.

This module provides validation functions for retry and rate limit
parameters to ensure they meet the required constraints before being
used by the request execution pipeline.
"""

from __future__ import annotations

__all__ = ["validate_retry_params", "validate_timeout"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


def validate_timeout(timeout: float | httpx.Timeout) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for server responses.
            Must be > 0 if provided as a numeric value.

    Raises:
        ValueError: If timeout is a numeric value <= 0.

    Example:
        ```pycon
        >>> from arelay.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(0)
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if isinstance(timeout, (int, float)) and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry_params(max_retries: int, retry_interval: float) -> None:
    """Validate retry parameters.

    Args:
        max_retries: Maximum number of retry attempts after a server
            error. Must be >= 0. A value of 0 means a single attempt.
        retry_interval: Base backoff interval in seconds. Must be >= 0.

    Raises:
        ValueError: If max_retries or retry_interval are negative.

    Example:
        ```pycon
        >>> from arelay.core import validate_retry_params
        >>> validate_retry_params(max_retries=3, retry_interval=1.0)
        >>> validate_retry_params(max_retries=0, retry_interval=0.0)
        >>> validate_retry_params(max_retries=-1, retry_interval=1.0)
        Traceback (most recent call last):
        ...
        ValueError: max_retries must be >= 0, got -1

        ```
    """
    if max_retries < 0:
        msg = f"max_retries must be >= 0, got {max_retries}"
        raise ValueError(msg)
    if retry_interval < 0:
        msg = f"retry_interval must be >= 0, got {retry_interval}"
        raise ValueError(msg)
