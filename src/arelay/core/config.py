r"""Configuration dataclass and defaults for the request executor.

This module provides configuration constants and a dataclass-based
configuration object shared by ``Client`` and ``AsyncClient``.
"""

from __future__ import annotations

__all__ = [
    "BACKOFF_COEFFICIENT",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RETRY_INTERVAL",
    "DEFAULT_TIMEOUT",
    "RETRY_HEADER",
    "ClientConfig",
]

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from arelay.backoff import BaseBackoffStrategy, ExponentialBackoff
from arelay.core.validation import validate_retry_params

if TYPE_CHECKING:
    from arelay.letter import BaseDeadLetterSink
    from arelay.ratelimit import BaseRateLimiter


# Default timeout in seconds for the underlying httpx client
DEFAULT_TIMEOUT = 10.0

# Default maximum number of retries after a 5xx response
# Total attempts = max_retries + 1 (initial attempt)
DEFAULT_MAX_RETRIES = 3

# Default base backoff interval in seconds
# Wait before the retry following attempt n = retry_interval * (1.5 ** n)
# With 1.0: 1st retry waits 1.5s, 2nd waits 2.25s, 3rd waits 3.375s
DEFAULT_RETRY_INTERVAL = 1.0

# Exponential growth factor of the backoff interval
BACKOFF_COEFFICIENT = 1.5

# Header stamped on retried requests with the number of the failed attempt
RETRY_HEADER = "X-Retry"


@dataclass(frozen=True)
class ClientConfig:
    """Configuration of a ``Client`` or ``AsyncClient`` instance.

    The configuration is immutable: it is read by every in-flight call
    and can be shared between threads and between client instances. The
    rate limiter is the only shared object with mutable state, and it
    synchronizes itself.

    Note:
        The transport is NOT part of this config. It is the httpx client
        passed to the ``Client``/``AsyncClient`` constructor, which can
        carry any httpx transport.

    Args:
        host: Base URL (scheme, authority and optional base path) used by
            request descriptors that do not set their own host.
        max_retries: Maximum number of retries after a 5xx response.
            Must be >= 0. ``0`` means a single attempt.
        retry_interval: Base backoff interval in seconds. Must be >= 0.
        backoff_strategy: Optional custom backoff strategy. Defaults to
            ``ExponentialBackoff(base_delay=retry_interval)``.
        dead_letter: Optional sink receiving the requests that exhausted
            their retry budget with a 5xx response.
        rate_limiter: Optional rate limiter gating every call.

    Example:
        ```pycon
        >>> from arelay.core.config import ClientConfig
        >>> config = ClientConfig(host="http://localhost:3000")
        >>> config.max_retries
        3
        >>> config.get_backoff_strategy().calculate(1)
        1.5
        >>> merged = config.merge(max_retries=5)
        >>> merged.max_retries, config.max_retries
        (5, 3)

        ```
    """

    host: str | None = None
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_interval: float = DEFAULT_RETRY_INTERVAL
    backoff_strategy: BaseBackoffStrategy | None = None
    dead_letter: BaseDeadLetterSink | None = None
    rate_limiter: BaseRateLimiter | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Raises:
            ValueError: If any parameter fails validation.
        """
        validate_retry_params(max_retries=self.max_retries, retry_interval=self.retry_interval)

    def get_backoff_strategy(self) -> BaseBackoffStrategy:
        """Return the backoff strategy used between retries.

        Returns:
            The configured strategy, or an exponential strategy built
            from ``retry_interval`` and ``BACKOFF_COEFFICIENT``.
        """
        if self.backoff_strategy is not None:
            return self.backoff_strategy
        return ExponentialBackoff(base_delay=self.retry_interval, coefficient=BACKOFF_COEFFICIENT)

    def merge(self, **overrides: Any) -> ClientConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new ClientConfig instance with overrides applied.

        Example:
            ```pycon
            >>> from arelay.core.config import ClientConfig
            >>> config = ClientConfig(max_retries=3)
            >>> config.merge(max_retries=0, host=None).max_retries
            0

            ```
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)
