r"""Client-side rate limiters.

A rate limiter gates how often a client may start a new request. The
executor only relies on the narrow ``acquire`` contract: block until a
permit is available and return ``True``, or return ``False`` as soon as
the caller's cancellation signal fires.

Two implementations are provided:

- ``TokenBucketRateLimiter``: one token every ``interval`` seconds, up to
  ``burst`` tokens stored. Allows short bursts then a steady rate.
- ``SlidingWindowRateLimiter``: never more than ``max_requests`` permits
  in any window of ``time_window`` seconds.

Both are thread-safe and can be shared by several clients, sync or
async. The bookkeeping is protected by a lock and the waiting happens
outside of it.

Example:
    ```pycon
    >>> from arelay import Client
    >>> from arelay.core.config import ClientConfig
    >>> from arelay.ratelimit import TokenBucketRateLimiter
    >>> limiter = TokenBucketRateLimiter(interval=0.065, burst=50)
    >>> client = Client(config=ClientConfig(host="http://localhost", rate_limiter=limiter))

    ```
"""

from __future__ import annotations

__all__ = ["BaseRateLimiter", "SlidingWindowRateLimiter", "TokenBucketRateLimiter"]

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from typing import TYPE_CHECKING

from arelay.utils.sleep import wait, wait_async

if TYPE_CHECKING:
    import asyncio

logger: logging.Logger = logging.getLogger(__name__)


class BaseRateLimiter(ABC):
    """Abstract base class for rate limiters.

    Subclasses implement ``_try_acquire``, a non-blocking attempt to
    take a permit. The blocking ``acquire`` and ``acquire_async`` loops
    are shared.
    """

    @abstractmethod
    def _try_acquire(self) -> float | None:
        """Try to take a permit without blocking.

        Returns:
            ``None`` if a permit was taken, otherwise the number of
            seconds to wait before trying again.
        """

    def acquire(self, cancel: threading.Event | None = None) -> bool:
        """Block until a permit is available.

        Args:
            cancel: Optional cancellation signal. When it is set, the
                wait stops and no permit is taken.

        Returns:
            ``True`` once a permit was taken, ``False`` if the wait was
            cancelled.
        """
        while True:
            if cancel is not None and cancel.is_set():
                return False
            delay = self._try_acquire()
            if delay is None:
                return True
            logger.debug(f"Rate limit reached, waiting {delay:.3f}s for a permit")
            if not wait(delay, cancel):
                return False

    async def acquire_async(self, cancel: asyncio.Event | None = None) -> bool:
        """Wait asynchronously until a permit is available.

        Args:
            cancel: Optional cancellation signal. When it is set, the
                wait stops and no permit is taken.

        Returns:
            ``True`` once a permit was taken, ``False`` if the wait was
            cancelled.
        """
        while True:
            if cancel is not None and cancel.is_set():
                return False
            delay = self._try_acquire()
            if delay is None:
                return True
            logger.debug(f"Rate limit reached, waiting {delay:.3f}s for a permit")
            if not await wait_async(delay, cancel):
                return False


class TokenBucketRateLimiter(BaseRateLimiter):
    r"""Token bucket rate limiter.

    The bucket holds at most ``burst`` tokens and starts full. One token
    is added every ``interval`` seconds and each permit consumes one
    token.

    Args:
        interval: Seconds between two token refills. Must be > 0.
        burst: Bucket capacity. Must be > 0.

    Raises:
        ValueError: If interval or burst are not positive.

    Example:
        ```pycon
        >>> from arelay.ratelimit import TokenBucketRateLimiter
        >>> limiter = TokenBucketRateLimiter(interval=1.0, burst=2)
        >>> limiter.acquire(), limiter.acquire()
        (True, True)

        ```
    """

    def __init__(self, interval: float, burst: int) -> None:
        if interval <= 0:
            msg = f"interval must be > 0, got {interval}"
            raise ValueError(msg)
        if burst <= 0:
            msg = f"burst must be > 0, got {burst}"
            raise ValueError(msg)

        self._interval = interval
        self._burst = burst

        # Bucket state (protected by lock)
        self._tokens = float(burst)
        self._last_refill = time.monotonic()
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(interval={self._interval}, burst={self._burst})"

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def burst(self) -> int:
        return self._burst

    def _try_acquire(self) -> float | None:
        with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_refill
            self._tokens = min(float(self._burst), self._tokens + elapsed / self._interval)
            self._last_refill = now

            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return None
            return (1.0 - self._tokens) * self._interval


class SlidingWindowRateLimiter(BaseRateLimiter):
    r"""Sliding window rate limiter.

    Records the time of every permit and grants a new one only while
    fewer than ``max_requests`` permits were granted during the last
    ``time_window`` seconds.

    Args:
        max_requests: Maximum number of permits per window. Must be > 0.
        time_window: Window length in seconds. Must be > 0.

    Raises:
        ValueError: If max_requests or time_window are not positive.

    Example:
        ```pycon
        >>> import threading
        >>> from arelay.ratelimit import SlidingWindowRateLimiter
        >>> limiter = SlidingWindowRateLimiter(max_requests=1, time_window=60.0)
        >>> limiter.acquire()
        True
        >>> cancel = threading.Event()
        >>> cancel.set()
        >>> limiter.acquire(cancel)
        False

        ```
    """

    def __init__(self, max_requests: int, time_window: float) -> None:
        if max_requests <= 0:
            msg = f"max_requests must be > 0, got {max_requests}"
            raise ValueError(msg)
        if time_window <= 0:
            msg = f"time_window must be > 0, got {time_window}"
            raise ValueError(msg)

        self._max_requests = max_requests
        self._time_window = time_window
        self._timestamps: deque[float] = deque()
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(max_requests={self._max_requests}, "
            f"time_window={self._time_window})"
        )

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def time_window(self) -> float:
        return self._time_window

    def _try_acquire(self) -> float | None:
        with self._lock:
            now = time.monotonic()
            while self._timestamps and self._timestamps[0] + self._time_window <= now:
                self._timestamps.popleft()

            if len(self._timestamps) < self._max_requests:
                self._timestamps.append(now)
                return None
            return self._timestamps[0] + self._time_window - now
