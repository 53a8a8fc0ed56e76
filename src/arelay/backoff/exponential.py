r"""Exponential backoff strategy."""

from __future__ import annotations

__all__ = ["ExponentialBackoff"]

from arelay.backoff.base import BaseBackoffStrategy


class ExponentialBackoff(BaseBackoffStrategy):
    """Exponential backoff strategy.

    Calculates delay as: base_delay * (coefficient ** attempt), with an
    optional max_delay cap. With the defaults, the waits before the
    first three retries are 1.5s, 2.25s and 3.375s, so the total cost
    of N retries is base_delay * sum(1.5 ** i for i in 1..N).

    Args:
        base_delay: The base delay in seconds (default: 1.0).
        coefficient: The exponential growth factor (default: 1.5).
            Must be >= 1.
        max_delay: Optional maximum delay cap in seconds. If specified,
            delays will not exceed this value.

    Example:
        ```pycon
        >>> from arelay.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(base_delay=1.0)
        >>> backoff.calculate(1)  # Before the first retry
        1.5
        >>> backoff.calculate(2)  # Before the second retry
        2.25
        >>> backoff = ExponentialBackoff(base_delay=1.0, max_delay=2.0)
        >>> backoff.calculate(5)  # Would be 7.59375, but capped
        2.0

        ```
    """

    def __init__(
        self,
        base_delay: float = 1.0,
        coefficient: float = 1.5,
        max_delay: float | None = None,
    ) -> None:
        if base_delay < 0:
            msg = f"base_delay must be non-negative, got {base_delay}"
            raise ValueError(msg)
        if coefficient < 1:
            msg = f"coefficient must be >= 1, got {coefficient}"
            raise ValueError(msg)
        if max_delay is not None and max_delay <= 0:
            msg = f"max_delay must be positive if specified, got {max_delay}"
            raise ValueError(msg)

        self.base_delay = base_delay
        self.coefficient = coefficient
        self.max_delay = max_delay

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(base_delay={self.base_delay}, "
            f"coefficient={self.coefficient}, max_delay={self.max_delay})"
        )

    def calculate(self, attempt: int) -> float:
        """Calculate exponential backoff delay.

        Args:
            attempt: The number of the attempt that just failed (1-indexed).

        Returns:
            The calculated delay: base_delay * (coefficient ** attempt),
            capped at max_delay if set.
        """
        delay = self.base_delay * (self.coefficient**attempt)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay
