r"""Retry strategy for calculating backoff delays."""

from __future__ import annotations

__all__ = ["RetryStrategy"]

import logging
from typing import TYPE_CHECKING

from arelay.backoff import ExponentialBackoff

if TYPE_CHECKING:
    from arelay.backoff import BaseBackoffStrategy

logger: logging.Logger = logging.getLogger(__name__)


class RetryStrategy:
    """Strategy for calculating the wait between two attempts.

    Args:
        backoff_strategy: Backoff strategy instance. Defaults to
            ``ExponentialBackoff()``.

    Attributes:
        backoff_strategy: Backoff strategy instance.
    """

    def __init__(self, backoff_strategy: BaseBackoffStrategy | None = None) -> None:
        self.backoff_strategy: BaseBackoffStrategy = (
            backoff_strategy if backoff_strategy is not None else ExponentialBackoff()
        )

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay before the next attempt.

        Args:
            attempt: The number of the attempt that just failed (1-indexed).

        Returns:
            Sleep time in seconds.
        """
        delay = self.backoff_strategy.calculate(attempt)
        logger.debug(f"Waiting {delay:.2f}s before retry")
        return delay
