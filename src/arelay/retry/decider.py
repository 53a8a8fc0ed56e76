r"""Retry decision logic.

This module provides the RetryDecider class that decides, after each
response, whether the request should be attempted again.
"""

from __future__ import annotations

__all__ = ["RetryDecider"]


class RetryDecider:
    """Decides whether a request should be retried.

    Only server errors (status 500 to 599) are retried, and only while
    the number of the attempt that failed does not exceed
    ``max_retries``. Connection-level failures are never retried.

    Args:
        max_retries: Maximum number of retries.

    Example:
        ```pycon
        >>> from arelay.retry import RetryDecider
        >>> decider = RetryDecider(max_retries=1)
        >>> decider.should_retry(503, attempt=1)
        True
        >>> decider.should_retry(503, attempt=2)
        False
        >>> decider.should_retry(404, attempt=1)
        False

        ```
    """

    def __init__(self, max_retries: int) -> None:
        self.max_retries = max_retries

    @staticmethod
    def is_server_error(status_code: int) -> bool:
        """Return whether a status code is a server error (5xx)."""
        return 500 <= status_code <= 599

    def should_retry(self, status_code: int, attempt: int) -> bool:
        """Determine if a response should trigger a retry.

        Args:
            status_code: The status code of the response.
            attempt: The number of the attempt that produced the
                response (1-indexed).

        Returns:
            ``True`` if the request must be attempted again.
        """
        return self.is_server_error(status_code) and attempt <= self.max_retries
