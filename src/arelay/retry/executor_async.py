r"""Asynchronous retry executor.

This module provides the AsyncRetryExecutor class, the asyncio
counterpart of ``RetryExecutor``.
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor"]

import logging
from typing import TYPE_CHECKING

import httpx

from arelay.core.config import DEFAULT_MAX_RETRIES, RETRY_HEADER
from arelay.exceptions import RequestCancelledError, TransportFailedError
from arelay.retry.decider import RetryDecider
from arelay.retry.outcome import RetryOutcome, RetryState
from arelay.retry.strategy import RetryStrategy
from arelay.utils.sleep import wait_async

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Awaitable, Callable

    from arelay.backoff import BaseBackoffStrategy

logger: logging.Logger = logging.getLogger(__name__)


class AsyncRetryExecutor:
    """Executes an async request, retrying server errors with backoff.

    The state machine is the same as ``RetryExecutor``. Backoff waits use
    asyncio, so other tasks keep running while a call waits between two
    attempts.

    Args:
        max_retries: Maximum number of retries. ``0`` means a single
            attempt.
        backoff_strategy: Optional backoff strategy. Defaults to
            ``ExponentialBackoff()``.
        retry_header: Name of the retry marker header.

    Attributes:
        max_retries: Maximum number of retries.
        strategy: Strategy for calculating retry delays.
        decider: Logic for deciding whether to retry.

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from arelay.retry import AsyncRetryExecutor
        >>> async def main():
        ...     executor = AsyncRetryExecutor(max_retries=2)
        ...     async with httpx.AsyncClient() as client:
        ...         return await executor.execute(
        ...             httpx.Request("GET", "https://api.example.com/data"), send=client.send
        ...         )
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_strategy: BaseBackoffStrategy | None = None,
        retry_header: str = RETRY_HEADER,
    ) -> None:
        self.max_retries = max_retries
        self.retry_header = retry_header
        self.strategy: RetryStrategy = RetryStrategy(backoff_strategy)
        self.decider: RetryDecider = RetryDecider(max_retries)

    async def execute(
        self,
        request: httpx.Request,
        send: Callable[[httpx.Request], Awaitable[httpx.Response]],
        url: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> RetryOutcome:
        """Execute the request until a terminal state is reached.

        Args:
            request: The wire request. The retry marker header is set
                on it in place.
            send: Coroutine function performing one exchange, e.g.
                ``httpx.AsyncClient.send``.
            url: The resolved URL of the request. Defaults to
                ``str(request.url)``.
            cancel: Optional cancellation signal.

        Returns:
            The terminal outcome, ``SUCCESS`` or ``EXHAUSTED``.

        Raises:
            TransportFailedError: If ``send`` fails at the connection level.
            RequestCancelledError: If ``cancel`` is set before an attempt
                or during a backoff wait.
        """
        url = url if url is not None else str(request.url)
        method = request.method
        attempt = 1
        while True:
            if cancel is not None and cancel.is_set():
                raise RequestCancelledError(
                    method=method,
                    url=url,
                    message=f"{method} request to {url} cancelled before attempt {attempt}",
                )
            try:
                response = await send(request)
            except httpx.TransportError as exc:
                logger.debug(
                    f"{method} request to {url} encountered {type(exc).__name__} "
                    f"on attempt {attempt}: {exc}"
                )
                raise TransportFailedError(
                    method=method,
                    url=url,
                    message=f"{method} request to {url} failed on attempt {attempt}: {exc}",
                    cause=exc,
                ) from exc

            if not self.decider.is_server_error(response.status_code):
                if attempt > 1:
                    logger.debug(f"{method} request to {url} succeeded on attempt {attempt}")
                return RetryOutcome(
                    state=RetryState.SUCCESS,
                    response=response,
                    request=request,
                    url=url,
                    attempts=attempt,
                )

            if not self.decider.should_retry(response.status_code, attempt):
                logger.debug(
                    f"{method} request to {url} failed with status {response.status_code} "
                    f"after {attempt} attempts"
                )
                return RetryOutcome(
                    state=RetryState.EXHAUSTED,
                    response=response,
                    request=request,
                    url=url,
                    attempts=attempt,
                )

            logger.debug(
                f"{method} request to {url} failed with status {response.status_code} "
                f"(attempt {attempt}/{self.max_retries + 1})"
            )
            status_code = response.status_code
            await response.aclose()
            if not await wait_async(self.strategy.calculate_delay(attempt), cancel):
                raise RequestCancelledError(
                    method=method,
                    url=url,
                    message=f"{method} request to {url} cancelled during backoff "
                    f"after attempt {attempt}",
                    status_code=status_code,
                )
            request.headers[self.retry_header] = str(attempt)
            attempt += 1
