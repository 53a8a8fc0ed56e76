r"""Asynchronous request executor.

This module provides the ``AsyncClient`` class, the asyncio counterpart
of ``Client``. Rate limiter waits and backoff waits do not block the
event loop, and dead letter sinks run in a worker thread.
"""

from __future__ import annotations

__all__ = ["AsyncClient"]

import logging
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from arelay.core.config import DEFAULT_TIMEOUT, ClientConfig
from arelay.core.validation import validate_timeout
from arelay.decoders import decode_json, decode_xml
from arelay.exceptions import DecodeError, RateLimitCancelledError
from arelay.request import Request
from arelay.retry import AsyncRetryExecutor, DeadLetterEscalator

if TYPE_CHECKING:
    import asyncio
    import xml.etree.ElementTree as ET
    from collections.abc import Callable
    from types import TracebackType
    from typing import Self

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class AsyncClient:
    r"""Asynchronous executor for ``Request`` descriptors.

    The pipeline is the same as ``Client``. The ``httpx.AsyncClient``
    created when ``client`` is omitted is closed on ``async with`` exit
    or by ``aclose``. A client passed in is never closed.

    Args:
        config: Optional ClientConfig instance. If ``None``, a default
            ClientConfig is used.
        client: Optional httpx.AsyncClient instance used as transport.
            If ``None``, a new client is created with ``timeout``.
        timeout: Timeout of the default httpx client. Ignored when
            ``client`` is provided.

    Raises:
        ValueError: If timeout is not positive.

    Example:
        ```pycon
        >>> import asyncio
        >>> from arelay import AsyncClient
        >>> from arelay.core.config import ClientConfig
        >>> async def main():
        ...     async with AsyncClient(config=ClientConfig(host="https://api.example.com")) as client:
        ...         return await client.get_json(client.new_request().path("/orders"))
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        *,
        config: ClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
    ) -> None:
        validate_timeout(timeout)
        self._config: ClientConfig = config or ClientConfig()
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)
        self._close_client = client is None
        self._escalator = DeadLetterEscalator(self._config.dead_letter)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(config={self._config})"

    async def __aenter__(self) -> Self:
        """Enter the async context manager.

        Returns:
            The AsyncClient instance.
        """
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the async context manager and close the underlying httpx
        client if this client owns it.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        await self.aclose()

    @property
    def config(self) -> ClientConfig:
        """The configuration of the client."""
        return self._config

    async def aclose(self) -> None:
        """Close the underlying httpx client if this client owns it."""
        if self._close_client:
            await self._client.aclose()
            self._close_client = False

    def new_request(self) -> Request:
        """Create a descriptor pre-filled with the client host."""
        return Request(host=self._config.host)

    async def do(self, request: Request, cancel: asyncio.Event | None = None) -> httpx.Response:
        r"""Send a request through the resilience pipeline.

        Args:
            request: The request descriptor.
            cancel: Optional cancellation signal, observed while waiting
                for a rate limiter permit and between two attempts.

        Returns:
            The last response received. A 5xx response is returned once
            the retry budget is exhausted.

        Raises:
            RateLimitCancelledError: If ``cancel`` fires while waiting for
                a rate limiter permit.
            RequestConstructionError: If the descriptor is malformed.
            TransportFailedError: If the transport fails.
            RequestCancelledError: If ``cancel`` fires between two attempts.
            DeadLetterPersistError: If the dead letter sink fails.
        """
        config = self._config
        if config.rate_limiter is not None and not await config.rate_limiter.acquire_async(
            cancel
        ):
            url = request.raw_url(config.host)
            raise RateLimitCancelledError(
                method=request.method_name,
                url=url,
                message=f"{request.method_name} request to {url} cancelled "
                "while waiting for a rate limiter permit",
            )

        wire_request = request.build(self._client, config.host)
        url = str(wire_request.url)
        executor = AsyncRetryExecutor(
            max_retries=config.max_retries, backoff_strategy=config.get_backoff_strategy()
        )
        outcome = await executor.execute(
            wire_request, send=self._client.send, url=url, cancel=cancel
        )
        logger.debug(
            f"{wire_request.method} request to {url} finished with status "
            f"{outcome.response.status_code} after {outcome.attempts} attempt(s)"
        )
        await self._escalator.escalate_async(outcome)
        return outcome.response

    async def parse(
        self,
        request: Request,
        parser: Callable[[bytes], T],
        cancel: asyncio.Event | None = None,
    ) -> T:
        r"""Send a request and decode the response body.

        Args:
            request: The request descriptor.
            parser: Function decoding the raw body.
            cancel: Optional cancellation signal.

        Returns:
            The decoded body.

        Raises:
            DecodeError: If the parser fails.
            HttpRequestError: If the request itself fails (see ``do``).
        """
        response = await self.do(request, cancel=cancel)
        try:
            content = await response.aread()
        finally:
            await response.aclose()
        try:
            return parser(content)
        except Exception as exc:
            url = str(response.request.url)
            raise DecodeError(
                method=response.request.method,
                url=url,
                message=f"response body of {url} could not be decoded: {exc}",
                status_code=response.status_code,
                response=response,
                cause=exc,
            ) from exc

    async def parse_json(self, request: Request, cancel: asyncio.Event | None = None) -> Any:
        """Send a request and decode the JSON response body."""
        return await self.parse(request, decode_json, cancel=cancel)

    async def parse_xml(
        self, request: Request, cancel: asyncio.Event | None = None
    ) -> ET.Element:
        """Send a request and decode the XML response body."""
        return await self.parse(request, decode_xml, cancel=cancel)

    async def get_json(self, request: Request, cancel: asyncio.Event | None = None) -> Any:
        """Send a ``GET`` request and decode the JSON response body."""
        return await self.parse_json(request.method("GET"), cancel=cancel)

    async def get_xml(self, request: Request, cancel: asyncio.Event | None = None) -> ET.Element:
        """Send a ``GET`` request and decode the XML response body."""
        return await self.parse_xml(request.method("GET"), cancel=cancel)

    async def post_json(self, request: Request, cancel: asyncio.Event | None = None) -> Any:
        """Send a ``POST`` request and decode the JSON response body."""
        return await self.parse_json(request.method("POST"), cancel=cancel)

    async def put_json(self, request: Request, cancel: asyncio.Event | None = None) -> Any:
        """Send a ``PUT`` request and decode the JSON response body."""
        return await self.parse_json(request.method("PUT"), cancel=cancel)
