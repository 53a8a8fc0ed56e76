r"""Synchronous request executor.

This module provides the ``Client`` class, which sends ``Request``
descriptors through the full pipeline: rate limiter, materialization,
retry loop and dead letter escalation. It also provides convenience
methods decoding the response body.
"""

from __future__ import annotations

__all__ = ["Client"]

import logging
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from arelay.core.config import DEFAULT_TIMEOUT, ClientConfig
from arelay.core.validation import validate_timeout
from arelay.decoders import decode_json, decode_xml
from arelay.exceptions import DecodeError, RateLimitCancelledError
from arelay.request import Request
from arelay.retry import DeadLetterEscalator, RetryExecutor

if TYPE_CHECKING:
    import threading
    import xml.etree.ElementTree as ET
    from collections.abc import Callable
    from types import TracebackType
    from typing import Self

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class Client:
    r"""Synchronous executor for ``Request`` descriptors.

    Every call to ``do`` goes through the same pipeline:

    1. Wait for a permit from the rate limiter, if one is configured.
    2. Resolve the descriptor URL and build the wire request.
    3. Send it, retrying 5xx responses with exponential backoff.
    4. If the retry budget is exhausted, hand the request to the dead
       letter sink, if one is configured.
    5. Return the last response.

    A client holds no per-call state, so one instance can be used from
    several threads at once.

    Two usage patterns are supported:

    **Scenario 1 – External lifecycle management**: the ``httpx.Client``
    is created and managed by an outer ``with`` block and passed into
    ``Client``, which does *not* close it.

    .. code-block:: python

        import httpx
        from arelay import Client
        from arelay.core.config import ClientConfig

        with httpx.Client(headers={"Authorization": "Bearer token"}) as http_client:
            with Client(
                client=http_client, config=ClientConfig(host="https://api.example.com")
            ) as client:
                response = client.do(client.new_request().path("/orders"))

    **Scenario 2 – Client manages the lifecycle**: the ``httpx.Client``
    is omitted, a default one is created, and ``Client`` closes it when
    the ``with`` block exits or when ``close`` is called.

    .. code-block:: python

        from arelay import Client
        from arelay.core.config import ClientConfig

        with Client(config=ClientConfig(host="https://api.example.com")) as client:
            orders = client.get_json(client.new_request().path("/orders"))

    Args:
        config: Optional ClientConfig instance. If ``None``, a default
            ClientConfig is used.
        client: Optional httpx.Client instance used as transport. If
            ``None``, a new client is created with ``timeout``.
        timeout: Timeout of the default httpx client. Ignored when
            ``client`` is provided.

    Raises:
        ValueError: If timeout is not positive.

    Example:
        ```pycon
        >>> from arelay import Client
        >>> from arelay.core.config import ClientConfig
        >>> with Client(config=ClientConfig(host="http://localhost:3000")) as client:
        ...     client.new_request().path("/orders/%d", 1).url()
        ...
        'http://localhost:3000/orders/1'

        ```
    """

    def __init__(
        self,
        *,
        config: ClientConfig | None = None,
        client: httpx.Client | None = None,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
    ) -> None:
        validate_timeout(timeout)
        self._config: ClientConfig = config or ClientConfig()
        self._client: httpx.Client = client or httpx.Client(timeout=timeout)
        self._close_client = client is None
        self._escalator = DeadLetterEscalator(self._config.dead_letter)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(config={self._config})"

    def __enter__(self) -> Self:
        """Enter the context manager.

        Returns:
            The Client instance.
        """
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager and close the underlying httpx
        client if this client owns it.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        self.close()

    @property
    def config(self) -> ClientConfig:
        """The configuration of the client."""
        return self._config

    def close(self) -> None:
        """Close the underlying httpx client if this client owns it."""
        if self._close_client:
            self._client.close()
            self._close_client = False

    def new_request(self) -> Request:
        r"""Create a descriptor pre-filled with the client host.

        Returns:
            A new ``GET`` request descriptor.

        Example:
            ```pycon
            >>> from arelay import Client
            >>> from arelay.core.config import ClientConfig
            >>> client = Client(config=ClientConfig(host="http://localhost"))
            >>> client.new_request().host_name
            'http://localhost'

            ```
        """
        return Request(host=self._config.host)

    def do(self, request: Request, cancel: threading.Event | None = None) -> httpx.Response:
        r"""Send a request through the resilience pipeline.

        A 5xx response is returned, not raised, once the retry budget is
        exhausted: callers must check the status code. The caller owns
        the returned response and should close it once read.

        Args:
            request: The request descriptor.
            cancel: Optional cancellation signal, observed while waiting
                for a rate limiter permit and between two attempts.

        Returns:
            The last response received.

        Raises:
            RateLimitCancelledError: If ``cancel`` fires while waiting for
                a rate limiter permit.
            RequestConstructionError: If the descriptor is malformed.
            TransportFailedError: If the transport fails.
            RequestCancelledError: If ``cancel`` fires between two attempts.
            DeadLetterPersistError: If the dead letter sink fails.

        Example:
            ```pycon
            >>> from arelay import Client, Request
            >>> with Client() as client:  # doctest: +SKIP
            ...     response = client.do(Request("https://api.example.com").path("/data"))
            ...

            ```
        """
        config = self._config
        if config.rate_limiter is not None and not config.rate_limiter.acquire(cancel):
            url = request.raw_url(config.host)
            raise RateLimitCancelledError(
                method=request.method_name,
                url=url,
                message=f"{request.method_name} request to {url} cancelled "
                "while waiting for a rate limiter permit",
            )

        wire_request = request.build(self._client, config.host)
        url = str(wire_request.url)
        executor = RetryExecutor(
            max_retries=config.max_retries, backoff_strategy=config.get_backoff_strategy()
        )
        outcome = executor.execute(wire_request, send=self._client.send, url=url, cancel=cancel)
        logger.debug(
            f"{wire_request.method} request to {url} finished with status "
            f"{outcome.response.status_code} after {outcome.attempts} attempt(s)"
        )
        self._escalator.escalate(outcome)
        return outcome.response

    def parse(
        self,
        request: Request,
        parser: Callable[[bytes], T],
        cancel: threading.Event | None = None,
    ) -> T:
        r"""Send a request and decode the response body.

        The body is read and the response closed whatever its status.
        Check the status with ``do`` when it matters.

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
        response = self.do(request, cancel=cancel)
        try:
            content = response.read()
        finally:
            response.close()
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

    def parse_json(self, request: Request, cancel: threading.Event | None = None) -> Any:
        """Send a request and decode the JSON response body."""
        return self.parse(request, decode_json, cancel=cancel)

    def parse_xml(self, request: Request, cancel: threading.Event | None = None) -> ET.Element:
        """Send a request and decode the XML response body."""
        return self.parse(request, decode_xml, cancel=cancel)

    def get_json(self, request: Request, cancel: threading.Event | None = None) -> Any:
        r"""Send a ``GET`` request and decode the JSON response body.

        The descriptor method is forced to ``GET``.

        Example:
            ```pycon
            >>> from arelay import Client
            >>> from arelay.core.config import ClientConfig
            >>> with Client(config=ClientConfig(host="https://api.example.com")) as client:  # doctest: +SKIP
            ...     order = client.get_json(client.new_request().path("/orders/%d", 1))
            ...

            ```
        """
        return self.parse_json(request.method("GET"), cancel=cancel)

    def get_xml(self, request: Request, cancel: threading.Event | None = None) -> ET.Element:
        """Send a ``GET`` request and decode the XML response body."""
        return self.parse_xml(request.method("GET"), cancel=cancel)

    def post_json(self, request: Request, cancel: threading.Event | None = None) -> Any:
        """Send a ``POST`` request and decode the JSON response body."""
        return self.parse_json(request.method("POST"), cancel=cancel)

    def put_json(self, request: Request, cancel: threading.Event | None = None) -> Any:
        """Send a ``PUT`` request and decode the JSON response body."""
        return self.parse_json(request.method("PUT"), cancel=cancel)
