r"""arelay - Resilient outbound HTTP request executor.

This package sends HTTP requests described by a fluent ``Request``
descriptor through a pipeline that makes outbound calls resilient.
Built on top of the httpx library, each call goes through:

    - An optional client-side rate limiter (token bucket or sliding window)
    - Automatic retry of 5xx responses with exponential backoff
      (coefficient 1.5) and an ``X-Retry`` header on retried attempts
    - An optional dead letter sink receiving the requests that
      exhausted their retries
    - JSON and XML decoding helpers

Example:
    ```pycon
    >>> from arelay import Client
    >>> from arelay.core.config import ClientConfig
    >>> from arelay.letter import InMemoryDeadLetterSink
    >>> config = ClientConfig(
    ...     host="http://localhost:3000", max_retries=3, dead_letter=InMemoryDeadLetterSink()
    ... )
    >>> with Client(config=config) as client:  # doctest: +SKIP
    ...     order = client.get_json(client.new_request().path("/orders/%d", 1231))
    ...

    ```
"""

from __future__ import annotations

__all__ = [
    "AsyncClient",
    "Client",
    "ClientConfig",
    "DeadLetterPersistError",
    "DecodeError",
    "HttpRequestError",
    "RateLimitCancelledError",
    "Request",
    "RequestCancelledError",
    "RequestConstructionError",
    "TransportFailedError",
    "__version__",
]

from importlib.metadata import PackageNotFoundError, version

from arelay.client import Client
from arelay.client_async import AsyncClient
from arelay.core.config import ClientConfig
from arelay.exceptions import (
    DeadLetterPersistError,
    DecodeError,
    HttpRequestError,
    RateLimitCancelledError,
    RequestCancelledError,
    RequestConstructionError,
    TransportFailedError,
)
from arelay.request import Request

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
