r"""Exception types raised by the request execution pipeline.

Every error raised by ``arelay`` derives from ``HttpRequestError`` and
carries the HTTP method and the resolved URL of the request that failed.
The subclasses let callers distinguish where the pipeline stopped:

- ``RequestConstructionError``: the descriptor could not be turned into a
  wire request (malformed URL or method). No network call was made.
- ``RateLimitCancelledError``: the call was cancelled while waiting for a
  rate limiter permit. No network call was made.
- ``TransportFailedError``: a connection-level failure. Never retried.
- ``RequestCancelledError``: the call was cancelled between two attempts.
- ``DeadLetterPersistError``: the retry budget was exhausted and the dead
  letter sink failed to record the request.
- ``DecodeError``: the response body could not be decoded.

Note that a 5xx response returned after the retry budget is exhausted is
not an error: the response is returned to the caller as-is.
"""

from __future__ import annotations

__all__ = [
    "DeadLetterPersistError",
    "DecodeError",
    "HttpRequestError",
    "RateLimitCancelledError",
    "RequestCancelledError",
    "RequestConstructionError",
    "TransportFailedError",
]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class HttpRequestError(RuntimeError):
    r"""Base exception for failed HTTP requests.

    Args:
        method: The HTTP method of the failed request.
        url: The URL of the failed request.
        message: A descriptive error message.
        status_code: The HTTP status code, if a response was received.
        response: The HTTP response, if a response was received.
        cause: The underlying exception, if any.

    Example:
        ```pycon
        >>> from arelay.exceptions import HttpRequestError
        >>> err = HttpRequestError(method="GET", url="http://localhost", message="boom")
        >>> err.method, err.url
        ('GET', 'http://localhost')
        >>> str(err)
        'boom'

        ```
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        status_code: int | None = None,
        response: httpx.Response | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.message = message
        self.status_code = status_code
        self.response = response
        self.cause = cause

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(method={self.method!r}, url={self.url!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


class RequestConstructionError(HttpRequestError):
    r"""Raised when a request descriptor cannot be materialized.

    This covers malformed URLs (unparsable host, invalid port, missing
    scheme) and invalid method tokens. It is raised before any network
    activity.
    """


class TransportFailedError(HttpRequestError):
    r"""Raised when the transport fails at the connection level.

    Connection refused, DNS failures, timeouts and protocol errors are
    reported with this exception. They are never retried.
    """


class RateLimitCancelledError(HttpRequestError):
    r"""Raised when the cancellation signal fires while waiting for a
    rate limiter permit."""


class RequestCancelledError(HttpRequestError):
    r"""Raised when the cancellation signal fires between two attempts,
    including during the backoff wait."""


class DeadLetterPersistError(HttpRequestError):
    r"""Raised when the dead letter sink fails to save a letter.

    The request exhausted its retry budget with a 5xx response and the
    attempt to record it failed. The sink's exception is available as
    ``cause`` and as ``__cause__``.
    """


class DecodeError(HttpRequestError):
    r"""Raised when a response body cannot be decoded by the parser."""
