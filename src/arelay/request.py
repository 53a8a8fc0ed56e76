r"""Fluent request descriptor.

A ``Request`` describes an HTTP request declaratively: method, host,
path, query parameters, headers, body and a list of mutators applied to
the wire request right before it is sent. It performs no I/O. The
descriptor is turned into a canonical URL and an ``httpx.Request`` only
when the request is sent, so editing a descriptor never affects an
attempt that is already in flight.

Example:
    ```pycon
    >>> from arelay.request import Request
    >>> request = (
    ...     Request(host="http://localhost:3000")
    ...     .path("/orders/%d", 1231)
    ...     .add_query("clientId", "1231321")
    ...     .add_query("deviceId", "45555")
    ... )
    >>> request.url()
    'http://localhost:3000/orders/1231?clientId=1231321&deviceId=45555'

    ```
"""

from __future__ import annotations

__all__ = ["Request", "RequestMutator"]

import logging
import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode, urlsplit

import httpx

from arelay.exceptions import RequestConstructionError

if TYPE_CHECKING:
    from typing import Self

RequestMutator = Callable[[httpx.Request], None]

logger: logging.Logger = logging.getLogger(__name__)

# RFC 9110 section 5.6.2 token
_METHOD_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_SUPPORTED_SCHEMES = ("http", "https")


class Request:
    r"""Declarative description of an HTTP request.

    All setters return the descriptor itself so calls can be chained.
    Query parameters and headers are multimaps: ``set_*`` replaces the
    whole value sequence of a key, ``add_*`` appends to it (creating the
    key if needed).

    Args:
        host: Base URL of the request. When ``None``, the host of the
            client sending the request is used.
        method: The HTTP method. Defaults to ``GET``.

    Example:
        ```pycon
        >>> from arelay.request import Request
        >>> request = Request(host="http://localhost:3000")
        >>> request.add_query("id", "1").add_query("id", "2").url()
        'http://localhost:3000?id=1&id=2'
        >>> request.set_query("id", "3").url()
        'http://localhost:3000?id=3'

        ```
    """

    def __init__(self, host: str | None = None, method: str = "GET") -> None:
        self._host = host
        self._method = method.upper()
        self._path = ""
        self._query: dict[str, list[str]] = {}
        self._headers: dict[str, list[str]] = {}
        self._body = b""
        self._mutators: list[RequestMutator] = []

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(method={self._method!r}, host={self._host!r}, "
            f"path={self._path!r})"
        )

    @property
    def method_name(self) -> str:
        r"""The HTTP method of the request."""
        return self._method

    @property
    def host_name(self) -> str | None:
        r"""The base URL of the request, if set."""
        return self._host

    @property
    def query(self) -> dict[str, list[str]]:
        r"""A copy of the query parameters."""
        return {key: list(values) for key, values in self._query.items()}

    @property
    def headers(self) -> dict[str, list[str]]:
        r"""A copy of the headers."""
        return {key: list(values) for key, values in self._headers.items()}

    @property
    def content(self) -> bytes:
        r"""The raw body of the request."""
        return self._body

    def host(self, host: str) -> Self:
        r"""Set the base URL, overriding the client host."""
        self._host = host
        return self

    def method(self, method: str) -> Self:
        r"""Set the HTTP method."""
        self._method = method.upper()
        return self

    def path(self, path: str, *args: Any) -> Self:
        r"""Set the request path.

        The path is a printf-style template resolved immediately when
        arguments are given, so ``path("/orders/%d", 12)`` sets
        ``/orders/12``.

        Args:
            path: The path or path template.
            *args: Values substituted into the template.

        Returns:
            The descriptor itself.
        """
        self._path = path % args if args else path
        return self

    def set_query(self, key: str, *values: str) -> Self:
        r"""Replace all values of the query parameter ``key``."""
        self._query[key] = list(values)
        return self

    def add_query(self, key: str, *values: str) -> Self:
        r"""Append values to the query parameter ``key``."""
        self._query.setdefault(key, []).extend(values)
        return self

    def set_header(self, key: str, *values: str) -> Self:
        r"""Replace all values of the header ``key``."""
        self._headers[key] = list(values)
        return self

    def add_header(self, key: str, *values: str) -> Self:
        r"""Append values to the header ``key``."""
        self._headers.setdefault(key, []).extend(values)
        return self

    def body(self, content: bytes | str) -> Self:
        r"""Attach a raw body. Text is encoded as UTF-8."""
        self._body = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        return self

    def mutate(self, mutator: RequestMutator) -> Self:
        r"""Register a function applied to the wire request before each
        send.

        Mutators run in registration order on the materialized
        ``httpx.Request``, after the descriptor headers were copied.

        Args:
            mutator: A callable receiving the ``httpx.Request``.

        Returns:
            The descriptor itself.
        """
        self._mutators.append(mutator)
        return self

    def set_basic_auth(self, username: str, password: str) -> Self:
        r"""Send HTTP basic credentials with the request.

        Example:
            ```pycon
            >>> import httpx
            >>> from arelay.request import Request
            >>> request = Request(host="http://localhost").set_basic_auth("test", "test")
            >>> with httpx.Client() as client:
            ...     request.build(client).headers["Authorization"]
            ...
            'Basic dGVzdDp0ZXN0'

            ```
        """
        auth = httpx.BasicAuth(username, password)

        def _apply(request: httpx.Request) -> None:
            next(auth.auth_flow(request))

        return self.mutate(_apply)

    def raw_url(self, default_host: str | None = None) -> str:
        r"""Return ``host + path`` without validation or query.

        Used in messages where the descriptor may be malformed.

        Example:
            ```pycon
            >>> from arelay import Request
            >>> Request(host="http://localhost:abc").path("/orders").raw_url()
            'http://localhost:abc/orders'

            ```
        """
        host = self._host if self._host is not None else (default_host or "")
        return f"{host}{self._path}"

    def url(self, default_host: str | None = None) -> str:
        r"""Resolve the canonical URL of the request.

        The URL is ``host + path`` followed by the URL-encoded query
        parameters. Keys keep the order of their first use and values
        keep their insertion order. Calling this method does not modify
        the descriptor.

        Args:
            default_host: Host used when the descriptor has none.

        Returns:
            The resolved URL.

        Raises:
            RequestConstructionError: If the URL is malformed.
        """
        raw_url = self.raw_url(default_host)
        try:
            parts = urlsplit(raw_url)
            # Accessing the port validates it.
            parts.port  # noqa: B018
        except ValueError as exc:
            raise RequestConstructionError(
                method=self._method,
                url=raw_url,
                message=f"malformed URL {raw_url!r}: {exc}",
                cause=exc,
            ) from exc
        if parts.scheme not in _SUPPORTED_SCHEMES or not parts.hostname:
            raise RequestConstructionError(
                method=self._method,
                url=raw_url,
                message=f"malformed URL {raw_url!r}: expected an absolute http(s) URL",
            )

        encoded_query = urlencode(
            [(key, value) for key, values in self._query.items() for value in values]
        )
        if not encoded_query:
            return raw_url
        separator = "&" if parts.query else "?"
        if raw_url.endswith(("?", "&")):
            separator = ""
        return f"{raw_url}{separator}{encoded_query}"

    def build(
        self,
        client: httpx.Client | httpx.AsyncClient,
        default_host: str | None = None,
    ) -> httpx.Request:
        r"""Materialize the descriptor into a wire request.

        The request is built by ``client.build_request`` so client-level
        defaults (headers, cookies) apply. The descriptor headers are
        copied, then the mutators run on the built request.

        Args:
            client: The httpx client that will send the request.
            default_host: Host used when the descriptor has none.

        Returns:
            A new ``httpx.Request``.

        Raises:
            RequestConstructionError: If the URL or the method is invalid.
        """
        url = self.url(default_host)
        if not _METHOD_TOKEN.match(self._method):
            raise RequestConstructionError(
                method=self._method,
                url=url,
                message=f"invalid HTTP method {self._method!r}",
            )
        headers = [(key, value) for key, values in self._headers.items() for value in values]
        try:
            request = client.build_request(
                self._method, url, headers=headers, content=self._body or None
            )
        except (httpx.InvalidURL, ValueError) as exc:
            raise RequestConstructionError(
                method=self._method,
                url=url,
                message=f"{self._method} request to {url} could not be built: {exc}",
                cause=exc,
            ) from exc
        for mutator in self._mutators:
            mutator(request)
        logger.debug(f"Built {self._method} request to {url}")
        return request
