r"""Shared test helpers for the request executor tests.

The network is replaced by ``httpx.MockTransport``. ``ScriptedServer``
answers each request with the next status of a script and records what
it received, so tests can count attempts and inspect the retry marker.
"""

from __future__ import annotations

__all__ = [
    "HOST",
    "FailingSink",
    "FakeClock",
    "ScriptedServer",
    "create_async_client",
    "create_client",
]

from typing import TYPE_CHECKING, Any

import httpx

from arelay import AsyncClient, Client, ClientConfig
from arelay.core.config import RETRY_HEADER
from arelay.letter import BaseDeadLetterSink

if TYPE_CHECKING:
    from arelay.letter import Letter

HOST = "http://localhost:3000"


class ScriptedServer:
    """Mock transport handler returning scripted responses.

    The last status of the script is repeated once the script is
    consumed. An exception in the script is raised instead of returning
    a response.

    Args:
        *script: Status codes or exceptions, in order.
        content: Body of every response.
        headers: Headers of every response.
        on_request: Optional function called with each request before
            answering it.

    Example:
        >>> server = ScriptedServer(500, 200)
        >>> client = create_client(server)
        >>> client.do(client.new_request()).status_code
        200
        >>> server.calls
        2
    """

    def __init__(
        self,
        *script: int | Exception,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
        on_request: Any = None,
    ) -> None:
        self.script = list(script) or [200]
        self.content = content
        self.headers = headers or {}
        self.on_request = on_request
        self.methods: list[str] = []
        self.urls: list[str] = []
        self.bodies: list[bytes] = []
        self.retry_markers: list[str | None] = []
        self.header_lists: list[list[tuple[str, str]]] = []

    @property
    def calls(self) -> int:
        return len(self.methods)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.methods.append(request.method)
        self.urls.append(str(request.url))
        self.bodies.append(request.content)
        self.retry_markers.append(request.headers.get(RETRY_HEADER))
        self.header_lists.append(list(request.headers.multi_items()))
        if self.on_request is not None:
            self.on_request(request)
        item = self.script[min(self.calls - 1, len(self.script) - 1)]
        if isinstance(item, Exception):
            raise item
        return httpx.Response(item, content=self.content, headers=self.headers)


class FailingSink(BaseDeadLetterSink):
    """Dead letter sink whose ``save`` always fails."""

    def __init__(self) -> None:
        self.attempts = 0

    def save(self, letter: Letter) -> None:  # noqa: ARG002
        self.attempts += 1
        msg = "disk full"
        raise OSError(msg)


class FakeClock:
    """Manual clock advanced by the patched sleep function."""

    def __init__(self) -> None:
        self.now = 0.0

    def monotonic(self) -> float:
        return self.now

    def sleep(self, delay: float) -> None:
        self.now += delay


def create_client(server: ScriptedServer, **config: Any) -> Client:
    """Create a ``Client`` sending requests to ``server``."""
    config.setdefault("host", HOST)
    return Client(
        config=ClientConfig(**config),
        client=httpx.Client(transport=httpx.MockTransport(server)),
    )


def create_async_client(server: ScriptedServer, **config: Any) -> AsyncClient:
    """Create an ``AsyncClient`` sending requests to ``server``."""
    config.setdefault("host", HOST)
    return AsyncClient(
        config=ClientConfig(**config),
        client=httpx.AsyncClient(transport=httpx.MockTransport(server)),
    )
