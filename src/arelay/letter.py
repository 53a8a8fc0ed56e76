r"""Dead letters and dead letter sinks.

A ``Letter`` records a request that exhausted its retry budget while
the server kept answering with a 5xx status, so it can be inspected or
replayed later. Letters are handed to a sink implementing
``BaseDeadLetterSink``. How and where letters are stored is entirely
the sink's concern.

Example:
    ```pycon
    >>> from arelay.letter import InMemoryDeadLetterSink, Letter
    >>> sink = InMemoryDeadLetterSink()
    >>> sink.save(Letter(method="GET", url="http://localhost/orders", body=b"", headers={}))
    >>> len(sink)
    1

    ```
"""

from __future__ import annotations

__all__ = ["BaseDeadLetterSink", "InMemoryDeadLetterSink", "Letter"]

import base64
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


@dataclass(frozen=True)
class Letter:
    """A request that could not be completed after exhausting its
    retries.

    Attributes:
        method: The HTTP method of the request.
        url: The fully resolved URL sent on the final attempt.
        body: The raw request body.
        headers: The headers sent on the final attempt, including the
            retry marker header. Header names keep their original casing.
    """

    method: str
    url: str
    body: bytes = b""
    headers: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_request(cls, request: httpx.Request, url: str) -> Letter:
        """Create a letter from the wire request sent on the final
        attempt.

        Args:
            request: The materialized request.
            url: The resolved URL of the request.

        Returns:
            A new letter.

        Example:
            ```pycon
            >>> import httpx
            >>> from arelay.letter import Letter
            >>> request = httpx.Request("POST", "http://localhost/a", headers={"X-Retry": "3"})
            >>> letter = Letter.from_request(request, "http://localhost/a")
            >>> letter.headers["X-Retry"]
            ['3']

            ```
        """
        headers: dict[str, list[str]] = {}
        encoding = request.headers.encoding
        for raw_key, raw_value in request.headers.raw:
            headers.setdefault(raw_key.decode(encoding), []).append(raw_value.decode(encoding))
        return cls(method=request.method, url=url, body=request.content, headers=headers)

    def to_dict(self) -> dict[str, Any]:
        """Convert the letter to a JSON serializable dictionary.

        The body is base64 encoded.

        Returns:
            Dictionary with the letter fields.

        Example:
            ```pycon
            >>> from arelay.letter import Letter
            >>> Letter(method="POST", url="http://localhost", body=b"hi").to_dict()
            {'method': 'POST', 'url': 'http://localhost', 'body': 'aGk=', 'headers': {}}

            ```
        """
        return {
            "method": self.method,
            "url": self.url,
            "body": base64.b64encode(self.body).decode("ascii"),
            "headers": {key: list(values) for key, values in self.headers.items()},
        }


class BaseDeadLetterSink(ABC):
    """Abstract base class for dead letter sinks.

    A sink persists letters. ``save`` is called at most once per
    exhausted request and signals a failure by raising; the exception
    is wrapped in ``DeadLetterPersistError`` and surfaced to the caller.
    """

    @abstractmethod
    def save(self, letter: Letter) -> None:
        """Persist a letter.

        Args:
            letter: The letter to save.
        """


class InMemoryDeadLetterSink(BaseDeadLetterSink):
    """Dead letter sink keeping the letters in a list.

    Thread-safe: it can be shared by clients used from several threads.
    """

    def __init__(self) -> None:
        self._letters: list[Letter] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._letters)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(letters={len(self)})"

    @property
    def letters(self) -> list[Letter]:
        """A snapshot of the saved letters, oldest first."""
        with self._lock:
            return list(self._letters)

    def save(self, letter: Letter) -> None:
        with self._lock:
            self._letters.append(letter)

    def clear(self) -> None:
        """Remove all saved letters."""
        with self._lock:
            self._letters.clear()
