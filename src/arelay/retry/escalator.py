r"""Dead letter escalation of exhausted requests.

When a request exhausts its retry budget and the last response is still
a server error, the escalator builds a ``Letter`` from the wire request
as sent on the last attempt and hands it to the configured sink.
"""

from __future__ import annotations

__all__ = ["DeadLetterEscalator"]

import asyncio
import logging
from typing import TYPE_CHECKING

from arelay.exceptions import DeadLetterPersistError
from arelay.letter import Letter

if TYPE_CHECKING:
    from arelay.letter import BaseDeadLetterSink
    from arelay.retry.outcome import RetryOutcome

logger: logging.Logger = logging.getLogger(__name__)


class DeadLetterEscalator:
    """Hands exhausted requests to a dead letter sink.

    The dead letter feature is opt-in: without a sink, escalation does
    nothing. With a sink, ``save`` is called exactly once per exhausted
    outcome and is never retried. If it raises, the last response is
    closed and discarded and ``DeadLetterPersistError`` is raised.

    Args:
        sink: Optional dead letter sink.

    Example:
        ```pycon
        >>> from arelay.letter import InMemoryDeadLetterSink
        >>> from arelay.retry import DeadLetterEscalator
        >>> escalator = DeadLetterEscalator(InMemoryDeadLetterSink())
        >>> escalator.sink
        InMemoryDeadLetterSink(letters=0)

        ```
    """

    def __init__(self, sink: BaseDeadLetterSink | None = None) -> None:
        self.sink = sink

    def _build_letter(self, outcome: RetryOutcome) -> Letter | None:
        if not outcome.exhausted:
            return None
        if self.sink is None:
            logger.debug(f"No dead letter sink configured, dropping {outcome.url}")
            return None
        return Letter.from_request(outcome.request, outcome.url)

    def _persist_error(self, outcome: RetryOutcome, exc: Exception) -> DeadLetterPersistError:
        method = outcome.request.method
        return DeadLetterPersistError(
            method=method,
            url=outcome.url,
            message=f"letter could not be saved: {exc}",
            status_code=outcome.response.status_code,
            cause=exc,
        )

    def escalate(self, outcome: RetryOutcome) -> None:
        """Save a letter for an exhausted outcome.

        Args:
            outcome: The terminal outcome of the retry loop. Outcomes
                that are not exhausted are ignored.

        Raises:
            DeadLetterPersistError: If the sink fails to save the letter.
        """
        letter = self._build_letter(outcome)
        if letter is None:
            return
        try:
            self.sink.save(letter)
        except Exception as exc:
            outcome.response.close()
            raise self._persist_error(outcome, exc) from exc
        logger.debug(f"Saved dead letter for {letter.method} request to {letter.url}")

    async def escalate_async(self, outcome: RetryOutcome) -> None:
        """Save a letter for an exhausted outcome without blocking the
        event loop.

        The sink's ``save`` runs in a worker thread.

        Args:
            outcome: The terminal outcome of the retry loop.

        Raises:
            DeadLetterPersistError: If the sink fails to save the letter.
        """
        letter = self._build_letter(outcome)
        if letter is None:
            return
        try:
            await asyncio.to_thread(self.sink.save, letter)
        except Exception as exc:
            await outcome.response.aclose()
            raise self._persist_error(outcome, exc) from exc
        logger.debug(f"Saved dead letter for {letter.method} request to {letter.url}")
