r"""Terminal outcome of the retry state machine.

The machine starts by attempting the request. After each response it
either stops on ``SUCCESS`` (the status is not a server error), waits
and retries (server error and retries left), or stops on ``EXHAUSTED``
(server error and no retry left). Only the two terminal states leave
the retry loop, so only they are modelled by ``RetryState``.
"""

from __future__ import annotations

__all__ = ["RetryOutcome", "RetryState"]

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class RetryState(Enum):
    """Terminal states of the retry state machine.

    Attributes:
        SUCCESS: The last response is not a server error.
        EXHAUSTED: The last response is a server error and no retry is
            left.
    """

    SUCCESS = "success"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class RetryOutcome:
    """Terminal result of a retry loop.

    Attributes:
        state: ``RetryState.SUCCESS`` or ``RetryState.EXHAUSTED``.
        response: The response of the last attempt.
        request: The wire request as sent on the last attempt.
        url: The resolved URL of the request.
        attempts: The number of attempts made (>= 1).
    """

    state: RetryState
    response: httpx.Response
    request: httpx.Request
    url: str
    attempts: int

    @property
    def exhausted(self) -> bool:
        return self.state is RetryState.EXHAUSTED
