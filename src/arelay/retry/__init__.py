r"""Retry/backoff engine and dead letter escalation.

Public API:
    - RetryState: Terminal states of the retry state machine
    - RetryOutcome: Terminal result of a retry loop
    - RetryDecider: Logic for deciding whether to retry
    - RetryStrategy: Strategy for calculating retry delays
    - RetryExecutor: Synchronous retry loop
    - AsyncRetryExecutor: Asynchronous retry loop
    - DeadLetterEscalator: Hands exhausted requests to a dead letter sink
"""

from __future__ import annotations

__all__ = [
    "AsyncRetryExecutor",
    "DeadLetterEscalator",
    "RetryDecider",
    "RetryExecutor",
    "RetryOutcome",
    "RetryState",
    "RetryStrategy",
]

from arelay.retry.decider import RetryDecider
from arelay.retry.escalator import DeadLetterEscalator
from arelay.retry.executor import RetryExecutor
from arelay.retry.executor_async import AsyncRetryExecutor
from arelay.retry.outcome import RetryOutcome, RetryState
from arelay.retry.strategy import RetryStrategy
