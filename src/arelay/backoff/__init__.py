r"""Backoff strategies for retry delays.

This package provides the strategy interface used by the retry engine
to compute how long to wait before the next attempt, and the default
exponential strategy.
"""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "ExponentialBackoff"]

from arelay.backoff.base import BaseBackoffStrategy
from arelay.backoff.exponential import ExponentialBackoff
