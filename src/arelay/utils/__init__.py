r"""Utility functions shared by the sync and async request pipelines."""

from __future__ import annotations

__all__ = ["wait", "wait_async"]

from arelay.utils.sleep import wait, wait_async
