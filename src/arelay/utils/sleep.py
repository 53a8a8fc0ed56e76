r"""Cancellable waits.

The retry engine and the rate limiters never sleep unconditionally when
a cancellation signal is available: they wait on the signal with a
timeout, so a call can be aborted in the middle of a backoff delay or of
a rate limiter wait.
"""

from __future__ import annotations

__all__ = ["wait", "wait_async"]

import asyncio
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import threading


def wait(delay: float, cancel: threading.Event | None = None) -> bool:
    """Wait for ``delay`` seconds unless ``cancel`` is set first.

    Args:
        delay: The number of seconds to wait.
        cancel: Optional cancellation signal.

    Returns:
        ``True`` if the full delay elapsed, ``False`` if the wait was
        cancelled.

    Example:
        ```pycon
        >>> import threading
        >>> from arelay.utils.sleep import wait
        >>> wait(0.0)
        True
        >>> cancel = threading.Event()
        >>> cancel.set()
        >>> wait(10.0, cancel)
        False

        ```
    """
    if cancel is None:
        time.sleep(delay)
        return True
    if cancel.is_set():
        return False
    return not cancel.wait(delay)


async def wait_async(delay: float, cancel: asyncio.Event | None = None) -> bool:
    """Wait for ``delay`` seconds unless ``cancel`` is set first.

    Args:
        delay: The number of seconds to wait.
        cancel: Optional cancellation signal.

    Returns:
        ``True`` if the full delay elapsed, ``False`` if the wait was
        cancelled.
    """
    if cancel is None:
        await asyncio.sleep(delay)
        return True
    if cancel.is_set():
        return False
    try:
        await asyncio.wait_for(cancel.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return True
    return False
