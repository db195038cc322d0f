r"""Cancellable waits used between retry attempts.

The executors never sleep directly: they go through these helpers so
that a caller-provided cancel event can cut a backoff wait short.
"""

from __future__ import annotations

__all__ = ["wait", "wait_async"]

import asyncio
import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import threading

logger: logging.Logger = logging.getLogger(__name__)


def wait(delay: float, cancel_event: threading.Event | None = None) -> bool:
    """Block the current thread for ``delay`` seconds.

    Args:
        delay: The wait in seconds.
        cancel_event: Optional event; setting it ends the wait early.

    Returns:
        ``True`` if the full delay elapsed, ``False`` if the wait was
        cancelled.

    Example:
        ```pycon
        >>> import threading
        >>> from arebound.utils.sleep import wait
        >>> wait(0.0)
        True
        >>> event = threading.Event()
        >>> event.set()
        >>> wait(10.0, event)
        False

        ```
    """
    if cancel_event is None:
        time.sleep(delay)
        return True
    if cancel_event.wait(timeout=delay):
        logger.debug(f"Wait of {delay:.2f}s cancelled")
        return False
    return True


async def wait_async(delay: float, cancel_event: asyncio.Event | None = None) -> bool:
    """Suspend the current task for ``delay`` seconds.

    Other tasks keep running during the wait.

    Args:
        delay: The wait in seconds.
        cancel_event: Optional event; setting it ends the wait early.

    Returns:
        ``True`` if the full delay elapsed, ``False`` if the wait was
        cancelled.
    """
    if cancel_event is None:
        await asyncio.sleep(delay)
        return True
    if cancel_event.is_set():
        return False
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return True
    logger.debug(f"Wait of {delay:.2f}s cancelled")
    return False
