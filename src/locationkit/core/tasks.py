"""
Fire-and-forget task launching.

Some collaborator calls are issued only for their side effect (re-prompting for a
permission, opening a settings screen) and their outcome is discarded on purpose.
`fire_and_forget` makes that discard explicit at the call site:
- the task is kept alive until it finishes (asyncio only holds weak references),
- its result or exception is logged and never re-raised.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine

logger = logging.getLogger(__name__)

_pending: set[asyncio.Task[Any]] = set()


def _discard_outcome(task: asyncio.Task[Any]) -> None:
    _pending.discard(task)
    if task.cancelled():
        logger.debug("Discarded task %s was cancelled", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Discarded task %s failed: %r", task.get_name(), exc)
        return
    logger.debug("Discarded task %s finished with %r", task.get_name(), task.result())


def fire_and_forget(coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
    """Schedule `coro` on the running loop; its outcome is intentionally ignored."""
    task = asyncio.get_running_loop().create_task(coro, name=name)
    _pending.add(task)
    task.add_done_callback(_discard_outcome)
    return task
