from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


def spawn(
    coro: Coroutine[Any, Any, None],
    pending: set[asyncio.Task[None]],
    *,
    name: str,
) -> asyncio.Task[None]:
    """Start a detached task; `pending` only keeps it referenced until done."""

    task = asyncio.get_running_loop().create_task(coro, name=name)
    pending.add(task)

    def _done(finished: asyncio.Task[None]) -> None:
        pending.discard(finished)
        if finished.cancelled():
            return
        exc = finished.exception()
        if exc is not None:
            logger.error("detached task failed", extra={"task": name}, exc_info=exc)

    task.add_done_callback(_done)
    return task
