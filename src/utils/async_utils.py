"""
RoMod - Async Utilities
=======================

Background task helpers that log failures instead of losing them.

Usage:
    from src.utils.async_utils import create_safe_task, drain_tasks

    # Instead of:
    asyncio.create_task(manager.broadcast_change(event))

    # Use:
    create_safe_task(manager.broadcast_change(event), "Fan-Out")

    # At shutdown:
    await drain_tasks(pending, cancel=True)

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import Any, Coroutine, Set

from src.core.logger import logger


# =============================================================================
# Safe Background Tasks
# =============================================================================

def create_safe_task(
    coro: Coroutine[Any, Any, Any],
    name: str = "Background Task",
) -> asyncio.Task:
    """
    Create a background task with automatic error logging.

    Unlike raw asyncio.create_task(), this catches and logs any exceptions
    instead of letting them silently disappear. Must be called with a
    running event loop.
    """
    async def wrapped():
        try:
            await coro
        except asyncio.CancelledError:
            # Cancelled during shutdown
            pass
        except Exception as e:
            logger.error("Background Task Failed", [
                ("Task", name),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])

    return asyncio.create_task(wrapped(), name=name)


async def drain_tasks(tasks: Set[asyncio.Task], cancel: bool = False) -> int:
    """
    Wait until a live task set is empty.

    The set may grow while waiting (tasks scheduling more tasks), so
    this loops until nothing is left. Tasks are expected to remove
    themselves from the set when done.

    Args:
        tasks: Set of tasks, mutated by the tasks' done callbacks.
        cancel: Cancel every task first instead of letting it finish.

    Returns:
        Number of tasks waited on.
    """
    waited = 0
    if cancel:
        for task in list(tasks):
            task.cancel()
        if tasks:
            logger.debug("Cancelling Tasks", [("Count", str(len(tasks)))])

    while tasks:
        batch = list(tasks)
        waited += len(batch)
        await asyncio.gather(*batch, return_exceptions=True)
        # Done callbacks have run; drop anything that did not remove itself
        tasks.difference_update(t for t in batch if t.done())
    return waited


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "create_safe_task",
    "drain_tasks",
]
