"""Tracking of in-flight webhook work for graceful shutdown.

Webhook routes schedule work through FastAPI BackgroundTasks with
run_tracked(), which runs it as a separate asyncio task and registers it
here. On shutdown the lifespan calls drain_background_tasks(): tracked
tasks get a bounded time to finish and are cancelled after that.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import logfire

# Track pending background tasks for graceful shutdown
_pending_tasks: set[asyncio.Task] = set()


def track_background_task(task: asyncio.Task) -> None:
    """
    Track a background task for graceful shutdown.

    Example:
        task = asyncio.create_task(process_image(...))
        track_background_task(task)
    """
    _pending_tasks.add(task)
    task.add_done_callback(_pending_tasks.discard)


def pending_task_count() -> int:
    return len(_pending_tasks)


async def run_tracked(
    func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any
) -> None:
    """Run ``func(*args, **kwargs)`` as a tracked task and wait for it.

    Cancelling the caller leaves the task running; it stays tracked until
    it finishes or drain_background_tasks() cancels it.
    """
    task = asyncio.create_task(func(*args, **kwargs))
    track_background_task(task)
    await asyncio.shield(task)


async def drain_background_tasks(timeout_seconds: float) -> tuple[int, int]:
    """Wait for tracked tasks, cancelling any still running at the timeout.

    Only tasks on the running loop are considered.

    Returns:
        (completed tasks, cancelled tasks)
    """
    loop = asyncio.get_running_loop()
    tasks = {
        task
        for task in _pending_tasks
        if task.get_loop() is loop and not task.done()
    }
    if not tasks:
        return 0, 0

    logfire.info(
        "Waiting for pending background tasks to complete",
        task_count=len(tasks),
        timeout_seconds=timeout_seconds,
    )
    done, pending = await asyncio.wait(
        tasks,
        timeout=timeout_seconds,
        return_when=asyncio.ALL_COMPLETED,
    )

    if pending:
        logfire.warning(
            "Cancelling remaining tasks after timeout",
            completed_count=len(done),
            cancelled_count=len(pending),
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
    else:
        logfire.info(
            "All background tasks completed successfully",
            completed_count=len(done),
        )
    return len(done), len(pending)
