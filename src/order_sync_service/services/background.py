"""Supervised background tasks for full syncs."""

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

logger = structlog.get_logger()


class BackgroundSyncRunner:
    """Runs full syncs as asyncio tasks detached from the request that started them.

    Holds a reference to every in-flight task so it is not garbage collected
    mid-run, and logs failures when a task ends. Failures are not re-raised:
    the sync has already recorded them on its job.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def active_jobs(self) -> list[str]:
        return list(self._tasks)

    def launch(self, job_id: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro, name=f"order-sync:{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda t: self._on_done(job_id, t))
        logger.info("Background sync launched", job_id=job_id)
        return task

    def _on_done(self, job_id: str, task: asyncio.Task) -> None:
        self._tasks.pop(job_id, None)
        if task.cancelled():
            logger.warning("Background sync cancelled", job_id=job_id)
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "Background sync failed",
                job_id=job_id,
                error=str(error),
                exc_info=error,
            )
        else:
            logger.info("Background sync finished", job_id=job_id)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight syncs, up to ``timeout`` seconds."""
        tasks = list(self._tasks.values())
        if not tasks:
            return
        logger.info("Waiting for background syncs", count=len(tasks))
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        if pending:
            logger.warning(
                "Background syncs still running after grace period",
                jobs=[t.get_name() for t in pending],
            )

    async def cancel_pending(self) -> None:
        """Cancel in-flight syncs and wait until each has recorded its outcome."""
        tasks = list(self._tasks.values())
        if not tasks:
            return
        logger.warning("Cancelling background syncs", jobs=[t.get_name() for t in tasks])
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
