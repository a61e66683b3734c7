"""
Background jobs that run inside the API process.

Each job runs on a fixed interval. A failing run is logged and retried on the
next tick; it never stops the loop.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]


async def run_periodically(name: str, interval_seconds: float, job: Job) -> None:
    """Run ``job`` every ``interval_seconds`` until cancelled (first run after one interval)."""
    logger.info(f"[{name}] scheduled every {interval_seconds:g}s")
    while True:
        await asyncio.sleep(interval_seconds)
        logger.info(f"[{name}] running scheduled check...")
        try:
            await job()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"[{name}] scheduled run failed; retrying next tick")


class Scheduler:
    """Owns the background tasks started with the application."""

    def __init__(self):
        self._tasks: List[asyncio.Task] = []

    def every(self, name: str, interval_seconds: float, job: Job) -> asyncio.Task:
        task = asyncio.create_task(run_periodically(name, interval_seconds, job), name=name)
        self._tasks.append(task)
        return task

    async def shutdown(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
