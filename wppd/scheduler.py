"""Cron scheduler for background tasks.

Every registered task gets its own asyncio task that sleeps until the next
fire time computed by croniter and then awaits the callback. Runs of the same
task never overlap; different tasks are not coordinated.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from croniter import croniter

logger = logging.getLogger(__name__)

TaskCallback = Callable[[], Awaitable[None]]


@dataclass
class ScheduledTask:
    name: str
    cron: str
    callback: TaskCallback
    run_on_start: bool = False
    handle: asyncio.Task | None = None


class Scheduler:
    """Register named cron tasks and run them on the event loop."""

    def __init__(self):
        self.tasks: dict[str, ScheduledTask] = {}
        self.running = False

    def add_task(
        self,
        name: str,
        cron: str,
        callback: TaskCallback,
        run_on_start: bool = False,
    ) -> bool:
        """Register a task under a unique name.

        Args:
            name: Task name, unique per scheduler
            cron: Five-field cron expression
            callback: Coroutine function to await on every run
            run_on_start: Also run once as soon as the scheduler starts

        Returns:
            False when a task with the same name is already registered.

        Raises:
            ValueError: If the cron expression is invalid.
        """
        if name in self.tasks:
            logger.warning(f'Task with name "{name}" already exists. Skipping addition.')
            return False

        if not croniter.is_valid(cron):
            raise ValueError(f"Invalid cron expression for task {name}: {cron}")

        task = ScheduledTask(name=name, cron=cron, callback=callback, run_on_start=run_on_start)
        self.tasks[name] = task
        if self.running:
            task.handle = asyncio.create_task(self._run_forever(task), name=name)

        logger.info(f'Task "{name}" scheduled successfully.')
        return True

    def next_run(self, name: str, now: datetime | None = None) -> datetime:
        task = self.tasks[name]
        return croniter(task.cron, now or datetime.utcnow()).get_next(datetime)

    def start(self) -> None:
        if self.running:
            return

        self.running = True
        for task in self.tasks.values():
            task.handle = asyncio.create_task(self._run_forever(task), name=task.name)
        logger.info(f"Scheduler started with {len(self.tasks)} tasks")

    async def shutdown(self) -> None:
        self.running = False
        handles = [task.handle for task in self.tasks.values() if task.handle is not None]
        for handle in handles:
            handle.cancel()

        await asyncio.gather(*handles, return_exceptions=True)
        for task in self.tasks.values():
            task.handle = None
        logger.info("Scheduler stopped")

    async def _run_forever(self, task: ScheduledTask) -> None:
        if task.run_on_start:
            await self._run_once(task)

        while True:
            now = datetime.utcnow()
            delay = (self.next_run(task.name, now) - now).total_seconds()
            await asyncio.sleep(max(delay, 0))
            await self._run_once(task)

    async def _run_once(self, task: ScheduledTask) -> None:
        logger.debug(f"Running task {task.name}")
        try:
            await task.callback()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Task {task.name} failed: {e}", exc_info=True)
