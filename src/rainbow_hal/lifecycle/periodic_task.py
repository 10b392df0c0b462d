"""
Periodic Task
-------------

Owned handle over a repeating asyncio task. The callback (sync or async) is
awaited before the next sleep, so one timer never runs its callback twice at
the same time. A failing callback is logged and the loop keeps going.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Awaitable, Callable, Optional, Union

from rainbow_hal.lifecycle.task_registry import TaskCategory, create_tracked_task
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.TASK)

TickCallback = Callable[[], Union[None, Awaitable[None]]]


class PeriodicTask:
    """
    Example:
        poll = PeriodicTask("button-poll", 0.05, controller.poll_buttons, TaskCategory.INPUT)
        poll.start()
        ...
        await poll.stop()
    """

    def __init__(
        self,
        name: str,
        interval: float,
        callback: TickCallback,
        category: TaskCategory = TaskCategory.GENERAL,
    ):
        if interval <= 0:
            raise ValueError("PeriodicTask interval must be > 0")
        self.name = name
        self.interval = interval
        self._callback = callback
        self._category = category
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = create_tracked_task(
            self._run(),
            category=self._category,
            description=f"Periodic {self.name} every {self.interval}s",
        )
        log.debug("Periodic task started", name=self.name, interval=self.interval)

    def cancel(self) -> None:
        """Request cancellation without waiting for it."""
        if self._task and not self._task.done():
            self._task.cancel()

    async def stop(self) -> None:
        """Cancel and wait until the loop has fully exited."""
        task = self._task
        if task is None:
            return
        self.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self._task = None
        log.debug("Periodic task stopped", name=self.name, ticks=self.ticks)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                result = self._callback()
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.error(f"Periodic task {self.name} tick failed", error=str(e))
            self.ticks += 1
