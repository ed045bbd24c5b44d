"""asyncio implementation of the Scheduler port."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from dealcart.application.ports import ScheduledHandle, Scheduler

logger = logging.getLogger(__name__)


class _IntervalHandle(ScheduledHandle):
    """Cancels the interval task.

    A callback may cancel its own handle (the poller does when it sees a
    terminal status).  The running callback is then allowed to finish and
    the loop exits afterwards, instead of being interrupted mid-await.
    """

    def __init__(self) -> None:
        self.task: asyncio.Task[None] | None = None
        self.cancelled = False
        self.running = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self.task is not None and not self.running:
            self.task.cancel()


class AsyncioScheduler(Scheduler):

    def every(
        self, interval: float, callback: Callable[[], Awaitable[None]]
    ) -> ScheduledHandle:
        handle = _IntervalHandle()
        handle.task = asyncio.get_running_loop().create_task(
            self._run(handle, interval, callback)
        )
        return handle

    @staticmethod
    async def _run(
        handle: _IntervalHandle,
        interval: float,
        callback: Callable[[], Awaitable[None]],
    ) -> None:
        while not handle.cancelled:
            await asyncio.sleep(interval)
            if handle.cancelled:
                break
            handle.running = True
            try:
                await callback()
            except Exception:
                logger.exception("Scheduled callback failed")
            finally:
                handle.running = False
