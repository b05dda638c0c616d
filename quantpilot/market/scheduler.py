"""Cancellable periodic task for the simulation clock."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Calls a synchronous callback every ``interval`` seconds.

    The callback runs on the event loop between sleeps, so two ticks can
    never overlap. ``cancel`` is idempotent, and once it returns the
    callback is not invoked again.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "periodic"):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.name = name
        self._callback = callback
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._cancelled

    def start(self) -> None:
        """Schedule the loop on the running event loop.

        Raises:
            RuntimeError: If the task was already started or cancelled.
        """
        if self._task is not None or self._cancelled:
            raise RuntimeError(f"{self.name} task cannot be restarted")
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self._cancelled:
                return
            self.ticks += 1
            self._callback()

    def cancel(self) -> None:
        """Stop the loop. Safe to call more than once."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.debug("Cancelled %s after %d ticks", self.name, self.ticks)

    async def wait_closed(self) -> None:
        """Wait for the underlying asyncio task to finish after cancel."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass
