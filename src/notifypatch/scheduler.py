"""
Periodic poll driver.

Runs the update detector once shortly after startup and then on a fixed
period for the life of the process. There is a single asyncio task and each
cycle is awaited before the next one is scheduled.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .config import INITIAL_POLL_DELAY, POLL_INTERVAL

logger = logging.getLogger(__name__)


class PollScheduler:
    """Calls `job` after `initial_delay` seconds, then every `interval` seconds."""

    def __init__(
        self,
        job: Callable[[], Awaitable[object]],
        initial_delay: float = INITIAL_POLL_DELAY,
        interval: float = POLL_INTERVAL,
    ):
        self.job = job
        self.initial_delay = initial_delay
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self.cycles = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Start the poll loop on the running event loop. Idempotent."""
        if self.running:
            logger.debug("Poll scheduler already running")
            return self._task
        self._task = asyncio.create_task(self._run(), name="notifypatch-poll")
        logger.info(
            f"Polling scheduled: first check in {self.initial_delay}s, "
            f"then every {self.interval}s"
        )
        return self._task

    async def stop(self) -> None:
        """Cancel the poll loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Poll scheduler stopped")

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        await asyncio.sleep(self.initial_delay)
        next_run = loop.time()

        while True:
            await self._run_once()

            # Fixed-rate schedule; ticks missed during a slow cycle are skipped.
            next_run += self.interval
            now = loop.time()
            if next_run < now:
                missed = int((now - next_run) // self.interval) + 1
                next_run += missed * self.interval
            await asyncio.sleep(next_run - now)

    async def _run_once(self) -> None:
        self.cycles += 1
        try:
            await self.job()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Poll cycle {self.cycles} raised: {e}", exc_info=True)
