"""
One poll cycle: fetch the latest build, compare it with what was last
announced, and persist + announce it if it is new.
"""

import asyncio
import logging

from .errors import PersistenceError, RequestError
from .formatters import POLL_FAILED_MESSAGE, format_new_build_embed
from .notifier import ChannelNotifier
from .poller import BuildPoller
from .state import StateStore

logger = logging.getLogger(__name__)


class UpdateDetector:
    """
    Detects new builds and announces them.

    The detector is the only writer of the state store. Cycles never overlap:
    a cycle requested while another is running is skipped.
    """

    def __init__(self, poller: BuildPoller, store: StateStore, notifier: ChannelNotifier):
        self.poller = poller
        self.store = store
        self.notifier = notifier
        self._lock = asyncio.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    async def run_cycle(self) -> bool:
        """
        Run one poll cycle. Never raises.

        Returns:
            True if a new build was detected and recorded
        """
        if self._lock.locked():
            logger.warning("Previous update check still running, skipping this one")
            return False

        async with self._lock:
            return await self._check()

    async def _check(self) -> bool:
        logger.info("Checking for updates...")

        try:
            record = await self.poller.fetch_latest_build()
        except Exception as e:
            if isinstance(e, RequestError):
                logger.error(f"Error checking for updates: {e}")
            else:
                logger.error(f"Error checking for updates: {e}", exc_info=True)
            await self._send_warning()
            return False

        if self.store.state.is_known(record.version, record.build):
            logger.info("No new updates")
            return False

        logger.info(f"New build detected: Paper {record.version} Build #{record.build}")
        self.store.record_build(record)

        try:
            self.store.save()
        except PersistenceError as e:
            logger.error(f"Failed to save persisted state: {e}")

        try:
            await self.notifier.send_embed(format_new_build_embed(record))
            logger.info("New build announcement sent")
        except Exception as e:
            logger.error(f"Failed to send new build announcement: {e}", exc_info=True)

        return True

    async def _send_warning(self) -> None:
        try:
            await self.notifier.send_text(POLL_FAILED_MESSAGE)
        except Exception as e:
            logger.error(f"Failed to send update-check warning: {e}", exc_info=True)
