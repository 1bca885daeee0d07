"""
Async HTTP client for the upstream build API.

Every request carries the bot's User-Agent and a fixed total timeout.
Failures are never retried; they surface as RequestError.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from .config import REQUEST_TIMEOUT, USER_AGENT
from .errors import RequestError

logger = logging.getLogger(__name__)


class UpstreamClient:
    """Thin JSON-over-GET wrapper around an aiohttp session."""

    def __init__(
        self,
        user_agent: str = USER_AGENT,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Args:
            user_agent: Sent as the User-Agent header on every request
            timeout: Total seconds allowed per request
            session: Optional shared session. If omitted, one is created on
                first use and closed by close().
        """
        self.user_agent = user_agent
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            self._owns_session = True
        return self._session

    async def get_json(self, url: str) -> Any:
        """
        GET a URL and decode the JSON body.

        Raises:
            RequestError: On transport error, timeout, non-2xx status or a
                body that isn't JSON
        """
        session = self._get_session()
        try:
            async with session.get(
                url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            ) as resp:
                resp.raise_for_status()
                return await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            logger.error(f"Request to {url} timed out after {self.timeout.total}s")
            raise RequestError(url, e) from e
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"Request to {url} failed: {e}")
            raise RequestError(url, e) from e

    async def close(self) -> None:
        """Close the session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
