"""Async HTTP session manager.

Owns the lifecycle of the aiohttp.ClientSession shared by the HTTP
data-source adapters of one controller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import aiohttp

from servesync.shared.constants import NetworkConfig
from servesync.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)


class AsyncSessionManager:
    """Manages one aiohttp.ClientSession.

    The session is created lazily on first use and recreated if it was
    closed underneath us. Per-request timeouts are enforced by the fetch
    orchestrator, so the session itself has no total timeout.
    """

    def __init__(self, user_agent: str = NetworkConfig.USER_AGENT) -> None:
        self._user_agent = user_agent
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()
        self._closed = False

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session.

        Raises:
            ApplicationError: SESSION_CLOSED after close() was called.
        """
        if self._closed:
            raise ApplicationError(
                code=ErrorCode.SESSION_CLOSED,
                message="HTTP session manager has been closed",
                context=ErrorContext(operation="get_session"),
            )
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = self._create_session()
            return self._session

    def _create_session(self) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(
            limit=NetworkConfig.CONNECTION_LIMIT,
            limit_per_host=NetworkConfig.CONNECTION_LIMIT_PER_HOST,
            keepalive_timeout=NetworkConfig.KEEPALIVE_TIMEOUT,
        )
        headers = {
            "User-Agent": self._user_agent,
            "Accept": NetworkConfig.ACCEPT_JSON,
            "Cache-Control": NetworkConfig.NO_CACHE,
        }
        session = aiohttp.ClientSession(
            connector=connector,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=None),
            raise_for_status=False,
        )
        logger.debug("aiohttp.ClientSession created")
        return session

    async def close(self) -> None:
        """Close the HTTP session; the manager can not be reused afterwards."""
        async with self._session_lock:
            self._closed = True
            if self._session is not None and not self._session.closed:
                try:
                    await self._session.close()
                    logger.debug("aiohttp.ClientSession closed")
                except aiohttp.ClientError as e:
                    logger.warning("Error closing aiohttp.ClientSession: %s", e)
            self._session = None

    @property
    def is_session_ready(self) -> bool:
        return self._session is not None and not self._session.closed

    @asynccontextmanager
    async def session_context(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Yield the managed session; the manager keeps ownership."""
        yield await self.get_session()

    async def __aenter__(self) -> AsyncSessionManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


__all__ = ["AsyncSessionManager"]
