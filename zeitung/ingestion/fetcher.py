"""Async HTTP transport for downloading feeds."""

from typing import Optional

import aiohttp
import structlog

from .interfaces import FetchResponse, HttpTransport
from ..config.settings import settings

logger = structlog.get_logger()


class AiohttpTransport(HttpTransport):
    """aiohttp-backed transport with a per-request timeout.

    Use as an async context manager so the session is closed after a run.
    """

    def __init__(self, timeout_seconds: Optional[int] = None, user_agent: Optional[str] = None):
        self.timeout_seconds = timeout_seconds or settings.fetch_timeout_seconds
        self.user_agent = user_agent or settings.user_agent
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            headers={"User-Agent": self.user_agent}
        )
        return self

    async def __aexit__(self, *args):
        if self.session:
            await self.session.close()
            self.session = None

    async def fetch(self, url: str) -> FetchResponse:
        """Download a URL. Timeouts and connection errors propagate."""
        if self.session is None:
            raise RuntimeError("AiohttpTransport must be used as an async context manager")

        async with self.session.get(url) as response:
            body = await response.read()
            logger.debug("feed_downloaded", url=url[:80], status=response.status, size=len(body))
            return FetchResponse(status=response.status, body=body)
