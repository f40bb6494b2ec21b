"""
Fetcher module: HTTP retrieval with rate limiting, retry/backoff and timeout.

Every failure surfaces as :class:`~link_spider.errors.FetchError`; the crawl
engine records it against the resource and carries on with its siblings.
"""
from __future__ import annotations

import asyncio
import random
import time
from typing import Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from link_spider.config import SpiderConfig
from link_spider.errors import FetchError
from link_spider.logger import logger

__all__ = ("HttpFetcher", "open_session")

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)


def open_session(config: SpiderConfig) -> ClientSession:
    """Build the shared client session for a crawl run."""
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        headers={"User-Agent": config.user_agent},
        raise_for_status=False,
    )


class _RetryableStatus(ClientError):
    def __init__(self, status: int) -> None:
        super().__init__(f"retryable status {status}")
        self.status = status


class HttpFetcher:
    """Fetches raw bytes over HTTP with rate limit, retries/backoff and timeout."""

    def __init__(
        self,
        session: ClientSession,
        config: SpiderConfig,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.session = session
        self.config = config
        self._retry_status = retry_status
        self._rate_lock = asyncio.Lock()
        self._last_request_ts = 0.0

    async def fetch(self, url: str) -> bytes:
        attempts = 0
        while True:
            await self._wait_for_rate_limit()
            try:
                async with self.session.get(url) as resp:
                    if resp.status in self._retry_status:
                        raise _RetryableStatus(resp.status)
                    if resp.status >= 400:
                        raise FetchError(url, "http", f"HTTP {resp.status}", status=resp.status)
                    return await resp.read()
            except asyncio.TimeoutError:
                logger.warning("Timeout fetching %s", url)
                raise FetchError(url, "timeout", f"no response within {self.config.timeout}s") from None
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    logger.warning("Failed %s: %s", url, exc)
                    status = exc.status if isinstance(exc, _RetryableStatus) else None
                    raise FetchError(url, "transport", str(exc), status=status) from exc
                factor = self.config.backoff_factor
                backoff = min(60, (2**attempts + random.random()) * factor)
                logger.debug(
                    "Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, backoff
                )
                await asyncio.sleep(backoff)

    async def _wait_for_rate_limit(self) -> None:
        interval = 1 / self.config.rate_limit
        async with self._rate_lock:
            wait = interval - (time.monotonic() - self._last_request_ts)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()
