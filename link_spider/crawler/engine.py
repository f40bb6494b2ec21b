"""
Crawl engine: depth-bounded, deduplicated, concurrent link traversal.

Each identifier is claimed once per run. The claimant reads it from the store
or fetches it, extracts its links and crawls every child concurrently, then
waits for the whole subtree to settle before reporting. Failures stay local
to their branch and are collected into the report.
"""
from __future__ import annotations

import asyncio
import time
from contextlib import AsyncExitStack
from typing import Optional

from link_spider.crawler.link_extractor import extract_links
from link_spider.crawler.models import CrawlOutcome, CrawlReport, PageData, SkipReason
from link_spider.crawler.protocols import Fetcher, LinkExtractor
from link_spider.crawler.store import ResourceStore
from link_spider.crawler.visited import ClaimResult, VisitedTracker
from link_spider.errors import CrawlCancelled, SpiderError
from link_spider.logger import logger

__all__ = ("CrawlEngine",)


class _CrawlRun:
    """State shared by all branches of one top-level crawl."""

    def __init__(
        self,
        engine: CrawlEngine,
        stop_event: Optional[asyncio.Event],
    ) -> None:
        self.engine = engine
        self.visited = VisitedTracker()
        self.stop_event = stop_event
        self.limiter = (
            asyncio.Semaphore(engine.max_in_flight) if engine.max_in_flight is not None else None
        )
        self.admitted = 0

    @property
    def stopping(self) -> bool:
        return self.stop_event is not None and self.stop_event.is_set()

    async def fetch(self, url: str) -> bytes:
        async with AsyncExitStack() as stack:
            if self.limiter is not None:
                await stack.enter_async_context(self.limiter)
            # the stop may have been requested while waiting for a slot
            if self.stopping:
                raise CrawlCancelled(url)
            return await self.engine.fetcher.fetch(url)

    async def visit(self, url: str, depth: int) -> CrawlReport:
        report = CrawlReport()
        if self.visited.claim(url) is ClaimResult.ALREADY_CLAIMED:
            report.duplicates += 1
            return report

        outcome, page = await self._load(url, depth)
        if page is None or depth == 0:
            report.add(outcome)
            return report

        try:
            links = list(self.engine.extractor(url, page.content))
        except SpiderError as exc:
            logger.warning("Link extraction failed for %s: %s", url, exc)
            report.add(CrawlOutcome.failed(url, depth, exc))
            return report
        report.add(outcome)

        children = await asyncio.gather(*(self.visit(link, depth - 1) for link in links))
        for child in children:
            report.merge(child)
        return report

    async def _load(self, url: str, depth: int) -> tuple[CrawlOutcome, Optional[PageData]]:
        if self.stopping:
            return CrawlOutcome.skipped(url, depth, SkipReason.CANCELLED), None
        limit = self.engine.max_resources
        if limit is not None and self.admitted >= limit:
            return CrawlOutcome.skipped(url, depth, SkipReason.LIMIT_REACHED), None
        self.admitted += 1

        try:
            page = await self.engine.store.read_or_fetch(url, self.fetch)
        except CrawlCancelled:
            return CrawlOutcome.skipped(url, depth, SkipReason.CANCELLED), None
        except SpiderError as exc:
            logger.warning("Failed %s: %s", url, exc)
            return CrawlOutcome.failed(url, depth, exc), None
        return CrawlOutcome.fetched(page, depth), page


class CrawlEngine:
    """Recursive fork-join crawler over injected fetcher, store and extractor."""

    def __init__(
        self,
        fetcher: Fetcher,
        store: ResourceStore,
        extractor: LinkExtractor = extract_links,
        *,
        max_in_flight: Optional[int] = None,
        max_resources: Optional[int] = None,
    ) -> None:
        if max_in_flight is not None and max_in_flight < 1:
            raise ValueError("max_in_flight must be >= 1")
        if max_resources is not None and max_resources < 1:
            raise ValueError("max_resources must be >= 1")
        self.fetcher = fetcher
        self.store = store
        self.extractor = extractor
        self.max_in_flight = max_in_flight
        self.max_resources = max_resources

    async def crawl(
        self,
        seed: str,
        max_depth: int,
        *,
        stop_event: Optional[asyncio.Event] = None,
    ) -> CrawlReport:
        """
        Crawl from *seed* down to *max_depth* link hops and report every
        identifier visited. Setting *stop_event* stops new fetches; whatever
        is in flight settles and the partial report is returned.
        """
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        logger.info("Crawl start: %s (depth %d)", seed, max_depth)
        start = time.monotonic()
        report = await _CrawlRun(self, stop_event).visit(seed, max_depth)
        duration = time.monotonic() - start
        logger.info(
            "Crawl done in %.2f s: %d fetched, %d cached, %d skipped, %d failed",
            duration,
            report.fetched,
            report.cached,
            report.skipped,
            report.failed,
        )
        return report
