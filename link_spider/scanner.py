"""
Wiring of a complete crawl run from a configuration.
"""
import asyncio
from typing import Optional

from link_spider.config import SpiderConfig
from link_spider.crawler.engine import CrawlEngine
from link_spider.crawler.fetcher import HttpFetcher, open_session
from link_spider.crawler.link_extractor import extract_links, normalize_url, same_host_extractor
from link_spider.crawler.models import CrawlReport
from link_spider.crawler.store import FileResourceStore


async def start_crawl(cfg: SpiderConfig, stop_event: Optional[asyncio.Event] = None) -> CrawlReport:
    """
    Run one crawl described by *cfg* and return its report.

    Parameters
    ----------
    cfg : SpiderConfig
        Crawl configuration.
    stop_event : asyncio.Event, optional
        When set, no new fetches are issued and the partial report is returned.
    """
    extractor = same_host_extractor() if cfg.same_host else extract_links
    store = FileResourceStore(cfg.cache_dir)
    async with open_session(cfg) as session:
        engine = CrawlEngine(
            HttpFetcher(session, cfg),
            store,
            extractor,
            max_in_flight=cfg.max_in_flight,
            max_resources=cfg.max_resources,
        )
        return await engine.crawl(normalize_url(str(cfg.seed_url)), cfg.max_depth, stop_event=stop_event)

__all__ = ["start_crawl"]
