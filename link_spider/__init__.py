"""
LinkSpider package initializer.
Defines package version and exposes the crawl engine and CLI.
"""
__version__ = "0.1.0"

from link_spider.crawler.engine import CrawlEngine
from link_spider.crawler.models import CrawlOutcome, CrawlReport, CrawlStatus, SkipReason
from link_spider.crawler.store import FileResourceStore, MemoryResourceStore, ResourceStore

# Expose CLI entry point
from link_spider.cli import cli as main_cli
from .cli import cli

__all__ = [
    "__version__",
    "CrawlEngine",
    "CrawlOutcome",
    "CrawlReport",
    "CrawlStatus",
    "SkipReason",
    "ResourceStore",
    "FileResourceStore",
    "MemoryResourceStore",
    "cli",
    "main_cli",
]
