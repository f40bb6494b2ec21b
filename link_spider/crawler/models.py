"""
Data models for the LinkSpider crawler.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from link_spider.errors import SpiderError

__all__ = ("PageData", "CrawlStatus", "SkipReason", "CrawlOutcome", "CrawlReport")


@dataclass(slots=True, frozen=True)
class PageData:
    """Content of a resource and whether it came from the store instead of the network."""

    url: str
    content: bytes
    cached: bool = False


class CrawlStatus(str, enum.Enum):
    FETCHED = "fetched"
    CACHED = "cached"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, enum.Enum):
    ALREADY_VISITED = "already_visited"
    CANCELLED = "cancelled"
    LIMIT_REACHED = "limit_reached"


@dataclass(slots=True, frozen=True)
class CrawlOutcome:
    """Result of one admitted crawl attempt."""

    url: str
    status: CrawlStatus
    depth: int
    reason: Optional[SkipReason] = None
    error: Optional[SpiderError] = None

    @classmethod
    def fetched(cls, page: PageData, depth: int) -> CrawlOutcome:
        status = CrawlStatus.CACHED if page.cached else CrawlStatus.FETCHED
        return cls(page.url, status, depth)

    @classmethod
    def skipped(cls, url: str, depth: int, reason: SkipReason) -> CrawlOutcome:
        return cls(url, CrawlStatus.SKIPPED, depth, reason=reason)

    @classmethod
    def failed(cls, url: str, depth: int, error: SpiderError) -> CrawlOutcome:
        return cls(url, CrawlStatus.FAILED, depth, error=error)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"url": self.url, "status": self.status.value, "depth": self.depth}
        if self.reason is not None:
            data["reason"] = self.reason.value
        if self.error is not None:
            data["error"] = self.error.to_dict()
        return data


@dataclass(slots=True)
class CrawlReport:
    """
    Aggregate of a crawl subtree.

    ``outcomes`` holds every admitted identifier exactly once, in the order
    its outcome was settled. ``duplicates`` counts branches that were turned
    away because another branch had already claimed the identifier.
    """

    outcomes: Dict[str, CrawlOutcome] = field(default_factory=dict)
    duplicates: int = 0

    def add(self, outcome: CrawlOutcome) -> None:
        if outcome.url in self.outcomes:
            raise ValueError(f"outcome for {outcome.url} already recorded")
        self.outcomes[outcome.url] = outcome

    def merge(self, other: CrawlReport) -> None:
        for outcome in other.outcomes.values():
            self.add(outcome)
        self.duplicates += other.duplicates

    def _count(self, status: CrawlStatus) -> int:
        return sum(1 for o in self.outcomes.values() if o.status is status)

    @property
    def fetched(self) -> int:
        return self._count(CrawlStatus.FETCHED)

    @property
    def cached(self) -> int:
        return self._count(CrawlStatus.CACHED)

    @property
    def skipped(self) -> int:
        """Duplicate discoveries plus admitted identifiers that were never fetched."""
        return self.duplicates + self._count(CrawlStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(CrawlStatus.FAILED)

    @property
    def errors(self) -> List[SpiderError]:
        return [o.error for o in self.outcomes.values() if o.error is not None]

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def __getitem__(self, url: str) -> CrawlOutcome:
        return self.outcomes[url]

    def __contains__(self, url: object) -> bool:
        return url in self.outcomes

    def __len__(self) -> int:
        return len(self.outcomes)

    def summary(self) -> Dict[str, int]:
        return {
            "visited": len(self.outcomes),
            "fetched": self.fetched,
            "cached": self.cached,
            "skipped": self.skipped,
            "failed": self.failed,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary(),
            "outcomes": [o.to_dict() for o in self.outcomes.values()],
        }
