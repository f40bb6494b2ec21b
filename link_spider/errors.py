"""Exception hierarchy shared by the crawler core and its collaborators."""
from __future__ import annotations

from typing import Optional

__all__ = (
    "SpiderError",
    "FetchError",
    "StoreError",
    "StoreReadError",
    "ResourceNotFound",
    "StoreWriteError",
    "ExtractionError",
    "CrawlCancelled",
)


class SpiderError(Exception):
    """Base class for every error a crawl branch can record as a failure."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, object]:
        return {"type": type(self).__name__, "kind": self.kind, "message": self.message}


class FetchError(SpiderError):
    """Transport or remote failure while retrieving a resource."""

    def __init__(self, url: str, kind: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(url, message)
        self._kind = kind
        self.status = status

    @property
    def kind(self) -> str:
        return self._kind

    def to_dict(self) -> dict[str, object]:
        data = super().to_dict()
        if self.status is not None:
            data["status"] = self.status
        return data


class StoreError(SpiderError):
    """Persistence failure in a ResourceStore."""


class StoreReadError(StoreError):
    pass


class ResourceNotFound(StoreReadError):
    def __init__(self, url: str) -> None:
        super().__init__(url, "not found in store")


class StoreWriteError(StoreError):
    pass


class ExtractionError(SpiderError):
    """Content could not be parsed for outbound links."""


class CrawlCancelled(SpiderError):
    """Raised inside a branch when a stop was requested before its fetch was issued."""

    def __init__(self, url: str) -> None:
        super().__init__(url, "crawl stopped before fetch")
