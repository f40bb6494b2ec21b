"""Collaborator interfaces consumed by the crawl engine."""
from __future__ import annotations

from typing import Awaitable, Callable, Iterable, Protocol

__all__ = ("Fetcher", "FetchFn", "LinkExtractor", "StorageKeyFn")


class Fetcher(Protocol):
    async def fetch(self, url: str) -> bytes:
        """Return the raw content of *url* or raise :class:`~link_spider.errors.FetchError`."""
        ...


FetchFn = Callable[[str], Awaitable[bytes]]

# (url, content) -> referenced identifiers; may raise ExtractionError
LinkExtractor = Callable[[str, bytes], Iterable[str]]

StorageKeyFn = Callable[[str], str]
