# File: tests/conftest.py
import asyncio
from collections import Counter
from typing import AsyncIterator, Callable, Dict, Iterable, List, Optional

import pytest
from aiohttp import web

from link_spider.errors import FetchError


class GraphFetcher:
    """
    In-memory fetcher over a link graph ``{url: [child, ...]}``.

    Page content is the space-separated list of children, so
    :func:`split_links` recovers it. Counts calls and peak concurrency.
    """

    def __init__(
        self,
        graph: Dict[str, List[str]],
        failing: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.graph = graph
        self.failing = set(failing)
        self.delay = delay
        self.calls: Counter = Counter()
        self.in_flight = 0
        self.peak_in_flight = 0
        self.on_fetch: Optional[Callable[[str], None]] = None

    async def fetch(self, url: str) -> bytes:
        self.calls[url] += 1
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if self.on_fetch is not None:
                self.on_fetch(url)
            if url in self.failing:
                raise FetchError(url, "transport", "connection reset")
            if url not in self.graph:
                raise FetchError(url, "http", "HTTP 404", status=404)
            return " ".join(self.graph[url]).encode()
        finally:
            self.in_flight -= 1


def split_links(url: str, content: bytes) -> List[str]:
    return content.decode().split()


@pytest.fixture()
def diamond_graph() -> Dict[str, List[str]]:
    """A -> [B, C]; B -> [C, D]; C and D are leaves."""
    return {"A": ["B", "C"], "B": ["C", "D"], "C": [], "D": []}


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()
