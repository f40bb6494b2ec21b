# File: tests/test_store.py
from __future__ import annotations

from pathlib import Path

import pytest

from link_spider.crawler.store import FileResourceStore, MemoryResourceStore, to_storage_key
from link_spider.errors import FetchError, ResourceNotFound, StoreReadError, StoreWriteError

URL = "http://example.com/page"


def test_storage_key_layout():
    key = to_storage_key("http://Example.com:8080/a?b=1")
    host, name = key.split("/")
    assert host == "example.com"
    assert name.endswith(".bin")
    assert len(name) == 64 + len(".bin")


def test_storage_key_distinguishes_urls():
    keys = {to_storage_key(u) for u in ("http://a.com/x", "http://a.com/x?y", "https://a.com/x", "http://a.com/x/")}
    assert len(keys) == 4
    assert to_storage_key("http://a.com/x") == to_storage_key("http://a.com/x")


@pytest.mark.asyncio()
async def test_file_store_round_trip(tmp_path):
    store = FileResourceStore(tmp_path / "pages")
    assert not await store.exists(URL)

    await store.write(URL, b"<html></html>")

    assert await store.exists(URL)
    assert await store.read(URL) == b"<html></html>"
    assert store.path_for(URL).is_file()
    assert not list(store.path_for(URL).parent.glob("*.tmp"))


@pytest.mark.asyncio()
async def test_file_store_read_missing(tmp_path):
    store = FileResourceStore(tmp_path)
    with pytest.raises(ResourceNotFound) as excinfo:
        await store.read(URL)
    assert isinstance(excinfo.value, StoreReadError)
    assert excinfo.value.url == URL


@pytest.mark.asyncio()
async def test_file_store_write_failure(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    store = FileResourceStore(blocker)
    with pytest.raises(StoreWriteError):
        await store.write(URL, b"data")


@pytest.mark.asyncio()
async def test_file_store_exists_failure(tmp_path, monkeypatch):
    def denied(self):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(Path, "is_file", denied)
    store = FileResourceStore(tmp_path)
    with pytest.raises(StoreReadError) as excinfo:
        await store.exists(URL)
    assert excinfo.value.url == URL


@pytest.mark.asyncio()
async def test_file_store_custom_key(tmp_path):
    store = FileResourceStore(tmp_path, key_fn=lambda url: "fixed.html")
    await store.write(URL, b"x")
    assert (tmp_path / "fixed.html").read_bytes() == b"x"


@pytest.mark.asyncio()
async def test_memory_store_read_missing():
    with pytest.raises(ResourceNotFound):
        await MemoryResourceStore().read(URL)


@pytest.mark.asyncio()
async def test_read_or_fetch_miss_fetches_and_persists(tmp_path):
    store = FileResourceStore(tmp_path)
    calls = []

    async def fetch(url):
        calls.append(url)
        return b"fresh"

    page = await store.read_or_fetch(URL, fetch)

    assert page.content == b"fresh"
    assert not page.cached
    assert calls == [URL]
    assert await store.read(URL) == b"fresh"


@pytest.mark.asyncio()
async def test_read_or_fetch_hit_skips_fetch(tmp_path):
    store = FileResourceStore(tmp_path)
    await store.write(URL, b"stored")

    async def fetch(url):
        raise AssertionError("fetch must not be called on a cache hit")

    page = await store.read_or_fetch(URL, fetch)
    assert page.cached
    assert page.content == b"stored"


@pytest.mark.asyncio()
async def test_read_or_fetch_error_writes_nothing():
    store = MemoryResourceStore()

    async def fetch(url):
        raise FetchError(url, "transport", "refused")

    with pytest.raises(FetchError):
        await store.read_or_fetch(URL, fetch)
    assert not await store.exists(URL)


@pytest.mark.asyncio()
@pytest.mark.parametrize("cached", [True, False])
async def test_read_or_fetch_never_completes_inline(cached):
    store = MemoryResourceStore({URL: b"x"} if cached else {})
    log = []

    async def fetch(url):
        log.append("fetch")
        return b"x"

    future = store.read_or_fetch(URL, fetch)
    log.append("returned")
    future.add_done_callback(lambda _: log.append("done"))
    log.append("listener registered")

    page = await future

    assert page.cached is cached
    assert log[:2] == ["returned", "listener registered"]
    assert log[-1] == "done"
    assert ("fetch" in log) is not cached
