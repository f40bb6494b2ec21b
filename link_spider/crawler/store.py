"""
Resource store: write-once memoization of fetched content, keyed by identifier.

Every store exposes :meth:`ResourceStore.read_or_fetch`, a read-through that
always hands its result back through the event loop. A caller may attach
callbacks to the returned future after the call and will never miss the
completion, whether the content came from disk or from the network.
"""
from __future__ import annotations

import abc
import asyncio
import hashlib
import os
import tempfile
from pathlib import Path
from typing import Dict, Union
from urllib.parse import urlparse

from link_spider.crawler.models import PageData
from link_spider.crawler.protocols import FetchFn, StorageKeyFn
from link_spider.errors import ResourceNotFound, StoreReadError, StoreWriteError
from link_spider.logger import logger

__all__ = ("ResourceStore", "FileResourceStore", "MemoryResourceStore", "to_storage_key")


def to_storage_key(url: str) -> str:
    """Map *url* to a relative path ``<host>/<sha256>.bin``."""
    host = (urlparse(url).hostname or "").lower()
    host = "".join(c if (c.isalnum() or c in ".-_") else "_" for c in host) or "unknown"
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    return f"{host}/{digest}.bin"


class ResourceStore(abc.ABC):
    """Maps an identifier to previously fetched content."""

    @abc.abstractmethod
    async def exists(self, url: str) -> bool: ...

    @abc.abstractmethod
    async def read(self, url: str) -> bytes: ...

    @abc.abstractmethod
    async def write(self, url: str, content: bytes) -> None: ...

    def read_or_fetch(self, url: str, fetch: FetchFn) -> asyncio.Future[PageData]:
        """Return stored content for *url*, fetching and persisting it on a miss.

        The work is scheduled as a task on the running loop and the task is
        returned, so no continuation runs before this call has returned.
        """
        loop = asyncio.get_running_loop()
        return loop.create_task(self._read_or_fetch(url, fetch))

    async def _read_or_fetch(self, url: str, fetch: FetchFn) -> PageData:
        if await self.exists(url):
            logger.debug("Cache hit: %s", url)
            return PageData(url, await self.read(url), cached=True)
        content = await fetch(url)
        await self.write(url, content)
        logger.debug("Fetched and stored: %s (%d bytes)", url, len(content))
        return PageData(url, content, cached=False)


class FileResourceStore(ResourceStore):
    """Persists each resource in its own file under *root*.

    Blocking file operations run in worker threads; writes go through a
    temporary file and ``os.replace`` so a reader never sees partial content.
    """

    def __init__(self, root: Union[str, Path], key_fn: StorageKeyFn = to_storage_key) -> None:
        self.root = Path(root)
        self._key_fn = key_fn

    def path_for(self, url: str) -> Path:
        return self.root / self._key_fn(url)

    async def exists(self, url: str) -> bool:
        path = self.path_for(url)
        try:
            return await asyncio.to_thread(path.is_file)
        except OSError as exc:
            raise StoreReadError(url, f"cannot stat {path}: {exc}") from exc

    async def read(self, url: str) -> bytes:
        path = self.path_for(url)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            raise ResourceNotFound(url) from None
        except OSError as exc:
            raise StoreReadError(url, f"cannot read {path}: {exc}") from exc

    async def write(self, url: str, content: bytes) -> None:
        path = self.path_for(url)
        try:
            await asyncio.to_thread(self._atomic_write_bytes, path, content)
        except OSError as exc:
            raise StoreWriteError(url, f"cannot write {path}: {exc}") from exc

    @staticmethod
    def _atomic_write_bytes(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=path.name + ".",
            suffix=".tmp",
        )
        try:
            with os.fdopen(tmp_fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise


class MemoryResourceStore(ResourceStore):
    """Dict-backed store for tests and throwaway runs."""

    def __init__(self, initial: Union[Dict[str, bytes], None] = None) -> None:
        self.data: Dict[str, bytes] = dict(initial or {})

    async def exists(self, url: str) -> bool:
        return url in self.data

    async def read(self, url: str) -> bytes:
        try:
            return self.data[url]
        except KeyError:
            raise ResourceNotFound(url) from None

    async def write(self, url: str, content: bytes) -> None:
        self.data[url] = content
