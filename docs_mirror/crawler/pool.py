# docs_mirror/crawler/pool.py
"""
Fixed-size pool of download workers draining one shared URL queue.

The queue is the only coordination point: the producer closes it by putting
one ``None`` sentinel per worker, and every worker returns its own
:class:`WorkerStats` which are summed once all of them have finished.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from docs_mirror.crawler.fetcher import Fetcher
from docs_mirror.crawler.models import FetchFailure
from docs_mirror.logger import LOGGER_NAME
from docs_mirror.storage import StorageWriter

__all__ = ("PoolStats", "WorkerStats", "WorkerPool")

UrlQueue = asyncio.Queue[Optional[str]]


@dataclass(slots=True)
class WorkerStats:
    processed: int = 0
    stored: int = 0
    bytes_written: int = 0
    fetch_failures: int = 0
    store_failures: int = 0


@dataclass(frozen=True, slots=True)
class PoolStats:
    workers: int = 0
    processed: int = 0
    stored: int = 0
    bytes_written: int = 0
    fetch_failures: int = 0
    store_failures: int = 0

    @classmethod
    def combine(cls, parts: list[WorkerStats]) -> PoolStats:
        return cls(
            workers=len(parts),
            processed=sum(p.processed for p in parts),
            stored=sum(p.stored for p in parts),
            bytes_written=sum(p.bytes_written for p in parts),
            fetch_failures=sum(p.fetch_failures for p in parts),
            store_failures=sum(p.store_failures for p in parts),
        )


class WorkerPool:
    """Runs ``workers`` concurrent fetch-and-store loops over a shared queue."""

    def __init__(
        self,
        fetcher: Fetcher,
        storage: StorageWriter,
        workers: int = 10,
        pacing_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.fetcher = fetcher
        self.storage = storage
        self.workers = workers
        self.pacing_delay = pacing_delay
        self._sleep = sleep
        self.logger = logging.getLogger(LOGGER_NAME)

    async def drain(self, queue: UrlQueue) -> PoolStats:
        """Consume ``queue`` until every worker has received its sentinel."""
        parts = await asyncio.gather(*(self._worker(i, queue) for i in range(self.workers)))
        return PoolStats.combine(list(parts))

    async def close(self, queue: UrlQueue) -> None:
        for _ in range(self.workers):
            await queue.put(None)

    async def _worker(self, worker_id: int, queue: UrlQueue) -> WorkerStats:
        stats = WorkerStats()
        while True:
            url = await queue.get()
            try:
                if url is None:
                    self.logger.debug("Worker %d finished after %d URLs", worker_id, stats.processed)
                    return stats
                await self._process(url, stats)
            finally:
                queue.task_done()
            if self.pacing_delay:
                await self._sleep(self.pacing_delay)

    async def _process(self, url: str, stats: WorkerStats) -> None:
        stats.processed += 1
        self.logger.info("Downloading document: %s", url)
        fetched = await self.fetcher.fetch(url)
        if isinstance(fetched, FetchFailure):
            self.logger.error("Error downloading document: %s", fetched)
            stats.fetch_failures += 1
            return
        try:
            stored = await asyncio.to_thread(self.storage.store, url, fetched.body)
        except (OSError, ValueError) as exc:
            self.logger.error("Error writing file for %s: %s", url, exc)
            stats.store_failures += 1
            return
        stats.stored += 1
        stats.bytes_written += stored.size
