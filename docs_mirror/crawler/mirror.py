# === FILE: docs_mirror/crawler/mirror.py ===
"""
Top-level mirror run: one sitemap walker feeding a pool of download workers.

:class:`DocsMirror` owns the HTTP session. The walker is the only producer on
a bounded queue; when the walk finishes the queue is closed and the workers'
stats are folded into a :class:`MirrorReport`. A failure of the root sitemap
stops the run with :class:`~docs_mirror.errors.RootSitemapError`.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from aiohttp import ClientSession, ClientTimeout

from docs_mirror.config import MirrorConfig
from docs_mirror.crawler.fetcher import Fetcher
from docs_mirror.crawler.models import WalkResult
from docs_mirror.crawler.pool import PoolStats, WorkerPool
from docs_mirror.crawler.url_filter import UrlFilter
from docs_mirror.crawler.walker import SitemapWalker
from docs_mirror.errors import RootSitemapError
from docs_mirror.logger import LOGGER_NAME
from docs_mirror.storage import StorageWriter

__all__ = ("MirrorReport", "DocsMirror")


@dataclass(frozen=True, slots=True)
class MirrorReport:
    """Итог одного запуска: счётчики обхода sitemap и загрузчиков."""
    root: str
    sitemaps: int
    queued: int
    skipped: int
    failed_branches: int
    stored: int
    bytes_written: int
    fetch_failures: int
    store_failures: int
    duration: float

    @classmethod
    def build(cls, walk: WalkResult, pool: PoolStats, duration: float) -> MirrorReport:
        return cls(
            root=walk.url,
            sitemaps=walk.sitemaps,
            queued=walk.queued,
            skipped=walk.skipped,
            failed_branches=walk.failed_branches,
            stored=pool.stored,
            bytes_written=pool.bytes_written,
            fetch_failures=pool.fetch_failures,
            store_failures=pool.store_failures,
            duration=round(duration, 3),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DocsMirror:
    """Асинхронное зеркалирование: один producer (обход sitemap) и пул загрузчиков."""

    def __init__(
        self,
        config: MirrorConfig,
        session: Optional[ClientSession] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self._sleep = sleep
        self.url_filter = UrlFilter.from_config(config)
        self.storage = StorageWriter(config.base_dir, config.index_filename)
        self.logger = logging.getLogger(LOGGER_NAME)

    async def __aenter__(self) -> DocsMirror:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def run(self) -> MirrorReport:
        if not self.session:
            raise RuntimeError("Session not initialized")
        root = str(self.config.sitemap_url)
        self.logger.info("Starting documentation mirror from %s", root)
        start = time.monotonic()

        fetcher = Fetcher.from_config(self.session, self.config, sleep=self._sleep)
        walker = SitemapWalker(fetcher, self.url_filter)
        pool = WorkerPool(
            fetcher,
            self.storage,
            workers=self.config.workers,
            pacing_delay=self.config.rate_limit_delay if self.config.rate_limit else None,
            sleep=self._sleep,
        )

        queue: asyncio.Queue[Optional[str]] = asyncio.Queue(maxsize=self.config.workers)
        consumers = asyncio.create_task(pool.drain(queue))
        producer = asyncio.create_task(walker.walk(root, self.config.max_docs, queue))
        try:
            await asyncio.wait({producer, consumers}, return_when=asyncio.FIRST_COMPLETED)
            if not producer.done():
                # workers only return after the queue is closed, so this is a crash
                await _cancel(producer)
                consumers.result()
                raise RuntimeError("workers stopped before the sitemap walk finished")
            walk = producer.result()
        except BaseException:
            await _cancel(producer)
            await _cancel(consumers)
            raise
        if not walk.ok:
            await _cancel(consumers)
            raise RootSitemapError(walk)

        await pool.close(queue)
        stats = await consumers
        report = MirrorReport.build(walk, stats, time.monotonic() - start)
        self.logger.info(
            "Mirroring finished: %d stored, %d fetch failures, %d write failures, %d skipped in %.2fs",
            report.stored, report.fetch_failures, report.store_failures, report.skipped, report.duration,
        )
        return report


async def _cancel(task: asyncio.Task) -> None:
    if task.done():
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
