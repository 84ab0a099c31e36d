# === FILE: docs_mirror/crawler/walker.py ===
"""
Recursive sitemap walker.

Resolves one sitemap URL into a stream of filtered page URLs put on a shared
queue. Every branch returns a :class:`WalkResult` instead of raising, so a
failing child sitemap never aborts its siblings.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Optional

from docs_mirror.crawler.fetcher import Fetcher
from docs_mirror.crawler.models import (
    FetchFailure,
    WalkError,
    WalkErrorKind,
    WalkResult,
)
from docs_mirror.crawler.url_filter import FilterDecision, UrlFilter
from docs_mirror.logger import LOGGER_NAME
from docs_mirror.parser.sitemap_parser import parse_sitemap_index, parse_urlset

__all__ = ("SitemapWalker",)

_SKIP_MESSAGES = {
    FilterDecision.INVALID: "Error parsing %s URL %s",
    FilterDecision.WRONG_SCHEME: "Skipping %s with unsupported scheme: %s",
    FilterDecision.OTHER_HOST: "Skipping %s from other domain: %s",
    FilterDecision.EXCLUDED: "Skipping excluded %s: %s",
}


class SitemapWalker:
    """Walks sitemap indexes depth-first, one child at a time."""

    def __init__(self, fetcher: Fetcher, url_filter: UrlFilter) -> None:
        self.fetcher = fetcher
        self.url_filter = url_filter
        self.logger = logging.getLogger(LOGGER_NAME)

    async def walk(self, url: str, limit: int, sink: asyncio.Queue[Optional[str]]) -> WalkResult:
        """Walk ``url`` and put every surviving page URL on ``sink``.

        ``limit`` > 0 caps the number of URLs emitted from each URL-set
        document. The returned result is ok when the branch rooted at ``url``
        was fetched and decoded (or skipped by the filter).
        """
        url = self.url_filter.upgrade(url)

        decision = self.url_filter.check(url)
        if decision is not FilterDecision.INCLUDED:
            self.logger.info(_SKIP_MESSAGES[decision], "sitemap", url)
            return WalkResult(url, skipped=1)

        self.logger.info("Fetching sitemap: %s", url)
        fetched = await self.fetcher.fetch(url)
        if isinstance(fetched, FetchFailure):
            self.logger.error("Error fetching sitemap %s: %s", url, fetched)
            return WalkResult(url, error=WalkError(WalkErrorKind.FETCH_FAILED, str(fetched)), sitemaps=1)

        # Index first: a document only counts as an index when it has children.
        index = parse_sitemap_index(fetched.body)
        if index is not None and index.locations:
            self.logger.info("Parsed sitemap as a SitemapIndex: %s (%d children)", url, len(index.locations))
            return await self._walk_children(url, index.locations, limit, sink)

        urlset = parse_urlset(fetched.body)
        if urlset is not None and urlset.locations:
            self.logger.info("Parsed sitemap as a URLSet: %s (%d URLs)", url, len(urlset.locations))
            return await self._emit(url, urlset.locations, limit, sink)

        self.logger.error("Error parsing sitemap: unable to determine type for URL %s", url)
        return WalkResult(
            url,
            error=WalkError(WalkErrorKind.DECODE_FAILED, f"unable to parse sitemap at {url}"),
            sitemaps=1,
        )

    async def _walk_children(
        self, url: str, children: tuple[str, ...], limit: int, sink: asyncio.Queue[Optional[str]]
    ) -> WalkResult:
        total = WalkResult(url, sitemaps=1)
        for child in children:
            result = await self.walk(child, limit, sink)
            if not result.ok:
                self.logger.warning("Error fetching child sitemap %s: %s", result.url, result.error.detail)
            total = replace(
                total,
                sitemaps=total.sitemaps + result.sitemaps,
                queued=total.queued + result.queued,
                skipped=total.skipped + result.skipped,
                failed_branches=total.failed_branches + result.failed_branches + (0 if result.ok else 1),
            )
        return total

    async def _emit(
        self, url: str, locations: tuple[str, ...], limit: int, sink: asyncio.Queue[Optional[str]]
    ) -> WalkResult:
        queued = skipped = 0
        for loc in locations:
            if limit > 0 and queued >= limit:
                break
            loc = self.url_filter.upgrade(loc)
            decision = self.url_filter.check(loc)
            if decision is not FilterDecision.INCLUDED:
                self.logger.debug(_SKIP_MESSAGES[decision], "URL", loc)
                skipped += 1
                continue
            await sink.put(loc)
            queued += 1
            self.logger.debug("Queued URL for download: %s", loc)
        return WalkResult(url, sitemaps=1, queued=queued, skipped=skipped)
