# File: docs_mirror/errors.py
"""Exceptions raised out of a mirror run. Failures below the root sitemap are result values, not exceptions."""

from __future__ import annotations

from docs_mirror.crawler.models import WalkResult


class MirrorError(Exception):
    """Base class for fatal docs-mirror errors."""


class RootSitemapError(MirrorError):
    """The root sitemap could not be fetched or decoded; the whole run is aborted."""

    def __init__(self, result: WalkResult) -> None:
        self.result = result
        detail = result.error.detail if result.error else "unknown error"
        super().__init__(f"Error fetching sitemap {result.url}: {detail}")


__all__ = ["MirrorError", "RootSitemapError"]
