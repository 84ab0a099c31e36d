# docs_mirror/crawler/models.py
"""
Data models for the docs-mirror crawler.

All records are immutable and are handed from one component to the next
(walker -> queue -> worker -> storage) without further mutation.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union


@dataclass(frozen=True, slots=True)
class SitemapIndexDocument:
    """Decoded ``<sitemapindex>``: locations of child sitemaps in document order."""

    locations: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class UrlSetDocument:
    """Decoded ``<urlset>``: locations of content pages in document order."""

    locations: Tuple[str, ...]


class FailureKind(str, Enum):
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    RETRIES_EXHAUSTED = "retries_exhausted"


@dataclass(frozen=True, slots=True)
class FetchSuccess:
    url: str
    status: int
    body: bytes
    attempts: int = 1


@dataclass(frozen=True, slots=True)
class FetchFailure:
    url: str
    kind: FailureKind
    status: Optional[int] = None
    attempts: int = 1
    reason: str = ""

    def __str__(self) -> str:
        if self.kind is FailureKind.HTTP_STATUS:
            return f"unexpected status code {self.status} for URL {self.url}"
        if self.kind is FailureKind.RETRIES_EXHAUSTED:
            return f"max retries ({self.attempts}) exceeded for URL {self.url}: {self.reason}"
        return f"error fetching {self.url}: {self.reason}"


FetchResult = Union[FetchSuccess, FetchFailure]


@dataclass(frozen=True, slots=True)
class StoredFile:
    """A page written to disk."""

    url: str
    path: Path
    size: int


class WalkErrorKind(str, Enum):
    FETCH_FAILED = "fetch_failed"
    DECODE_FAILED = "decode_failed"


@dataclass(frozen=True, slots=True)
class WalkError:
    kind: WalkErrorKind
    detail: str


@dataclass(frozen=True, slots=True)
class WalkResult:
    """Outcome of walking one sitemap branch, with counters summed over its subtree."""

    url: str
    error: Optional[WalkError] = None
    sitemaps: int = 0
    queued: int = 0
    skipped: int = 0
    failed_branches: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None
