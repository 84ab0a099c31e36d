# File: tests/conftest.py
from __future__ import annotations

import gzip
from datetime import date
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

import pytest

from docs_mirror.config import MirrorConfig
from docs_mirror.crawler.url_filter import UrlFilter
from docs_mirror.logger import configure

HOST = "docs.example.com"
ROOT_SITEMAP = f"https://{HOST}/sitemap_index.xml"

Step = Union[int, Tuple[int, bytes], BaseException]


# --------------------------------------------------------------------------- #
#                               Sitemap builders                              #
# --------------------------------------------------------------------------- #

_NS = 'xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"'


def sitemap_index(*locs: str) -> bytes:
    entries = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
    return f'<?xml version="1.0" encoding="UTF-8"?><sitemapindex {_NS}>{entries}</sitemapindex>'.encode()


def urlset(*locs: str) -> bytes:
    entries = "".join(f"<url><loc>{loc}</loc><lastmod>2024-09-26</lastmod></url>" for loc in locs)
    return f'<?xml version="1.0" encoding="UTF-8"?><urlset {_NS}>{entries}</urlset>'.encode()


def gzipped(body: bytes) -> bytes:
    return gzip.compress(body)


# --------------------------------------------------------------------------- #
#                              In-memory HTTP fakes                           #
# --------------------------------------------------------------------------- #


class FakeResponse:
    def __init__(self, status: int, body: bytes) -> None:
        self.status = status
        self._body = body

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None


class _RaisingContext:
    def __init__(self, exc: BaseException) -> None:
        self._exc = exc

    async def __aenter__(self):
        raise self._exc

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None


class FakeSession:
    """Stand-in for ``aiohttp.ClientSession.get``.

    ``routes`` maps a URL to a single step or a list of steps; the last step of
    a list repeats forever. Unknown URLs answer 404.
    """

    closed = False

    def __init__(self, routes: Dict[str, Union[Step, Sequence[Step]]]) -> None:
        self._routes: Dict[str, List[Step]] = {
            url: list(steps) if isinstance(steps, list) else [steps] for url, steps in routes.items()
        }
        self.calls: List[Tuple[str, Dict[str, str]]] = []

    def get(self, url: str, headers: Dict[str, str] | None = None, **kwargs):
        self.calls.append((url, dict(headers or {})))
        steps = self._routes.get(url)
        if not steps:
            return FakeResponse(404, b"not found")
        step = steps.pop(0) if len(steps) > 1 else steps[0]
        if isinstance(step, BaseException):
            return _RaisingContext(step)
        if isinstance(step, int):
            return FakeResponse(step, b"")
        status, body = step
        return FakeResponse(status, body)

    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]

    def count(self, url: str) -> int:
        return self.urls().count(url)


class SleepRecorder:
    """Awaitable replacement for ``asyncio.sleep`` that records delays and returns immediately."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# --------------------------------------------------------------------------- #
#                                   Fixtures                                  #
# --------------------------------------------------------------------------- #


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep the project logger bound to the real stdout between tests."""
    configure(level="WARNING")
    yield
    configure(level="WARNING")


@pytest.fixture()
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def url_filter() -> UrlFilter:
    return UrlFilter(host=HOST)


@pytest.fixture()
def mirror_config(tmp_path: Path) -> MirrorConfig:
    """A config pointing at the fake documentation host and a temporary output tree."""
    return MirrorConfig(
        sitemap_url=ROOT_SITEMAP,
        host=HOST,
        base_dir=tmp_path / "mirror",
        workers=2,
        backoff=0.5,
        rate_limit_delay=0.25,
    )


@pytest.fixture()
def capture_day() -> date:
    return date(2024, 9, 26)
