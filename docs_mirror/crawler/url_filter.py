# docs_mirror/crawler/url_filter.py
"""
Host and path-exclusion rules deciding which sitemap and page URLs are mirrored.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple
from urllib.parse import SplitResult, urlsplit

from docs_mirror.config import (
    DEFAULT_EXCLUDED_SEGMENTS,
    DEFAULT_HOST,
    DEFAULT_LOCALE_PATTERN,
    MirrorConfig,
)

__all__ = ("FilterDecision", "UrlFilter", "upgrade_scheme")


class FilterDecision(str, Enum):
    INCLUDED = "included"
    INVALID = "invalid"
    WRONG_SCHEME = "wrong_scheme"
    OTHER_HOST = "other_host"
    EXCLUDED = "excluded"


def upgrade_scheme(url: str, scheme: str = "https") -> str:
    """Replace a leading ``http://`` with ``<scheme>://``."""
    if url.startswith("http://"):
        return f"{scheme}://{url[len('http://'):]}"
    return url


def _split(url: str) -> Optional[SplitResult]:
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a malformed port
    except (TypeError, ValueError):
        return None
    return parts


@dataclass(frozen=True)
class UrlFilter:
    """Immutable inclusion predicate for one documentation host.

    A URL is included when it uses ``scheme``, its host equals ``host``
    exactly and it does not live under ``<scheme>://<host>/<segment>/`` for a
    locale segment, ``cdk`` or any of ``excluded_segments``.
    """

    host: str = DEFAULT_HOST
    excluded_segments: Tuple[str, ...] = DEFAULT_EXCLUDED_SEGMENTS
    locale_pattern: str = DEFAULT_LOCALE_PATTERN
    scheme: str = "https"
    _exclude_re: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "host", self.host.lower())
        alternatives = [self.locale_pattern, "cdk", *(re.escape(s) for s in self.excluded_segments)]
        pattern = rf"{re.escape(self.scheme)}://{re.escape(self.host)}/(?:{'|'.join(alternatives)})/"
        object.__setattr__(self, "_exclude_re", re.compile(pattern))

    @classmethod
    def from_config(cls, config: MirrorConfig) -> UrlFilter:
        return cls(
            host=config.host,
            excluded_segments=tuple(config.excluded_segments),
            locale_pattern=config.locale_pattern,
        )

    @property
    def pattern(self) -> str:
        return self._exclude_re.pattern

    def check(self, url: str) -> FilterDecision:
        """Classify ``url``; rules are applied in order and the first failing one wins."""
        parts = _split(url)
        if parts is None or not parts.scheme or not parts.netloc:
            return FilterDecision.INVALID
        if parts.scheme != self.scheme:
            return FilterDecision.WRONG_SCHEME
        if parts.netloc.lower() != self.host:
            return FilterDecision.OTHER_HOST
        # scheme and host are case-insensitive, path segments are not
        normalised = parts._replace(netloc=parts.netloc.lower()).geturl()
        if self._exclude_re.search(normalised):
            return FilterDecision.EXCLUDED
        return FilterDecision.INCLUDED

    def should_include(self, url: str) -> bool:
        return self.check(url) is FilterDecision.INCLUDED

    def upgrade(self, url: str) -> str:
        return upgrade_scheme(url, self.scheme)
