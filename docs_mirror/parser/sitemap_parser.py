# File: docs_mirror/parser/sitemap_parser.py
"""docs_mirror.parser.sitemap_parser: Разбор sitemap index и urlset документов."""

from __future__ import annotations

import gzip
import zlib
from typing import List, Optional

from lxml import etree

from docs_mirror.crawler.models import SitemapIndexDocument, UrlSetDocument

__all__ = ["parse_sitemap_index", "parse_urlset", "decompress"]

_GZIP_MAGIC = b"\x1f\x8b"


def decompress(body: bytes) -> Optional[bytes]:
    """Возвращает тело без gzip-сжатия; ``None``, если gzip-поток повреждён."""
    if not body.startswith(_GZIP_MAGIC):
        return body
    try:
        return gzip.decompress(body)
    except (OSError, EOFError, zlib.error):
        return None


def _root(body: bytes) -> Optional[etree._Element]:
    data = decompress(body)
    if not data:
        return None
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        return etree.fromstring(data, parser=parser)
    except (etree.XMLSyntaxError, ValueError):
        return None


def _locations(root: etree._Element, entry_tag: str) -> List[str]:
    locations: List[str] = []
    for entry in root.iterchildren("{*}" + entry_tag):
        loc = entry.find("{*}loc")
        text = loc.text if loc is not None else None
        locations.append(text.strip() if text else "")
    return locations


def _decode(body: bytes, root_tag: str, entry_tag: str) -> Optional[List[str]]:
    root = _root(body)
    if root is None or not isinstance(root.tag, str):
        return None
    if etree.QName(root).localname != root_tag:
        return None
    return _locations(root, entry_tag)


def parse_sitemap_index(body: bytes) -> Optional[SitemapIndexDocument]:
    """Разбирает ``<sitemapindex>`` и возвращает ссылки на дочерние sitemap.

    Args:
        body: сырое тело ответа (допускается gzip).

    Returns:
        SitemapIndexDocument в порядке документа или ``None``, если корневой
        элемент не ``sitemapindex`` либо XML некорректен.

    Пример:
    ```python
    doc = parse_sitemap_index(b"<sitemapindex><sitemap><loc>https://a/s.xml</loc></sitemap></sitemapindex>")
    assert doc.locations == ("https://a/s.xml",)
    ```
    """
    locations = _decode(body, "sitemapindex", "sitemap")
    return None if locations is None else SitemapIndexDocument(tuple(locations))


def parse_urlset(body: bytes) -> Optional[UrlSetDocument]:
    """Разбирает ``<urlset>`` и возвращает адреса страниц в порядке документа."""
    locations = _decode(body, "urlset", "url")
    return None if locations is None else UrlSetDocument(tuple(locations))
