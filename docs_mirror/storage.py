# File: docs_mirror/storage.py
"""docs_mirror.storage: Сохранение скачанных страниц в дерево base/YYYY/MM/DD/<host>/<path>."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Union

from docs_mirror.crawler.models import StoredFile
from docs_mirror.logger import LOGGER_NAME

__all__ = ["StorageWriter", "utc_today"]

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class StorageWriter:
    """Вычисляет детерминированный путь для URL и записывает туда тело ответа."""

    def __init__(
        self,
        base_dir: Union[str, Path],
        index_filename: str = "index.html",
        today: Callable[[], date] = utc_today,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.index_filename = index_filename
        self._today = today
        self.logger = logging.getLogger(LOGGER_NAME)

    def path_for(self, url: str, day: Optional[date] = None) -> Path:
        """Возвращает путь файла для ``url`` на дату ``day`` (по умолчанию сегодня, UTC).

        ``https://docs.example.com/ec2/`` на 2024-09-26 превращается в
        ``<base>/2024/09/26/docs.example.com/ec2/index.html``.
        """
        day = day or self._today()
        stripped = _SCHEME_RE.sub("", url, count=1)
        # "." and ".." never leave the date directory
        segments: List[str] = [s for s in stripped.split("/") if s not in ("", ".", "..")]
        if not segments:
            raise ValueError(f"cannot derive a file path from URL {url!r}")
        if stripped.endswith("/") or len(segments) == 1:
            segments.append(self.index_filename)
        return self.base_dir.joinpath(f"{day.year:04d}", f"{day.month:02d}", f"{day.day:02d}", *segments)

    def store(self, url: str, body: bytes) -> StoredFile:
        """Записывает ``body`` целиком, создавая промежуточные директории. Ошибки ОС пробрасываются."""
        path = self.path_for(url)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(body)
        self.logger.info("Successfully saved file: %s", path)
        return StoredFile(url=url, path=path, size=len(body))
