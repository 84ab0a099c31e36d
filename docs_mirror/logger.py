# === FILE: docs_mirror/logger.py ===
"""Logging setup for **docs-mirror**.

Everything logs through the ``DocsMirror`` logger: components call
``logging.getLogger(LOGGER_NAME)`` and the CLI calls :func:`configure` once
with the options it received. A mirror run can take hours, so the optional
log file is appended to across runs and rotated at 5 MiB.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "DocsMirror"

LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _formatted(handler: logging.Handler, fmt: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _open_log_file(path: Path) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        mode="a",
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Point the ``DocsMirror`` logger at stdout and, optionally, ``log_file``.

    With ``replace_handlers`` the previous handlers are detached and closed,
    so calling this again (tests, repeated CLI invocations in one process)
    never leaves a log file open twice.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    lg.addHandler(_formatted(logging.StreamHandler(sys.stdout), log_format))

    if log_file is not None:
        path = Path(log_file)
        lg.addHandler(_formatted(_open_log_file(path), log_format))
        lg.debug("Appending log to %s", path)

    lg.propagate = False
    return lg


def init_logging(level: _LevelT = "INFO", log_file: str | Path | None = None) -> logging.Logger:
    return configure(level=level, log_file=log_file, replace_handlers=True)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
