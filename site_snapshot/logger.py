"""Logging setup for SiteSnapshot.

Every module logs through the ``SiteSnapshot`` logger (:data:`LOGGER_NAME`).
Progress lines and per-page failures are diagnostics, so the console handler
writes to stderr and stdout carries only the final summary or listing. The
CLI calls :func:`init_logging` once with its ``--log-*`` options; a log file,
when given, rotates at 5 MB.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

LOGGER_NAME: Final[str] = "SiteSnapshot"
DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_ROTATE_BYTES: Final[int] = 5 * 1024 * 1024
_ROTATE_KEEP: Final[int] = 3

_LevelT = Union[int, str]


def _console_handler(fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _rotating_handler(path: Path | str, fmt: str) -> logging.Handler:
    handler = RotatingFileHandler(
        filename=str(path), maxBytes=_ROTATE_BYTES, backupCount=_ROTATE_KEEP, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Attach a stderr handler (and a rotating file handler if *log_file* is set).

    With *replace_handlers* the previous handlers are closed first, so calling
    this twice never duplicates crawl progress lines.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    lg.addHandler(_console_handler(log_format))
    if log_file is not None:
        lg.addHandler(_rotating_handler(log_file, log_format))

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


logger: logging.Logger = init_logging()

__all__ = ["LOGGER_NAME", "DEFAULT_FORMAT", "logger", "configure", "init_logging"]
