"""Logging bootstrap for the resident process.

Every module logs through ``logging.getLogger(__name__)``; handlers are
attached here only, to the ``hearth`` logger.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import APP_NAME, LOG_DIR


@dataclass(frozen=True)
class LoggingRuntime:
    level_name: str
    level: int
    file_path: str
    stderr: bool


_RUNTIME: LoggingRuntime | None = None


def _parse_level(raw: str | None) -> tuple[str, int]:
    normalized = str(raw or "INFO").strip().upper()
    level = getattr(logging, normalized, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    return str(logging.getLevelName(level)), level


def _default_log_path() -> str:
    return str(LOG_DIR / f"{APP_NAME}-{os.getpid()}.log")


def _make_stream_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    return handler


def _make_file_handler(level: int, file_path: str) -> logging.Handler:
    handler = RotatingFileHandler(
        file_path,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def configure(level: str | None = None, *, stderr: bool = False) -> LoggingRuntime:
    """Wire the ``hearth`` logger to a rotating file and, optionally, stderr.

    The textual host owns the terminal, so it passes ``stderr=False``.
    Idempotent: later calls return the first runtime.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level_name, level_no = _parse_level(level or os.environ.get("HEARTH_LOG_LEVEL"))
    file_path = os.environ.get("HEARTH_LOG_FILE") or _default_log_path()
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(APP_NAME)
    logger.setLevel(level_no)
    logger.propagate = False
    logger.handlers.clear()
    logger.addHandler(_make_file_handler(level_no, file_path))
    if stderr:
        logger.addHandler(_make_stream_handler(level_no))

    logging.captureWarnings(True)

    _RUNTIME = LoggingRuntime(
        level_name=level_name, level=level_no, file_path=file_path, stderr=stderr
    )
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    return _RUNTIME


def reset() -> None:
    """Detach handlers so a later ``configure`` starts fresh (tests)."""
    global _RUNTIME
    logger = logging.getLogger(APP_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    _RUNTIME = None
