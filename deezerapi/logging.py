"""Loguru setup for applications embedding the client.

The library itself only emits records through `loguru.logger`; applications
call `configure_logging()` once to pick the level and route standard-library
logging (httpx, httpcore) into the same sink.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

__all__ = ["configure_logging"]


class _LoguruInterceptHandler(logging.Handler):
    """Bridge standard-library logging records into Loguru."""

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - thin wrapper
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(exception=record.exc_info).log(level, record.getMessage())


def _configure_stdlib_logging(level: str) -> None:
    handler: logging.Handler = _LoguruInterceptHandler()

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in ("httpx", "httpcore"):
        named = logging.getLogger(name)
        named.handlers = [handler]
        named.propagate = False
        named.setLevel(level)

    logging.captureWarnings(True)


def configure_logging(level: str | None = None) -> str:
    """Configure Loguru at `level` (defaults to the LOG_LEVEL setting) and return it."""
    if level is None:
        from deezerapi.config import get_settings

        level = get_settings().log_level
    level = (level or "INFO").upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        backtrace=False,
        diagnose=False,
    )
    _configure_stdlib_logging(level)

    logger.bind(module="logging").debug("Logging initialised at level {}", level)
    return level
