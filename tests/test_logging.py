from __future__ import annotations

import logging
import sys
from typing import Generator

import pytest
from loguru import logger

from deezerapi.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None, None, None]:
    saved = {
        name: (log.handlers[:], log.level, log.propagate)
        for name, log in (
            ("", logging.getLogger()),
            ("httpx", logging.getLogger("httpx")),
            ("httpcore", logging.getLogger("httpcore")),
        )
    }
    yield
    for name, (handlers, level, propagate) in saved.items():
        log = logging.getLogger(name or None)
        log.handlers = handlers
        log.setLevel(level)
        log.propagate = propagate
    logging.captureWarnings(False)
    logger.remove()
    logger.add(sys.stderr)


def test_configure_logging_routes_http_loggers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")

    level = configure_logging()

    assert level == "DEBUG"
    httpx_logger = logging.getLogger("httpx")
    assert httpx_logger.level == logging.DEBUG
    assert httpx_logger.propagate is False
    assert type(httpx_logger.handlers[0]).__name__ == "_LoguruInterceptHandler"


def test_configure_logging_accepts_explicit_level() -> None:
    assert configure_logging("warning") == "WARNING"
    assert logging.getLogger().level == logging.WARNING
