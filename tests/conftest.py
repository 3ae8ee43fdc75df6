from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generator, Mapping

import pytest

import sys


ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from deezerapi.config import Settings, get_settings

_REASONS = {200: "OK", 400: "Bad Request", 404: "Not Found", 500: "Internal Server Error"}


class StubTransport:
    """Transport double that replays raw responses and records each call.

    Queued items are raw response text/bytes or exceptions to raise. The last
    item is replayed once the queue runs dry.
    """

    def __init__(self, responses: list[Any]) -> None:
        if not responses:
            raise ValueError("StubTransport needs at least one response.")
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        content: bytes | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> bytes:
        self.calls.append(
            {
                "method": method,
                "url": url,
                "headers": dict(headers or {}),
                "content": content,
                "options": dict(options or {}),
            }
        )
        item = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, str):
            return item.encode("utf-8")
        return item


def build_json_response(payload: Any, *, status: int = 200, headers: Mapping[str, str] | None = None) -> str:
    reason = _REASONS.get(status, "Unknown")
    lines = [f"HTTP/1.1 {status} {reason}", "Content-Type: application/json"]
    lines.extend(f"{name}: {value}" for name, value in (headers or {}).items())
    return "\r\n".join(lines) + "\r\n\r\n" + json.dumps(payload)


@pytest.fixture
def make_transport() -> Callable[..., StubTransport]:
    """Return a factory building a `StubTransport` from queued responses."""

    def _factory(*responses: Any) -> StubTransport:
        return StubTransport(list(responses))

    return _factory


@pytest.fixture
def json_response() -> Callable[..., str]:
    """Return a helper rendering a JSON payload as a raw HTTP/1.1 response."""
    return build_json_response


@pytest.fixture
def settings() -> Generator[Settings, None, None]:
    """Return a fresh Settings instance for each test, ignoring any .env file."""

    yield Settings(
        _env_file=None,
        app_id="123456",
        app_secret="s3cret",
        redirect_uri="https://example.com/callback",
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
