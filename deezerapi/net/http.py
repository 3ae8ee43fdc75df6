"""HTTP transport built on top of httpx.

The transport issues exactly one request and hands back the raw wire form of
the response (status line, header block, blank line, body). Framing and
decoding are left to `deezerapi.net.wire` and `deezerapi.request`.
"""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Mapping, Protocol

import httpx
from loguru import logger

from deezerapi.errors import TransportError

__all__ = ["HttpTransport", "Transport", "render_raw_response"]

log = logger.bind(module="net.http")

_MIN_TIMEOUT_SECONDS = 0.1


class Transport(Protocol):
    """Issue one HTTP request and return the raw response bytes."""

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        content: bytes | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> bytes:
        ...


def render_raw_response(response: httpx.Response) -> bytes:
    """Serialise an httpx response back into HTTP/1.x wire form."""
    status_line = f"{response.http_version} {response.status_code} {response.reason_phrase}".rstrip()
    header_lines = "".join(f"{name}: {value}\r\n" for name, value in response.headers.multi_items())
    head = f"{status_line}\r\n{header_lines}\r\n"
    return head.encode("utf-8") + response.content


class HttpTransport:
    """Small sync transport with consistent defaults and error mapping.

    Notes:
        - By default, a short-lived `httpx.Client` is created per request.
        - When `reuse_connections=True`, an internal persistent `httpx.Client` is
          used. Call `close()` (or use this object as a context manager) to
          release it deterministically.
        - Per-call `options` are passed to `httpx.Client` as keyword overrides
          (`timeout`, `verify`, `proxy`, ...). A call with overrides always uses
          a dedicated short-lived client.
        - Timeouts are clamped to at least `_MIN_TIMEOUT_SECONDS`.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        follow_redirects: bool = True,
        user_agent: str | None = None,
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
        reuse_connections: bool = False,
    ) -> None:
        self.timeout_seconds = float(max(_MIN_TIMEOUT_SECONDS, timeout_seconds))
        self.follow_redirects = bool(follow_redirects)
        self.transport = transport
        self.reuse_connections = bool(reuse_connections)

        merged: dict[str, str] = dict(headers or {})
        if user_agent and "User-Agent" not in merged:
            merged["User-Agent"] = user_agent
        self.headers = merged
        self._client: httpx.Client | None = None
        self._finalizer: weakref.finalize | None = None

    def _client_kwargs(self, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "timeout": self.timeout_seconds,
            "follow_redirects": self.follow_redirects,
            "headers": self.headers,
        }
        if self.transport is not None:
            kwargs["transport"] = self.transport
        if overrides:
            kwargs.update(dict(overrides))
        return kwargs

    def _build_client(self, overrides: Mapping[str, Any] | None = None) -> httpx.Client:
        return httpx.Client(**self._client_kwargs(overrides))

    def open(self) -> None:
        """Open an internal persistent `httpx.Client` when reuse is enabled."""
        if not self.reuse_connections:
            return
        if self._client is not None:
            return
        self._client = self._build_client()
        self._finalizer = weakref.finalize(self, self._client.close)

    def close(self) -> None:
        """Close any internal persistent `httpx.Client`."""
        if self._finalizer is not None:
            self._finalizer.detach()
            self._finalizer = None
        if self._client is None:
            return
        self._client.close()
        self._client = None

    def __enter__(self) -> "HttpTransport":
        self.open()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    @contextmanager
    def _client_ctx(self, overrides: Mapping[str, Any] | None = None) -> Iterator[httpx.Client]:
        if self.reuse_connections and not overrides:
            self.open()
            assert self._client is not None
            yield self._client
            return
        with self._build_client(overrides) as client:
            yield client

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        content: bytes | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> bytes:
        """Send one request and return the raw response.

        Non-2xx responses are returned like any other; only failures of the
        exchange itself are raised.

        Raises:
            TransportError: When the request could not be completed.
        """
        method = (method or "GET").strip().upper()
        target = (url or "").strip()
        if not target:
            raise ValueError("url must be non-empty.")

        try:
            with self._client_ctx(options) as client:
                response = client.request(
                    method,
                    target,
                    headers=dict(headers) if headers else None,
                    content=content,
                )
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            code = type(exc).__name__
            log.warning("{} {} failed: {} {}", method, target, code, exc)
            raise TransportError(f"HTTP transport error: {code} {exc}", code=code) from exc

        log.debug("{} {} -> {}", method, target, response.status_code)
        return render_raw_response(response)

    def is_reachable(self, url: str, *, timeout_seconds: float | None = None) -> bool:
        """Return True when a GET request completes with a status below 500."""
        target = (url or "").strip()
        if not target:
            return False
        overrides: dict[str, Any] | None = None
        if timeout_seconds is not None:
            overrides = {"timeout": float(max(_MIN_TIMEOUT_SECONDS, timeout_seconds))}
        try:
            with self._client_ctx(overrides) as client:
                response = client.get(target)
                return int(response.status_code) < 500
        except (httpx.HTTPError, httpx.InvalidURL):
            return False
