"""Helpers for framing raw HTTP/1.x responses.

A raw response is one or more header blocks followed by a body, each block
terminated by a blank line. Transparent proxies may emit an informational or
tunnel-established block before the real response; that preamble is dropped
before the real headers are parsed.
"""

from __future__ import annotations

import re

from deezerapi.errors import MalformedResponseError

__all__ = ["PREAMBLE_PATTERNS", "parse_headers", "parse_status", "split_response"]

_BLANK_LINE_RE = re.compile(r"\r?\n\r?\n")
_STATUS_LINE_RE = re.compile(r"^HTTP/\d(?:\.\d)?\s+(\d{3})(?:\s|$)")

PREAMBLE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^HTTP/\d(?:\.\d)? 100 Continue", re.IGNORECASE),
    re.compile(r"^HTTP/\d(?:\.\d)? 200 Connection established", re.IGNORECASE),
    re.compile(r"^HTTP/\d(?:\.\d)? 200 Tunnel established", re.IGNORECASE),
)


def _as_text(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


def _split_once(text: str, *, context: str) -> tuple[str, str]:
    parts = _BLANK_LINE_RE.split(text, maxsplit=1)
    if len(parts) != 2:
        raise MalformedResponseError(f"Malformed response: no blank line after {context}.")
    return parts[0], parts[1]


def _is_preamble(block: str) -> bool:
    return any(pattern.match(block) for pattern in PREAMBLE_PATTERNS)


def split_response(raw: str | bytes) -> tuple[str, str]:
    """Split a raw response into its (headers, body) pair.

    Exactly one preamble block is skipped when present. The body is returned
    verbatim, so blank lines inside it are preserved.
    """
    text = _as_text(raw)
    first, rest = _split_once(text, context="the first header block")
    if _is_preamble(first):
        return _split_once(rest, context="the header block following a proxy preamble")
    return first, rest


def _lines(block: str) -> list[str]:
    return block.replace("\r\n", "\n").split("\n")


def parse_status(headers: str) -> int:
    """Return the numeric status code from the status line of a header block."""
    status_line = _lines(headers)[0].strip()
    match = _STATUS_LINE_RE.match(status_line)
    if match is None:
        raise MalformedResponseError(f"Malformed status line: {status_line!r}")
    return int(match.group(1))


def parse_headers(headers: str) -> dict[str, str]:
    """Parse a header block into a lower-cased name -> trimmed value mapping.

    The status line is discarded. Repeated names keep the last value.
    """
    parsed: dict[str, str] = {}
    for line in _lines(headers)[1:]:
        if not line.strip():
            continue
        name, sep, value = line.partition(":")
        if not sep:
            raise MalformedResponseError(f"Malformed header line: {line!r}")
        parsed[name.strip().lower()] = value.strip()
    return parsed
