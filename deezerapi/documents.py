"""JSON document decoding in either of the two supported shapes.

With ``assoc=True`` JSON objects decode to plain dicts; otherwise they decode
to `types.SimpleNamespace` trees so fields read as attributes. `get_field`
reads a member from either shape.
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

__all__ = ["decode_document", "get_field", "has_field"]

_MISSING = object()


def _namespace(pairs: dict[str, Any]) -> SimpleNamespace:
    return SimpleNamespace(**pairs)


def decode_document(text: str | bytes, *, assoc: bool) -> Any:
    """Decode a JSON body; empty bodies decode to None.

    Raises:
        ValueError: When the body is not valid JSON.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    if not text.strip():
        return None
    if assoc:
        return json.loads(text)
    return json.loads(text, object_hook=_namespace)


def get_field(document: Any, name: str, default: Any = None) -> Any:
    """Return a member of a decoded JSON object, whatever its shape."""
    if isinstance(document, dict):
        return document.get(name, default)
    if isinstance(document, SimpleNamespace):
        return getattr(document, name, default)
    return default


def has_field(document: Any, name: str) -> bool:
    """Return True when the member is present and not null."""
    return get_field(document, name, _MISSING) not in (_MISSING, None)
