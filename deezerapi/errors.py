"""Error types raised by the Deezer client and the error payload classifier.

Every failure derives from `DeezerError`. Errors raised after a response was
received carry the parsed envelope as `.response` so callers can inspect the
triggering response after catching the failure.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from deezerapi.request import Response

__all__ = [
    "DeezerAPIError",
    "DeezerError",
    "INVALID_TOKEN_CODE",
    "MalformedResponseError",
    "RATE_LIMIT_CODE",
    "TOKEN_INVALID",
    "TransportError",
    "UNKNOWN_ERROR_MESSAGE",
    "UnknownAPIError",
    "raise_for_error_payload",
]

# Deezer returns code 4 ("Quota limit exceeded") when a caller is throttled.
RATE_LIMIT_CODE: int = 4
INVALID_TOKEN_CODE: int = 300
TOKEN_INVALID: str = "The access token is invalid"
UNKNOWN_ERROR_MESSAGE: str = "An unknown error occurred."


class DeezerError(RuntimeError):
    """Base class for all client failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response: "Response | None" = None,
    ) -> None:
        super().__init__(message)
        self.message = str(message)
        self.status_code = int(status_code) if status_code is not None else None
        self.response = response

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.status_code is None:
            return self.message
        return f"{self.message} (status={self.status_code})"


class TransportError(DeezerError):
    """Raised when the HTTP exchange itself fails (DNS, TLS, connect, timeout)."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class MalformedResponseError(DeezerError):
    """Raised when a response cannot be framed or decoded."""


class DeezerAPIError(DeezerError):
    """Raised when Deezer answers with an error object carrying a message and a code."""

    def __init__(
        self,
        message: str,
        code: int,
        *,
        error_type: str | None = None,
        status_code: int | None = None,
        response: "Response | None" = None,
    ) -> None:
        super().__init__(message, status_code=status_code, response=response)
        self.code = int(code)
        self.error_type = error_type

    def is_rate_limited(self) -> bool:
        return self.code == RATE_LIMIT_CODE

    def has_invalid_token(self) -> bool:
        return self.message == TOKEN_INVALID or self.code == INVALID_TOKEN_CODE


class UnknownAPIError(DeezerError):
    """Raised for error-shaped bodies that lack a usable message/code pair."""


def _error_object(text: str) -> Any:
    try:
        payload = json.loads(text)
    except (TypeError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get("error")


def raise_for_error_payload(
    body: str | bytes,
    status: int | None,
    *,
    response: "Response | None" = None,
) -> None:
    """Raise the typed failure described by an error-shaped response body.

    The raw body is parsed again here so the outcome does not depend on the
    decoding shape chosen for the envelope. This function always raises.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")

    error = _error_object(body)
    if isinstance(error, dict) and error.get("code") is not None and error.get("message") is not None:
        try:
            code = int(error["code"])
        except (TypeError, ValueError):
            code = None
        if code is not None:
            error_type = error.get("type")
            raise DeezerAPIError(
                str(error["message"]),
                code,
                error_type=str(error_type) if error_type is not None else None,
                status_code=status,
                response=response,
            )

    raise UnknownAPIError(UNKNOWN_ERROR_MESSAGE, status_code=status, response=response)
