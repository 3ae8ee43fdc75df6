"""Request orchestration for the Deezer endpoints.

`Request.send` builds one HTTP request, hands it to the transport, frames and
decodes the raw response and raises typed failures for error payloads. The
`connect` and `api` helpers prefix the two Deezer hosts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, Mapping
from urllib.parse import urlencode

from loguru import logger

from deezerapi.documents import decode_document, get_field
from deezerapi.errors import MalformedResponseError, raise_for_error_payload
from deezerapi.net.http import HttpTransport, Transport
from deezerapi.net.wire import parse_headers, parse_status, split_response

if TYPE_CHECKING:
    from deezerapi.config import Settings

__all__ = [
    "API_URL",
    "CONNECT_URL",
    "DEFAULT_USER_AGENT",
    "Parameters",
    "Request",
    "Response",
    "encode_parameters",
]

log = logger.bind(module="request")

CONNECT_URL: str = "https://connect.deezer.com"
API_URL: str = "https://api.deezer.com"
DEFAULT_USER_AGENT: str = "deezerapi"

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
_BODY_METHODS = frozenset({"POST", "PUT", "DELETE"})

Parameters = Mapping[str, Any] | str | bytes | None


@dataclass(frozen=True, slots=True)
class Response:
    """Parsed result of one HTTP exchange."""

    body: Any
    headers: dict[str, str] = field(default_factory=dict)
    status: int = 0
    url: str = ""


def _form_value(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (list, tuple)):
        return [_form_value(item) for item in value]
    return value


def encode_parameters(parameters: Parameters) -> str:
    """Form-encode structured parameters; pre-encoded text passes through.

    None values are dropped and booleans are sent as 1/0.
    """
    if parameters is None:
        return ""
    if isinstance(parameters, bytes):
        return parameters.decode("utf-8")
    if isinstance(parameters, str):
        return parameters
    pairs = [(str(key), _form_value(value)) for key, value in parameters.items() if value is not None]
    return urlencode(pairs, doseq=True)


def _has_error(document: Any) -> bool:
    error = get_field(document, "error")
    # An error object counts even when empty.
    if isinstance(error, (dict, SimpleNamespace)):
        return True
    return bool(error)


def _has_header(headers: Mapping[str, str], name: str) -> bool:
    lowered = name.lower()
    return any(key.lower() == lowered for key in headers)


class Request:
    """Send requests to Deezer and keep the most recent response for introspection.

    Options:
        return_assoc: decode JSON objects to dicts instead of namespaces.
        transport_options: keyword overrides handed to the transport untouched.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        transport: Transport | None = None,
        connect_url: str = CONNECT_URL,
        api_url: str = API_URL,
    ) -> None:
        self.options: dict[str, Any] = {
            "return_assoc": False,
            "transport_options": {},
        }
        self.set_options(**dict(options or {}))
        self.transport: Transport = transport or HttpTransport(user_agent=DEFAULT_USER_AGENT)
        self.connect_url = connect_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self.last_response: Response | None = None

    @classmethod
    def from_settings(cls, settings: "Settings", *, transport: Transport | None = None) -> "Request":
        if transport is None:
            transport = HttpTransport(
                timeout_seconds=settings.timeout_seconds,
                user_agent=settings.user_agent,
            )
        return cls(
            {"return_assoc": settings.return_assoc},
            transport=transport,
            connect_url=settings.connect_url,
            api_url=settings.api_url,
        )

    def set_options(self, **options: Any) -> "Request":
        unknown = sorted(set(options) - set(self.options))
        if unknown:
            raise ValueError(f"Unknown request option(s): {', '.join(unknown)}")
        if "return_assoc" in options:
            options["return_assoc"] = bool(options["return_assoc"])
        if "transport_options" in options:
            options["transport_options"] = dict(options["transport_options"] or {})
        self.options.update(options)
        return self

    def get_last_response(self) -> Response | None:
        return self.last_response

    def connect(
        self,
        method: str,
        uri: str,
        parameters: Parameters = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Make a request to the authorization host."""
        return self.send(method, self.connect_url + uri, parameters, headers)

    def api(
        self,
        method: str,
        uri: str,
        parameters: Parameters = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Make a request to the resource API host."""
        return self.send(method, self.api_url + uri, parameters, headers)

    def send(
        self,
        method: str,
        url: str,
        parameters: Parameters = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Make a request to Deezer and return the parsed response.

        For POST, PUT and DELETE the parameters form the request body; for any
        other verb they are appended to the URL as a query string.

        Raises:
            TransportError: When the exchange itself fails.
            MalformedResponseError: When the response cannot be framed or decoded.
            DeezerAPIError: When Deezer answers with a message/code error object.
            UnknownAPIError: When the body is error-shaped without message/code.
        """
        self.last_response = None

        method = (method or "GET").strip().upper()
        url = url.rstrip("/")
        encoded = encode_parameters(parameters)
        request_headers: dict[str, str] = dict(headers or {})

        target = url
        content: bytes | None = None
        if method in _BODY_METHODS:
            content = encoded.encode("utf-8")
            if content and not _has_header(request_headers, "Content-Type"):
                request_headers["Content-Type"] = _FORM_CONTENT_TYPE
        elif encoded:
            separator = "&" if "?" in url else "?"
            target = f"{url}{separator}{encoded}"

        log.debug("Sending {} {}", method, url)
        raw = self.transport.request(
            method,
            target,
            headers=request_headers,
            content=content,
            options=self.options["transport_options"],
        )

        head, body = split_response(raw)
        status = parse_status(head)
        parsed_headers = parse_headers(head)

        try:
            document = decode_document(body, assoc=self.options["return_assoc"])
        except ValueError as exc:
            response = Response(body=None, headers=parsed_headers, status=status, url=url)
            self.last_response = response
            raise MalformedResponseError(
                f"Invalid JSON response: {exc}",
                status_code=status,
                response=response,
            ) from exc

        response = Response(body=document, headers=parsed_headers, status=status, url=url)
        self.last_response = response

        if _has_error(document):
            log.debug("{} {} returned an error payload (status={})", method, url, status)
            raise_for_error_payload(body, status, response=response)

        return response
