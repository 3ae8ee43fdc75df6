"""Synchronous client for the Deezer REST API."""

from deezerapi.client import DeezerAPI, Endpoint
from deezerapi.errors import (
    DeezerAPIError,
    DeezerError,
    MalformedResponseError,
    TransportError,
    UnknownAPIError,
)
from deezerapi.request import API_URL, CONNECT_URL, Request, Response
from deezerapi.session import Session

__all__ = [
    "API_URL",
    "CONNECT_URL",
    "DeezerAPI",
    "DeezerAPIError",
    "DeezerError",
    "Endpoint",
    "MalformedResponseError",
    "Request",
    "Response",
    "Session",
    "TransportError",
    "UnknownAPIError",
]
