"""OAuth session handling for Deezer apps.

A `Session` holds the app credentials, builds the authorization URL the user
is sent to, and exchanges the returned authorization code for an access
token. Token state lives in memory only.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable, Iterable
from urllib.parse import urlencode

from loguru import logger

from deezerapi.documents import get_field, has_field
from deezerapi.errors import MalformedResponseError
from deezerapi.request import Request

if TYPE_CHECKING:
    from deezerapi.config import Settings

__all__ = ["DEFAULT_PERMS", "Session"]

log = logger.bind(module="session")

DEFAULT_PERMS: tuple[str, ...] = ("basic_access", "email")


class Session:
    """App credentials plus the access token obtained for them."""

    def __init__(
        self,
        app_id: str,
        app_secret: str = "",
        redirect_uri: str = "",
        request: Request | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.app_id = app_id
        self.app_secret = app_secret
        self.redirect_uri = redirect_uri
        self.access_token = ""
        self.expiration_time = 0
        self.request = request or Request()
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: "Settings", *, request: Request | None = None) -> "Session":
        return cls(
            settings.app_id or "",
            settings.app_secret or "",
            settings.redirect_uri or "",
            request or Request.from_settings(settings),
        )

    def get_authorize_url(self, perms: Iterable[str] | None = None) -> str:
        """Return the URL the user should visit to authorize the app.

        `perms` lists the permissions to request; `basic_access,email` is
        requested when omitted.
        """
        scope = DEFAULT_PERMS if perms is None else tuple(perms)
        parameters = {
            "app_id": self.app_id,
            "redirect_uri": self.redirect_uri,
            "perms": ",".join(scope),
        }
        return f"{self.request.connect_url}/oauth/auth.php?{urlencode(parameters)}"

    def request_access_token(self, authorization_code: str) -> bool:
        """Exchange an authorization code for an access token.

        Returns True when a token was granted and stored. A response without a
        token/expiry pair, or a body that is not JSON (Deezer answers a bad code
        with plain text such as `wrong code`), yields False. Transport and API
        failures propagate.
        """
        parameters = {
            "app_id": self.app_id,
            "secret": self.app_secret,
            "code": authorization_code,
            "output": "json",
        }
        requested_at = int(self._clock())
        try:
            response = self.request.connect("GET", "/oauth/access_token.php", parameters)
        except MalformedResponseError as exc:
            log.warning("Token exchange for app {} returned an unreadable response: {}", self.app_id, exc)
            return False
        body = response.body

        if not (has_field(body, "access_token") and has_field(body, "expires")):
            log.warning("Token exchange for app {} returned no access token", self.app_id)
            return False

        self.access_token = str(get_field(body, "access_token"))
        self.expiration_time = requested_at + int(get_field(body, "expires"))
        log.info("Access token granted for app {} (expires at {})", self.app_id, self.expiration_time)
        return True

    def token_expired(self) -> bool:
        """Return True when no token is held or its expiry has passed."""
        if not self.access_token:
            return True
        return int(self._clock()) >= self.expiration_time

    def get_access_token(self) -> str:
        return self.access_token

    def get_token_expiration(self) -> int:
        return self.expiration_time

    def set_access_token(self, access_token: str) -> "Session":
        self.access_token = access_token
        return self

    def set_app_id(self, app_id: str) -> "Session":
        self.app_id = app_id
        return self

    def set_app_secret(self, app_secret: str) -> "Session":
        self.app_secret = app_secret
        return self

    def set_redirect_uri(self, redirect_uri: str) -> "Session":
        self.redirect_uri = redirect_uri
        return self
