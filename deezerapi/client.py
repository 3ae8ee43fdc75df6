"""Public per-resource surface of the Deezer API.

Each operation is described by an `Endpoint` (verb, path template, whether it
needs the access token). `DeezerAPI` formats the path, merges provider query
options and sends the request through the rate-limit retry policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from deezerapi.request import Request, Response
from deezerapi.retry import DEFAULT_MAX_ATTEMPTS, call_with_rate_limit_retry

if TYPE_CHECKING:
    from deezerapi.config import Settings
    from deezerapi.session import Session

__all__ = ["DeezerAPI", "ENDPOINTS", "Endpoint"]


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Static description of one Deezer API operation."""

    method: str
    path: str
    authenticated: bool = False

    def uri(self, **path_args: Any) -> str:
        return self.path.format(**{key: str(value) for key, value in path_args.items()})


ENDPOINTS: dict[str, Endpoint] = {
    "track": Endpoint("GET", "/track/{track_id}"),
    "user": Endpoint("GET", "/user/{user_id}"),
    "user_playlists": Endpoint("GET", "/user/{user_id}/playlists"),
    "my_playlists": Endpoint("GET", "/user/me/playlists", authenticated=True),
    "playlist": Endpoint("GET", "/playlist/{playlist_id}", authenticated=True),
    "playlist_tracks": Endpoint("GET", "/playlist/{playlist_id}/tracks", authenticated=True),
    "add_playlist_tracks": Endpoint("POST", "/playlist/{playlist_id}/tracks", authenticated=True),
    "delete_playlist_tracks": Endpoint("DELETE", "/playlist/{playlist_id}/tracks", authenticated=True),
    "search": Endpoint("GET", "/search/{item_type}"),
}


def _join_ids(ids: str | int | Iterable[str | int]) -> str:
    if isinstance(ids, (str, int)):
        return str(ids)
    return ",".join(str(item) for item in ids)


class DeezerAPI:
    """Client for the Deezer resource API.

    Options:
        auto_retry: retry calls that fail with the rate-limit error code.
        return_assoc: return JSON objects as dicts instead of namespaces.
        transport_options: keyword overrides handed to the HTTP transport.
        max_attempts: cap on attempts when retrying (None retries forever).
        backoff_seconds: linear backoff step between retries.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        session: "Session | None" = None,
        request: Request | None = None,
    ) -> None:
        self.options: dict[str, Any] = {
            "auto_retry": False,
            "return_assoc": False,
            "transport_options": {},
            "max_attempts": DEFAULT_MAX_ATTEMPTS,
            "backoff_seconds": 0.0,
        }
        self.set_options(**dict(options or {}))
        self.session = session
        self.request = request or Request()
        self.access_token = ""
        self.last_response: Response | None = None

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        *,
        session: "Session | None" = None,
        request: Request | None = None,
    ) -> "DeezerAPI":
        options = {
            "auto_retry": settings.auto_retry,
            "return_assoc": settings.return_assoc,
            "max_attempts": settings.retry_max_attempts,
            "backoff_seconds": settings.rate_limit_backoff_seconds,
        }
        return cls(options, session=session, request=request or Request.from_settings(settings))

    def set_options(self, **options: Any) -> "DeezerAPI":
        unknown = sorted(set(options) - set(self.options))
        if unknown:
            raise ValueError(f"Unknown client option(s): {', '.join(unknown)}")
        self.options.update(options)
        return self

    def set_session(self, session: "Session | None") -> "DeezerAPI":
        self.session = session
        return self

    def set_access_token(self, access_token: str) -> "DeezerAPI":
        self.access_token = access_token
        return self

    def get_last_response(self) -> Response | None:
        """Return the full envelope of the most recent call."""
        return self.last_response

    def _token(self) -> str:
        if self.access_token:
            return self.access_token
        if self.session is not None:
            return self.session.access_token
        return ""

    def _send(
        self,
        method: str,
        uri: str,
        parameters: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        self.request.set_options(
            return_assoc=self.options["return_assoc"],
            transport_options=self.options["transport_options"],
        )
        try:
            return call_with_rate_limit_retry(
                lambda: self.request.api(method, uri, parameters, headers),
                enabled=bool(self.options["auto_retry"]),
                max_attempts=self.options["max_attempts"],
                backoff_seconds=self.options["backoff_seconds"],
                operation=f"{method} {uri}",
            )
        finally:
            self.last_response = self.request.last_response

    def _call(
        self,
        name: str,
        options: Mapping[str, Any] | None = None,
        **path_args: Any,
    ) -> Any:
        endpoint = ENDPOINTS[name]
        parameters = dict(options or {})
        if endpoint.authenticated:
            parameters["access_token"] = self._token()
        response = self._send(endpoint.method, endpoint.uri(**path_args), parameters)
        return response.body

    def add_playlist_tracks(self, playlist_id: str | int, tracks: str | int | Iterable[str | int]) -> Any:
        """Add tracks to a playlist. Returns the body Deezer sends back (`true` on success)."""
        return self._call("add_playlist_tracks", {"songs": _join_ids(tracks)}, playlist_id=playlist_id)

    def delete_playlist_tracks(self, playlist_id: str | int, tracks: str | int | Iterable[str | int]) -> Any:
        """Delete tracks from a playlist. Returns the body Deezer sends back (`true` on success)."""
        return self._call("delete_playlist_tracks", {"songs": _join_ids(tracks)}, playlist_id=playlist_id)

    def get_my_playlists(self, options: Mapping[str, Any] | None = None) -> Any:
        """Get the current user's playlists (`limit`, `index` are accepted)."""
        return self._call("my_playlists", options)

    def get_playlist(self, playlist_id: str | int, options: Mapping[str, Any] | None = None) -> Any:
        return self._call("playlist", options, playlist_id=playlist_id)

    def get_playlist_tracks(self, playlist_id: str | int, options: Mapping[str, Any] | None = None) -> Any:
        """Get the tracks in a playlist (`limit`, `index` are accepted)."""
        return self._call("playlist_tracks", options, playlist_id=playlist_id)

    def get_track(self, track_id: str | int, options: Mapping[str, Any] | None = None) -> Any:
        return self._call("track", options, track_id=track_id)

    def get_user(self, user_id: str | int, options: Mapping[str, Any] | None = None) -> Any:
        return self._call("user", options, user_id=user_id)

    def get_user_playlists(self, user_id: str | int, options: Mapping[str, Any] | None = None) -> Any:
        return self._call("user_playlists", options, user_id=user_id)

    def search(
        self,
        query: str,
        item_type: str,
        options: Mapping[str, Any] | None = None,
    ) -> Any:
        """Search the catalog.

        `item_type` selects the collection (track, album, artist, playlist, user,
        ...); `limit` and `index` page through results.
        """
        parameters = dict(options or {})
        parameters["q"] = query
        return self._call("search", parameters, item_type=item_type)
