from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import pytest

from deezerapi.errors import DeezerAPIError, TransportError
from deezerapi.request import Request
from deezerapi.session import Session

_NOW = 1_700_000_000.0


def _session(transport, **request_options) -> Session:
    return Session(
        "123456",
        "s3cret",
        "https://example.com/callback",
        Request(request_options, transport=transport),
        clock=lambda: _NOW,
    )


def test_authorize_url_uses_default_perms(make_transport) -> None:
    session = _session(make_transport("unused"))
    url = session.get_authorize_url()

    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://connect.deezer.com/oauth/auth.php"
    assert parse_qs(parts.query) == {
        "app_id": ["123456"],
        "redirect_uri": ["https://example.com/callback"],
        "perms": ["basic_access,email"],
    }


def test_authorize_url_joins_requested_perms(make_transport) -> None:
    session = _session(make_transport("unused"))
    url = session.get_authorize_url(["basic_access", "manage_library", "offline_access"])
    assert url.endswith("perms=basic_access%2Cmanage_library%2Coffline_access")


def test_authorize_url_makes_no_request(make_transport) -> None:
    transport = make_transport("unused")
    _session(transport).get_authorize_url()
    assert transport.calls == []


def test_request_access_token_stores_token_and_expiry(make_transport, json_response) -> None:
    transport = make_transport(json_response({"access_token": "abc", "expires": 3600}))
    session = _session(transport)

    assert session.request_access_token("auth-code") is True

    assert session.get_access_token() == "abc"
    assert session.get_token_expiration() == int(_NOW) + 3600
    assert transport.calls[0]["method"] == "GET"
    query = parse_qs(urlsplit(transport.calls[0]["url"]).query)
    assert urlsplit(transport.calls[0]["url"]).path == "/oauth/access_token.php"
    assert query == {
        "app_id": ["123456"],
        "secret": ["s3cret"],
        "code": ["auth-code"],
        "output": ["json"],
    }


def test_request_access_token_works_with_dict_bodies(make_transport, json_response) -> None:
    session = _session(make_transport(json_response({"access_token": "abc", "expires": "60"})), return_assoc=True)
    assert session.request_access_token("auth-code") is True
    assert session.get_token_expiration() == int(_NOW) + 60


@pytest.mark.parametrize("payload", [{}, {"access_token": "abc"}, {"expires": 3600}])
def test_request_access_token_returns_false_without_token_fields(make_transport, json_response, payload) -> None:
    session = _session(make_transport(json_response(payload)))
    assert session.request_access_token("auth-code") is False
    assert session.get_access_token() == ""
    assert session.get_token_expiration() == 0


def test_request_access_token_returns_false_for_plain_text_body(make_transport) -> None:
    transport = make_transport("HTTP/1.1 200 OK\r\nContent-Type: text/html\r\n\r\nwrong code")
    session = _session(transport)

    assert session.request_access_token("bad-code") is False
    assert session.get_access_token() == ""
    assert session.get_token_expiration() == 0
    assert session.token_expired() is True


def test_request_access_token_propagates_transport_errors(make_transport) -> None:
    session = _session(make_transport(TransportError("HTTP transport error: ConnectError boom", code="ConnectError")))
    with pytest.raises(TransportError):
        session.request_access_token("auth-code")


def test_request_access_token_propagates_api_errors(make_transport, json_response) -> None:
    payload = {"error": {"type": "OAuthException", "message": "Invalid OAuth access token.", "code": 300}}
    session = _session(make_transport(json_response(payload)))
    with pytest.raises(DeezerAPIError):
        session.request_access_token("bad-code")


def test_token_expired_tracks_clock(make_transport) -> None:
    session = _session(make_transport("unused"))
    assert session.token_expired() is True

    session.set_access_token("abc")
    session.expiration_time = int(_NOW) + 10
    assert session.token_expired() is False

    session.expiration_time = int(_NOW)
    assert session.token_expired() is True


def test_setters_chain(make_transport) -> None:
    session = _session(make_transport("unused"))
    assert session.set_app_id("1").set_app_secret("2").set_redirect_uri("https://x.test/cb") is session
    assert (session.app_id, session.app_secret, session.redirect_uri) == ("1", "2", "https://x.test/cb")


def test_from_settings_reads_credentials(settings) -> None:
    session = Session.from_settings(settings)
    assert session.app_id == "123456"
    assert session.app_secret == "s3cret"
    assert session.redirect_uri == "https://example.com/callback"
    assert session.request.connect_url == "https://connect.deezer.com"
