from __future__ import annotations

import httpx

from deezerapi.config import Settings
from deezerapi.net.http import HttpTransport
from deezerapi.preflight import check_app_id, check_app_secret, check_host, check_redirect_uri


def test_check_app_id_missing() -> None:
    result = check_app_id(Settings(_env_file=None, app_id="  "))
    assert result.status == "fail"


def test_check_credentials_configured(settings: Settings) -> None:
    assert check_app_id(settings).status == "ok"
    assert check_app_secret(settings).status == "ok"
    assert check_redirect_uri(settings).status == "ok"


def test_check_app_secret_missing_is_a_warning() -> None:
    result = check_app_secret(Settings(_env_file=None, app_secret=None))
    assert result.status == "warn"


def test_check_redirect_uri_requires_absolute_url() -> None:
    result = check_redirect_uri(Settings(_env_file=None, redirect_uri="/callback"))
    assert result.status == "fail"


def test_check_host_uses_transport_reachability() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.example.local":
            return httpx.Response(200, json={}, request=request)
        raise httpx.ConnectError("dns failure", request=request)

    transport = HttpTransport(transport=httpx.MockTransport(handler))
    assert check_host("api_url", "http://api.example.local", transport=transport, timeout_seconds=1.0).status == "ok"
    assert check_host("connect_url", "http://down.example.local", transport=transport, timeout_seconds=1.0).status == "fail"
