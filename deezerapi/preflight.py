"""Configuration and connectivity checks used by `script/doctor.py`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from deezerapi.config import Settings
from deezerapi.net.http import HttpTransport

__all__ = [
    "CheckResult",
    "Status",
    "check_app_id",
    "check_app_secret",
    "check_host",
    "check_redirect_uri",
]

Status = Literal["ok", "warn", "fail"]


@dataclass(slots=True)
class CheckResult:
    name: str
    status: Status
    details: str


def check_app_id(settings: Settings) -> CheckResult:
    if (settings.app_id or "").strip():
        return CheckResult("app_id", "ok", "configured")
    return CheckResult("app_id", "fail", "DEEZER_APP_ID is not set.")


def check_app_secret(settings: Settings) -> CheckResult:
    if (settings.app_secret or "").strip():
        return CheckResult("app_secret", "ok", "configured")
    return CheckResult("app_secret", "warn", "DEEZER_APP_SECRET is not set (required for the token exchange).")


def check_redirect_uri(settings: Settings) -> CheckResult:
    value = (settings.redirect_uri or "").strip()
    if not value:
        return CheckResult(
            "redirect_uri",
            "warn",
            "DEEZER_REDIRECT_URI is not set (required to build the authorization URL).",
        )
    if not value.startswith(("http://", "https://")):
        return CheckResult("redirect_uri", "fail", f"not an absolute http(s) URL: {value!r}")
    return CheckResult("redirect_uri", "ok", value)


def check_host(label: str, url: str, *, transport: HttpTransport, timeout_seconds: float) -> CheckResult:
    if transport.is_reachable(url, timeout_seconds=timeout_seconds):
        return CheckResult(label, "ok", f"reachable: {url}")
    return CheckResult(label, "fail", f"unreachable: {url}")
