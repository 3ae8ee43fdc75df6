"""Tenacity helpers for retrying rate-limited Deezer calls.

Only `DeezerAPIError`s carrying the rate-limit code are retried. Every other
failure propagates unchanged on the first occurrence. Retries re-issue the
exact same request, so callers should only enable them for calls that are
safe to repeat.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from loguru import logger
from tenacity import Retrying, retry_if_exception, stop_after_attempt, stop_never, wait_incrementing

from deezerapi.errors import DeezerAPIError

__all__ = ["DEFAULT_MAX_ATTEMPTS", "call_with_rate_limit_retry", "is_rate_limited", "rate_limit_retrying"]

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS: int = 10

_log = logger.bind(module="retry")


def is_rate_limited(exc: BaseException) -> bool:
    return isinstance(exc, DeezerAPIError) and exc.is_rate_limited()


def rate_limit_retrying(
    *,
    max_attempts: int | None,
    backoff_seconds: float,
    log: Any = None,
    operation: str = "Deezer call",
    sleep: Callable[[float], None] | None = None,
) -> Retrying:
    """Return a configured Tenacity `Retrying` instance for rate-limited calls.

    Notes:
    - `max_attempts=None` retries until the call stops being rate-limited.
      That can block the caller indefinitely against a throttled endpoint.
    - `backoff_seconds` gives linear backoff:
      sleep = backoff_seconds * attempt_number (1-indexed).
    - The last error is re-raised unchanged when attempts run out.
    """
    backoff_seconds = max(0.0, float(backoff_seconds))
    stop = stop_never if max_attempts is None else stop_after_attempt(max(1, int(max_attempts)))
    log = log if log is not None else _log
    operation = (operation or "Deezer call").strip() or "Deezer call"

    def _before_sleep(retry_state) -> None:  # type: ignore[no-untyped-def]
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        sleep_for = getattr(getattr(retry_state, "next_action", None), "sleep", None)
        attempt = getattr(retry_state, "attempt_number", None)
        if not sleep_for:
            log.warning("{} attempt {} was rate limited: {}. Retrying...", operation, attempt, exc)
            return
        log.warning(
            "{} attempt {} was rate limited: {}. Retrying in {:.1f}s",
            operation,
            attempt,
            exc,
            float(sleep_for),
        )

    kwargs: dict[str, Any] = {}
    if sleep is not None:
        kwargs["sleep"] = sleep

    return Retrying(
        stop=stop,
        wait=wait_incrementing(start=backoff_seconds, increment=backoff_seconds),
        retry=retry_if_exception(is_rate_limited),
        reraise=True,
        before_sleep=_before_sleep,
        **kwargs,
    )


def call_with_rate_limit_retry(
    fn: Callable[[], T],
    *,
    enabled: bool,
    max_attempts: int | None = DEFAULT_MAX_ATTEMPTS,
    backoff_seconds: float = 0.0,
    operation: str = "Deezer call",
    sleep: Callable[[float], None] | None = None,
) -> T:
    """Invoke `fn`, retrying on rate limiting when `enabled` is True."""
    if not enabled:
        return fn()
    retrying = rate_limit_retrying(
        max_attempts=max_attempts,
        backoff_seconds=backoff_seconds,
        operation=operation,
        sleep=sleep,
    )
    return retrying(fn)
