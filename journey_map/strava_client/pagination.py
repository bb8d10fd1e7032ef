"""Retrying GET helper for Strava API endpoints."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, TypeAlias, cast

import requests

from ..config import (
    RATE_LIMIT_MAX_429_RETRIES,
    RATE_LIMIT_THROTTLE_SECONDS,
    REQUEST_TIMEOUT,
    STRAVA_BACKOFF_MAX_SECONDS,
    STRAVA_MAX_RETRIES,
)
from ..errors import StravaTimeoutError, StravaTransportError
from .rate_limiter import RateLimiter
from .response_handling import error_for_status

JSONList: TypeAlias = List[Dict[str, Any]]

LOGGER = logging.getLogger(__name__)


def fetch_json_with_retries(
    *,
    url: str,
    params: Optional[Dict[str, Any]],
    headers: Mapping[str, str],
    context_label: str,
    session: requests.Session,
    limiter: RateLimiter,
    timeout: float = REQUEST_TIMEOUT,
    max_retries: int = STRAVA_MAX_RETRIES,
    deadline: Optional[float] = None,
) -> Any:
    """GET ``url`` and return the decoded JSON body.

    Network errors, 5xx, HTML downtime pages and invalid JSON are retried with
    exponential backoff; 429 is retried after the throttle pause. A 401 is
    raised immediately as :class:`StravaUnauthorizedError` so the caller can
    refresh the token.

    ``deadline`` is an absolute :func:`time.monotonic` value. Request timeouts
    are clamped to the time left and no retry pause may run past it.

    Raises:
        StravaTimeoutError: When ``deadline`` passes before a usable response.
        StravaAPIError: When the request fails for good.
    """

    attempts = 0
    rate_limit_retries = 0
    backoff = 1.0
    while True:
        attempts += 1
        can_retry = attempts < max_retries
        request_timeout = _remaining(deadline, timeout, context_label)
        limiter.before_request()
        try:
            resp = session.get(
                url, headers=dict(headers), params=params, timeout=request_timeout
            )
        except requests.RequestException as exc:
            if can_retry:
                _log_retry(context_label, attempts, backoff, exc.__class__.__name__)
                _pause(backoff, deadline, context_label)
                backoff = min(backoff * 2, STRAVA_BACKOFF_MAX_SECONDS)
                continue
            LOGGER.error(
                "%s network error (giving up) attempts=%s err=%s",
                context_label,
                attempts,
                exc,
            )
            raise StravaTransportError(f"{context_label} network error: {exc}") from exc

        limiter.after_response(resp.headers, resp.status_code)

        if resp.status_code == 429:
            rate_limit_retries += 1
            if rate_limit_retries > RATE_LIMIT_MAX_429_RETRIES:
                LOGGER.error(
                    "%s exceeded max 429 retries (%s); giving up",
                    context_label,
                    RATE_LIMIT_MAX_429_RETRIES,
                )
                raise StravaTransportError(f"{context_label} rate limited (429)")
            _pause(RATE_LIMIT_THROTTLE_SECONDS, deadline, context_label)
            continue

        error = error_for_status(resp, context_label)
        if error is not None:
            if can_retry and 500 <= resp.status_code < 600:
                _log_retry(context_label, attempts, backoff, f"status={resp.status_code}")
                _pause(backoff, deadline, context_label)
                backoff = min(backoff * 2, STRAVA_BACKOFF_MAX_SECONDS)
                continue
            raise error

        is_html = "text/html" in (resp.headers.get("Content-Type", "").lower())
        if is_html:
            if can_retry:
                _log_retry(context_label, attempts, backoff, "html downtime page")
                _pause(backoff, deadline, context_label)
                backoff = min(backoff * 2, STRAVA_BACKOFF_MAX_SECONDS)
                continue
            raise StravaTransportError(
                f"{context_label} returned an HTML page after {attempts} attempts"
            )

        try:
            return resp.json()
        except ValueError as exc:
            if can_retry:
                _log_retry(context_label, attempts, backoff, "invalid json")
                _pause(backoff, deadline, context_label)
                backoff = min(backoff * 2, STRAVA_BACKOFF_MAX_SECONDS)
                continue
            raise StravaTransportError(
                f"{context_label} returned invalid JSON after {attempts} attempts"
            ) from exc


def fetch_page_with_retries(
    *,
    url: str,
    params: Dict[str, Any],
    headers: Mapping[str, str],
    context_label: str,
    session: requests.Session,
    limiter: RateLimiter,
    timeout: float = REQUEST_TIMEOUT,
    max_retries: int = STRAVA_MAX_RETRIES,
    deadline: Optional[float] = None,
) -> JSONList:
    """Like :func:`fetch_json_with_retries` but require a JSON list body."""

    data = fetch_json_with_retries(
        url=url,
        params=params,
        headers=headers,
        context_label=context_label,
        session=session,
        limiter=limiter,
        timeout=timeout,
        max_retries=max_retries,
        deadline=deadline,
    )
    if not isinstance(data, list):
        LOGGER.warning(
            "Unexpected JSON shape (not list) for %s page=%s type=%s",
            context_label,
            params.get("page"),
            type(data).__name__,
        )
        raise StravaTransportError(f"{context_label} returned a non-list payload")
    return cast(JSONList, data)


def _remaining(deadline: Optional[float], timeout: float, context_label: str) -> float:
    if deadline is None:
        return timeout
    left = deadline - time.monotonic()
    if left <= 0:
        raise StravaTimeoutError(f"{context_label} deadline exceeded before request")
    return min(timeout, left)


def _pause(seconds: float, deadline: Optional[float], context_label: str) -> None:
    if deadline is not None and time.monotonic() + seconds > deadline:
        LOGGER.error(
            "%s retry pause of %.1fs would pass the fetch deadline; giving up",
            context_label,
            seconds,
        )
        raise StravaTimeoutError(f"{context_label} deadline exceeded while retrying")
    time.sleep(seconds)


def _log_retry(context_label: str, attempt: int, backoff: float, reason: str) -> None:
    LOGGER.warning(
        "%s attempt=%s failed err=%s; backoff %.1fs",
        context_label,
        attempt,
        reason,
        backoff,
    )
