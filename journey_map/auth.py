"""OAuth token refresh for the Strava API.

Exchanges the long-lived refresh token for a short-lived access token using
Strava's OAuth endpoint, with HTTP retries for transient failures and logging
that never leaks secrets.
"""

from __future__ import annotations

import logging
from typing import Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import config
from .errors import StravaAuthError
from .models import Credentials
from .strava_client.response_handling import extract_error

LOGGER = logging.getLogger(__name__)

# Reusable session with limited retry for transient network/server issues.
_token_retry = Retry(
    total=3,
    backoff_factor=1.0,
    status_forcelist=[429, 500, 502, 503, 504],
    allowed_methods=["POST"],
    raise_on_status=False,
)
_session = requests.Session()
_session.mount("https://", HTTPAdapter(max_retries=_token_retry))
_session.mount("http://", HTTPAdapter(max_retries=_token_retry))


def _mask_tail(value: str | None, visible: int = 4) -> str:
    if not value:
        return ""
    return "****" + value[-visible:]


def get_access_token(credentials: Credentials) -> Tuple[str, str | None]:
    """Exchange the refresh token for a new access (and possibly new refresh) token.

    Args:
        credentials: Client id, client secret and refresh token.

    Returns:
        ``(access_token, refresh_token)``; the refresh token is ``None`` when
        the response does not carry one.

    Raises:
        StravaAuthError: If credentials are incomplete, the request fails, or
            the response lacks an access token.
    """
    if not credentials.client_id or not credentials.client_secret:
        raise StravaAuthError("Client credentials not configured (client id / secret missing)")
    if not credentials.refresh_token:
        raise StravaAuthError("Missing refresh token")

    payload = {
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
        "refresh_token": credentials.refresh_token,
        "grant_type": "refresh_token",
    }
    LOGGER.info(
        "Refreshing Strava token refresh_token=%s",
        _mask_tail(credentials.refresh_token),
    )
    LOGGER.debug("Token endpoint: %s", config.STRAVA_OAUTH_URL)

    try:
        resp = _session.post(
            config.STRAVA_OAUTH_URL, data=payload, timeout=config.REQUEST_TIMEOUT
        )
    except requests.exceptions.RequestException as e:
        LOGGER.error("Token request transport error: %s", e)
        raise StravaAuthError("Transport failure during token refresh") from e

    status = resp.status_code
    LOGGER.debug("Token endpoint status=%s", status)
    if status >= 300:
        detail = extract_error(resp)
        LOGGER.error(
            "Token refresh failed status=%s%s",
            status,
            f" detail={detail}" if detail else "",
        )
        raise StravaAuthError(f"Token refresh failed with status {status}")

    try:
        data = resp.json()
    except ValueError as e:
        LOGGER.error("Invalid JSON in token response: %s", e)
        raise StravaAuthError("Invalid JSON in token response") from e

    if not isinstance(data, dict):
        LOGGER.error("Unexpected token response shape: %s", type(data).__name__)
        raise StravaAuthError("Unexpected token response shape")

    access_token = data.get("access_token")
    new_refresh_token = data.get("refresh_token")
    LOGGER.info(
        "Token refresh access_token_len=%s refresh_token_changed=%s",
        len(access_token) if access_token else 0,
        bool(new_refresh_token and new_refresh_token != credentials.refresh_token),
    )
    if not access_token:
        LOGGER.error("No access_token in token response")
        raise StravaAuthError("No access_token in response")
    return access_token, new_refresh_token
