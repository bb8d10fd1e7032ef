"""Bearer token ownership for Strava API calls."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import replace
from typing import Dict, Optional

from .. import auth
from ..errors import StravaAuthError
from ..models import Credentials

LOGGER = logging.getLogger(__name__)


class TokenState(enum.Enum):
    NO_TOKEN = "no_token"
    VALID = "valid"
    REFRESHING = "refreshing"


class TokenManager:
    """Own a single access token and refresh it through the OAuth exchange.

    Refreshes are serialized: callers that hit a 401 hand back the token they
    used, and only the first of them performs the exchange. Later callers see
    that the token has already changed and reuse it.
    """

    def __init__(self, credentials: Credentials, access_token: Optional[str] = None) -> None:
        self._credentials = credentials
        self._access_token = access_token
        self._state = TokenState.VALID if access_token else TokenState.NO_TOKEN
        self._lock = threading.Lock()
        self.refresh_count = 0

    @property
    def state(self) -> TokenState:
        return self._state

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    @property
    def refresh_token(self) -> str:
        return self._credentials.refresh_token

    def refresh(self) -> str:
        """Exchange the refresh token for a new access token."""

        with self._lock:
            return self._refresh_locked()

    def ensure_token(self) -> str:
        """Return the current access token, refreshing first when there is none."""

        with self._lock:
            if self._access_token:
                return self._access_token
            return self._refresh_locked()

    def refresh_if_stale(self, stale_token: Optional[str]) -> str:
        """Refresh after ``stale_token`` was rejected, unless another caller already did."""

        with self._lock:
            if self._access_token and self._access_token != stale_token:
                LOGGER.debug("Access token already refreshed by another caller")
                return self._access_token
            self._access_token = None
            self._state = TokenState.NO_TOKEN
            return self._refresh_locked()

    def auth_headers(self, token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def _refresh_locked(self) -> str:
        self._state = TokenState.REFRESHING
        self.refresh_count += 1
        try:
            access_token, new_refresh_token = auth.get_access_token(self._credentials)
        except StravaAuthError:
            self._access_token = None
            self._state = TokenState.NO_TOKEN
            raise
        except Exception as exc:
            self._access_token = None
            self._state = TokenState.NO_TOKEN
            raise StravaAuthError(f"Token refresh failed: {exc}") from exc
        self._access_token = access_token
        self._state = TokenState.VALID
        if new_refresh_token and new_refresh_token != self._credentials.refresh_token:
            LOGGER.info("Strava rotated the refresh token")
            self._credentials = replace(self._credentials, refresh_token=new_refresh_token)
        return access_token
