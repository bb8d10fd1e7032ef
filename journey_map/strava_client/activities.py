"""Authenticated, paginated activity retrieval."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar, Union

import requests

from ..activity_types import activity_type_matches, normalize_activity_types
from ..config import ACTIVITY_PAGE_SIZE, REQUEST_TIMEOUT, STRAVA_BASE_URL
from ..errors import (
    StravaAPIError,
    StravaAuthError,
    StravaResourceNotFoundError,
    StravaTimeoutError,
    StravaTransportError,
    StravaUnauthorizedError,
)
from ..models import Activity
from ..utils import parse_datetime, to_epoch_seconds
from .base import TokenManager
from .pagination import JSONList, fetch_json_with_retries, fetch_page_with_retries
from .rate_limiter import RateLimiter
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def parse_activities(payloads: Iterable[Dict[str, Any]]) -> List[Activity]:
    """Convert raw payloads into activities, skipping malformed records."""

    activities: List[Activity] = []
    for payload in payloads:
        try:
            activities.append(Activity.from_payload(payload))
        except (TypeError, ValueError) as exc:
            LOGGER.warning(
                "Skipping malformed activity id=%s: %s",
                payload.get("id") if isinstance(payload, dict) else "?",
                exc,
            )
    return activities


def _payload_start(payload: Any) -> Optional[datetime]:
    if not isinstance(payload, dict):
        return None
    try:
        return parse_datetime(payload.get("start_date") or "")
    except ValueError:
        return None


class ActivitiesAPI:
    """Fetch the authenticated athlete's activities."""

    def __init__(
        self,
        tokens: TokenManager,
        *,
        session: requests.Session | None = None,
        limiter: RateLimiter | None = None,
        base_url: str = STRAVA_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._tokens = tokens
        self._session = session or get_default_session()
        self._limiter = limiter or RateLimiter()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _with_auth_retry(self, context: str, call: Callable[[Dict[str, str]], T]) -> T:
        """Run ``call`` with auth headers; on 401 refresh once and retry once."""

        token = self._tokens.ensure_token()
        try:
            return call(self._tokens.auth_headers(token))
        except StravaUnauthorizedError:
            LOGGER.info("401 for %s. Refreshing token and retrying once.", context)
        token = self._tokens.refresh_if_stale(token)
        try:
            return call(self._tokens.auth_headers(token))
        except StravaUnauthorizedError as exc:
            LOGGER.warning("%s still unauthorized after token refresh", context)
            raise StravaAuthError(f"{context} unauthorized after token refresh") from exc

    def _fetch_page_payload(
        self,
        per_page: int,
        page: int,
        after: Optional[int] = None,
        deadline: Optional[float] = None,
    ) -> JSONList:
        url = f"{self._base_url}/athlete/activities"
        params: Dict[str, Any] = {"per_page": per_page, "page": page}
        if after is not None:
            params["after"] = after
        context = f"activities page={page}"
        return self._with_auth_retry(
            context,
            lambda headers: fetch_page_with_retries(
                url=url,
                params=params,
                headers=headers,
                context_label=context,
                session=self._session,
                limiter=self._limiter,
                timeout=self._timeout,
                deadline=deadline,
            ),
        )

    def get_activities(self, per_page: int = 30, page: int = 1) -> List[Activity]:
        """Fetch one page of activities (newest first)."""

        return parse_activities(self._fetch_page_payload(per_page, page))

    def get_all_activities_after(
        self,
        after: Union[int, float, datetime, str],
        activity_types: Optional[Iterable[str]] = None,
        *,
        deadline_seconds: Optional[float] = None,
    ) -> List[Activity]:
        """Fetch every activity starting at or after ``after``.

        Pages are requested newest-first until a short page, an empty page, or
        a page whose last (oldest) entry predates ``after``. A failure on the
        first page raises; a failure on a later page is logged and the
        activities gathered so far are returned.
        """

        after_ts = to_epoch_seconds(after)
        allowed = normalize_activity_types(activity_types)
        deadline = (
            time.monotonic() + deadline_seconds if deadline_seconds else None
        )
        per_page = ACTIVITY_PAGE_SIZE
        collected: List[Activity] = []
        page = 1
        while True:
            try:
                if deadline is not None and time.monotonic() > deadline:
                    raise StravaTimeoutError(
                        f"Activity fetch deadline of {deadline_seconds}s exceeded before page {page}"
                    )
                data = self._fetch_page_payload(
                    per_page, page, after=after_ts, deadline=deadline
                )
            except StravaAPIError as exc:
                if page == 1:
                    raise
                LOGGER.error(
                    "Activities fetch failed on page %s; returning %s activities gathered so far: %s",
                    page,
                    len(collected),
                    exc,
                )
                return collected

            if not data:
                break

            for activity in parse_activities(data):
                if activity.start_date.timestamp() < after_ts:
                    continue
                if not activity_type_matches(activity.type_fields(), allowed):
                    continue
                collected.append(activity)

            if len(data) < per_page:
                break
            oldest = _payload_start(data[-1])
            if oldest is not None and oldest.timestamp() < after_ts:
                break
            page += 1

        LOGGER.info(
            "Fetched %s activities after %s across %s page(s)",
            len(collected),
            after_ts,
            page,
        )
        return collected

    def get_activity(self, activity_id: int) -> Dict[str, Any]:
        """Fetch the detailed payload of one activity."""

        url = f"{self._base_url}/activities/{activity_id}"
        context = f"activity_detail id={activity_id}"
        payload = self._with_auth_retry(
            context,
            lambda headers: fetch_json_with_retries(
                url=url,
                params=None,
                headers=headers,
                context_label=context,
                session=self._session,
                limiter=self._limiter,
                timeout=self._timeout,
            ),
        )
        if isinstance(payload, dict):
            return payload
        raise StravaTransportError(f"{context} returned non-object payload")

    def get_latest_activity(self) -> Dict[str, Any]:
        """Fetch the detailed payload of the most recent activity."""

        latest = self._fetch_page_payload(1, 1)
        if not latest or not isinstance(latest[0], dict) or latest[0].get("id") is None:
            raise StravaResourceNotFoundError("No activities found")
        return self.get_activity(int(latest[0]["id"]))
