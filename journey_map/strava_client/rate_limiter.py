"""Header-driven throttling for sequential Strava API calls."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Mapping

from ..config import RATE_LIMIT_NEAR_LIMIT_BUFFER, RATE_LIMIT_THROTTLE_SECONDS

__all__ = ["RateLimiter"]

LOGGER = logging.getLogger(__name__)


class RateLimiter:
    """Pause before the next request after a 429 or when near the short-window limit."""

    def __init__(
        self,
        throttle_seconds: float = RATE_LIMIT_THROTTLE_SECONDS,
        near_limit_buffer: int = RATE_LIMIT_NEAR_LIMIT_BUFFER,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._lock = threading.Lock()
        self._throttle_until: float = 0.0
        self._throttle_seconds = throttle_seconds
        self._near_limit_buffer = near_limit_buffer
        self._clock = clock
        self._sleep = sleep

    def before_request(self) -> None:
        with self._lock:
            wait_for = max(0.0, self._throttle_until - self._clock())
        if wait_for > 0:
            LOGGER.debug("Rate limiter sleeping %.1fs before next request", wait_for)
            self._sleep(wait_for)

    def after_response(
        self, headers: Mapping[str, object] | None, status_code: int | None
    ) -> bool:
        """Record a response; return ``True`` when a throttle pause was scheduled."""

        throttle = False
        if status_code == 429:
            throttle = True
            LOGGER.warning(
                "Rate limit: 429. Throttling %ss.", self._throttle_seconds
            )
        else:
            usage = _short_window(headers, "X-RateLimit-Usage")
            limit = _short_window(headers, "X-RateLimit-Limit")
            if (
                usage is not None
                and limit is not None
                and usage >= max(limit - self._near_limit_buffer, 0)
            ):
                throttle = True
                LOGGER.info(
                    "Approaching short-window limit (%s/%s). Throttling %ss.",
                    usage,
                    limit,
                    self._throttle_seconds,
                )
        if throttle:
            with self._lock:
                self._throttle_until = self._clock() + self._throttle_seconds
        return throttle

    def snapshot(self) -> dict[str, float]:  # pragma: no cover - debug helper
        with self._lock:
            return {"throttle_until": self._throttle_until}


def _short_window(headers: Mapping[str, object] | None, key: str) -> int | None:
    if not headers:
        return None
    raw = headers.get(key)
    if not raw:
        return None
    try:
        return int(str(raw).split(",")[0])
    except (ValueError, TypeError) as exc:
        LOGGER.debug("Failed to parse rate limit header %s=%s: %s", key, raw, exc)
        return None
