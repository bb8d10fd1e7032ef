"""Central configuration for the journey map pipeline.

All values are constants imported by the rest of the package. Secrets are read
from environment variables (optionally via a local `.env`).
"""

from __future__ import annotations

import os

from dotenv import load_dotenv


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_list(key: str, default: str = "") -> list[str]:
    raw = os.getenv(key, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# Load .env from the current directory or any parent folder.
load_dotenv()


# ---------------------------------------------------------------------------
# Strava settings
# ---------------------------------------------------------------------------
STRAVA_BASE_URL = "https://www.strava.com/api/v3"
STRAVA_OAUTH_URL = "https://www.strava.com/oauth/token"

# Client credentials and the long-lived refresh token. Do not hardcode secrets.
CLIENT_ID = os.getenv("STRAVA_CLIENT_ID", "")
CLIENT_SECRET = os.getenv("STRAVA_CLIENT_SECRET", "")
REFRESH_TOKEN = os.getenv("STRAVA_REFRESH_TOKEN", "")


# ---------------------------------------------------------------------------
# Journey settings
# ---------------------------------------------------------------------------
# Activities starting before this instant are not part of the journey.
JOURNEY_START_DATE = os.getenv("JOURNEY_START_DATE", "2023-01-01T00:00:00Z")

# Restrict the fetched activities to these types (e.g. "Ride"). Empty keeps all.
JOURNEY_ACTIVITY_TYPES = _env_list("JOURNEY_ACTIVITY_TYPES")


# ---------------------------------------------------------------------------
# HTTP / pagination
# ---------------------------------------------------------------------------
# Largest page size accepted by the activities endpoint.
ACTIVITY_PAGE_SIZE = 200

HTTP_POOL_CONNECTIONS = 4
HTTP_POOL_MAXSIZE = 4

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_int("STRAVA_REQUEST_TIMEOUT", 15)

# Overall budget for a full paginated fetch. 0 disables the deadline.
FETCH_DEADLINE_SECONDS = _env_float("STRAVA_FETCH_DEADLINE_SECONDS", 0.0)

# STRAVA_MAX_RETRIES covers network failures, 5xx, or bad payloads.
STRAVA_MAX_RETRIES = _env_int("STRAVA_MAX_RETRIES", 3)
# STRAVA_BACKOFF_MAX_SECONDS caps the exponential backoff per attempt.
STRAVA_BACKOFF_MAX_SECONDS = _env_float("STRAVA_BACKOFF_MAX_SECONDS", 4.0)


# Rate limiter settings.
# RATE_LIMIT_NEAR_LIMIT_BUFFER starts throttling when this close to the short-window limit.
RATE_LIMIT_NEAR_LIMIT_BUFFER = 3
# RATE_LIMIT_THROTTLE_SECONDS is the pause applied on 429s or near-limit signals.
RATE_LIMIT_THROTTLE_SECONDS = 15
# RATE_LIMIT_MAX_429_RETRIES bounds how often a single page is retried after 429.
RATE_LIMIT_MAX_429_RETRIES = 5
