"""Pipeline entry point: fetch the journey's activities and build the map artifact.

Any failure to obtain live data (missing credentials, authentication or
transport errors) is replaced by a fixed three-activity fallback dataset. The
result records which of the two was used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from . import config
from .errors import ConfigError, StravaAPIError
from .models import (
    Activity,
    ActivityStats,
    BoundingBox,
    Credentials,
    FeatureCollection,
)
from .polyline import FIXTURE_POLYLINE
from .processor import calculate_bounds, filter_since, process_activities, summarize_activities
from .strava_client import ActivitiesAPI, TokenManager
from .utils import parse_datetime

LOGGER = logging.getLogger(__name__)

SOURCE_LIVE = "live"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class JourneyActivities:
    activities: Tuple[Activity, ...]
    start_date: str
    source: str
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_FALLBACK


@dataclass(frozen=True)
class JourneyMap:
    features: FeatureCollection
    bounds: Optional[BoundingBox]
    stats: ActivityStats
    start_date: str
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date,
            "source": self.source,
            "bounds": self.bounds.as_list() if self.bounds else None,
            "stats": self.stats.to_dict(),
            "features": self.features.to_geojson(),
        }


def load_credentials() -> Credentials:
    """Read the Strava credentials from configuration.

    Raises:
        ConfigError: If any of the three secrets is missing.
    """

    values = {
        "STRAVA_CLIENT_ID": config.CLIENT_ID,
        "STRAVA_CLIENT_SECRET": config.CLIENT_SECRET,
        "STRAVA_REFRESH_TOKEN": config.REFRESH_TOKEN,
    }
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigError(f"Missing Strava credentials: {', '.join(missing)}")
    return Credentials(
        client_id=config.CLIENT_ID,
        client_secret=config.CLIENT_SECRET,
        refresh_token=config.REFRESH_TOKEN,
    )


def create_client(credentials: Credentials) -> ActivitiesAPI:
    return ActivitiesAPI(TokenManager(credentials))


def fallback_activities() -> List[Activity]:
    """Return the fixed fallback dataset used when live data is unavailable."""

    payloads = [
        {
            "id": 1,
            "name": "Morning Run",
            "start_date": "2023-01-05T08:00:00Z",
            "distance": 5000,
            "type": "Run",
            "map": {"summary_polyline": FIXTURE_POLYLINE},
        },
        {
            "id": 2,
            "name": "Evening Ride",
            "start_date": "2023-01-07T18:00:00Z",
            "distance": 15000,
            "type": "Ride",
            "map": {"summary_polyline": FIXTURE_POLYLINE},
        },
        {
            "id": 3,
            "name": "Weekend Hike",
            "start_date": "2023-01-14T10:00:00Z",
            "distance": 8000,
            "type": "Hike",
            "map": {"summary_polyline": FIXTURE_POLYLINE},
        },
    ]
    return [Activity.from_payload(payload) for payload in payloads]


def get_journey_activities(
    start_date: Optional[str] = None,
    *,
    client: Optional[ActivitiesAPI] = None,
    activity_types: Optional[Iterable[str]] = None,
) -> JourneyActivities:
    """Fetch the journey's activities, falling back to the fixture on failure."""

    if start_date is None:
        start_date = config.JOURNEY_START_DATE
    if activity_types is None:
        activity_types = config.JOURNEY_ACTIVITY_TYPES
    after = parse_datetime(start_date)
    try:
        if client is None:
            client = create_client(load_credentials())
        activities = client.get_all_activities_after(
            after,
            activity_types,
            deadline_seconds=config.FETCH_DEADLINE_SECONDS or None,
        )
    except ConfigError as exc:
        LOGGER.error("Strava configuration incomplete: %s", exc)
        return _fallback(start_date, exc)
    except (StravaAPIError, requests.RequestException) as exc:
        LOGGER.error("Error fetching Strava activities: %s", exc)
        return _fallback(start_date, exc)
    return JourneyActivities(
        activities=tuple(activities),
        start_date=start_date,
        source=SOURCE_LIVE,
    )


def _fallback(start_date: str, error: Exception) -> JourneyActivities:
    LOGGER.warning("Using fallback Strava data")
    return JourneyActivities(
        activities=tuple(fallback_activities()),
        start_date=start_date,
        source=SOURCE_FALLBACK,
        error=str(error),
    )


def build_journey_map(journey: JourneyActivities) -> JourneyMap:
    """Process the journey's activities into features, bounds and stats.

    Stats count every activity in the date window; features and bounds only
    include activities whose geometry could be used.
    """

    in_window = filter_since(journey.activities, journey.start_date)
    return JourneyMap(
        features=process_activities(in_window, journey.start_date),
        bounds=calculate_bounds(in_window),
        stats=summarize_activities(in_window),
        start_date=journey.start_date,
        source=journey.source,
    )
