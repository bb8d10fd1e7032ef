"""Strava journey map pipeline."""

from .errors import (
    ConfigError,
    StravaAPIError,
    StravaAuthError,
    StravaTransportError,
)
from .journey import (
    JourneyActivities,
    JourneyMap,
    build_journey_map,
    fallback_activities,
    get_journey_activities,
)
from .models import Activity, ActivityStats, BoundingBox, FeatureCollection, MapFeature

__all__ = [
    "Activity",
    "ActivityStats",
    "BoundingBox",
    "FeatureCollection",
    "MapFeature",
    "JourneyActivities",
    "JourneyMap",
    "build_journey_map",
    "fallback_activities",
    "get_journey_activities",
    "ConfigError",
    "StravaAPIError",
    "StravaAuthError",
    "StravaTransportError",
]
