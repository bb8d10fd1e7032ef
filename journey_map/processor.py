"""Turn fetched activities into map geometry, bounds and summary statistics."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from . import polyline
from .errors import PolylineDecodeError
from .models import Activity, ActivityStats, BoundingBox, FeatureCollection, LatLon, MapFeature
from .utils import DateLike, parse_datetime

LOGGER = logging.getLogger(__name__)


def filter_since(activities: Iterable[Activity], start_date: DateLike) -> List[Activity]:
    """Return activities starting at or after ``start_date``, oldest first."""

    start = parse_datetime(start_date)
    selected = [activity for activity in activities if activity.start_date >= start]
    return sorted(selected, key=lambda activity: activity.start_date)


def _decode_route(
    activity: Activity, log_level: int = logging.WARNING
) -> Optional[List[LatLon]]:
    """Decode the activity polyline; ``None`` when absent or undecodable."""

    if not activity.summary_polyline:
        return None
    try:
        return polyline.decode(activity.summary_polyline)
    except PolylineDecodeError as exc:
        LOGGER.log(log_level, "Dropping route for activity id=%s: %s", activity.id, exc)
        return None


def build_feature(activity: Activity) -> Optional[MapFeature]:
    points = _decode_route(activity)
    if not points:
        if points is not None:
            LOGGER.warning("Activity id=%s polyline decoded to no points", activity.id)
        return None
    return MapFeature(
        id=activity.id,
        name=activity.name,
        type=activity.type,
        start_date=activity.start_date,
        distance=activity.distance,
        coordinates=tuple((lng, lat) for lat, lng in points),
        sport_type=activity.sport_type,
        start_date_local=activity.start_date_local,
        elapsed_time=activity.elapsed_time,
        total_elevation_gain=activity.total_elevation_gain,
    )


def process_activities(
    activities: Sequence[Activity], start_date: DateLike
) -> FeatureCollection:
    """Build the chronological feature collection for activities since ``start_date``.

    Activities without a polyline, or whose polyline is malformed or empty,
    are left out of the collection.
    """

    features: List[MapFeature] = []
    for activity in filter_since(activities, start_date):
        if not activity.summary_polyline:
            continue
        feature = build_feature(activity)
        if feature is not None:
            features.append(feature)
    LOGGER.debug(
        "Built %s map features from %s activities", len(features), len(activities)
    )
    return FeatureCollection(tuple(features))


def calculate_bounds(activities: Iterable[Activity]) -> Optional[BoundingBox]:
    """Return the box enclosing every start/end point and route point, if any.

    An activity whose polyline fails to decode contributes nothing, not even
    its start and end points.
    """

    min_lat, min_lng = 90.0, 180.0
    max_lat, max_lng = -90.0, -180.0
    found = False
    for activity in activities:
        points: List[LatLon] = []
        if activity.summary_polyline:
            # process_activities already warned about this route.
            route = _decode_route(activity, logging.DEBUG)
            if route is None:
                continue
            points.extend(route)
        if activity.start_latlng:
            points.append(activity.start_latlng)
        if activity.end_latlng:
            points.append(activity.end_latlng)
        for lat, lng in points:
            min_lat = min(min_lat, lat)
            max_lat = max(max_lat, lat)
            min_lng = min(min_lng, lng)
            max_lng = max(max_lng, lng)
            found = True
    if not found:
        return None
    return BoundingBox(min_lng=min_lng, min_lat=min_lat, max_lng=max_lng, max_lat=max_lat)


def summarize_activities(activities: Iterable[Activity]) -> ActivityStats:
    """Total distance, elevation gain and elapsed time plus per-type counts."""

    count = 0
    distance = 0.0
    elevation = 0.0
    elapsed = 0
    type_counts: Dict[str, int] = {}
    for activity in activities:
        count += 1
        distance += activity.distance
        elevation += activity.total_elevation_gain or 0.0
        elapsed += activity.elapsed_time
        key = activity.type or "Unknown"
        type_counts[key] = type_counts.get(key, 0) + 1
    return ActivityStats(
        activity_count=count,
        total_distance=distance,
        total_elevation_gain=elevation,
        total_elapsed_time=elapsed,
        type_counts=type_counts,
    )
