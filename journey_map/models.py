from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from .utils import parse_datetime

LatLon = Tuple[float, float]
LngLat = Tuple[float, float]


@dataclass(frozen=True)
class Credentials:
    client_id: str
    client_secret: str
    refresh_token: str

    def __repr__(self) -> str:
        # Keep secrets out of logs and tracebacks.
        return f"Credentials(client_id={self.client_id!r}, client_secret='****', refresh_token='****')"


def _latlng(value: Any) -> Optional[LatLon]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    try:
        return float(value[0]), float(value[1])
    except (TypeError, ValueError):
        return None


def _float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Activity:
    """One recorded exercise session as returned by the activities endpoint."""

    id: int
    name: str
    type: str
    start_date: datetime
    distance: float = 0.0
    elapsed_time: int = 0
    total_elevation_gain: Optional[float] = None
    sport_type: Optional[str] = None
    start_date_local: Optional[str] = None
    start_latlng: Optional[LatLon] = None
    end_latlng: Optional[LatLon] = None
    summary_polyline: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Activity":
        """Build an activity from a Strava summary payload.

        Raises:
            ValueError: If the payload is not an object, or lacks an id or a
                parsable ``start_date``.
        """

        if not isinstance(payload, Mapping):
            raise ValueError(f"Activity payload is not an object: {type(payload).__name__}")
        raw_id = payload.get("id")
        if raw_id is None:
            raise ValueError("Activity payload has no id")
        start_date = parse_datetime(payload.get("start_date") or "")
        map_info = payload.get("map") or {}
        polyline = map_info.get("summary_polyline") if isinstance(map_info, Mapping) else None
        return cls(
            id=int(raw_id),
            name=str(payload.get("name") or ""),
            type=str(payload.get("type") or ""),
            start_date=start_date,
            distance=_float(payload.get("distance")) or 0.0,
            elapsed_time=int(payload.get("elapsed_time") or 0),
            total_elevation_gain=_float(payload.get("total_elevation_gain"), None),
            sport_type=payload.get("sport_type"),
            start_date_local=payload.get("start_date_local"),
            start_latlng=_latlng(payload.get("start_latlng")),
            end_latlng=_latlng(payload.get("end_latlng")),
            summary_polyline=polyline or None,
        )

    def type_fields(self) -> Dict[str, Any]:
        """Return the ``type``/``sport_type`` mapping used by type filters."""

        return {"type": self.type, "sport_type": self.sport_type}


@dataclass(frozen=True)
class MapFeature:
    """A single activity route, coordinates in ``(lng, lat)`` order."""

    id: int
    name: str
    type: str
    start_date: datetime
    distance: float
    coordinates: Tuple[LngLat, ...]
    sport_type: Optional[str] = None
    start_date_local: Optional[str] = None
    elapsed_time: Optional[int] = None
    total_elevation_gain: Optional[float] = None

    def properties(self) -> Dict[str, Any]:
        props: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "date": self.start_date.isoformat().replace("+00:00", "Z"),
            "distance": self.distance,
        }
        optional = {
            "sport_type": self.sport_type,
            "start_date_local": self.start_date_local,
            "elapsed_time": self.elapsed_time,
            "total_elevation_gain": self.total_elevation_gain,
        }
        props.update({key: value for key, value in optional.items() if value is not None})
        return props

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "properties": self.properties(),
            "geometry": {
                "type": "LineString",
                "coordinates": [[lng, lat] for lng, lat in self.coordinates],
            },
        }


@dataclass(frozen=True)
class FeatureCollection:
    """Chronologically ordered map features."""

    features: Tuple[MapFeature, ...] = ()

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[MapFeature]:
        return iter(self.features)

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [feature.to_geojson() for feature in self.features],
        }


@dataclass(frozen=True)
class BoundingBox:
    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float

    def as_list(self) -> list[float]:
        return [self.min_lng, self.min_lat, self.max_lng, self.max_lat]


@dataclass(frozen=True)
class ActivityStats:
    """Aggregate totals over a set of activities."""

    activity_count: int = 0
    total_distance: float = 0.0
    total_elevation_gain: float = 0.0
    total_elapsed_time: int = 0
    type_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activity_count": self.activity_count,
            "total_distance": self.total_distance,
            "total_elevation_gain": self.total_elevation_gain,
            "total_elapsed_time": self.total_elapsed_time,
            "type_counts": dict(self.type_counts),
        }
