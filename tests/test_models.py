from datetime import datetime, timezone

import pytest

from journey_map.models import Activity


def test_from_payload_reads_summary_fields():
    activity = Activity.from_payload(
        {
            "id": "12",
            "name": "Lunch Ride",
            "type": "Ride",
            "sport_type": "MountainBikeRide",
            "start_date": "2024-04-02T11:30:00Z",
            "start_date_local": "2024-04-02T13:30:00Z",
            "distance": 25000.5,
            "elapsed_time": 4200,
            "total_elevation_gain": 310,
            "start_latlng": [46.5, 7.1],
            "end_latlng": [],
            "map": {"id": "a12", "summary_polyline": "_p~iF~ps|U"},
        }
    )

    assert activity.id == 12
    assert activity.start_date == datetime(2024, 4, 2, 11, 30, tzinfo=timezone.utc)
    assert activity.distance == 25000.5
    assert activity.total_elevation_gain == 310.0
    assert activity.start_latlng == (46.5, 7.1)
    assert activity.end_latlng is None
    assert activity.summary_polyline == "_p~iF~ps|U"


def test_from_payload_tolerates_missing_optionals():
    activity = Activity.from_payload({"id": 1, "start_date": "2024-01-01T00:00:00Z"})

    assert activity.name == ""
    assert activity.distance == 0.0
    assert activity.total_elevation_gain is None
    assert activity.summary_polyline is None


@pytest.mark.parametrize(
    "payload",
    [
        {"start_date": "2024-01-01T00:00:00Z"},
        {"id": 1},
        {"id": 1, "start_date": "yesterday"},
    ],
)
def test_from_payload_rejects_incomplete_records(payload):
    with pytest.raises(ValueError):
        Activity.from_payload(payload)
