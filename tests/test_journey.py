"""Tests for the pipeline entry point and its fallback dataset."""

from __future__ import annotations

import pytest

from conftest import FakeResp, FakeSession, make_activity, make_payload
from journey_map import config, journey, polyline
from journey_map.errors import ConfigError, StravaAuthError, StravaTransportError
from journey_map.strava_client import ActivitiesAPI, TokenManager


class StubClient:
    def __init__(self, result=None, error=None):
        self.result = result or []
        self.error = error
        self.calls = []

    def get_all_activities_after(self, after, activity_types=None, *, deadline_seconds=None):
        self.calls.append((after, activity_types, deadline_seconds))
        if self.error is not None:
            raise self.error
        return self.result


def test_fallback_dataset_is_fixed():
    activities = journey.fallback_activities()

    assert [a.id for a in activities] == [1, 2, 3]
    assert [a.type for a in activities] == ["Run", "Ride", "Hike"]
    assert [a.distance for a in activities] == [5000, 15000, 8000]
    assert [a.start_date.isoformat() for a in activities] == [
        "2023-01-05T08:00:00+00:00",
        "2023-01-07T18:00:00+00:00",
        "2023-01-14T10:00:00+00:00",
    ]
    assert {a.summary_polyline for a in activities} == {polyline.FIXTURE_POLYLINE}


def test_missing_credentials_use_fallback(monkeypatch):
    monkeypatch.setattr(config, "CLIENT_ID", "")
    monkeypatch.setattr(config, "CLIENT_SECRET", "secret")
    monkeypatch.setattr(config, "REFRESH_TOKEN", "")

    with pytest.raises(ConfigError) as excinfo:
        journey.load_credentials()
    assert "STRAVA_CLIENT_ID" in str(excinfo.value)
    assert "STRAVA_REFRESH_TOKEN" in str(excinfo.value)

    result = journey.get_journey_activities("2023-01-01T00:00:00Z")
    assert result.source == journey.SOURCE_FALLBACK
    assert result.is_fallback
    assert "Missing Strava credentials" in result.error
    assert len(result.activities) == 3


@pytest.mark.parametrize(
    "error", [StravaAuthError("expired"), StravaTransportError("offline")]
)
def test_fetch_errors_use_fallback(error):
    result = journey.get_journey_activities(
        "2023-01-01T00:00:00Z", client=StubClient(error=error)
    )

    assert result.source == journey.SOURCE_FALLBACK
    assert result.error == str(error)
    assert [a.id for a in result.activities] == [1, 2, 3]


def test_live_activities_are_flagged_live():
    live = [make_activity(9, "2024-05-01T10:00:00Z")]
    client = StubClient(result=live)

    result = journey.get_journey_activities(
        "2024-01-01T00:00:00Z", client=client, activity_types=["Ride"]
    )

    assert result.source == journey.SOURCE_LIVE
    assert result.error is None
    assert result.activities == tuple(live)
    assert client.calls[0][1] == ["Ride"]


def test_fallback_journey_map():
    journey_map = journey.build_journey_map(
        journey.get_journey_activities(
            "2023-01-01T00:00:00Z", client=StubClient(error=StravaAuthError("nope"))
        )
    )

    assert len(journey_map.features) == 3
    assert journey_map.features.features[0].coordinates[0] == (-0.1278, 51.5074)
    assert journey_map.bounds.as_list() == [-3.7038, 40.4168, 13.405, 52.52]
    assert journey_map.stats.total_distance == 28000
    assert journey_map.stats.type_counts == {"Run": 1, "Ride": 1, "Hike": 1}

    payload = journey_map.to_dict()
    assert payload["source"] == "fallback"
    assert payload["bounds"] == [-3.7038, 40.4168, 13.405, 52.52]
    assert len(payload["features"]["features"]) == 3


def test_stats_count_activities_without_geometry():
    activities = (
        make_activity(1, "2024-01-02T00:00:00Z", distance=1000),
        make_activity(
            2, "2024-01-03T00:00:00Z", distance=2000, map={"summary_polyline": "_p~iF"}
        ),
        make_activity(3, "2023-06-01T00:00:00Z", distance=4000),
    )
    journey_map = journey.build_journey_map(
        journey.JourneyActivities(
            activities=activities, start_date="2024-01-01T00:00:00Z", source="live"
        )
    )

    assert len(journey_map.features) == 0
    assert journey_map.bounds is None
    assert journey_map.stats.activity_count == 2
    assert journey_map.stats.total_distance == 3000


def test_broken_route_is_reported_once(caplog):
    activities = (
        make_activity(
            5, "2024-01-03T00:00:00Z", map={"summary_polyline": "_p~iF"}
        ),
    )

    with caplog.at_level("WARNING", logger="journey_map.processor"):
        journey.build_journey_map(
            journey.JourneyActivities(
                activities=activities, start_date="2024-01-01T00:00:00Z", source="live"
            )
        )

    dropped = [r for r in caplog.records if "Dropping route" in r.getMessage()]
    assert len(dropped) == 1
    assert dropped[0].levelname == "WARNING"


def test_non_object_page_entry_keeps_live_data(credentials, quiet_limiter):
    page = [make_payload(1, "2024-02-01T10:00:00Z"), "garbage", None]
    session = FakeSession(lambda _n, _p: FakeResp(200, data=page))
    client = ActivitiesAPI(
        TokenManager(credentials, access_token="tok"), session=session, limiter=quiet_limiter
    )

    result = journey.get_journey_activities("2024-01-01T00:00:00Z", client=client)

    assert result.source == journey.SOURCE_LIVE
    assert [a.id for a in result.activities] == [1]
