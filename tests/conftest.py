"""Global pytest fixtures & helpers.

Adds project root to path and provides fake HTTP plumbing and activity
factories shared across test modules.
"""
from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from journey_map.models import Activity, Credentials
from journey_map.strava_client import pagination
from journey_map.strava_client.rate_limiter import RateLimiter


class FakeResp:
    """Minimal fake response matching needed parts of requests.Response."""

    def __init__(self, status_code=200, data=None, headers=None, text=None):
        self.status_code = status_code
        self._data = data
        self.headers = headers or {}
        self._text = text

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data

    @property
    def text(self):
        if self._text is not None:
            return self._text
        try:
            return json.dumps(self._data)
        except Exception:
            return str(self._data)


class FakeSession:
    """Record GET calls and answer them with ``handler(call_number, params)``."""

    def __init__(self, handler):
        self._handler = handler
        self.calls = []

    def get(self, url, headers=None, params=None, timeout=None):
        self.calls.append(
            {
                "url": url,
                "headers": dict(headers or {}),
                "params": dict(params or {}),
                "timeout": timeout,
            }
        )
        return self._handler(len(self.calls), dict(params or {}))


def make_payload(activity_id, start, **extra):
    """Return a Strava summary payload starting at ``start`` (datetime or ISO)."""

    if isinstance(start, datetime):
        start = start.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    payload = {
        "id": activity_id,
        "name": f"Activity {activity_id}",
        "type": "Ride",
        "sport_type": "Ride",
        "start_date": start,
        "distance": 1000.0,
        "elapsed_time": 600,
        "total_elevation_gain": 10.0,
    }
    payload.update(extra)
    return payload


def make_page(first_id, count, newest, step=timedelta(hours=1), **extra):
    """Build a newest-first page of ``count`` payloads."""

    return [
        make_payload(first_id + i, newest - step * i, **extra) for i in range(count)
    ]


def make_activity(activity_id=1, start="2024-01-01T10:00:00Z", **extra):
    return Activity.from_payload(make_payload(activity_id, start, **extra))


@pytest.fixture
def credentials():
    return Credentials(client_id="cid", client_secret="csec", refresh_token="rt1")


@pytest.fixture
def quiet_limiter():
    return RateLimiter(sleep=lambda _s: None)


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    monkeypatch.setattr(pagination.time, "sleep", lambda _s: None)
