"""Tests for the encoded polyline codec."""

from __future__ import annotations

import polyline as reference
import pytest

from journey_map import polyline
from journey_map.errors import PolylineDecodeError

GOOGLE_EXAMPLE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
GOOGLE_POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]


def test_decode_known_example() -> None:
    assert polyline.decode(GOOGLE_EXAMPLE) == GOOGLE_POINTS


def test_encode_known_example() -> None:
    assert polyline.encode(GOOGLE_POINTS) == GOOGLE_EXAMPLE


def test_empty_inputs() -> None:
    assert polyline.decode("") == []
    assert polyline.encode([]) == ""


def test_fixture_polyline_decodes_to_capitals() -> None:
    assert polyline.decode("mock_polyline_data") == [
        (51.5074, -0.1278),
        (48.8566, 2.3522),
        (41.9028, 12.4964),
        (40.4168, -3.7038),
        (52.52, 13.405),
    ]


def test_round_trip_five_decimal_points() -> None:
    points = [
        (0.0, 0.0),
        (-33.86882, 151.20929),
        (64.14657, -21.94265),
        (-0.00001, 0.00001),
        (89.99999, -179.99999),
        (51.50735, -0.12776),
    ]
    assert polyline.decode(polyline.encode(points)) == points


@pytest.mark.parametrize(
    "points",
    [
        [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)],
        [(47.60621, -122.33207), (47.60622, -122.33209), (47.6, -122.3)],
    ],
)
def test_agrees_with_reference_library(points) -> None:
    encoded = polyline.encode(points)
    assert encoded == reference.encode(points, 5)
    assert polyline.decode(encoded) == reference.decode(encoded, 5)


@pytest.mark.parametrize("bad", ["_p~iF~ps|U_", "_p~iF", "abc\x10def"])
def test_malformed_input_raises(bad: str) -> None:
    with pytest.raises(PolylineDecodeError):
        polyline.decode(bad)
