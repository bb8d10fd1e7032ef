"""General utility helpers shared across modules."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

DateLike = Union[datetime, str]


def to_utc_aware(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: DateLike) -> datetime:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into an aware UTC datetime.

    Raises:
        ValueError: If ``value`` is empty or not ISO-8601.
    """

    if isinstance(value, datetime):
        return to_utc_aware(value)
    if not value:
        raise ValueError("Empty datetime value")
    return to_utc_aware(datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")))


def to_epoch_seconds(value: Union[DateLike, int, float]) -> int:
    """Return whole epoch seconds for a datetime, ISO string or number."""

    if isinstance(value, (int, float)):
        return int(value)
    return int(parse_datetime(value).timestamp())
