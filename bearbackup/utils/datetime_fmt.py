"""Timestamp conversion and display helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

# Bear (Core Data) stores dates as seconds since 2001-01-01 00:00:00 UTC.
CORE_DATA_EPOCH = datetime(2001, 1, 1, tzinfo=timezone.utc)

_DISPLAY_FORMAT = "%Y-%m-%d %H:%M UTC"


def from_core_data_timestamp(seconds: float) -> datetime:
    """Convert a Core Data timestamp into an aware UTC ``datetime``."""

    return CORE_DATA_EPOCH + timedelta(seconds=seconds)


def to_user_friendly_utc(dt: datetime) -> str:
    """Format the provided aware ``datetime`` in UTC using a friendly format."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(_DISPLAY_FORMAT)
