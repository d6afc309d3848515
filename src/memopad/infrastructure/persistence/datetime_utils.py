"""Datetime utilities for persistence layer."""

from datetime import datetime, timezone


def normalize_to_utc(dt: datetime) -> datetime:
    """Ensure datetime is UTC and timezone-aware.

    SQLite stores datetimes without timezone info (CURRENT_TIMESTAMP is UTC).
    Naive datetimes are treated as UTC, aware ones are converted to UTC.

    Args:
        dt: datetime to process

    Returns:
        timezone-aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def coalesce_timestamp(value: datetime | str | None) -> datetime:
    """Turn a nullable stored timestamp into an aware UTC datetime.

    Args:
        value: datetime, ISO string, or None as returned by the store

    Returns:
        timezone-aware datetime in UTC; the current time when value is None
    """
    if value is None:
        return datetime.now(timezone.utc)
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return normalize_to_utc(value)
