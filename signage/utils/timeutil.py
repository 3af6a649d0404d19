"""Datetime helpers."""

from datetime import datetime, timezone


def as_utc(value: datetime) -> datetime:
    """SQLite hands datetimes back without tzinfo; they were written as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def isoformat(value: datetime | None) -> str | None:
    return as_utc(value).isoformat() if value else None
