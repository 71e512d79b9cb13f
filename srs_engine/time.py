"""Time helpers for scheduling.

ISO strings produced by this module are UTC and end with 'Z': YYYY-MM-DDTHH:MM:SSZ,
or YYYY-MM-DDTHH:MM:SS.ffffffZ when fractional seconds are kept.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC 'now'."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; aware datetimes are returned unchanged."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def utc_datetime_to_iso_z(dt: datetime, *, keep_microseconds: bool = False) -> str:
    """Format a datetime as UTC ISO string with trailing 'Z'.

    Second precision by default; with keep_microseconds, fractional seconds
    are written whenever the datetime has them.
    """
    dt = ensure_aware(dt).astimezone(timezone.utc)
    if not keep_microseconds:
        dt = dt.replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


def parse_iso_z(s: str) -> datetime:
    """Parse an ISO-8601 string ending with 'Z' (or '+00:00') into UTC datetime.

    Accepts both second precision and fractional seconds.
    """
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    return ensure_aware(dt).astimezone(timezone.utc)


def add_calendar_days(start: datetime, days: int) -> datetime:
    """Add whole calendar days, keeping the wall-clock time of day.

    Aware arithmetic in Python is wall-clock arithmetic within the same tzinfo,
    so a zoneinfo-aware start keeps its local time across DST changes.
    """
    return ensure_aware(start) + timedelta(days=days)


def minutes_between(start: datetime, end: datetime) -> float:
    """Elapsed minutes from start to end (negative when end is earlier)."""
    return (ensure_aware(end) - ensure_aware(start)).total_seconds() / 60


def days_between(start: datetime, end: datetime) -> float:
    """Elapsed days from start to end (negative when end is earlier)."""
    return minutes_between(start, end) / (24 * 60)
