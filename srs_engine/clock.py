"""Clock abstraction injected into the review service."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol

from .time import ensure_aware, utc_now


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock UTC time, truncated to whole seconds.

    Due dates then fall on whole seconds and persist in the short ISO-Z form.
    """

    def now(self) -> datetime:
        return utc_now().replace(microsecond=0)


class FixedClock:
    """A clock that only moves when told to (tests, replays)."""

    def __init__(self, current: datetime):
        self._current = ensure_aware(current)

    def now(self) -> datetime:
        return self._current

    def set_time(self, current: datetime) -> None:
        self._current = ensure_aware(current)

    def advance(self, *, days: float = 0, hours: float = 0, minutes: float = 0) -> datetime:
        """Move the clock forward and return the new time."""
        self._current = self._current + timedelta(days=days, hours=hours, minutes=minutes)
        return self._current
