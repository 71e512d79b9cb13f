"""Review interval value type (whole days until the next review)."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from .errors import OutOfRangeError
from .policy import IntervalLevel, get_policy
from .time import add_calendar_days


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves up (built-in round() rounds half to even)."""
    return math.floor(x + 0.5)


@dataclass(frozen=True, order=True)
class ReviewInterval:
    """Number of days until an item is due again.

    Always an integer within [min_interval_days, max_interval_days].
    """

    days: int

    def __post_init__(self) -> None:
        days = self.days
        if isinstance(days, bool) or not isinstance(days, int):
            raise OutOfRangeError(f"interval must be a whole number of days, got {days!r}")
        policy = get_policy()
        if not policy.min_interval_days <= days <= policy.max_interval_days:
            raise OutOfRangeError(
                f"interval {days} days outside [{policy.min_interval_days}, {policy.max_interval_days}]"
            )

    @classmethod
    def create(cls, days: int) -> ReviewInterval:
        """Build an interval from a whole number of days.

        Raises:
            OutOfRangeError: If days is not an integer within policy bounds
        """
        return cls(days)

    @classmethod
    def initial(cls) -> ReviewInterval:
        return cls(get_policy().initial_interval_days)

    @classmethod
    def clamped(cls, days: int) -> ReviewInterval:
        """Build an interval from any integer, clamping into policy bounds."""
        return cls(get_policy().clamp_interval_days(int(days)))

    @property
    def hours(self) -> int:
        return self.days * 24

    @property
    def minutes(self) -> int:
        return self.days * 24 * 60

    def multiply_by(self, factor: float) -> ReviewInterval:
        """Scale by a factor, rounding half up and flooring at one day.

        Raises:
            OutOfRangeError: If the rounded result is still out of bounds
        """
        return ReviewInterval(self._scaled_days(factor))

    def multiply_by_clamped(self, factor: float) -> ReviewInterval:
        """Scale like multiply_by, but clamp into bounds instead of failing."""
        return ReviewInterval.clamped(self._scaled_days(factor))

    def _scaled_days(self, factor: float) -> int:
        if not math.isfinite(factor) or factor < 0:
            raise ValueError(f"interval factor must be a finite non-negative number, got {factor}")
        return max(1, round_half_up(self.days * factor))

    def add_days(self, n: int) -> ReviewInterval:
        """Raises OutOfRangeError if the sum leaves policy bounds."""
        return ReviewInterval(self.days + n)

    def min(self, other: ReviewInterval) -> ReviewInterval:
        return other if other.days < self.days else self

    def max(self, other: ReviewInterval) -> ReviewInterval:
        return other if other.days > self.days else self

    def get_next_review_date(self, from_: datetime) -> datetime:
        """The due time: `from_` plus this many calendar days, same time of day."""
        return add_calendar_days(from_, self.days)

    def get_interval_level(self) -> IntervalLevel:
        return get_policy().classify_interval(self.days)

    def ratio_to(self, other: ReviewInterval) -> float:
        return self.days / other.days

    def __int__(self) -> int:
        return self.days
