"""Per learner-item scheduling state and its transition."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from .ease import DifficultyFactor
from .errors import InvalidStateError
from .interval import ReviewInterval
from .policy import get_policy
from .time import days_between, ensure_aware, minutes_between


@dataclass(frozen=True)
class SchedulingState:
    """Scheduling record for one learner-item pair at one point in time.

    Attributes:
        interval: Days between the last review and the next one
        difficulty_factor: Current ease of the item for this learner
        review_count: Number of reviews so far (0 for a never-reviewed item)
        last_reviewed_at: When the item was last reviewed, None if never
        next_review_at: When the item becomes due
        consecutive_failures: AGAIN reviews in a row, reset by any recall

    "Never reviewed", "due" and "not yet due" are derived from these fields;
    they are not stored.
    """

    interval: ReviewInterval
    difficulty_factor: DifficultyFactor
    review_count: int
    last_reviewed_at: datetime | None
    next_review_at: datetime
    consecutive_failures: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.interval, ReviewInterval):
            raise InvalidStateError("interval must be a ReviewInterval")
        if not isinstance(self.difficulty_factor, DifficultyFactor):
            raise InvalidStateError("difficulty_factor must be a DifficultyFactor")
        if isinstance(self.review_count, bool) or not isinstance(self.review_count, int):
            raise InvalidStateError(f"review_count must be an integer, got {self.review_count!r}")
        if self.review_count < 0:
            raise InvalidStateError(f"review_count must be >= 0, got {self.review_count}")
        if isinstance(self.consecutive_failures, bool) or not isinstance(self.consecutive_failures, int):
            raise InvalidStateError(
                f"consecutive_failures must be an integer, got {self.consecutive_failures!r}"
            )
        if not 0 <= self.consecutive_failures <= self.review_count:
            raise InvalidStateError(
                f"consecutive_failures must be between 0 and review_count ({self.review_count}), "
                f"got {self.consecutive_failures}"
            )
        if not isinstance(self.next_review_at, datetime):
            raise InvalidStateError("next_review_at must be a datetime")
        if self.last_reviewed_at is not None and not isinstance(self.last_reviewed_at, datetime):
            raise InvalidStateError("last_reviewed_at must be a datetime or None")
        if self.review_count == 0 and self.last_reviewed_at is not None:
            raise InvalidStateError("a never-reviewed item cannot have last_reviewed_at")
        if self.review_count > 0 and self.last_reviewed_at is None:
            raise InvalidStateError(
                f"last_reviewed_at is required once reviewed (review_count={self.review_count})"
            )

        object.__setattr__(self, "next_review_at", ensure_aware(self.next_review_at))
        if self.last_reviewed_at is not None:
            object.__setattr__(self, "last_reviewed_at", ensure_aware(self.last_reviewed_at))

    @classmethod
    def create(
        cls,
        interval: ReviewInterval,
        difficulty_factor: DifficultyFactor,
        review_count: int,
        last_reviewed_at: datetime | None,
        next_review_at: datetime,
        consecutive_failures: int = 0,
    ) -> SchedulingState:
        """Build a state from (possibly persisted) fields.

        Raises:
            InvalidStateError: If review_count, consecutive_failures and
                last_reviewed_at disagree
        """
        return cls(
            interval=interval,
            difficulty_factor=difficulty_factor,
            review_count=review_count,
            last_reviewed_at=last_reviewed_at,
            next_review_at=next_review_at,
            consecutive_failures=consecutive_failures,
        )

    @classmethod
    def initial(cls, seed_next_review_at: datetime) -> SchedulingState:
        """State of an item entering the review pool, due at the seed time."""
        return cls(
            interval=ReviewInterval.initial(),
            difficulty_factor=DifficultyFactor.default(),
            review_count=0,
            last_reviewed_at=None,
            next_review_at=seed_next_review_at,
        )

    def with_new_review(
        self,
        new_interval: ReviewInterval,
        new_difficulty_factor: DifficultyFactor,
        reviewed_at: datetime,
        *,
        failed: bool = False,
    ) -> SchedulingState:
        """Return the state after one more review. Never mutates self.

        A failed (AGAIN) review extends the failure streak; any other review
        ends it.
        """
        reviewed_at = ensure_aware(reviewed_at)
        return SchedulingState(
            interval=new_interval,
            difficulty_factor=new_difficulty_factor,
            review_count=self.review_count + 1,
            last_reviewed_at=reviewed_at,
            next_review_at=new_interval.get_next_review_date(reviewed_at),
            consecutive_failures=self.consecutive_failures + 1 if failed else 0,
        )

    def is_first_review(self) -> bool:
        return self.review_count == 0

    def is_due(self, now: datetime) -> bool:
        return ensure_aware(now) >= self.next_review_at

    def is_overdue(self, now: datetime) -> bool:
        """Strictly past due, beyond the policy's grace window."""
        grace = timedelta(minutes=get_policy().overdue_grace_minutes)
        return ensure_aware(now) > self.next_review_at + grace

    def days_since_last_review(self, now: datetime) -> float:
        if self.last_reviewed_at is None:
            return 0.0
        return max(0.0, days_between(self.last_reviewed_at, now))

    def minutes_until_due(self, now: datetime) -> int:
        """Whole minutes until due, rounded up; 0 once due."""
        return max(0, math.ceil(minutes_between(now, self.next_review_at)))

    def minutes_overdue(self, now: datetime) -> int:
        """Whole minutes past due; 0 unless overdue."""
        if not self.is_overdue(now):
            return 0
        return math.floor(minutes_between(self.next_review_at, now))

    def retention_probability(self, now: datetime) -> float:
        """Estimated chance the learner still remembers the item.

        Forgetting-curve approximation exp(-elapsed / interval), floored at the
        policy's min_retention_probability.
        """
        elapsed = self.days_since_last_review(now)
        if elapsed <= 0:
            return 1.0
        retention = math.exp(-elapsed / self.interval.days)
        return max(get_policy().min_retention_probability, min(1.0, retention))
