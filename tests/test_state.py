"""Unit tests for scheduling state."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from srs_engine.ease import DifficultyFactor
from srs_engine.errors import InvalidStateError
from srs_engine.interval import ReviewInterval
from srs_engine.state import SchedulingState


def make_state(now, *, days=7, ease=2.5, review_count=3):
    last = now - timedelta(days=days)
    return SchedulingState.create(
        interval=ReviewInterval.create(days),
        difficulty_factor=DifficultyFactor.create(ease),
        review_count=review_count,
        last_reviewed_at=last,
        next_review_at=last + timedelta(days=days),
    )


class TestCreate:
    def test_initial_state(self, now, default_policy):
        state = SchedulingState.initial(now)
        assert state.review_count == 0
        assert state.last_reviewed_at is None
        assert state.next_review_at == now
        assert state.interval.days == default_policy.initial_interval_days
        assert state.difficulty_factor.value == default_policy.default_ease
        assert state.is_first_review()

    def test_reviewed_without_timestamp_is_invalid(self, now):
        with pytest.raises(InvalidStateError, match="last_reviewed_at is required"):
            SchedulingState.create(
                interval=ReviewInterval.create(3),
                difficulty_factor=DifficultyFactor.default(),
                review_count=2,
                last_reviewed_at=None,
                next_review_at=now,
            )

    def test_never_reviewed_with_timestamp_is_invalid(self, now):
        with pytest.raises(InvalidStateError, match="never-reviewed"):
            SchedulingState.create(
                interval=ReviewInterval.initial(),
                difficulty_factor=DifficultyFactor.default(),
                review_count=0,
                last_reviewed_at=now,
                next_review_at=now,
            )

    @pytest.mark.parametrize("count", [-1, 1.0, True])
    def test_bad_review_count_is_invalid(self, now, count):
        with pytest.raises(InvalidStateError, match="review_count"):
            SchedulingState.create(
                interval=ReviewInterval.initial(),
                difficulty_factor=DifficultyFactor.default(),
                review_count=count,
                last_reviewed_at=now,
                next_review_at=now,
            )

    @pytest.mark.parametrize("failures", [-1, 4, True])
    def test_bad_consecutive_failures_is_invalid(self, now, failures):
        with pytest.raises(InvalidStateError, match="consecutive_failures"):
            SchedulingState.create(
                interval=ReviewInterval.initial(),
                difficulty_factor=DifficultyFactor.default(),
                review_count=3,
                last_reviewed_at=now,
                next_review_at=now,
                consecutive_failures=failures,
            )

    def test_raw_values_are_rejected(self, now):
        with pytest.raises(InvalidStateError, match="interval"):
            SchedulingState.create(
                interval=3,
                difficulty_factor=DifficultyFactor.default(),
                review_count=0,
                last_reviewed_at=None,
                next_review_at=now,
            )

    def test_naive_timestamps_become_utc(self):
        state = SchedulingState.initial(datetime(2024, 1, 1, 9, 0))
        assert state.next_review_at.tzinfo is not None
        assert state.next_review_at == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def test_is_immutable(self, now):
        state = SchedulingState.initial(now)
        with pytest.raises(AttributeError):
            state.review_count = 5


class TestWithNewReview:
    def test_transition(self, now):
        state = SchedulingState.initial(now)
        interval = ReviewInterval.create(3)
        ease = DifficultyFactor.create(2.5)

        new_state = state.with_new_review(interval, ease, now)

        assert new_state.review_count == 1
        assert new_state.last_reviewed_at == now
        assert new_state.interval is interval
        assert new_state.difficulty_factor is ease
        assert new_state.next_review_at == now + timedelta(days=3)
        assert state.review_count == 0

    def test_count_increments_by_one_each_time(self, now):
        state = SchedulingState.initial(now)
        for expected in range(1, 6):
            state = state.with_new_review(ReviewInterval.initial(), DifficultyFactor.default(), now)
            assert state.review_count == expected

    def test_failure_streak(self, now):
        state = SchedulingState.initial(now)
        ease = DifficultyFactor.default()
        for expected in (1, 2):
            state = state.with_new_review(ReviewInterval.initial(), ease, now, failed=True)
            assert state.consecutive_failures == expected
        state = state.with_new_review(ReviewInterval.initial(), ease, now)
        assert state.consecutive_failures == 0


class TestDuePredicates:
    def test_due_boundaries(self, now):
        state = make_state(now, days=7)
        due_at = state.next_review_at
        assert not state.is_due(due_at - timedelta(seconds=1))
        assert state.is_due(due_at)
        assert state.is_due(due_at + timedelta(hours=1))

    def test_overdue_is_strict(self, now):
        state = make_state(now, days=7)
        due_at = state.next_review_at
        assert not state.is_overdue(due_at - timedelta(hours=1))
        assert not state.is_overdue(due_at)
        assert state.is_overdue(due_at + timedelta(hours=1))

    def test_overdue_grace_window(self, now, override_policy):
        override_policy(overdue_grace_minutes=60)
        state = make_state(now, days=7)
        due_at = state.next_review_at
        assert state.is_due(due_at + timedelta(minutes=30))
        assert not state.is_overdue(due_at + timedelta(minutes=60))
        assert state.is_overdue(due_at + timedelta(minutes=61))

    def test_minutes_until_due(self, now):
        state = SchedulingState.initial(now + timedelta(hours=2))
        assert state.minutes_until_due(now) == 120
        assert state.minutes_until_due(now + timedelta(minutes=119, seconds=30)) == 1
        assert state.minutes_until_due(now + timedelta(hours=3)) == 0

    def test_minutes_overdue(self, now):
        state = SchedulingState.initial(now)
        assert state.minutes_overdue(now - timedelta(minutes=5)) == 0
        assert state.minutes_overdue(now) == 0
        assert state.minutes_overdue(now + timedelta(hours=25)) == 25 * 60


class TestElapsed:
    def test_days_since_last_review(self, now):
        state = make_state(now, days=7)
        assert state.days_since_last_review(now) == pytest.approx(7.0)
        assert state.days_since_last_review(now + timedelta(hours=12)) == pytest.approx(7.5)

    def test_days_since_last_review_never_reviewed(self, now):
        assert SchedulingState.initial(now).days_since_last_review(now + timedelta(days=3)) == 0.0

    def test_retention_decreases_over_time(self, now):
        state = make_state(now, days=7)
        at_due = state.retention_probability(now)
        a_day_later = state.retention_probability(now + timedelta(days=1))
        assert at_due > a_day_later
        assert at_due == pytest.approx(math.exp(-1))

    def test_retention_bounds(self, now, default_policy):
        state = make_state(now, days=1)
        assert state.retention_probability(state.last_reviewed_at) == 1.0
        assert state.retention_probability(now + timedelta(days=30)) == default_policy.min_retention_probability
        assert SchedulingState.initial(now).retention_probability(now) == 1.0
