"""SM-2 style scheduling: derive the next state from feedback.

Rules (constants come from SchedulingPolicy):
- ease' = ease - again_ease_penalty (AGAIN), - hard_ease_penalty (HARD),
  unchanged (GOOD), + easy_ease_bonus (EASY); clamped to [min_ease, max_ease]
- AGAIN: interval' = initial_interval_days
- HARD:  interval' = interval * hard_interval_multiplier
- GOOD:  interval' = interval * ease'
- EASY:  interval' = interval * ease' * easy_interval_bonus
- every interval is rounded half up and clamped to [min_interval_days, max_interval_days]
- consecutive_failure_reset_threshold AGAINs in a row: ease' = min_ease
- next_review_at = reviewed_at + interval' calendar days
"""

from __future__ import annotations

import logging
import math
from datetime import datetime

from .clock import Clock, SystemClock
from .ease import DifficultyFactor
from .feedback import ReviewFeedback
from .interval import ReviewInterval
from .policy import get_policy
from .state import SchedulingState
from .time import days_between, ensure_aware

logger = logging.getLogger(__name__)


def next_interval(
    previous: ReviewInterval,
    feedback: ReviewFeedback,
    new_ease: DifficultyFactor,
) -> ReviewInterval:
    """Derive the next interval from the previous one and the adjusted ease."""
    policy = get_policy()
    feedback = ReviewFeedback.parse(feedback)

    if feedback is ReviewFeedback.AGAIN:
        return ReviewInterval.initial()
    if feedback is ReviewFeedback.HARD:
        return previous.multiply_by_clamped(policy.hard_interval_multiplier)
    if feedback is ReviewFeedback.GOOD:
        return previous.multiply_by_clamped(new_ease.value)
    if feedback is ReviewFeedback.EASY:
        grown = previous.multiply_by_clamped(new_ease.value)
        return grown.multiply_by_clamped(policy.easy_interval_bonus)
    raise ValueError(f"Unhandled feedback: {feedback!r}")


def adjust_for_late_review(state: SchedulingState, reviewed_at: datetime) -> DifficultyFactor:
    """Ease after penalising a review that happened after the item was due.

    The penalty grows per whole day late and is capped by
    late_review_max_ease_penalty. On-time, early and first reviews are not
    penalised.

    Only the ease factor is adjusted. The interval is left to next_interval,
    which grows the previous interval by the penalised ease as usual.
    """
    if state.is_first_review():
        return state.difficulty_factor

    days_late = math.floor(days_between(state.next_review_at, reviewed_at))
    if days_late <= 0:
        return state.difficulty_factor

    policy = get_policy()
    penalty = min(policy.late_review_max_ease_penalty, days_late * policy.late_review_ease_penalty_per_day)
    return state.difficulty_factor.penalize(penalty)


def should_reset_interval(consecutive_failures: int) -> bool:
    """Whether a run of AGAIN reviews is long enough to reset the item.

    A reset item restarts from the initial interval at min_ease.
    """
    return consecutive_failures >= get_policy().consecutive_failure_reset_threshold


def schedule(
    previous: SchedulingState | None,
    feedback: ReviewFeedback | str,
    now: datetime,
) -> SchedulingState:
    """Apply one review to the previous state and return the next state.

    A missing previous state is treated as a brand-new item due now.

    Raises:
        ValueError: If feedback is not a recognised feedback value
    """
    feedback = ReviewFeedback.parse(feedback)
    now = ensure_aware(now)
    if previous is None:
        previous = SchedulingState.initial(now)

    ease = previous.difficulty_factor
    if get_policy().late_review_penalty_enabled:
        ease = adjust_for_late_review(previous, now)

    failed = feedback.is_again()
    new_ease = ease.adjust_for_feedback(feedback)
    new_interval = next_interval(previous.interval, feedback, new_ease)
    if failed and should_reset_interval(previous.consecutive_failures + 1):
        logger.debug("Resetting item after %d consecutive failures", previous.consecutive_failures + 1)
        new_ease = DifficultyFactor.minimum()
        new_interval = ReviewInterval.initial()
    state = previous.with_new_review(new_interval, new_ease, now, failed=failed)

    logger.debug(
        "Scheduled review: feedback=%s ease %.2f -> %.2f interval %d -> %d days, count=%d",
        feedback.value,
        previous.difficulty_factor.value,
        new_ease.value,
        previous.interval.days,
        new_interval.days,
        state.review_count,
    )
    return state


class Scheduler:
    """Scheduling service bound to a clock."""

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()

    @property
    def clock(self) -> Clock:
        return self._clock

    def schedule(
        self,
        previous: SchedulingState | None,
        feedback: ReviewFeedback | str,
        now: datetime | None = None,
    ) -> SchedulingState:
        """Schedule at `now`, or at the clock's current time when omitted."""
        return schedule(previous, feedback, now if now is not None else self._clock.now())

