"""Difficulty (ease) factor value type."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import OutOfRangeError
from .feedback import ReviewFeedback
from .policy import DifficultyLevel, get_policy


@dataclass(frozen=True, order=True)
class DifficultyFactor:
    """How easy an item has historically been for a learner.

    Always within [min_ease, max_ease]. Lower means harder. Instances are
    immutable; adjustments return a new factor.
    """

    value: float

    def __post_init__(self) -> None:
        value = self.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise OutOfRangeError(f"ease factor must be a number, got {type(value).__name__}")
        if not math.isfinite(value):
            raise OutOfRangeError(f"ease factor must be finite, got {value}")
        policy = get_policy()
        if not policy.min_ease <= value <= policy.max_ease:
            raise OutOfRangeError(
                f"ease factor {value} outside [{policy.min_ease}, {policy.max_ease}]"
            )
        object.__setattr__(self, "value", float(value))

    @classmethod
    def create(cls, value: float) -> DifficultyFactor:
        """Build a factor from a raw value.

        Raises:
            OutOfRangeError: If the value is not finite or outside policy bounds
        """
        return cls(value)

    @classmethod
    def default(cls) -> DifficultyFactor:
        return cls(get_policy().default_ease)

    @classmethod
    def minimum(cls) -> DifficultyFactor:
        return cls(get_policy().min_ease)

    @classmethod
    def clamped(cls, value: float) -> DifficultyFactor:
        """Build a factor from any finite value, clamping into policy bounds."""
        return cls(get_policy().clamp_ease(value))

    def adjust_for_feedback(self, feedback: ReviewFeedback) -> DifficultyFactor:
        """Apply the per-feedback ease delta, clamped into bounds.

        AGAIN and HARD subtract their penalty, EASY adds its bonus, GOOD leaves
        the value unchanged. The delta is applied exactly as configured. Never
        fails, so repeated AGAINs bottom out at min_ease.
        """
        policy = get_policy()
        deltas = {
            ReviewFeedback.AGAIN: -policy.again_ease_penalty,
            ReviewFeedback.HARD: -policy.hard_ease_penalty,
            ReviewFeedback.GOOD: 0.0,
            ReviewFeedback.EASY: policy.easy_ease_bonus,
        }
        return DifficultyFactor.clamped(self.value + deltas[ReviewFeedback.parse(feedback)])

    def penalize(self, amount: float) -> DifficultyFactor:
        """Lower the factor by a non-negative amount, clamped at min_ease."""
        if amount < 0:
            raise ValueError(f"penalty must be >= 0, got {amount}")
        return DifficultyFactor.clamped(self.value - amount)

    def get_difficulty_level(self) -> DifficultyLevel:
        return get_policy().classify_ease(self.value)

    def distance_from(self, other: DifficultyFactor) -> float:
        return abs(self.value - other.value)

    def is_harder_than(self, other: DifficultyFactor) -> bool:
        return self.value < other.value

    def __float__(self) -> float:
        return self.value
