"""Scheduling policy: every tunable constant of the engine.

Values are process-wide and fixed at configuration time. Each field can be
overridden from the environment as ``SRS_<FIELD_NAME>``, for example
``SRS_MAX_INTERVAL_DAYS=180``.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, model_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "SRS_"

DifficultyLevel = Literal["easy", "medium", "hard"]
IntervalLevel = Literal["short", "medium", "long"]


class SchedulingPolicy(BaseModel):
    """Bounds, defaults and per-feedback deltas for ease and interval."""

    model_config = ConfigDict(frozen=True)

    # Difficulty factor
    min_ease: float = 1.3
    default_ease: float = 2.5
    max_ease: float = 4.0
    again_ease_penalty: float = 0.20
    hard_ease_penalty: float = 0.15
    easy_ease_bonus: float = 0.15

    # Interval (days)
    min_interval_days: int = 1
    initial_interval_days: int = 1
    max_interval_days: int = 365
    hard_interval_multiplier: float = 0.5
    easy_interval_bonus: float = 1.3

    # Display bands (not used by the transition math)
    beginner_ease_threshold: float = 2.5
    intermediate_ease_threshold: float = 2.0
    short_interval_max_days: int = 3
    medium_interval_max_days: int = 30

    # Due / overdue
    overdue_grace_minutes: int = 0
    min_retention_probability: float = 0.1

    # Late review
    late_review_penalty_enabled: bool = False
    late_review_ease_penalty_per_day: float = 0.05
    late_review_max_ease_penalty: float = 0.3

    # Lapses
    consecutive_failure_reset_threshold: int = 3

    @model_validator(mode="after")
    def check_bounds(self) -> "SchedulingPolicy":
        if not 1.0 <= self.min_ease <= self.default_ease <= self.max_ease:
            raise ValueError("ease bounds must satisfy 1 <= min_ease <= default_ease <= max_ease")
        if not 1 <= self.min_interval_days <= self.initial_interval_days <= self.max_interval_days:
            raise ValueError(
                "interval bounds must satisfy 1 <= min_interval_days <= initial_interval_days <= max_interval_days"
            )
        if min(self.again_ease_penalty, self.hard_ease_penalty, self.easy_ease_bonus) < 0:
            raise ValueError("ease penalties and bonus must be non-negative")
        if not 0 < self.hard_interval_multiplier < 1:
            raise ValueError("hard_interval_multiplier must be between 0 and 1 (exclusive)")
        if self.easy_interval_bonus < 1:
            raise ValueError("easy_interval_bonus must be >= 1")
        if self.intermediate_ease_threshold > self.beginner_ease_threshold:
            raise ValueError("intermediate_ease_threshold must not exceed beginner_ease_threshold")
        if self.short_interval_max_days > self.medium_interval_max_days:
            raise ValueError("short_interval_max_days must not exceed medium_interval_max_days")
        if self.overdue_grace_minutes < 0:
            raise ValueError("overdue_grace_minutes must be >= 0")
        if not 0 <= self.min_retention_probability <= 1:
            raise ValueError("min_retention_probability must be between 0 and 1")
        if self.late_review_ease_penalty_per_day < 0 or self.late_review_max_ease_penalty < 0:
            raise ValueError("late review penalties must be non-negative")
        if self.consecutive_failure_reset_threshold < 1:
            raise ValueError("consecutive_failure_reset_threshold must be >= 1")
        return self

    def clamp_ease(self, value: float) -> float:
        return min(self.max_ease, max(self.min_ease, value))

    def clamp_interval_days(self, days: int) -> int:
        return min(self.max_interval_days, max(self.min_interval_days, days))

    def classify_ease(self, value: float) -> DifficultyLevel:
        """Band an ease value: thresholds are checked in order, first match wins."""
        if value >= self.beginner_ease_threshold:
            return "easy"
        if value >= self.intermediate_ease_threshold:
            return "medium"
        return "hard"

    def classify_interval(self, days: int) -> IntervalLevel:
        if days <= self.short_interval_max_days:
            return "short"
        if days <= self.medium_interval_max_days:
            return "medium"
        return "long"


def _env_overrides() -> dict[str, str]:
    overrides = {}
    for name in SchedulingPolicy.model_fields:
        value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    return overrides


@lru_cache()
def get_policy() -> SchedulingPolicy:
    """Get the cached scheduling policy, applying environment overrides."""
    load_dotenv()
    overrides = _env_overrides()
    if overrides:
        logger.info("Scheduling policy overrides from environment: %s", ", ".join(sorted(overrides)))
    return SchedulingPolicy(**overrides)
