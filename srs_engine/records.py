"""Persisted form of SchedulingState."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .ease import DifficultyFactor
from .interval import ReviewInterval
from .state import SchedulingState
from .time import parse_iso_z, utc_datetime_to_iso_z


class SchedulingStateRecord(BaseModel):
    """SchedulingState as stored by a repository (camelCase, ISO-Z timestamps).

    Timestamps keep fractional seconds when the state has them.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "intervalDays": 6,
                "easeFactor": 2.5,
                "reviewCount": 2,
                "consecutiveFailures": 0,
                "lastReviewedAt": "2025-01-01T09:00:00Z",
                "nextReviewAt": "2025-01-07T09:00:00Z",
            }
        }
    )

    intervalDays: int = Field(..., description="Interval in whole days")
    easeFactor: float = Field(..., description="Difficulty (ease) factor")
    reviewCount: int = Field(0, description="Number of completed reviews")
    consecutiveFailures: int = Field(0, description="AGAIN reviews in a row, 0 after any recall")
    lastReviewedAt: str | None = Field(None, description="Last review timestamp (UTC ISO Z)")
    nextReviewAt: str = Field(..., description="Next due timestamp (UTC ISO Z)")


def to_record(state: SchedulingState) -> SchedulingStateRecord:
    last_reviewed_at = None
    if state.last_reviewed_at is not None:
        last_reviewed_at = utc_datetime_to_iso_z(state.last_reviewed_at, keep_microseconds=True)

    return SchedulingStateRecord(
        intervalDays=state.interval.days,
        easeFactor=state.difficulty_factor.value,
        reviewCount=state.review_count,
        consecutiveFailures=state.consecutive_failures,
        lastReviewedAt=last_reviewed_at,
        nextReviewAt=utc_datetime_to_iso_z(state.next_review_at, keep_microseconds=True),
    )


def from_record(record: SchedulingStateRecord | dict[str, Any]) -> SchedulingState:
    """Rehydrate a state, re-validating every field.

    Corrupted values are reported, never coerced.

    Raises:
        pydantic.ValidationError: If the record is structurally invalid
        OutOfRangeError: If the interval or ease factor is outside policy bounds
        InvalidStateError: If the review and failure counters disagree with
            each other or with lastReviewedAt
    """
    if not isinstance(record, SchedulingStateRecord):
        record = SchedulingStateRecord.model_validate(record)

    return SchedulingState.create(
        interval=ReviewInterval.create(record.intervalDays),
        difficulty_factor=DifficultyFactor.create(record.easeFactor),
        review_count=record.reviewCount,
        last_reviewed_at=parse_iso_z(record.lastReviewedAt) if record.lastReviewedAt is not None else None,
        next_review_at=parse_iso_z(record.nextReviewAt),
        consecutive_failures=record.consecutiveFailures,
    )
