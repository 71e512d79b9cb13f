"""Spaced-repetition scheduling engine (SM-2 family)."""

from .clock import Clock, FixedClock, SystemClock
from .ease import DifficultyFactor
from .errors import InvalidStateError, OutOfRangeError, ScheduleNotFoundError, SchedulingError
from .feedback import ReviewFeedback
from .interval import ReviewInterval
from .policy import SchedulingPolicy, get_policy
from .records import SchedulingStateRecord, from_record, to_record
from .repository import InMemoryScheduleRepository, ScheduleRepository
from .scheduler import Scheduler, adjust_for_late_review, next_interval, schedule, should_reset_interval
from .service import ReviewService
from .state import SchedulingState

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "DifficultyFactor",
    "InvalidStateError",
    "OutOfRangeError",
    "ScheduleNotFoundError",
    "SchedulingError",
    "ReviewFeedback",
    "ReviewInterval",
    "SchedulingPolicy",
    "get_policy",
    "SchedulingStateRecord",
    "from_record",
    "to_record",
    "InMemoryScheduleRepository",
    "ScheduleRepository",
    "Scheduler",
    "adjust_for_late_review",
    "next_interval",
    "schedule",
    "should_reset_interval",
    "ReviewService",
    "SchedulingState",
]
