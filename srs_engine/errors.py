"""Exceptions raised by the scheduling engine."""


class SchedulingError(Exception):
    """Base class for scheduling engine errors."""

    pass


class OutOfRangeError(SchedulingError, ValueError):
    """Raised when a difficulty factor or interval falls outside policy bounds."""

    pass


class InvalidStateError(SchedulingError, ValueError):
    """Raised when scheduling state fields are inconsistent with each other."""

    pass


class ScheduleNotFoundError(SchedulingError):
    """Raised when no scheduling state exists for a learner and item."""

    pass
