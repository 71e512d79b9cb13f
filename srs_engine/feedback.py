"""Qualitative review feedback reported by a learner."""

from __future__ import annotations

from enum import Enum


class ReviewFeedback(str, Enum):
    """Outcome of a single review attempt.

    Values match the persisted grade strings ("again", "hard", "good", "easy").
    """

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @classmethod
    def parse(cls, value: "str | ReviewFeedback") -> "ReviewFeedback":
        """Parse a feedback value, case-insensitively.

        Raises:
            ValueError: If the value is not one of the four feedback tags
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"feedback must be a string, got {type(value).__name__}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            allowed = ", ".join(f.value for f in cls)
            raise ValueError(f"Unknown feedback {value!r}; expected one of: {allowed}") from None

    def is_again(self) -> bool:
        """Whether the item was forgotten."""
        return self is ReviewFeedback.AGAIN

    def is_success(self) -> bool:
        """Whether the item was recalled (any feedback other than AGAIN)."""
        return self is not ReviewFeedback.AGAIN
