"""Review service: load, schedule and save under a per-item lock."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from .errors import ScheduleNotFoundError, SchedulingError
from .feedback import ReviewFeedback
from .repository import InMemoryScheduleRepository, ScheduleRepository
from .scheduler import Scheduler
from .state import SchedulingState

logger = logging.getLogger(__name__)


@dataclass
class _KeyLock:
    """Lock for one (student_id, item_id) and the number of callers holding or awaiting it."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class ReviewService:
    """Applies review submissions to stored scheduling states.

    Submissions for the same (student_id, item_id) are serialised so two
    concurrent reviews cannot both start from the same previous state.
    Different keys proceed in parallel. A key's lock only exists while a
    call for that key is in progress.
    """

    def __init__(
        self,
        repository: ScheduleRepository | None = None,
        scheduler: Scheduler | None = None,
    ):
        self._repository = repository if repository is not None else InMemoryScheduleRepository()
        self._scheduler = scheduler or Scheduler()
        self._key_locks: dict[tuple[str, str], _KeyLock] = {}
        self._key_locks_guard = threading.Lock()

    @property
    def repository(self) -> ScheduleRepository:
        return self._repository

    @contextmanager
    def _locked(self, student_id: str, item_id: str) -> Iterator[None]:
        key = (student_id, item_id)
        with self._key_locks_guard:
            entry = self._key_locks.get(key)
            if entry is None:
                entry = _KeyLock()
                self._key_locks[key] = entry
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._key_locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._key_locks[key]

    def _load(self, student_id: str, item_id: str) -> SchedulingState | None:
        try:
            return self._repository.load(student_id, item_id)
        except SchedulingError as e:
            logger.warning(
                "Rejected stored schedule for student=%s item=%s: %s", student_id, item_id, e
            )
            raise

    def enroll(self, student_id: str, item_id: str) -> SchedulingState:
        """Add an item to a student's review pool, due now.

        An already enrolled item keeps its existing state.
        """
        with self._locked(student_id, item_id):
            existing = self._load(student_id, item_id)
            if existing is not None:
                return existing
            state = SchedulingState.initial(self._scheduler.clock.now())
            self._repository.save(student_id, item_id, state)
            logger.info("Enrolled item %s for student %s", item_id, student_id)
            return state

    def submit_review(
        self,
        student_id: str,
        item_id: str,
        feedback: ReviewFeedback | str,
    ) -> SchedulingState:
        """Record a review and persist the resulting state.

        An item with no stored state is treated as a first-ever review.
        """
        feedback = ReviewFeedback.parse(feedback)
        with self._locked(student_id, item_id):
            previous = self._load(student_id, item_id)
            state = self._scheduler.schedule(previous, feedback)
            self._repository.save(student_id, item_id, state)

        logger.info(
            "Review recorded: student=%s item=%s feedback=%s interval=%d days next=%s",
            student_id,
            item_id,
            feedback.value,
            state.interval.days,
            state.next_review_at.isoformat(),
        )
        return state

    def get_state(self, student_id: str, item_id: str) -> SchedulingState:
        state = self._load(student_id, item_id)
        if state is None:
            raise ScheduleNotFoundError(f"No schedule for item {item_id} (student {student_id})")
        return state

    def due_items(self, student_id: str, limit: int = 20) -> list[tuple[str, SchedulingState]]:
        """Items due for the student right now, oldest due first."""
        return self._repository.find_due(student_id, self._scheduler.clock.now(), limit)
