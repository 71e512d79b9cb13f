"""Scheduling state repositories."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Protocol

from .records import SchedulingStateRecord, from_record, to_record
from .state import SchedulingState
from .time import ensure_aware, parse_iso_z


class ScheduleRepository(Protocol):
    """Storage contract for scheduling states keyed by (student_id, item_id)."""

    def load(self, student_id: str, item_id: str) -> SchedulingState | None:
        ...

    def save(self, student_id: str, item_id: str, state: SchedulingState) -> None:
        ...

    def find_due(self, student_id: str, now: datetime, limit: int) -> list[tuple[str, SchedulingState]]:
        ...


class InMemoryScheduleRepository:
    """Thread-safe in-process repository.

    Stores records rather than live objects so every load goes through the
    same validation as data read from a database.
    """

    def __init__(self):
        self._records: dict[tuple[str, str], dict] = {}
        self._lock = threading.Lock()

    def _make_key(self, student_id: str, item_id: str) -> tuple[str, str]:
        return (student_id, item_id)

    def load(self, student_id: str, item_id: str) -> SchedulingState | None:
        """Return the stored state, or None if the item was never scheduled."""
        with self._lock:
            item = self._records.get(self._make_key(student_id, item_id))
        if item is None:
            return None
        return from_record(item)

    def save(self, student_id: str, item_id: str, state: SchedulingState) -> None:
        item = to_record(state).model_dump()
        with self._lock:
            self._records[self._make_key(student_id, item_id)] = item

    def save_record(self, student_id: str, item_id: str, record: SchedulingStateRecord | dict) -> None:
        """Store a raw record as-is (e.g. when importing existing data)."""
        if isinstance(record, SchedulingStateRecord):
            record = record.model_dump()
        with self._lock:
            self._records[self._make_key(student_id, item_id)] = dict(record)

    def delete(self, student_id: str, item_id: str) -> bool:
        with self._lock:
            return self._records.pop(self._make_key(student_id, item_id), None) is not None

    def find_due(self, student_id: str, now: datetime, limit: int) -> list[tuple[str, SchedulingState]]:
        """Due items for a student, oldest due first, at most `limit` entries."""
        if limit <= 0:
            return []
        now = ensure_aware(now)
        with self._lock:
            candidates = [
                (item_id, item)
                for (owner, item_id), item in self._records.items()
                if owner == student_id
            ]

        due: list[tuple[str, SchedulingState]] = []
        for item_id, item in candidates:
            if parse_iso_z(item["nextReviewAt"]) > now:
                continue
            due.append((item_id, from_record(item)))

        due.sort(key=lambda entry: (entry[1].next_review_at, entry[0]))
        return due[:limit]

    def clear(self) -> None:
        """Clear all records (for testing)."""
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
