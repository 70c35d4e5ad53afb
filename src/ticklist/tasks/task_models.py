# src/ticklist/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Stored task status.

    Notes:
    - "blocked" is never stored; it is derived from depends_on at read time
      (see tasks/dependencies.py).
    """

    PENDING = "pending"
    DONE = "done"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(str(raw).lower())
        except ValueError:
            return cls.PENDING


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def order(self) -> int:
        """Sort order: lower is more urgent."""
        return _PRIORITY_ORDER[self]

    @property
    def letter(self) -> str:
        return self.value[0].upper()

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).lower())
        except ValueError:
            return cls.MEDIUM


_PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class Recurrence(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def from_db(cls, raw: str | None) -> Recurrence | None:
        if not raw:
            return None
        try:
            return cls(str(raw).lower())
        except ValueError:
            return None


# ---- list filters / sort keys ----


class StatusFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    DONE = "done"


class DueFilter(StrEnum):
    OVERDUE = "overdue"
    SOON = "soon"
    WITH_DUE = "with-due"
    NO_DUE = "no-due"


class RecurrenceFilter(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    RECURRING = "recurring"
    NON_RECURRING = "non-recurring"


class SortBy(StrEnum):
    PRIORITY = "priority"
    DUE = "due"
    CREATED = "created"


def new_task_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now().replace(microsecond=0)


@dataclass(slots=True)
class Task:
    text: str
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    tags: list[str] = field(default_factory=list)
    project: str | None = None
    due_date: date | None = None

    recurrence: Recurrence | None = None
    parent_id: str | None = None
    depends_on: list[str] = field(default_factory=list)

    id: str = field(default_factory=new_task_id)
    created_at: datetime = field(default_factory=_now)
    completed_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE

    def touch(self) -> None:
        self.updated_at = _now()

    def mark_done(self, now: datetime | None = None) -> None:
        self.status = TaskStatus.DONE
        self.completed_at = now or _now()
        self.touch()

    def mark_undone(self) -> None:
        self.status = TaskStatus.PENDING
        self.completed_at = None
        self.touch()

    def is_overdue(self, today: date) -> bool:
        return self.due_date is not None and self.due_date < today and not self.is_done

    def is_due_soon(self, today: date, days: int = 7) -> bool:
        if self.due_date is None or self.is_done:
            return False
        days_until = (self.due_date - today).days
        return 0 <= days_until <= days

    def matches_status(self, status: StatusFilter) -> bool:
        if status == StatusFilter.PENDING:
            return not self.is_done
        if status == StatusFilter.DONE:
            return self.is_done
        return True

    def matches_due(self, due: DueFilter, today: date, soon_days: int = 7) -> bool:
        if due == DueFilter.OVERDUE:
            return self.is_overdue(today)
        if due == DueFilter.SOON:
            return self.is_due_soon(today, soon_days)
        if due == DueFilter.WITH_DUE:
            return self.due_date is not None
        return self.due_date is None

    def matches_recurrence(self, recur: RecurrenceFilter) -> bool:
        if recur == RecurrenceFilter.RECURRING:
            return self.recurrence is not None
        if recur == RecurrenceFilter.NON_RECURRING:
            return self.recurrence is None
        return self.recurrence is not None and self.recurrence.value == recur.value

    def in_project(self, project: str) -> bool:
        return self.project is not None and self.project.lower() == project.lower()
