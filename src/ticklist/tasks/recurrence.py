# src/ticklist/tasks/recurrence.py

"""
Recurrence engine.

A lineage is the chain of task instances linked by parent_id. Completing the
pending member of a recurring lineage generates exactly one successor; the
engine refuses to generate a second one, so at most one member of a lineage
is pending at any time.

Deduplication runs two checks in order:
- parent_id: a task already points at the completed one (primary)
- text + recurrence: a pending twin exists (legacy data without parent_id)

The legacy check lives in its own function so it can be dropped once every
stored task carries lineage information.
"""

from __future__ import annotations

import calendar
import logging
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from .errors import InvalidRecurrenceFrequency
from .task_models import Recurrence, Task, TaskStatus

logger = logging.getLogger(__name__)


def add_months(d: date, months: int) -> date:
    """Same day-of-month `months` later, clamped to the target month's last day."""
    idx = d.month - 1 + months
    year = d.year + idx // 12
    month = idx % 12 + 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last))


def next_due_date(original_due: date | None, recurrence: Recurrence) -> date | None:
    """
    Next occurrence after original_due.

    Monthly steps clamp independently from the preceding date:
    Jan 31 -> Feb 28 (or 29), and Feb 28 -> Mar 28.
    """
    if original_due is None:
        return None
    if recurrence == Recurrence.DAILY:
        return original_due + timedelta(days=1)
    if recurrence == Recurrence.WEEKLY:
        return original_due + timedelta(days=7)
    return add_months(original_due, 1)


def coerce_recurrence(frequency: Recurrence | str) -> Recurrence:
    if isinstance(frequency, Recurrence):
        return frequency
    try:
        return Recurrence(str(frequency).strip().lower())
    except ValueError:
        raise InvalidRecurrenceFrequency(frequency) from None


def set_recurrence(task: Task, frequency: Recurrence | str) -> bool:
    """Set the pattern; returns True if it changed. Existing instances are untouched."""
    pattern = coerce_recurrence(frequency)
    if task.recurrence == pattern:
        return False
    task.recurrence = pattern
    task.touch()
    return True


def clear_recurrence(task: Task) -> Recurrence | None:
    """Remove the pattern; returns the old one (None if there was none)."""
    old = task.recurrence
    if old is not None:
        task.recurrence = None
        task.touch()
    return old


# ---- deduplication ----


def _child_by_parent(task: Task, all_tasks: Iterable[Task]) -> Task | None:
    for t in all_tasks:
        if t.parent_id == task.id:
            return t
    return None


def _pending_twin(task: Task, all_tasks: Iterable[Task]) -> Task | None:
    # Text + recurrence equality is deliberately enough; priority/tags are ignored.
    for t in all_tasks:
        if (
            t.id != task.id
            and t.status == TaskStatus.PENDING
            and t.text == task.text
            and t.recurrence == task.recurrence
        ):
            return t
    return None


def find_existing_instance(task: Task, all_tasks: Iterable[Task]) -> Task | None:
    snapshot = list(all_tasks)
    return _child_by_parent(task, snapshot) or _pending_twin(task, snapshot)


def build_next_instance(task: Task, now: datetime | None = None) -> Task:
    if task.recurrence is None:
        raise ValueError(f"task {task.id} does not recur")
    created = (now or datetime.now()).replace(microsecond=0)
    return Task(
        text=task.text,
        priority=task.priority,
        tags=list(task.tags),
        project=task.project,
        recurrence=task.recurrence,
        due_date=next_due_date(task.due_date, task.recurrence),
        parent_id=task.id,
        status=TaskStatus.PENDING,
        depends_on=[],
        created_at=created,
    )


def on_task_completed(
    task: Task,
    all_tasks: Iterable[Task],
    *,
    now: datetime | None = None,
) -> Task | None:
    """
    Return the next instance of a just-completed recurring task, or None.

    None means either the task does not recur or its successor already exists.
    The caller inserts the returned task into the collection and persists it.
    """
    if task.recurrence is None:
        return None

    existing = find_existing_instance(task, all_tasks)
    if existing is not None:
        logger.debug("Next instance of %s already exists (%s); skipping", task.id, existing.id)
        return None

    nxt = build_next_instance(task, now=now)
    logger.debug(
        "Generated %s instance %s from %s due=%s",
        task.recurrence.value,
        nxt.id,
        task.id,
        nxt.due_date,
    )
    return nxt


def lineage(task_id: str, all_tasks: Iterable[Task]) -> list[Task]:
    """Chain of instances ending at task_id, oldest first. Stops at missing parents."""
    by_id = {t.id: t for t in all_tasks}
    chain: list[Task] = []
    seen: set[str] = set()
    cur = by_id.get(task_id)
    while cur is not None and cur.id not in seen:
        seen.add(cur.id)
        chain.append(cur)
        cur = by_id.get(cur.parent_id) if cur.parent_id else None
    chain.reverse()
    return chain
