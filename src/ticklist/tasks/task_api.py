# src/ticklist/tasks/task_api.py

"""
Command-level task workflows.

Every public function here performs exactly one load -> mutate -> save cycle
against a TaskRepo and returns plain result objects for the CLI to render.
Validation always happens before the save, on a working copy of the
collection, so a failing command never leaves a partial change on disk.

Tasks are addressed by a "ref": either the 1-based position in the stored
collection ("3" or "#3") or a task UUID / unique UUID prefix. Positions are
display handles only; everything below the CLI works with UUIDs.
"""

from __future__ import annotations

import copy
import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from ..core.ports import TaskRepo
from .dependencies import (
    DependencyView,
    assert_completable,
    blocking_ids,
    clear_edges,
    compute_blocked,
    dependency_view,
    remove_edge,
    validate_add_edge,
)
from .errors import (
    AmbiguousTaskId,
    DanglingDependency,
    DependencyNotFound,
    DuplicateDependency,
    InvalidTaskId,
    NoProjectsFound,
    NoSearchResults,
    NoTagsFound,
    NoTasksFound,
    ProjectNotFound,
    RecurrenceRequiresDueDate,
    TagNotFound,
    TaskAlreadyInStatus,
    TaskBlocked,
)
from .recurrence import (
    clear_recurrence,
    coerce_recurrence,
    lineage,
    on_task_completed,
    set_recurrence,
)
from .tag_normalizer import collect_existing_tags, normalize_tags
from .task_models import (
    DueFilter,
    Priority,
    Recurrence,
    RecurrenceFilter,
    SortBy,
    StatusFilter,
    Task,
)
from .validation import (
    validate_due_date,
    validate_project_name,
    validate_recurrence,
    validate_tags,
    validate_task_text,
)

logger = logging.getLogger(__name__)

MIN_UUID_PREFIX = 4


# ---- result types ----


@dataclass(slots=True, frozen=True)
class NumberedTask:
    """A task together with its current 1-based position in the collection."""

    number: int
    task: Task

    @property
    def label(self) -> str:
        return f"#{self.number}"


@dataclass(slots=True, frozen=True)
class AddResult:
    item: NumberedTask
    tag_messages: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class EditResult:
    item: NumberedTask
    changes: list[str] = field(default_factory=list)
    tag_messages: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class CompleteResult:
    item: NumberedTask
    next_instance: NumberedTask | None = None
    # True when the task recurs but its successor already existed.
    skipped_duplicate: bool = False


@dataclass(slots=True, frozen=True)
class RemoveResult:
    task: Task
    # Tasks still listing the removed one in depends_on (now dangling, so blocked).
    dependents: list[NumberedTask] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class RecurrenceChange:
    item: NumberedTask
    old: Recurrence | None
    new: Recurrence | None

    @property
    def changed(self) -> bool:
        return self.old != self.new


@dataclass(slots=True, frozen=True)
class ListResult:
    items: list[NumberedTask]
    blocked: frozenset[str] = frozenset()


@dataclass(slots=True, frozen=True)
class ProjectCount:
    name: str
    pending: int
    done: int


@dataclass(slots=True, frozen=True)
class PriorityStats:
    priority: Priority
    total: int
    pending: int
    done: int


@dataclass(slots=True, frozen=True)
class ProjectStats:
    name: str
    total: int
    percent_done: int


@dataclass(slots=True, frozen=True)
class Stats:
    total: int
    completed: int
    pending: int
    overdue: int
    due_soon: int
    blocked: int
    percent_done: int
    by_priority: list[PriorityStats]
    by_project: list[ProjectStats]
    no_project: int
    activity: list[tuple[date, int]]


@dataclass(slots=True, frozen=True)
class DepsResult:
    item: NumberedTask
    view: DependencyView
    numbers: dict[str, int]


# ---- lookup helpers ----


def number_of(task_id: str, tasks: Sequence[Task]) -> int | None:
    for i, t in enumerate(tasks, start=1):
        if t.id == task_id:
            return i
    return None


def _numbered(task: Task, tasks: Sequence[Task]) -> NumberedTask:
    return NumberedTask(number=number_of(task.id, tasks) or 0, task=task)


def find_ref(tasks: Sequence[Task], ref: str) -> Task | None:
    """
    Resolve a ref to a task, or None if nothing matches.

    Raises AmbiguousTaskId when a UUID prefix matches more than one task.
    """
    raw = str(ref).strip()
    digits = raw[1:] if raw.startswith("#") else raw
    if digits.isdigit():
        pos = int(digits)
        if 1 <= pos <= len(tasks):
            return tasks[pos - 1]
        # Out of range: longer all-digit refs may still be UUID prefixes.
        if raw.startswith("#") or len(digits) < MIN_UUID_PREFIX:
            return None

    needle = raw.lower()
    for t in tasks:
        if t.id.lower() == needle:
            return t
    if len(needle) < MIN_UUID_PREFIX:
        return None
    matches = [t for t in tasks if t.id.lower().startswith(needle)]
    if len(matches) > 1:
        raise AmbiguousTaskId(raw, len(matches))
    return matches[0] if matches else None


def resolve_ref(tasks: Sequence[Task], ref: str) -> Task:
    task = find_ref(tasks, ref)
    if task is None:
        raise InvalidTaskId(str(ref).strip(), len(tasks))
    return task


def _resolve_dependency(tasks: Sequence[Task], ref: str) -> str:
    task = find_ref(tasks, ref)
    if task is None:
        raise DanglingDependency(str(ref).strip())
    return task.id


def _resolve_existing_edge(task: Task, tasks: Sequence[Task], ref: str) -> str:
    """
    Map a ref onto one of task.depends_on.

    Dangling entries cannot be resolved through the collection, so they are
    also matched by UUID prefix directly against depends_on.
    """
    target = find_ref(tasks, ref)
    if target is not None and target.id in task.depends_on:
        return target.id
    needle = str(ref).strip().lower()
    if len(needle) >= MIN_UUID_PREFIX:
        hits = [d for d in task.depends_on if d.lower().startswith(needle)]
        if len(hits) == 1:
            return hits[0]
    raise DependencyNotFound(task.id, target.id if target is not None else str(ref).strip())


def _labels(ids: Iterable[str], tasks: Sequence[Task]) -> list[str]:
    by_id = {t.id: (i, t) for i, t in enumerate(tasks, start=1)}
    out: list[str] = []
    for dep_id in ids:
        hit = by_id.get(dep_id)
        if hit is None:
            out.append(f"{dep_id[:8]} (missing)")
        else:
            out.append(f'#{hit[0]} "{hit[1].text}"')
    return out


def _today(today: date | None) -> date:
    return today if today is not None else date.today()


# ---- mutations ----


def add_task(
    repo: TaskRepo,
    text: str,
    *,
    priority: Priority = Priority.MEDIUM,
    tags: Sequence[str] = (),
    project: str | None = None,
    due: date | None = None,
    recurrence: Recurrence | str | None = None,
    depends_on: Sequence[str] = (),
    today: date | None = None,
) -> AddResult:
    text = validate_task_text(text)
    clean_tags = validate_tags(tags)
    if project is not None:
        project = validate_project_name(project)
    validate_due_date(due, today=_today(today), allow_past=False)
    pattern = coerce_recurrence(recurrence) if recurrence is not None else None
    validate_recurrence(pattern, due)

    tasks = repo.load_all()

    normalized, messages = normalize_tags(clean_tags, collect_existing_tags(tasks))
    task = Task(
        text=text,
        priority=priority,
        tags=normalized,
        project=project,
        due_date=due,
        recurrence=pattern,
    )

    work = [*tasks, task]
    for ref in depends_on:
        dep_id = _resolve_dependency(tasks, ref)
        if dep_id in task.depends_on:
            continue
        validate_add_edge(task.id, dep_id, work)
        task.depends_on.append(dep_id)

    repo.save_all(work)
    logger.info("Added task %s (recurrence=%s deps=%d)", task.id, pattern, len(task.depends_on))
    return AddResult(item=NumberedTask(number=len(work), task=task), tag_messages=messages)


def edit_task(
    repo: TaskRepo,
    ref: str,
    *,
    text: str | None = None,
    priority: Priority | None = None,
    add_tags: Sequence[str] = (),
    remove_tags: Sequence[str] = (),
    clear_tags: bool = False,
    project: str | None = None,
    clear_project: bool = False,
    due: date | None = None,
    clear_due: bool = False,
    add_deps: Sequence[str] = (),
    remove_deps: Sequence[str] = (),
    clear_deps: bool = False,
) -> EditResult:
    """
    Apply a partial update. Only the given fields change.

    The edit is validated against a deep copy of the collection; nothing is
    saved unless every requested change is valid and at least one value
    actually differs.
    """
    work = copy.deepcopy(repo.load_all())
    task = resolve_ref(work, ref)
    item = _numbered(task, work)
    changes: list[str] = []
    tag_messages: list[str] = []

    # Dependencies first: they are the changes most likely to be rejected.
    if clear_deps:
        removed = clear_edges(task)
        if removed:
            changes.append(f"dependencies cleared (was {', '.join(_labels(removed, work))})")
    else:
        removed_ids = [_resolve_existing_edge(task, work, r) for r in remove_deps]
        for dep_id in dict.fromkeys(removed_ids):
            remove_edge(task, dep_id)
        if removed_ids:
            changes.append(f"removed deps: {', '.join(_labels(dict.fromkeys(removed_ids), work))}")

        added: list[str] = []
        for r in add_deps:
            dep_id = _resolve_dependency(work, r)
            if dep_id in task.depends_on:
                raise DuplicateDependency(task.id, dep_id)
            validate_add_edge(task.id, dep_id, work)
            task.depends_on.append(dep_id)
            added.append(dep_id)
        if added:
            changes.append(f"added deps: {', '.join(_labels(added, work))}")

    if text is not None:
        new_text = validate_task_text(text)
        if new_text != task.text:
            task.text = new_text
            changes.append(f"text -> {new_text}")

    if priority is not None and priority != task.priority:
        task.priority = priority
        changes.append(f"priority -> {priority.value}")

    if clear_project:
        if task.project is not None:
            changes.append(f"project cleared (was {task.project})")
            task.project = None
    elif project is not None:
        new_project = validate_project_name(project)
        if new_project != task.project:
            task.project = new_project
            changes.append(f"project -> {new_project}")

    if clear_tags:
        if task.tags:
            changes.append(f"tags cleared (was {', '.join(task.tags)})")
            task.tags = []
    else:
        if remove_tags:
            wanted = {t.strip().lower() for t in remove_tags}
            kept = [t for t in task.tags if t.lower() not in wanted]
            removed_tags = [t for t in task.tags if t.lower() in wanted]
            if not removed_tags:
                raise TagNotFound(", ".join(sorted(wanted)))
            task.tags = kept
            changes.append(f"removed tags: {', '.join(removed_tags)}")
        if add_tags:
            clean = validate_tags(add_tags)
            normalized, tag_messages = normalize_tags(clean, collect_existing_tags(work))
            new_tags = [t for t in normalized if t not in task.tags]
            if new_tags:
                task.tags.extend(new_tags)
                changes.append(f"added tags: {', '.join(new_tags)}")

    if clear_due:
        if task.due_date is not None:
            if task.recurrence is not None:
                raise RecurrenceRequiresDueDate()
            task.due_date = None
            changes.append("due date cleared")
    elif due is not None and due != task.due_date:
        # Past dates are allowed here: fixing an overdue task is a valid edit.
        task.due_date = due
        changes.append(f"due date -> {due.isoformat()}")

    if not changes:
        return EditResult(item=item, changes=[], tag_messages=tag_messages)

    task.touch()
    repo.save_all(work)
    logger.info("Edited task %s (%d changes)", task.id, len(changes))
    return EditResult(item=item, changes=changes, tag_messages=tag_messages)


def complete_task(repo: TaskRepo, ref: str, *, now: datetime | None = None) -> CompleteResult:
    """
    Mark a task done: refuse if already done or blocked, then let the
    recurrence engine spawn the next instance. One save covers both steps.
    """
    tasks = repo.load_all()
    task = resolve_ref(tasks, ref)
    item = _numbered(task, tasks)

    if task.is_done:
        raise TaskAlreadyInStatus(item.label, "done")

    try:
        assert_completable(task.id, tasks)
    except TaskBlocked as e:
        raise TaskBlocked(e.task_id, e.blocking_ids, labels=_labels(e.blocking_ids, tasks)) from None

    task.mark_done(now)
    nxt = on_task_completed(task, tasks, now=now)
    if nxt is not None:
        tasks.append(nxt)

    repo.save_all(tasks)
    logger.info("Completed task %s (next=%s)", task.id, nxt.id if nxt else None)
    return CompleteResult(
        item=item,
        next_instance=NumberedTask(number=len(tasks), task=nxt) if nxt is not None else None,
        skipped_duplicate=task.recurrence is not None and nxt is None,
    )


def reopen_task(repo: TaskRepo, ref: str) -> NumberedTask:
    tasks = repo.load_all()
    task = resolve_ref(tasks, ref)
    item = _numbered(task, tasks)
    if not task.is_done:
        raise TaskAlreadyInStatus(item.label, "pending")
    task.mark_undone()
    repo.save_all(tasks)
    logger.info("Reopened task %s", task.id)
    return item


def remove_task(repo: TaskRepo, ref: str) -> RemoveResult:
    tasks = repo.load_all()
    task = resolve_ref(tasks, ref)
    remaining = [t for t in tasks if t.id != task.id]
    dependents = [_numbered(t, remaining) for t in remaining if task.id in t.depends_on]
    repo.save_all(remaining)
    logger.info("Removed task %s (%d dependents left dangling)", task.id, len(dependents))
    return RemoveResult(task=task, dependents=dependents)


def clear_tasks(repo: TaskRepo) -> int:
    tasks = repo.load_all()
    repo.save_all([])
    logger.info("Cleared %d tasks", len(tasks))
    return len(tasks)


def set_task_recurrence(repo: TaskRepo, ref: str, frequency: Recurrence | str) -> RecurrenceChange:
    pattern = coerce_recurrence(frequency)
    tasks = repo.load_all()
    task = resolve_ref(tasks, ref)
    validate_recurrence(pattern, task.due_date)

    old = task.recurrence
    if set_recurrence(task, pattern):
        repo.save_all(tasks)
        logger.info("Recurrence of %s: %s -> %s", task.id, old, pattern)
    return RecurrenceChange(item=_numbered(task, tasks), old=old, new=pattern)


def clear_task_recurrence(repo: TaskRepo, ref: str) -> RecurrenceChange:
    tasks = repo.load_all()
    task = resolve_ref(tasks, ref)
    old = clear_recurrence(task)
    if old is not None:
        repo.save_all(tasks)
        logger.info("Recurrence of %s cleared (was %s)", task.id, old)
    return RecurrenceChange(item=_numbered(task, tasks), old=old, new=None)


# ---- queries ----


def _blocked_set(tasks: Sequence[Task]) -> frozenset[str]:
    return frozenset(t.id for t in tasks if compute_blocked(t, tasks))


def _sort(items: list[NumberedTask], sort: SortBy) -> None:
    if sort == SortBy.PRIORITY:
        items.sort(key=lambda it: it.task.priority.order)
    elif sort == SortBy.DUE:
        # Tasks without a due date go last.
        items.sort(key=lambda it: (it.task.due_date is None, it.task.due_date or date.max))
    else:
        items.sort(key=lambda it: it.task.created_at)


def list_tasks(
    repo: TaskRepo,
    *,
    status: StatusFilter = StatusFilter.ALL,
    priority: Priority | None = None,
    due: DueFilter | None = None,
    tag: str | None = None,
    project: str | None = None,
    recurrence: RecurrenceFilter | None = None,
    sort: SortBy | None = None,
    today: date | None = None,
    soon_days: int = 7,
) -> ListResult:
    tasks = repo.load_all()
    ref_day = _today(today)
    items = [NumberedTask(i, t) for i, t in enumerate(tasks, start=1)]

    items = [it for it in items if it.task.matches_status(status)]
    if priority is not None:
        items = [it for it in items if it.task.priority == priority]
    if due is not None:
        items = [it for it in items if it.task.matches_due(due, ref_day, soon_days)]
    if tag is not None:
        before = len(items)
        wanted = tag.strip().lower()
        items = [it for it in items if wanted in it.task.tags]
        if not items and before:
            raise TagNotFound(tag)
    if project is not None:
        before = len(items)
        items = [it for it in items if it.task.in_project(project)]
        if not items and before:
            raise ProjectNotFound(project)
    if recurrence is not None:
        items = [it for it in items if it.task.matches_recurrence(recurrence)]

    if not items:
        raise NoTasksFound()

    if sort is not None:
        _sort(items, sort)

    return ListResult(items=items, blocked=_blocked_set(tasks))


def search_tasks(
    repo: TaskRepo,
    query: str,
    *,
    tag: str | None = None,
    project: str | None = None,
    status: StatusFilter = StatusFilter.ALL,
) -> ListResult:
    tasks = repo.load_all()
    needle = query.lower()
    items = [
        NumberedTask(i, t)
        for i, t in enumerate(tasks, start=1)
        if needle in t.text.lower() and t.matches_status(status)
    ]
    if tag is not None:
        wanted = tag.strip().lower()
        items = [it for it in items if wanted in it.task.tags]
    if project is not None:
        items = [it for it in items if it.task.in_project(project)]
    if not items:
        raise NoSearchResults(query)
    return ListResult(items=items, blocked=_blocked_set(tasks))


def list_tags(repo: TaskRepo) -> list[tuple[str, int]]:
    counts: Counter[str] = Counter()
    for t in repo.load_all():
        counts.update(set(t.tags))
    if not counts:
        raise NoTagsFound()
    return sorted(counts.items())


def list_projects(repo: TaskRepo) -> list[ProjectCount]:
    pending: Counter[str] = Counter()
    done: Counter[str] = Counter()
    for t in repo.load_all():
        if t.project is None:
            continue
        (done if t.is_done else pending)[t.project] += 1
    names = sorted(set(pending) | set(done))
    if not names:
        raise NoProjectsFound()
    return [ProjectCount(name=n, pending=pending[n], done=done[n]) for n in names]


def _percent(part: int, total: int) -> int:
    return 0 if total == 0 else (part * 100) // total


def compute_stats(repo: TaskRepo, *, today: date | None = None, soon_days: int = 7) -> Stats:
    tasks = repo.load_all()
    ref_day = _today(today)

    total = len(tasks)
    completed = sum(1 for t in tasks if t.is_done)

    by_priority: list[PriorityStats] = []
    for p in Priority:
        group = [t for t in tasks if t.priority == p]
        if group:
            d = sum(1 for t in group if t.is_done)
            by_priority.append(PriorityStats(priority=p, total=len(group), pending=len(group) - d, done=d))

    by_project: list[ProjectStats] = []
    for name in sorted({t.project for t in tasks if t.project is not None}):
        group = [t for t in tasks if t.project == name]
        d = sum(1 for t in group if t.is_done)
        by_project.append(ProjectStats(name=name, total=len(group), percent_done=_percent(d, len(group))))

    completions = Counter(t.completed_at.date() for t in tasks if t.completed_at is not None)
    activity = [
        (day, completions.get(day, 0))
        for day in (ref_day - timedelta(days=i) for i in range(6, -1, -1))
    ]

    return Stats(
        total=total,
        completed=completed,
        pending=total - completed,
        overdue=sum(1 for t in tasks if t.is_overdue(ref_day)),
        due_soon=sum(1 for t in tasks if t.is_due_soon(ref_day, soon_days)),
        blocked=len(_blocked_set(tasks)),
        percent_done=_percent(completed, total),
        by_priority=by_priority,
        by_project=by_project,
        no_project=sum(1 for t in tasks if t.project is None),
        activity=activity,
    )


def show_dependencies(repo: TaskRepo, ref: str) -> DepsResult:
    tasks = repo.load_all()
    task = resolve_ref(tasks, ref)
    return DepsResult(
        item=_numbered(task, tasks),
        view=dependency_view(task.id, tasks),
        numbers={t.id: i for i, t in enumerate(tasks, start=1)},
    )


@dataclass(slots=True, frozen=True)
class TaskInfo:
    item: NumberedTask
    blocked_by: list[str]
    required_by: list[str]
    lineage: list[NumberedTask]


def task_info(repo: TaskRepo, ref: str) -> TaskInfo:
    """Everything known about one task, with related tasks already labelled."""
    tasks = repo.load_all()
    task = resolve_ref(tasks, ref)
    view = dependency_view(task.id, tasks)
    return TaskInfo(
        item=_numbered(task, tasks),
        blocked_by=_labels(blocking_ids(task, tasks), tasks),
        required_by=_labels((t.id for t in view.required_by), tasks),
        lineage=[_numbered(t, tasks) for t in lineage(task.id, tasks)],
    )
