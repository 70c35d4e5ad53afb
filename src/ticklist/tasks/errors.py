# src/ticklist/tasks/errors.py

"""
Error taxonomy for the task subsystem.

Every error is recoverable and user-facing: the CLI catches TodoError once,
prints str(exc) and exits non-zero. Nothing here is raised after a partial
mutation has been saved.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date


def _short(task_id: str) -> str:
    return task_id[:8]


class TodoError(Exception):
    """Base class for all user-facing task errors."""


# ---- dependency graph ----


class CycleDetected(TodoError):
    """Adding an edge would close a cycle; `path` starts and ends at the edited task."""

    def __init__(self, path: Sequence[str], message: str | None = None) -> None:
        self.path = list(path)
        if message is None:
            message = f"Dependency cycle detected: {' -> '.join(_short(p) for p in self.path)}"
        super().__init__(message)


class SelfDependency(CycleDetected):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__([task_id, task_id], f"Task {_short(task_id)} cannot depend on itself")


class DanglingDependency(TodoError):
    def __init__(self, dep_id: str) -> None:
        self.dep_id = dep_id
        super().__init__(f"Dependency {dep_id} does not reference an existing task")


class TaskBlocked(TodoError):
    def __init__(self, task_id: str, blocking_ids: Sequence[str], labels: Sequence[str] | None = None) -> None:
        self.task_id = task_id
        self.blocking_ids = list(blocking_ids)
        shown = list(labels) if labels else [_short(b) for b in self.blocking_ids]
        super().__init__(
            f"Task {_short(task_id)} is blocked by pending dependencies: {', '.join(shown)}"
        )


class DuplicateDependency(TodoError):
    def __init__(self, task_id: str, dep_id: str) -> None:
        self.task_id = task_id
        self.dep_id = dep_id
        super().__init__(f"Task {_short(task_id)} already depends on task {_short(dep_id)}")


class DependencyNotFound(TodoError):
    def __init__(self, task_id: str, dep_id: str) -> None:
        self.task_id = task_id
        self.dep_id = dep_id
        super().__init__(f"Task {_short(task_id)} does not depend on task {_short(dep_id)}")


# ---- recurrence ----


class InvalidRecurrenceFrequency(TodoError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            f"Invalid recurrence frequency: {value!r} (expected daily, weekly or monthly)"
        )


class RecurrenceRequiresDueDate(TodoError):
    def __init__(self) -> None:
        super().__init__("Recurring tasks must have a due date. Use --due YYYY-MM-DD")


# ---- task lookup / state ----


class InvalidTaskId(TodoError):
    def __init__(self, ref: str, total: int) -> None:
        self.ref = ref
        self.total = total
        if total:
            msg = f"Task ID {ref} is invalid (valid range: 1-{total}, or a task UUID)"
        else:
            msg = f"Task ID {ref} is invalid (there are no tasks yet)"
        super().__init__(msg)


class AmbiguousTaskId(TodoError):
    def __init__(self, ref: str, matches: int) -> None:
        self.ref = ref
        self.matches = matches
        super().__init__(f"Task ID prefix {ref!r} matches {matches} tasks; use more characters")


class TaskAlreadyInStatus(TodoError):
    def __init__(self, label: str, status: str) -> None:
        self.label = label
        self.status = status
        super().__init__(f"Task {label} is already marked as {status}")


# ---- validation ----


class EmptyTaskText(TodoError):
    def __init__(self) -> None:
        super().__init__("Task text cannot be empty")


class TaskTextTooLong(TodoError):
    def __init__(self, max_len: int, actual: int) -> None:
        self.max_len = max_len
        self.actual = actual
        super().__init__(
            f"Task text too long (max: {max_len} characters, actual: {actual} characters)"
        )


class EmptyTag(TodoError):
    def __init__(self) -> None:
        super().__init__("Tag cannot be empty")


class TagTooLong(TodoError):
    def __init__(self, max_len: int, actual: int) -> None:
        self.max_len = max_len
        self.actual = actual
        super().__init__(f"Tag too long (max: {max_len} characters, actual: {actual} characters)")


class InvalidTagFormat(TodoError):
    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(
            f"Invalid tag format: {tag!r} "
            "(tags can only contain alphanumeric characters, hyphens, and underscores)"
        )


class DuplicateTag(TodoError):
    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Duplicate tag: {tag!r} (tags must be unique, case-insensitive)")


class EmptyProjectName(TodoError):
    def __init__(self) -> None:
        super().__init__("Project name cannot be empty")


class ProjectNameTooLong(TodoError):
    def __init__(self, max_len: int, actual: int) -> None:
        self.max_len = max_len
        self.actual = actual
        super().__init__(
            f"Project name too long (max: {max_len} characters, actual: {actual} characters)"
        )


class DueDateInPast(TodoError):
    def __init__(self, due: date, raw: str | None = None) -> None:
        self.due = due
        self.raw = raw
        if raw is not None:
            msg = f"The date interpreted from {raw!r} is {due.isoformat()}, which is already in the past"
        else:
            msg = f"Due date cannot be in the past: {due.isoformat()}"
        super().__init__(msg)


class InvalidDate(TodoError):
    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(
            f"Could not parse date: {raw!r}. Accepted: YYYY-MM-DD, today, tomorrow, "
            "in 3 days, in 2 weeks, in 1 month, friday, next monday"
        )


# ---- queries ----


class NoTasksFound(TodoError):
    def __init__(self) -> None:
        super().__init__("No tasks found matching the specified filters")


class TagNotFound(TodoError):
    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Tag {tag!r} not found in any task")


class ProjectNotFound(TodoError):
    def __init__(self, project: str) -> None:
        self.project = project
        super().__init__(f"Project {project!r} not found in any task")


class NoSearchResults(TodoError):
    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"Search returned no results for query: {query!r}")


class NoTagsFound(TodoError):
    def __init__(self) -> None:
        super().__init__("No tags found in any task")


class NoProjectsFound(TodoError):
    def __init__(self) -> None:
        super().__init__("No projects found in any task")


# ---- storage ----


class StorageError(TodoError):
    """Data file could not be read, parsed or written."""
