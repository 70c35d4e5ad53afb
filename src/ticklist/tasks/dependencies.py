# src/ticklist/tasks/dependencies.py

"""
Dependency graph validation.

The depends_on lists of all tasks form a directed graph (task -> dependency).
No graph object is kept between calls: every check builds an adjacency map
from the snapshot it is given, so the functions here are pure with respect to
the task collection. Mutation is left to the caller after a check passes.

Policy for dangling references (depends_on entries whose task no longer
exists): they are rejected when an edge is added, and treated as unresolved
(still blocking) when computing blocked state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .errors import (
    CycleDetected,
    DanglingDependency,
    DependencyNotFound,
    InvalidTaskId,
    SelfDependency,
    TaskBlocked,
)
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

MISSING = "missing"


@dataclass(slots=True, frozen=True)
class DependencyEntry:
    """One direct dependency of a task, annotated for display."""

    task_id: str
    status: str  # TaskStatus value, or MISSING when dangling
    task: Task | None = None

    @property
    def is_missing(self) -> bool:
        return self.task is None

    @property
    def is_resolved(self) -> bool:
        return self.status == TaskStatus.DONE.value


@dataclass(slots=True, frozen=True)
class DependencyView:
    task: Task
    depends_on: list[DependencyEntry] = field(default_factory=list)
    required_by: list[Task] = field(default_factory=list)
    blocked: bool = False


def index_by_id(all_tasks: Iterable[Task]) -> dict[str, Task]:
    return {t.id: t for t in all_tasks}


def adjacency(all_tasks: Iterable[Task]) -> dict[str, list[str]]:
    """task id -> ids it depends on."""
    return {t.id: list(t.depends_on) for t in all_tasks}


def _find_path(graph: Mapping[str, list[str]], start: str, goal: str) -> list[str] | None:
    """
    Iterative DFS from start following dependency edges.

    Returns the path start -> ... -> goal, or None if goal is unreachable.
    Dangling ids are leaves (they have no outgoing edges).
    """
    parents: dict[str, str | None] = {start: None}
    stack = [start]
    while stack:
        node = stack.pop()
        if node == goal:
            path = [node]
            prev = parents[node]
            while prev is not None:
                path.append(prev)
                prev = parents[prev]
            path.reverse()
            return path
        for nxt in graph.get(node, ()):
            if nxt not in parents:
                parents[nxt] = node
                stack.append(nxt)
    return None


def validate_add_edge(task_id: str, new_dependency_id: str, all_tasks: Iterable[Task]) -> None:
    """
    Check that the edge task_id -> new_dependency_id may be added.

    Raises:
    - SelfDependency if both ids are the same
    - DanglingDependency if new_dependency_id is not in the collection
    - CycleDetected if task_id is reachable from new_dependency_id; the
      reported path is task_id -> new_dependency_id -> ... -> task_id
    """
    tasks = list(all_tasks)
    if new_dependency_id == task_id:
        raise SelfDependency(task_id)

    by_id = index_by_id(tasks)
    if new_dependency_id not in by_id:
        raise DanglingDependency(new_dependency_id)

    back = _find_path(adjacency(tasks), new_dependency_id, task_id)
    if back is not None:
        path = [task_id, *back]
        logger.debug("Rejected edge %s -> %s (cycle length %d)", task_id, new_dependency_id, len(path) - 1)
        raise CycleDetected(path)


def blocking_ids(task: Task, all_tasks: Iterable[Task]) -> list[str]:
    """Ids in task.depends_on that are not done or no longer exist, in order."""
    if task.is_done:
        return []
    by_id = index_by_id(all_tasks)
    out: list[str] = []
    for dep_id in task.depends_on:
        dep = by_id.get(dep_id)
        if dep is None or not dep.is_done:
            out.append(dep_id)
    return out


def compute_blocked(task: Task, all_tasks: Iterable[Task]) -> bool:
    return bool(blocking_ids(task, all_tasks))


def assert_completable(task_id: str, all_tasks: Iterable[Task]) -> None:
    """Raise TaskBlocked listing unresolved dependencies; no side effects."""
    tasks = list(all_tasks)
    task = index_by_id(tasks).get(task_id)
    if task is None:
        raise InvalidTaskId(task_id, len(tasks))
    blocking = blocking_ids(task, tasks)
    if blocking:
        raise TaskBlocked(task_id, blocking)


def dependency_view(task_id: str, all_tasks: Iterable[Task]) -> DependencyView:
    tasks = list(all_tasks)
    by_id = index_by_id(tasks)
    task = by_id.get(task_id)
    if task is None:
        raise InvalidTaskId(task_id, len(tasks))

    entries: list[DependencyEntry] = []
    for dep_id in task.depends_on:
        dep = by_id.get(dep_id)
        if dep is None:
            entries.append(DependencyEntry(task_id=dep_id, status=MISSING))
        else:
            entries.append(DependencyEntry(task_id=dep_id, status=dep.status.value, task=dep))

    required_by = [t for t in tasks if t.id != task_id and task_id in t.depends_on]

    return DependencyView(
        task=task,
        depends_on=entries,
        required_by=required_by,
        blocked=compute_blocked(task, tasks),
    )


def remove_edge(task: Task, dependency_id: str) -> None:
    """Drop one edge. Removing edges cannot create a cycle, so nothing is checked."""
    if dependency_id not in task.depends_on:
        raise DependencyNotFound(task.id, dependency_id)
    task.depends_on = [d for d in task.depends_on if d != dependency_id]


def clear_edges(task: Task) -> list[str]:
    """Drop every edge; returns the ids that were removed."""
    removed = list(task.depends_on)
    task.depends_on = []
    return removed
