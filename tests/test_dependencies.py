# tests/test_dependencies.py

from __future__ import annotations

import pytest

from ticklist.tasks.dependencies import (
    MISSING,
    assert_completable,
    blocking_ids,
    clear_edges,
    compute_blocked,
    dependency_view,
    remove_edge,
    validate_add_edge,
)
from ticklist.tasks.errors import (
    CycleDetected,
    DanglingDependency,
    DependencyNotFound,
    InvalidTaskId,
    SelfDependency,
    TaskBlocked,
)
from ticklist.tasks.task_models import Task, TaskStatus


def _task(text: str, *deps: Task, done: bool = False) -> Task:
    t = Task(text=text, depends_on=[d.id for d in deps])
    if done:
        t.status = TaskStatus.DONE
    return t


def test_self_dependency_is_a_cycle() -> None:
    a = _task("a")
    with pytest.raises(SelfDependency) as exc:
        validate_add_edge(a.id, a.id, [a])
    assert isinstance(exc.value, CycleDetected)
    assert exc.value.path == [a.id, a.id]


def test_unknown_dependency_is_rejected() -> None:
    a = _task("a")
    with pytest.raises(DanglingDependency):
        validate_add_edge(a.id, "00000000-dead-beef-0000-000000000000", [a])


def test_direct_cycle_reports_path() -> None:
    b = _task("b")
    a = _task("a", b)
    with pytest.raises(CycleDetected) as exc:
        validate_add_edge(b.id, a.id, [a, b])
    assert exc.value.path == [b.id, a.id, b.id]


def test_transitive_cycle_reports_full_path() -> None:
    c = _task("c")
    b = _task("b", c)
    a = _task("a", b)
    with pytest.raises(CycleDetected) as exc:
        validate_add_edge(c.id, a.id, [a, b, c])
    assert exc.value.path == [c.id, a.id, b.id, c.id]
    assert a.id[:8] in str(exc.value)


def test_diamond_is_not_a_cycle() -> None:
    d = _task("d")
    b = _task("b", d)
    c = _task("c", d)
    a = _task("a", b, c)
    validate_add_edge(b.id, c.id, [a, b, c, d])
    validate_add_edge(a.id, d.id, [a, b, c, d])


def test_dangling_ids_inside_graph_are_leaves() -> None:
    b = _task("b")
    b.depends_on.append("ffffffff-0000-0000-0000-000000000000")
    a = _task("a")
    validate_add_edge(a.id, b.id, [a, b])


def test_blocked_until_dependency_done() -> None:
    b = _task("b")
    a = _task("a", b)
    assert compute_blocked(a, [a, b]) is True
    assert blocking_ids(a, [a, b]) == [b.id]

    b.status = TaskStatus.DONE
    assert compute_blocked(a, [a, b]) is False


def test_dangling_reference_keeps_task_blocked() -> None:
    a = _task("a")
    a.depends_on.append("ffffffff-0000-0000-0000-000000000000")
    assert compute_blocked(a, [a]) is True


def test_done_task_is_never_blocked() -> None:
    b = _task("b")
    a = _task("a", b, done=True)
    assert compute_blocked(a, [a, b]) is False


def test_assert_completable() -> None:
    b = _task("b")
    c = _task("c", done=True)
    a = _task("a", b, c)

    with pytest.raises(TaskBlocked) as exc:
        assert_completable(a.id, [a, b, c])
    assert exc.value.blocking_ids == [b.id]

    assert_completable(b.id, [a, b, c])

    with pytest.raises(InvalidTaskId):
        assert_completable("nope", [a, b, c])


def test_dependency_view_lists_both_directions() -> None:
    b = _task("b", done=True)
    a = _task("a", b)
    a.depends_on.append("ffffffff-0000-0000-0000-000000000000")
    c = _task("c", b)

    view = dependency_view(b.id, [a, b, c])
    assert [t.id for t in view.required_by] == [a.id, c.id]
    assert view.depends_on == []
    assert view.blocked is False

    view_a = dependency_view(a.id, [a, b, c])
    assert [e.status for e in view_a.depends_on] == ["done", MISSING]
    assert view_a.depends_on[0].is_resolved
    assert view_a.depends_on[1].is_missing
    assert view_a.blocked is True


def test_remove_and_clear_edges() -> None:
    b = _task("b")
    c = _task("c")
    a = _task("a", b, c)

    remove_edge(a, b.id)
    assert a.depends_on == [c.id]

    with pytest.raises(DependencyNotFound):
        remove_edge(a, b.id)

    assert clear_edges(a) == [c.id]
    assert a.depends_on == []
