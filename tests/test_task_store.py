# tests/test_task_store.py

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path

import pytest

from ticklist.tasks.errors import StorageError
from ticklist.tasks.task_models import Priority, Recurrence, Task, TaskStatus
from ticklist.tasks.task_store import JsonTaskStore


def test_missing_and_empty_file_mean_no_tasks(tmp_path: Path) -> None:
    store = JsonTaskStore(tmp_path / "todos.json")
    assert store.load_all() == []
    assert not store.exists()

    store.path.write_text("  \n", "utf-8")
    assert store.load_all() == []


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    store = JsonTaskStore(tmp_path / "nested" / "todos.json")
    parent = Task(text="a", due_date=date(2025, 1, 31), recurrence=Recurrence.MONTHLY)
    parent.mark_done(datetime(2025, 1, 31, 8, 0))
    child = Task(
        text="a",
        priority=Priority.HIGH,
        tags=["x"],
        project="P",
        due_date=date(2025, 2, 28),
        recurrence=Recurrence.MONTHLY,
        parent_id=parent.id,
        depends_on=[parent.id],
    )

    store.save_all([parent, child])
    assert store.exists()
    assert store.size_bytes() > 0
    assert not (store.path.parent / "todos.json.tmp").exists()

    loaded = store.load_all()
    assert loaded == [parent, child]


def test_persisted_shape(tmp_path: Path) -> None:
    store = JsonTaskStore(tmp_path / "todos.json")
    t = Task(text="a", depends_on=[])
    store.save_all([t])

    raw = json.loads(store.path.read_text("utf-8"))
    assert raw[0]["id"] == t.id
    assert raw[0]["status"] == "pending"
    assert raw[0]["parent_id"] is None
    assert raw[0]["depends_on"] == []


def test_legacy_records_are_migrated(tmp_path: Path) -> None:
    path = tmp_path / "todos.json"
    legacy = [
        {"text": "old done", "completed": True, "priority": "High", "created_at": "2024-05-01"},
        {"uuid": "11111111-2222-4333-8444-555555555555", "text": "old pending", "completed": False},
    ]
    path.write_text(json.dumps(legacy), "utf-8")

    store = JsonTaskStore(path)
    tasks = store.load_all()

    assert tasks[0].status == TaskStatus.DONE
    assert tasks[0].priority == Priority.HIGH
    assert tasks[0].created_at == datetime(2024, 5, 1)
    assert len(tasks[0].id) == 36
    assert tasks[1].id == "11111111-2222-4333-8444-555555555555"
    assert tasks[1].status == TaskStatus.PENDING
    assert tasks[1].depends_on == []

    # Migration is written back, so ids are stable from now on.
    rewritten = json.loads(path.read_text("utf-8"))
    assert [r["id"] for r in rewritten] == [t.id for t in tasks]
    assert store.load_all() == tasks


def test_duplicate_ids_get_new_identity(tmp_path: Path) -> None:
    path = tmp_path / "todos.json"
    same = "aaaaaaaa-bbbb-4ccc-8ddd-eeeeeeeeeeee"
    path.write_text(json.dumps([{"id": same, "text": "a"}, {"id": same, "text": "b"}]), "utf-8")

    tasks = JsonTaskStore(path).load_all()
    assert tasks[0].id == same
    assert tasks[1].id != same


def test_corrupt_file_raises_storage_error(tmp_path: Path) -> None:
    path = tmp_path / "todos.json"
    path.write_text("{not json", "utf-8")
    with pytest.raises(StorageError):
        JsonTaskStore(path).load_all()

    path.write_text('{"tasks": []}', "utf-8")
    with pytest.raises(StorageError):
        JsonTaskStore(path).load_all()
