# src/ticklist/tasks/task_store.py

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path
from typing import Any

from .errors import StorageError
from .task_models import Priority, Recurrence, Task, TaskStatus, new_task_id

logger = logging.getLogger(__name__)


def _parse_date(raw: Any) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        logger.warning("Ignoring malformed date %r", raw)
        return None


def _parse_ts(raw: Any) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        # Older files stored plain dates for created_at / completed_at.
        d = _parse_date(raw)
        return datetime(d.year, d.month, d.day) if d else None


def _str_list(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    out: list[str] = []
    for item in raw:
        s = str(item).strip()
        if s and s not in out:
            out.append(s)
    return out


def task_from_dict(raw: dict[str, Any]) -> tuple[Task, bool]:
    """
    Build a Task from one JSON record.

    Returns (task, migrated) where migrated is True when the record needed a
    fresh id (legacy files without UUIDs, or the old "uuid" key).
    """
    migrated = False
    task_id = str(raw.get("id") or raw.get("uuid") or "").strip()
    if not task_id or task_id.strip("0-") == "":
        task_id = new_task_id()
        migrated = True
    elif "id" not in raw:
        migrated = True

    if "status" in raw:
        status = TaskStatus.from_db(raw.get("status"))
    else:
        status = TaskStatus.DONE if raw.get("completed") else TaskStatus.PENDING

    created_at = _parse_ts(raw.get("created_at")) or datetime.now().replace(microsecond=0)
    parent = raw.get("parent_id")

    task = Task(
        id=task_id,
        text=str(raw.get("text") or ""),
        priority=Priority.from_db(raw.get("priority")),
        status=status,
        tags=_str_list(raw.get("tags")),
        project=(str(raw["project"]) if raw.get("project") else None),
        due_date=_parse_date(raw.get("due_date")),
        recurrence=Recurrence.from_db(raw.get("recurrence")),
        parent_id=(str(parent) if parent else None),
        depends_on=_str_list(raw.get("depends_on")),
        created_at=created_at,
        completed_at=_parse_ts(raw.get("completed_at")),
        updated_at=_parse_ts(raw.get("updated_at")),
    )
    return task, migrated


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "text": task.text,
        "priority": task.priority.value,
        "status": task.status.value,
        "tags": list(task.tags),
        "project": task.project,
        "due_date": task.due_date.isoformat() if task.due_date else None,
        "created_at": task.created_at.isoformat(),
        "completed_at": task.completed_at.isoformat() if task.completed_at else None,
        "updated_at": task.updated_at.isoformat() if task.updated_at else None,
        "recurrence": task.recurrence.value if task.recurrence else None,
        "parent_id": task.parent_id,
        "depends_on": list(task.depends_on),
    }


class JsonTaskStore:
    """
    JSON file task store.

    The whole collection is one pretty-printed JSON array. Writes go to a
    sibling .tmp file first and are moved into place with os.replace, so a
    crash never leaves a half-written data file behind.

    Concurrency:
    - single writer assumed; no cross-process lock is taken
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        logger.debug("JsonTaskStore ready path=%s exists=%s", self._path, self._path.exists())

    @property
    def path(self) -> Path:
        return self._path

    def location(self) -> str:
        return str(self._path)

    def exists(self) -> bool:
        return self._path.exists()

    def size_bytes(self) -> int:
        return self._path.stat().st_size if self._path.exists() else 0

    # ---- public API ----

    def load_all(self) -> list[Task]:
        """Return every stored task; a missing file means an empty collection."""
        try:
            content = self._path.read_text("utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}") from e

        if not content.strip():
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageError(f"Failed to parse {self._path} - file may be corrupted ({e})") from e

        if not isinstance(data, list):
            raise StorageError(f"Unexpected data in {self._path}: expected a JSON array")

        tasks: list[Task] = []
        any_migrated = False
        seen: set[str] = set()
        for raw in data:
            if not isinstance(raw, dict):
                logger.warning("Skipping non-object record in %s", self._path)
                continue
            task, migrated = task_from_dict(raw)
            if task.id in seen:
                # Ids must stay unique; a duplicated record gets a new identity.
                task.id = new_task_id()
                migrated = True
            seen.add(task.id)
            any_migrated = any_migrated or migrated
            tasks.append(task)

        if any_migrated:
            logger.info("Migrated legacy task records in %s", self._path)
            self.save_all(tasks)

        logger.debug("Loaded %d tasks from %s", len(tasks), self._path)
        return tasks

    def save_all(self, tasks: Iterable[Task]) -> None:
        records = [task_to_dict(t) for t in tasks]
        payload = json.dumps(records, ensure_ascii=False, indent=2)

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_name(self._path.name + ".tmp")
            tmp.write_text(payload + "\n", "utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}") from e

        logger.debug("Saved %d tasks to %s", len(records), self._path)
