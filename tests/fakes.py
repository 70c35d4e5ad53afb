# tests/fakes.py

from __future__ import annotations

import copy
from collections.abc import Iterable

from ticklist.tasks.task_models import Task


class InMemoryTaskRepo:
    """
    In-memory TaskRepo for unit tests.

    - load_all/save_all hand out deep copies, so callers mutating loaded tasks
      change nothing until they save (same as the JSON store)
    - counts saves for "nothing was written" assertions
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self.tasks: list[Task] = copy.deepcopy(list(tasks))
        self.saves = 0

    def load_all(self) -> list[Task]:
        return copy.deepcopy(self.tasks)

    def save_all(self, tasks: Iterable[Task]) -> None:
        self.tasks = copy.deepcopy(list(tasks))
        self.saves += 1

    def location(self) -> str:
        return "<memory>"

    def exists(self) -> bool:
        return self.saves > 0

    def size_bytes(self) -> int:
        return len(repr(self.tasks)) if self.saves else 0

    def get(self, task_id: str) -> Task:
        return next(t for t in self.tasks if t.id == task_id)
