# src/ticklist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task API depends on Protocols instead of concrete implementations.
This keeps storage swappable and makes testing easier (see tests/fakes.py).
"""

from collections.abc import Iterable
from typing import Protocol

from ..tasks.task_models import Task


class TaskRepo(Protocol):
    """
    Storage-side port: the whole task collection is loaded, mutated in memory
    and written back in one piece.
    """

    def load_all(self) -> list[Task]: ...
    def save_all(self, tasks: Iterable[Task]) -> None: ...
    def location(self) -> str: ...
    def exists(self) -> bool: ...
    def size_bytes(self) -> int: ...
