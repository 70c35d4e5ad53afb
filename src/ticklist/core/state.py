# src/ticklist/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from ..config import Settings
from .ports import TaskRepo


def _ask(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


@dataclass(slots=True)
class AppState:
    """
    Everything a command handler needs for one invocation.

    Built once by cli/bootstrap.py; tests construct it directly with fakes.
    """

    settings: Settings
    task_store: TaskRepo
    # Asked before destructive commands unless --yes is given.
    confirm: Callable[[str], bool] = field(default=_ask)
