# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from ticklist.config import Settings
from ticklist.core.state import AppState
from ticklist.tasks.task_store import JsonTaskStore

from .fakes import InMemoryTaskRepo


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at a per-test data directory.

    Built directly rather than via get_settings(), so the developer's
    environment and .env never leak into tests.
    """
    return Settings(
        app_name="ticklist-test",
        log_level="DEBUG",
        log_to_file=False,
        data_dir=tmp_path,
        data_file=tmp_path / "todos.json",
        due_soon_days=7,
    )


@pytest.fixture()
def repo() -> InMemoryTaskRepo:
    return InMemoryTaskRepo()


@pytest.fixture()
def state(settings: Settings) -> AppState:
    """
    AppState wired to a real JSON store in tmp_path.

    Confirmation prompts are answered "yes"; tests that need a "no" replace
    state.confirm.
    """
    return AppState(
        settings=settings,
        task_store=JsonTaskStore(settings.data_file),
        confirm=lambda _prompt: True,
    )
