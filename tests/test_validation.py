# tests/test_validation.py

from __future__ import annotations

from datetime import date

import pytest

from ticklist.tasks.errors import (
    DueDateInPast,
    DuplicateTag,
    EmptyProjectName,
    EmptyTag,
    EmptyTaskText,
    InvalidTagFormat,
    ProjectNameTooLong,
    RecurrenceRequiresDueDate,
    TagTooLong,
    TaskTextTooLong,
)
from ticklist.tasks.task_models import Recurrence
from ticklist.tasks.validation import (
    MAX_PROJECT_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TEXT_LENGTH,
    validate_due_date,
    validate_project_name,
    validate_recurrence,
    validate_tags,
    validate_task_text,
)


def test_task_text() -> None:
    assert validate_task_text("  buy milk ") == "buy milk"
    assert validate_task_text("x" * MAX_TEXT_LENGTH) == "x" * MAX_TEXT_LENGTH

    with pytest.raises(EmptyTaskText):
        validate_task_text("   ")
    with pytest.raises(TaskTextTooLong) as exc:
        validate_task_text("x" * (MAX_TEXT_LENGTH + 1))
    assert exc.value.actual == MAX_TEXT_LENGTH + 1


def test_tags() -> None:
    assert validate_tags(["Work", "home-office", "café_2"]) == ["work", "home-office", "café_2"]

    with pytest.raises(EmptyTag):
        validate_tags(["ok", " "])
    with pytest.raises(TagTooLong):
        validate_tags(["t" * (MAX_TAG_LENGTH + 1)])
    with pytest.raises(InvalidTagFormat):
        validate_tags(["with space"])
    with pytest.raises(InvalidTagFormat):
        validate_tags(["a.b"])
    with pytest.raises(DuplicateTag):
        validate_tags(["Work", "work"])


def test_project_name() -> None:
    assert validate_project_name(" Backend ") == "Backend"
    with pytest.raises(EmptyProjectName):
        validate_project_name("")
    with pytest.raises(ProjectNameTooLong):
        validate_project_name("p" * (MAX_PROJECT_LENGTH + 1))


def test_due_date() -> None:
    today = date(2025, 3, 10)
    validate_due_date(None, today=today, allow_past=False)
    validate_due_date(today, today=today, allow_past=False)
    validate_due_date(date(2025, 3, 1), today=today, allow_past=True)
    with pytest.raises(DueDateInPast):
        validate_due_date(date(2025, 3, 9), today=today, allow_past=False)


def test_recurrence_needs_due() -> None:
    validate_recurrence(None, None)
    validate_recurrence(Recurrence.DAILY, date(2025, 3, 10))
    with pytest.raises(RecurrenceRequiresDueDate):
        validate_recurrence(Recurrence.DAILY, None)
