# src/ticklist/tasks/validation.py

"""Input validation run before anything is written to the store."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date

from .errors import (
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
from .task_models import Recurrence

MAX_TEXT_LENGTH = 500
MAX_TAG_LENGTH = 50
MAX_PROJECT_LENGTH = 100

_TAG_RE = re.compile(r"^[\w-]+$")


def validate_task_text(text: str) -> str:
    trimmed = (text or "").strip()
    if not trimmed:
        raise EmptyTaskText()
    if len(trimmed) > MAX_TEXT_LENGTH:
        raise TaskTextTooLong(MAX_TEXT_LENGTH, len(trimmed))
    return trimmed


def validate_tags(tags: Iterable[str]) -> list[str]:
    """Return the tags trimmed and lowercased; raises on the first bad one."""
    out: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        trimmed = (tag or "").strip()
        if not trimmed:
            raise EmptyTag()
        if len(trimmed) > MAX_TAG_LENGTH:
            raise TagTooLong(MAX_TAG_LENGTH, len(trimmed))
        # \w also admits non-ASCII letters, which is what we want for tags.
        if not _TAG_RE.match(trimmed):
            raise InvalidTagFormat(trimmed)
        lowered = trimmed.lower()
        if lowered in seen:
            raise DuplicateTag(trimmed)
        seen.add(lowered)
        out.append(lowered)
    return out


def validate_project_name(name: str) -> str:
    trimmed = (name or "").strip()
    if not trimmed:
        raise EmptyProjectName()
    if len(trimmed) > MAX_PROJECT_LENGTH:
        raise ProjectNameTooLong(MAX_PROJECT_LENGTH, len(trimmed))
    return trimmed


def validate_due_date(due: date | None, *, today: date, allow_past: bool) -> None:
    if due is not None and not allow_past and due < today:
        raise DueDateInPast(due)


def validate_recurrence(recurrence: Recurrence | None, due: date | None) -> None:
    if recurrence is not None and due is None:
        raise RecurrenceRequiresDueDate()
