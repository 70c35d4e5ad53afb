# tests/test_date_parser.py

from __future__ import annotations

from datetime import date

import pytest

from ticklist.tasks.date_parser import parse_date, parse_date_not_in_past
from ticklist.tasks.errors import DueDateInPast, InvalidDate

MONDAY = date(2024, 1, 1)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2024-03-15", date(2024, 3, 15)),
        ("today", MONDAY),
        ("  Tomorrow ", date(2024, 1, 2)),
        ("yesterday", date(2023, 12, 31)),
        ("in 3 days", date(2024, 1, 4)),
        ("in 1 day", date(2024, 1, 2)),
        ("in 2 weeks", date(2024, 1, 15)),
        ("in 1 month", date(2024, 2, 1)),
        ("friday", date(2024, 1, 5)),
        ("fri", date(2024, 1, 5)),
        ("monday", date(2024, 1, 8)),
        ("next monday", date(2024, 1, 8)),
        ("this  wednesday", date(2024, 1, 3)),
    ],
)
def test_parse_date(text: str, expected: date) -> None:
    assert parse_date(text, today=MONDAY) == expected


def test_in_months_clamps_to_month_end() -> None:
    assert parse_date("in 1 month", today=date(2024, 1, 31)) == date(2024, 2, 29)


@pytest.mark.parametrize("text", ["", "someday", "next", "2024-02-30", "in days", "15/03/2024"])
def test_invalid_dates(text: str) -> None:
    with pytest.raises(InvalidDate):
        parse_date(text, today=MONDAY)


def test_not_in_past() -> None:
    assert parse_date_not_in_past("today", today=MONDAY) == MONDAY
    with pytest.raises(DueDateInPast) as exc:
        parse_date_not_in_past("yesterday", today=MONDAY)
    assert "yesterday" in str(exc.value)
