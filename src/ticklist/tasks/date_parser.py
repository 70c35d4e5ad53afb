# src/ticklist/tasks/date_parser.py

"""
Date phrases -> calendar dates.

Supported input:
- YYYY-MM-DD
- today, tomorrow, yesterday
- in N day(s) / week(s) / month(s)
- weekday names, optionally prefixed by "next" or "this"
  (always the next occurrence strictly after today)
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from .errors import DueDateInPast, InvalidDate
from .recurrence import add_months

_RE_IN_N = re.compile(r"^in\s+(\d+)\s+(day|week|month)s?$")
_RE_WEEKDAY = re.compile(r"^(?:(next|this)\s+)?([a-z]+)$")

_WEEKDAYS = {
    "monday": 0, "mon": 0,
    "tuesday": 1, "tue": 1, "tues": 1,
    "wednesday": 2, "wed": 2,
    "thursday": 3, "thu": 3, "thur": 3, "thurs": 3,
    "friday": 4, "fri": 4,
    "saturday": 5, "sat": 5,
    "sunday": 6, "sun": 6,
}

_RELATIVE_DAYS = {"today": 0, "tomorrow": 1, "yesterday": -1}


def parse_date(text: str, today: date | None = None) -> date:
    raw = (text or "").strip()
    phrase = " ".join(raw.lower().split())
    if today is None:
        today = date.today()

    try:
        return datetime.strptime(phrase, "%Y-%m-%d").date()
    except ValueError:
        pass

    if phrase in _RELATIVE_DAYS:
        return today + timedelta(days=_RELATIVE_DAYS[phrase])

    m = _RE_IN_N.match(phrase)
    if m:
        n = int(m.group(1))
        unit = m.group(2)
        if unit == "day":
            return today + timedelta(days=n)
        if unit == "week":
            return today + timedelta(weeks=n)
        return add_months(today, n)

    m = _RE_WEEKDAY.match(phrase)
    if m and m.group(2) in _WEEKDAYS:
        target = _WEEKDAYS[m.group(2)]
        ahead = (target - today.weekday()) % 7 or 7
        return today + timedelta(days=ahead)

    raise InvalidDate(raw)


def parse_date_not_in_past(text: str, today: date | None = None) -> date:
    """Like parse_date, but rejects dates before today (used when adding tasks)."""
    if today is None:
        today = date.today()
    parsed = parse_date(text, today=today)
    if parsed < today:
        raise DueDateInPast(parsed, raw=text.strip())
    return parsed
