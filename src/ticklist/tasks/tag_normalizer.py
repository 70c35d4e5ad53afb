# src/ticklist/tasks/tag_normalizer.py

"""
Tag normalization against tags already in use.

Rules, in order:
1. exact match            -> unchanged
2. case-insensitive match -> normalized to the existing spelling
3. edit distance <= 1 (tags up to 4 chars) or <= 2 (longer tags)
                          -> normalized to the closest existing tag
4. otherwise              -> new tag

Short tags only absorb single-character typos: "urgnt" becomes "urgent",
but "tset" stays apart from "test".
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .task_models import Task


@dataclass(slots=True, frozen=True)
class NormalizeResult:
    tag: str
    original: str

    @property
    def changed(self) -> bool:
        return self.tag != self.original


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        cur = [i]
        for j, cb in enumerate(b, start=1):
            cur.append(min(prev[j] + 1, cur[j - 1] + 1, prev[j - 1] + (ca != cb)))
        prev = cur
    return prev[-1]


def normalize_tag(tag: str, existing: Sequence[str]) -> NormalizeResult:
    if tag in existing:
        return NormalizeResult(tag=tag, original=tag)

    lowered = tag.lower()
    for t in existing:
        if t.lower() == lowered:
            return NormalizeResult(tag=t, original=tag)

    threshold = 1 if len(tag) <= 4 else 2
    best: tuple[int, str] | None = None
    for t in existing:
        dist = levenshtein(lowered, t.lower())
        if dist <= threshold and (best is None or dist < best[0]):
            best = (dist, t)
    if best is not None:
        return NormalizeResult(tag=best[1], original=tag)

    return NormalizeResult(tag=tag, original=tag)


def normalize_tags(tags: Iterable[str], existing: Sequence[str]) -> tuple[list[str], list[str]]:
    """Returns (normalized tags without duplicates, user-facing messages)."""
    out: list[str] = []
    messages: list[str] = []
    for tag in tags:
        res = normalize_tag(tag, existing)
        if res.changed:
            messages.append(f"'{res.original}' -> '{res.tag}'")
        if res.tag not in out:
            out.append(res.tag)
    return out, messages


def collect_existing_tags(tasks: Iterable[Task]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for task in tasks:
        for tag in task.tags:
            if tag not in seen:
                seen.add(tag)
                out.append(tag)
    return out
