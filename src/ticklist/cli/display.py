# src/ticklist/cli/display.py

"""Plain-text rendering for command output. Nothing here touches storage."""

from __future__ import annotations

from datetime import date

from ..tasks.dependencies import DependencyEntry
from ..tasks.task_api import DepsResult, ListResult, NumberedTask, ProjectCount, Stats, TaskInfo
from ..tasks.task_models import Task


def _due_label(task: Task, today: date) -> str:
    if task.due_date is None:
        return "no due date"
    label = f"due {task.due_date.isoformat()}"
    if task.is_done:
        return label
    days = (task.due_date - today).days
    if days < 0:
        return f"{label} (overdue {-days}d)"
    if days == 0:
        return f"{label} (today)"
    if days == 1:
        return f"{label} (tomorrow)"
    return label


def task_line(item: NumberedTask, *, today: date, blocked: bool = False) -> str:
    t = item.task
    if t.is_done:
        mark = "x"
    elif blocked:
        mark = "!"
    else:
        mark = " "

    parts = [f"{item.number:>3}. [{mark}] ({t.priority.letter}) {t.text}"]
    if t.due_date is not None:
        parts.append(_due_label(t, today))
    if t.project:
        parts.append(f"@{t.project}")
    if t.tags:
        parts.append(" ".join(f"#{tag}" for tag in t.tags))
    if t.recurrence is not None:
        parts.append(f"~{t.recurrence.value}")
    if blocked:
        parts.append("[blocked]")
    return "  ".join(parts)


def render_list(result: ListResult, *, today: date) -> str:
    lines = [task_line(it, today=today, blocked=it.task.id in result.blocked) for it in result.items]
    done = sum(1 for it in result.items if it.task.is_done)
    total = len(result.items)
    noun = "task" if total == 1 else "tasks"
    lines.append("")
    lines.append(f"{total} {noun} ({total - done} pending, {done} done)")
    return "\n".join(lines)


def _entry_line(entry: DependencyEntry, numbers: dict[str, int]) -> str:
    if entry.task is None:
        return f"  {entry.task_id[:8]}  [missing]"
    return f"  #{numbers.get(entry.task_id, 0)}  [{entry.status}]  {entry.task.text}"


def render_deps(result: DepsResult) -> str:
    view = result.view
    if view.task.is_done:
        state = "done"
    elif view.blocked:
        state = "blocked"
    else:
        state = "ready"

    lines = [f"Task {result.item.label}: {view.task.text}  [{state}]"]

    lines.append("Depends on:")
    if view.depends_on:
        lines.extend(_entry_line(e, result.numbers) for e in view.depends_on)
    else:
        lines.append("  (none)")

    lines.append("Required by:")
    if view.required_by:
        for t in view.required_by:
            lines.append(f"  #{result.numbers.get(t.id, 0)}  [{t.status.value}]  {t.text}")
    else:
        lines.append("  (none)")
    return "\n".join(lines)


def _ts(value) -> str:
    return value.isoformat(sep=" ") if value is not None else "-"


def render_info(info: TaskInfo, *, today: date) -> str:
    t = info.item.task
    lines = [
        f"Task {info.item.label}",
        f"  id:         {t.id}",
        f"  text:       {t.text}",
        f"  status:     {t.status.value}" + ("  (blocked)" if info.blocked_by else ""),
        f"  priority:   {t.priority.value}",
        f"  project:    {t.project or '-'}",
        f"  tags:       {', '.join(t.tags) if t.tags else '-'}",
        f"  due:        {_due_label(t, today) if t.due_date else '-'}",
        f"  recurrence: {t.recurrence.value if t.recurrence else '-'}",
        f"  created:    {_ts(t.created_at)}",
        f"  updated:    {_ts(t.updated_at)}",
        f"  completed:  {_ts(t.completed_at)}",
    ]
    if t.depends_on:
        lines.append(f"  depends on: {len(t.depends_on)} task(s)")
    if info.blocked_by:
        lines.append(f"  blocked by: {', '.join(info.blocked_by)}")
    if info.required_by:
        lines.append(f"  required by: {', '.join(info.required_by)}")
    if len(info.lineage) > 1:
        chain = " -> ".join(it.label if it.number else it.task.id[:8] for it in info.lineage)
        lines.append(f"  lineage:    {chain}")
    return "\n".join(lines)


def _bar(count: int, width: int = 20) -> str:
    return "#" * min(width, count)


def render_stats(stats: Stats) -> str:
    lines = [
        "Overview",
        f"  total:     {stats.total}",
        f"  completed: {stats.completed} ({stats.percent_done}%)",
        f"  pending:   {stats.pending}",
        f"  overdue:   {stats.overdue}",
        f"  due soon:  {stats.due_soon}",
        f"  blocked:   {stats.blocked}",
    ]

    if stats.by_priority:
        lines.append("")
        lines.append("By priority")
        for p in stats.by_priority:
            lines.append(
                f"  {p.priority.value:<7} {p.total:>3} total  {p.pending:>3} pending  {p.done:>3} done"
            )

    if stats.by_project:
        lines.append("")
        lines.append("By project")
        for proj in stats.by_project:
            lines.append(f"  {proj.name:<20} {proj.total:>3} tasks  {proj.percent_done:>3}% done")
        if stats.no_project:
            lines.append(f"  {'(no project)':<20} {stats.no_project:>3} tasks")

    lines.append("")
    lines.append("Completed in the last 7 days")
    for day, count in stats.activity:
        lines.append(f"  {day.strftime('%a %m-%d')}  {count:>3}  {_bar(count)}")
    return "\n".join(lines)


def render_tags(tags: list[tuple[str, int]]) -> str:
    lines = ["Tags:"]
    lines.extend(f"  #{name}  ({count})" for name, count in tags)
    return "\n".join(lines)


def render_projects(projects: list[ProjectCount]) -> str:
    lines = ["Projects:"]
    for p in projects:
        lines.append(f"  {p.name}  ({p.pending} pending, {p.done} done)")
    return "\n".join(lines)
