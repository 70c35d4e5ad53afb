# src/ticklist/cli/commands.py

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from datetime import date

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.date_parser import parse_date, parse_date_not_in_past
from ..tasks.task_models import DueFilter, Priority, RecurrenceFilter, SortBy, StatusFilter
from . import display

CommandHandler = Callable[[AppState, argparse.Namespace], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Command name/alias -> handler table. main.py builds the argparse subcommands from it."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._aliases: dict[str, list[str]] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        self._aliases[key] = [a.lower() for a in aliases]
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def names(self) -> list[str]:
        """Primary command names in registration order."""
        return list(self._help)

    def help_for(self, name: str) -> str:
        return self._help.get(name.lower(), "")

    def aliases_for(self, name: str) -> list[str]:
        return list(self._aliases.get(name.lower(), []))

    def handle(self, state: AppState, args: argparse.Namespace) -> str:
        """
        Dispatch on args.command (a name or an alias).
        Returns the text to print; TodoError propagates to the caller.
        """
        name = (getattr(args, "command", None) or "").lower()
        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: {name}. Use 'todo help' to list available commands."
        logger.debug("Dispatching command %s", name)
        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            aliases = self._aliases.get(name) or []
            label = f"{name} ({', '.join(aliases)})" if aliases else name
            lines.append(f"  {label:<28} {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _today() -> date:
    return date.today()


def _text(words: list[str] | str) -> str:
    return " ".join(words) if isinstance(words, list) else words


def _opt_enum(enum_cls, raw):
    return enum_cls(raw) if raw is not None else None


def _split(values: list[str] | None) -> list[str]:
    """Flatten repeated and comma-separated option values: -t a,b -t c -> [a, b, c]."""
    out: list[str] = []
    for v in values or []:
        out.extend(part for part in v.split(",") if part.strip())
    return out


# ---- mutations ----


def cmd_add(state: AppState, args: argparse.Namespace) -> str:
    today = _today()
    due = parse_date_not_in_past(args.due, today=today) if args.due else None
    res = task_api.add_task(
        state.task_store,
        _text(args.text),
        priority=Priority(args.priority),
        tags=_split(args.tags),
        project=args.project,
        due=due,
        recurrence=args.recur,
        depends_on=args.depends_on or [],
        today=today,
    )
    lines = [f"Added task {res.item.label}: {res.item.task.text}"]
    if res.tag_messages:
        lines.append(f"Tags normalized: {', '.join(res.tag_messages)}")
    if res.item.task.recurrence is not None:
        lines.append(f"Repeats {res.item.task.recurrence.value}")
    if res.item.task.depends_on:
        lines.append(f"Depends on {len(res.item.task.depends_on)} task(s)")
    return "\n".join(lines)


def cmd_edit(state: AppState, args: argparse.Namespace) -> str:
    due = parse_date(args.due, today=_today()) if args.due else None
    res = task_api.edit_task(
        state.task_store,
        args.id,
        text=_text(args.text) if args.text else None,
        priority=_opt_enum(Priority, args.priority),
        add_tags=_split(args.add_tags),
        remove_tags=_split(args.remove_tags),
        clear_tags=args.clear_tags,
        project=args.project,
        clear_project=args.clear_project,
        due=due,
        clear_due=args.clear_due,
        add_deps=args.add_deps or [],
        remove_deps=args.remove_deps or [],
        clear_deps=args.clear_deps,
    )
    if not res.changes:
        return f"No changes made to task {res.item.label}."
    lines = [f"Updated task {res.item.label}:"]
    lines.extend(f"  - {c}" for c in res.changes)
    if res.tag_messages:
        lines.append(f"Tags normalized: {', '.join(res.tag_messages)}")
    return "\n".join(lines)


def cmd_done(state: AppState, args: argparse.Namespace) -> str:
    res = task_api.complete_task(state.task_store, args.id)
    lines = [f"Completed task {res.item.label}: {res.item.task.text}"]
    if res.next_instance is not None:
        nxt = res.next_instance.task
        due = nxt.due_date.isoformat() if nxt.due_date else "no due date"
        lines.append(f"Next {nxt.recurrence.value} occurrence: {res.next_instance.label} ({due})")
    elif res.skipped_duplicate:
        lines.append("Next occurrence already exists; nothing generated.")
    return "\n".join(lines)


def cmd_undone(state: AppState, args: argparse.Namespace) -> str:
    item = task_api.reopen_task(state.task_store, args.id)
    return f"Task {item.label} marked as pending: {item.task.text}"


def cmd_remove(state: AppState, args: argparse.Namespace) -> str:
    if not args.yes:
        task = task_api.resolve_ref(state.task_store.load_all(), args.id)
        if not state.confirm(f'Remove task "{task.text}"?'):
            return "Cancelled."
    res = task_api.remove_task(state.task_store, args.id)
    lines = [f"Removed task: {res.task.text}"]
    if res.dependents:
        labels = ", ".join(d.label for d in res.dependents)
        lines.append(f"Warning: {labels} still depend on it and stay blocked (edit --remove-dep to fix).")
    return "\n".join(lines)


def cmd_clear(state: AppState, args: argparse.Namespace) -> str:
    if not args.yes and not state.confirm("Remove ALL tasks?"):
        return "Cancelled."
    count = task_api.clear_tasks(state.task_store)
    return f"Removed {count} task(s)."


def cmd_recur(state: AppState, args: argparse.Namespace) -> str:
    change = task_api.set_task_recurrence(state.task_store, args.id, args.frequency)
    if not change.changed:
        return f"Task {change.item.label} already repeats {change.new.value}."
    if change.old is None:
        return f"Task {change.item.label} now repeats {change.new.value}."
    return f"Task {change.item.label} recurrence: {change.old.value} -> {change.new.value}."


def cmd_clear_recur(state: AppState, args: argparse.Namespace) -> str:
    change = task_api.clear_task_recurrence(state.task_store, args.id)
    if change.old is None:
        return f"Task {change.item.label} has no recurrence."
    return f"Task {change.item.label} no longer repeats (was {change.old.value})."


# ---- queries ----


def cmd_list(state: AppState, args: argparse.Namespace) -> str:
    today = _today()
    result = task_api.list_tasks(
        state.task_store,
        status=StatusFilter(args.status),
        priority=_opt_enum(Priority, args.priority),
        due=_opt_enum(DueFilter, args.due),
        tag=args.tag,
        project=args.project,
        recurrence=_opt_enum(RecurrenceFilter, args.recur),
        sort=_opt_enum(SortBy, args.sort),
        today=today,
        soon_days=state.settings.due_soon_days,
    )
    return display.render_list(result, today=today)


def cmd_search(state: AppState, args: argparse.Namespace) -> str:
    query = _text(args.query)
    result = task_api.search_tasks(
        state.task_store,
        query,
        tag=args.tag,
        project=args.project,
        status=StatusFilter(args.status),
    )
    return f"Results for {query!r}:\n" + display.render_list(result, today=_today())


def cmd_stats(state: AppState, args: argparse.Namespace) -> str:
    stats = task_api.compute_stats(
        state.task_store, today=_today(), soon_days=state.settings.due_soon_days
    )
    return display.render_stats(stats)


def cmd_tags(state: AppState, args: argparse.Namespace) -> str:
    return display.render_tags(task_api.list_tags(state.task_store))


def cmd_projects(state: AppState, args: argparse.Namespace) -> str:
    return display.render_projects(task_api.list_projects(state.task_store))


def cmd_deps(state: AppState, args: argparse.Namespace) -> str:
    return display.render_deps(task_api.show_dependencies(state.task_store, args.id))


def cmd_info(state: AppState, args: argparse.Namespace) -> str:
    """
    todo info       -> data file location, size and task count
    todo info <id>  -> every detail of one task
    """
    if args.id:
        info = task_api.task_info(state.task_store, args.id)
        return display.render_info(info, today=_today())

    store = state.task_store
    path = store.location()
    if not store.exists():
        return f"Data file: {path}\nStatus:    not created yet"
    count = len(store.load_all())
    return (
        f"Data file: {path}\n"
        "Status:    exists\n"
        f"Size:      {store.size_bytes()} bytes\n"
        f"Tasks:     {count}"
    )


def cmd_help(state: AppState, args: argparse.Namespace) -> str:
    return registry.build_help()


registry.register("add", cmd_add, help_text="Add a task.", aliases=["a"])
registry.register("list", cmd_list, help_text="List tasks (filters: --status --due --tag ...).", aliases=["ls"])
registry.register("done", cmd_done, help_text="Mark a task done (spawns the next recurrence).", aliases=["complete"])
registry.register("undone", cmd_undone, help_text="Mark a done task as pending again.", aliases=["undo"])
registry.register("remove", cmd_remove, help_text="Remove a task.", aliases=["rm", "delete"])
registry.register("edit", cmd_edit, help_text="Edit text, priority, tags, project, due date or dependencies.", aliases=["e"])
registry.register("clear", cmd_clear, help_text="Remove all tasks.", aliases=["reset"])
registry.register("search", cmd_search, help_text="Search task text.", aliases=["find"])
registry.register("stats", cmd_stats, help_text="Show statistics.")
registry.register("tags", cmd_tags, help_text="List tags with counts.")
registry.register("projects", cmd_projects, help_text="List projects with counts.")
registry.register("deps", cmd_deps, help_text="Show what a task depends on and what depends on it.")
registry.register("info", cmd_info, help_text="Show data file info, or every detail of one task.")
registry.register("recur", cmd_recur, help_text="Make a task repeat: daily | weekly | monthly.")
registry.register("clear-recur", cmd_clear_recur, help_text="Stop a task from repeating.", aliases=["norecur"])
registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h"])
