# src/ticklist/cli/main.py

"""
CLI entrypoint (`todo`).

Parses arguments, initializes logging, builds AppState, then dispatches one
command through the registry and prints its output.

Exit codes:
- 0: success (including a cancelled confirmation)
- 1: a TodoError (message printed as "Error: ..." on stderr)
- 2: invalid arguments (argparse)
- 130: interrupted (Ctrl+C at a confirmation prompt)
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .. import __version__
from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..logging_setup import level_from_name, setup_logging
from ..tasks.errors import TodoError
from ..tasks.task_models import DueFilter, Priority, Recurrence, RecurrenceFilter, SortBy, StatusFilter
from .commands import registry

logger = logging.getLogger(__name__)


def _choices(enum_cls) -> list[str]:
    return [m.value for m in enum_cls]


def _sub(subparsers, name: str) -> argparse.ArgumentParser:
    help_text = registry.help_for(name)
    return subparsers.add_parser(
        name,
        aliases=registry.aliases_for(name),
        help=help_text,
        description=help_text,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="todo",
        description="Personal task tracker with recurring tasks and task dependencies.",
        epilog=(
            "Tasks are addressed by their list number (3 or #3) or by UUID / UUID prefix.\n"
            "Dates: YYYY-MM-DD, today, tomorrow, 'in 3 days', 'next friday'."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--data-file", help="Use this JSON file instead of the configured one.")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    p = _sub(subparsers, "add")
    p.add_argument("text", nargs="+", help="Task text.")
    p.add_argument("-p", "--priority", choices=_choices(Priority), default=Priority.MEDIUM.value)
    p.add_argument("-t", "--tag", dest="tags", action="append", help="Tag (repeatable or comma separated).")
    p.add_argument("-P", "--project", help="Project name.")
    p.add_argument("-d", "--due", help="Due date.")
    p.add_argument("-r", "--recur", choices=_choices(Recurrence), help="Repeat when completed.")
    p.add_argument("--depends-on", dest="depends_on", action="append", metavar="ID",
                   help="Task that must be done first (repeatable).")

    p = _sub(subparsers, "list")
    p.add_argument("--status", choices=_choices(StatusFilter), default=StatusFilter.ALL.value)
    p.add_argument("--priority", choices=_choices(Priority))
    p.add_argument("--due", choices=_choices(DueFilter))
    p.add_argument("-t", "--tag")
    p.add_argument("-p", "--project")
    p.add_argument("-r", "--recur", choices=_choices(RecurrenceFilter))
    p.add_argument("-s", "--sort", choices=_choices(SortBy))

    p = _sub(subparsers, "done")
    p.add_argument("id")

    p = _sub(subparsers, "undone")
    p.add_argument("id")

    p = _sub(subparsers, "remove")
    p.add_argument("id")
    p.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt.")

    p = _sub(subparsers, "edit")
    p.add_argument("id")
    p.add_argument("--text", nargs="+", help="New task text.")
    p.add_argument("-p", "--priority", choices=_choices(Priority))
    p.add_argument("--add-tag", dest="add_tags", action="append", metavar="TAG")
    p.add_argument("--remove-tag", dest="remove_tags", action="append", metavar="TAG")
    p.add_argument("--clear-tags", action="store_true")
    group = p.add_mutually_exclusive_group()
    group.add_argument("-P", "--project")
    group.add_argument("--clear-project", action="store_true")
    group = p.add_mutually_exclusive_group()
    group.add_argument("-d", "--due")
    group.add_argument("--clear-due", action="store_true")
    p.add_argument("--add-dep", dest="add_deps", action="append", metavar="ID")
    p.add_argument("--remove-dep", dest="remove_deps", action="append", metavar="ID")
    p.add_argument("--clear-deps", action="store_true")

    p = _sub(subparsers, "clear")
    p.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt.")

    p = _sub(subparsers, "search")
    p.add_argument("query", nargs="+")
    p.add_argument("-t", "--tag")
    p.add_argument("-p", "--project")
    p.add_argument("--status", choices=_choices(StatusFilter), default=StatusFilter.ALL.value)

    _sub(subparsers, "stats")
    _sub(subparsers, "tags")
    _sub(subparsers, "projects")

    p = _sub(subparsers, "deps")
    p.add_argument("id")

    p = _sub(subparsers, "info")
    p.add_argument("id", nargs="?")

    p = _sub(subparsers, "recur")
    p.add_argument("id")
    p.add_argument("frequency", help="daily | weekly | monthly")

    p = _sub(subparsers, "clear-recur")
    p.add_argument("id")

    _sub(subparsers, "help")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    if args.data_file:
        settings = settings.with_data_file(args.data_file)

    console_level = level_from_name(settings.log_level)
    log_dir = settings.data_dir if settings.log_to_file else None
    setup_logging(console_level=console_level, log_dir=log_dir)

    logger.debug("Starting %s %s (command=%s)", settings.app_name, __version__, args.command)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    try:
        output = registry.handle(state, args)
    except TodoError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130

    if output:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
