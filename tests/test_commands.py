# tests/test_commands.py

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from ticklist.cli.commands import CommandRegistry, registry
from ticklist.cli.main import build_parser, main
from ticklist.config import get_settings
from ticklist.tasks.errors import TaskBlocked


def _run(state, *argv: str) -> str:
    args = build_parser().parse_args(list(argv))
    return registry.handle(state, args)


def test_command_registry_routes_names_and_aliases(state) -> None:
    reg = CommandRegistry()
    called: list[str] = []

    def h(state, args):
        called.append(args.command)
        return "ok"

    reg.register("list", h, "List things.", aliases=["ls"])

    assert reg.handle(state, build_parser().parse_args(["list"])) == "ok"
    assert reg.handle(state, build_parser().parse_args(["ls"])) == "ok"
    assert called == ["list", "ls"]
    assert reg.names() == ["list"]
    assert reg.aliases_for("list") == ["ls"]
    assert "list (ls)" in reg.build_help()


def test_command_registry_unknown(state) -> None:
    reg = CommandRegistry()
    out = reg.handle(state, build_parser().parse_args(["stats"]))
    assert "Unknown command" in out


def test_every_command_has_a_subparser() -> None:
    parser = build_parser()
    for name in registry.names():
        argv = [name]
        if name in {"done", "undone", "remove", "edit", "deps", "clear-recur"}:
            argv.append("1")
        elif name == "recur":
            argv += ["1", "daily"]
        elif name in {"add", "search"}:
            argv.append("x")
        assert parser.parse_args(argv).command == name


def test_add_list_done_flow(state) -> None:
    out = _run(state, "add", "Buy", "milk", "-p", "high", "-t", "shop,food")
    assert out.startswith("Added task #1: Buy milk")

    _run(state, "add", "Cook", "dinner", "--depends-on", "1")
    listing = _run(state, "ls")
    assert "(H) Buy milk" in listing
    assert "#shop #food" in listing
    assert "[blocked]" in listing
    assert "2 tasks (2 pending, 0 done)" in listing

    with pytest.raises(TaskBlocked):
        _run(state, "done", "2")

    assert "Completed task #1" in _run(state, "done", "1")
    assert "Completed task #2" in _run(state, "complete", "2")


def test_recurring_done_reports_next_occurrence(state) -> None:
    _run(state, "add", "Standup", "--due", "tomorrow", "--recur", "daily")
    out = _run(state, "done", "1")
    assert "Next daily occurrence: #2" in out

    _run(state, "undone", "1")
    out = _run(state, "done", "1")
    assert "already exists" in out
    assert len(state.task_store.load_all()) == 2


def test_edit_and_deps_output(state) -> None:
    _run(state, "add", "a")
    _run(state, "add", "b")
    out = _run(state, "edit", "2", "--add-dep", "1", "--text", "b", "two", "-P", "Home")
    assert "Updated task #2:" in out
    assert "text -> b two" in out

    deps = _run(state, "deps", "1")
    assert "Required by:" in deps
    assert "#2  [pending]  b two" in deps

    assert _run(state, "edit", "2", "-P", "Home").startswith("No changes")


def test_remove_asks_for_confirmation(state) -> None:
    _run(state, "add", "a")
    state.confirm = lambda _prompt: False
    assert _run(state, "rm", "1") == "Cancelled."
    assert len(state.task_store.load_all()) == 1

    assert _run(state, "remove", "1", "--yes").startswith("Removed task: a")
    assert state.task_store.load_all() == []


def test_recur_commands(state) -> None:
    _run(state, "add", "rent", "--due", "in 3 days")
    assert "now repeats monthly" in _run(state, "recur", "1", "monthly")
    assert "already repeats monthly" in _run(state, "recur", "1", "MONTHLY")
    assert "no longer repeats" in _run(state, "norecur", "1")


def test_info_without_id_reports_data_file(state) -> None:
    assert "not created yet" in _run(state, "info")
    _run(state, "add", "a")
    out = _run(state, "info")
    assert "Tasks:     1" in out
    assert str(state.settings.data_file) in out
    assert f"Size:      {state.task_store.size_bytes()} bytes" in out


# ---- main() ----


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Isolated env for main(): settings cache cleared, root logging restored."""
    monkeypatch.setenv("TICKLIST_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("TICKLIST_DATA_FILE", raising=False)
    monkeypatch.setenv("TICKLIST_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield tmp_path
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    get_settings.cache_clear()


def test_main_exit_codes(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    data = cli_env / "custom.json"

    assert main(["--data-file", str(data), "add", "write", "tests"]) == 0
    assert "Added task #1" in capsys.readouterr().out
    assert json.loads(data.read_text("utf-8"))[0]["text"] == "write tests"

    assert main(["--data-file", str(data), "done", "5"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: Task ID 5 is invalid")

    with pytest.raises(SystemExit) as exc:
        main(["frobnicate"])
    assert exc.value.code == 2


def test_main_uses_configured_data_dir(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["add", "from", "env"]) == 0
    assert (cli_env / "todos.json").exists()
    capsys.readouterr()

    assert main(["help"]) == 0
    assert "Available commands:" in capsys.readouterr().out
