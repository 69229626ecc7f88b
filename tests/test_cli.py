"""
Tests for the one-shot CLI (taskman <command>).

Commands run in-process through Typer's CliRunner against a temp task file.
The last tests start the real program in a subprocess, pointed at the temp
file through TASKMAN_FILE.
"""

import json
import os
import subprocess
import sys
from pathlib import Path

from typer.testing import CliRunner

from taskman import __version__
from taskman.cli.main import app
from taskman.core import service

runner = CliRunner()

PROJECT_ROOT = Path(__file__).parent.parent


def invoke(*args, **kwargs):
    return runner.invoke(app, list(args), **kwargs)


def only_task():
    tasks = service.all_tasks()
    assert len(tasks) == 1
    return tasks[0]


# --- add / ls / show ---

def test_add_creates_task():
    result = invoke("add", "Buy milk")
    assert result.exit_code == 0, result.output
    task = only_task()
    assert task.name == "Buy milk"
    assert f"Created task {task.id}" in result.output


def test_add_under_parent_with_due():
    invoke("add", "Groceries")
    parent = only_task()
    result = invoke("add", "Milk", "--under", parent.id[:4], "--due", "tomorrow")
    assert result.exit_code == 0, result.output
    child = service.get_task(parent.id).children[0]
    assert child.name == "Milk"
    assert child.due is not None
    assert "due 1 day" in result.output


def test_add_json_output():
    result = invoke("add", "Buy milk", "--json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["name"] == "Buy milk"
    assert data["parent"] == "root"
    assert data["done"] is False


def test_add_with_bad_due_fails():
    result = invoke("add", "Buy milk", "--due", "someday")
    assert result.exit_code == 1
    assert "Error" in result.output
    assert service.all_tasks() == []


def test_ls_empty():
    result = invoke("ls")
    assert result.exit_code == 0
    assert "No tasks found" in result.output


def test_ls_outline_and_formats():
    invoke("add", "Groceries")
    parent = only_task()
    invoke("add", "Milk", "--under", parent.id)

    result = invoke("ls")
    assert result.exit_code == 0, result.output
    assert "Groceries" in result.output
    assert "Milk" in result.output
    assert "Total: 2 task(s)" in result.output

    raw = invoke("ls", "--raw")
    lines = raw.output.splitlines()
    assert lines[0].startswith(f"{parent.id}: [ ] Groceries")
    assert lines[1].startswith("  ")
    assert lines[1].strip().endswith("[ ] Milk")

    data = json.loads(invoke("ls", "--json").output)
    assert [task["name"] for task in data] == ["Groceries", "Milk"]
    assert data[0]["children"] == [data[1]["id"]]


def test_ls_all_shows_done_tasks():
    invoke("add", "Finished")
    task = only_task()
    invoke("done", task.id)
    assert "Finished" not in invoke("ls").output
    assert "Finished" in invoke("ls", "--all").output


def test_ls_invalid_view():
    result = invoke("ls", "--view", "calendar")
    assert result.exit_code == 1
    assert "Invalid view" in result.output


def test_ls_today_view():
    invoke("add", "Pay rent", "--due", "today")
    invoke("add", "Someday")
    result = invoke("ls", "--view", "today", "--raw")
    assert result.exit_code == 0, result.output
    assert "Pay rent" in result.output
    assert "Someday" not in result.output


def test_show_task():
    invoke("add", "Write report")
    task = only_task()
    result = invoke("show", task.id[:3])
    assert result.exit_code == 0, result.output
    assert "Write report" in result.output
    assert task.id in result.output

    data = json.loads(invoke("show", task.id, "--json").output)
    assert data["id"] == task.id


def test_show_unknown_task():
    result = invoke("show", "nope")
    assert result.exit_code == 1
    assert "Error" in result.output
    assert "not found" in result.output


# --- changes ---

def test_rename_done_and_note():
    invoke("add", "Old name")
    task = only_task()

    assert invoke("rename", task.id, "New name").exit_code == 0
    assert invoke("note", task.id, "call first").exit_code == 0
    result = invoke("done", task.id)
    assert result.exit_code == 0, result.output
    assert "Completed: New name" in result.output

    stored = service.get_task(task.id)
    assert stored.name == "New name"
    assert stored.info.notes == "call first"
    assert stored.done


def test_done_twice_fails():
    invoke("add", "Once")
    task = only_task()
    invoke("done", task.id)
    result = invoke("done", task.id)
    assert result.exit_code == 1
    assert "already done" in result.output


def test_due_set_and_clear():
    invoke("add", "Report")
    task = only_task()

    result = invoke("due", task.id, "fri")
    assert result.exit_code == 0, result.output
    assert "due friday" in result.output
    assert service.get_task(task.id).due.weekday() == 4

    result = invoke("due", task.id, "--clear")
    assert result.exit_code == 0, result.output
    assert service.get_task(task.id).due is None


def test_due_bad_text():
    invoke("add", "Report")
    task = only_task()
    result = invoke("due", task.id, "next week-ish")
    assert result.exit_code == 1
    assert "Could not parse date" in result.output


def test_category_repeat_and_log():
    invoke("add", "Exercise")
    task = only_task()

    assert invoke("category", task.id, "health").exit_code == 0
    result = invoke("repeat", task.id)
    assert result.exit_code == 0, result.output
    assert "repeats" in result.output
    result = invoke("log", task.id, "30")
    assert result.exit_code == 0, result.output
    assert "total 30m" in result.output

    stored = service.get_task(task.id)
    assert stored.info.category == "health"
    assert stored.info.repeats

    invoke("repeat", task.id, "--off")
    assert not service.get_task(task.id).info.repeats


def test_log_rejects_non_positive_minutes():
    invoke("add", "Write")
    task = only_task()
    result = invoke("log", task.id, "0")
    assert result.exit_code == 1
    assert "Error" in result.output


def test_mv_positions():
    invoke("add", "A")
    invoke("add", "B")
    a, b = service.all_tasks()

    result = invoke("mv", b.id, a.id, "--above")
    assert result.exit_code == 0, result.output
    assert [t.id for t in service.all_tasks()] == [b.id, a.id]

    assert invoke("mv", b.id, a.id).exit_code == 0
    assert service.get_task(b.id).parent_id == a.id

    assert invoke("mv", b.id, "root").exit_code == 0
    assert service.get_task(b.id).parent_id == "root"


def test_mv_rejects_conflicting_flags():
    invoke("add", "A")
    invoke("add", "B")
    a, b = service.all_tasks()
    result = invoke("mv", b.id, a.id, "--above", "--below")
    assert result.exit_code == 1
    assert "only one of" in result.output


def test_mv_into_own_subtree_fails():
    invoke("add", "A")
    a = only_task()
    invoke("add", "B", "--under", a.id)
    b = service.get_task(a.id).children[0]
    result = invoke("mv", a.id, b.id)
    assert result.exit_code == 1
    assert "own subtree" in result.output


def test_rm_leaf_without_prompt():
    invoke("add", "Trash")
    task = only_task()
    result = invoke("rm", task.id)
    assert result.exit_code == 0, result.output
    assert service.all_tasks() == []


def test_rm_with_subtasks_asks_first():
    invoke("add", "Parent")
    parent = only_task()
    invoke("add", "Child", "--under", parent.id)

    result = invoke("rm", parent.id, input="n\n")
    assert "Cancelled" in result.output
    assert len(service.all_tasks()) == 2

    result = invoke("rm", parent.id, "--yes")
    assert result.exit_code == 0, result.output
    assert "2 task(s)" in result.output
    assert service.all_tasks() == []


def test_archive_and_restore():
    invoke("add", "Old project")
    task = only_task()
    assert "Archived" in invoke("archive", task.id).output
    assert "Old project" not in invoke("ls").output
    assert "Restored" in invoke("archive", task.id, "--undo").output


# --- system ---

def test_version():
    result = invoke("version")
    assert result.exit_code == 0
    assert f"Taskman v{__version__}" in result.output


def test_help_lists_commands():
    result = invoke("help")
    assert result.exit_code == 0
    for command in ("add", "ls", "due", "mv", "repeat"):
        assert command in result.output


# --- real program ---

def run_cli(*args, tmp_path, **kwargs):
    """Run `python -m taskman` with its task file and logs inside tmp_path."""
    env = dict(os.environ)
    env["TASKMAN_FILE"] = str(tmp_path / "tasks.json")
    env["TASKMAN_LOG_DIR"] = str(tmp_path / "logs")
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")]))
    kwargs.setdefault("capture_output", True)
    kwargs.setdefault("text", True)
    kwargs.setdefault("encoding", "utf-8")
    kwargs.setdefault("errors", "replace")
    return subprocess.run([sys.executable, "-m", "taskman", *args], env=env, cwd=tmp_path, **kwargs)


def test_program_uses_configured_task_file(tmp_path):
    result = run_cli("add", "From subprocess", tmp_path=tmp_path)
    assert result.returncode == 0, result.stderr
    data = json.loads((tmp_path / "tasks.json").read_text(encoding="utf-8"))
    assert [node["name"] for node in data["nodes"].values()] == ["", "From subprocess"]
    assert (tmp_path / "logs" / "taskman.log").exists()


def test_no_command_starts_repl(tmp_path):
    result = run_cli(tmp_path=tmp_path, input="add Walk the dog\nls\nexit\n")
    assert result.returncode == 0, result.stderr
    assert "Taskman REPL" in result.stdout
    assert "Walk the dog" in result.stdout
    assert "Goodbye!" in result.stdout
