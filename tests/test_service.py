"""
Tests for the service layer (load, change, save).

Each test gets its own task file under tmp_path.
"""

import random
from datetime import datetime, timedelta

import pytest

from taskman.core import service
from taskman.core.constants import ID_ALPHABET, ID_LENGTH, ROOT_ID
from taskman.core.exceptions import (
    AmbiguousIdError,
    InvalidInputError,
    InvariantViolationError,
    ParseFailureError,
    TaskNotFoundError,
)
from taskman.core.recurrence import DayOffset, Once
from taskman.core.store import TaskStore

T0 = datetime(2026, 3, 2, 9, 0)


def add(name, parent=None, due=None):
    return service.create_task(name, parent_ref=parent, due_text=due, now=T0)


# --- IDs ---

def test_new_task_id_shape():
    task_id = service.new_task_id(TaskStore(), random.Random(1))
    assert len(task_id) == ID_LENGTH
    assert all(ch in ID_ALPHABET for ch in task_id)


def test_new_task_id_skips_taken_ids():
    first = service.new_task_id(TaskStore(), random.Random(7))
    store = TaskStore()
    store.create(first, T0)
    second = service.new_task_id(store, random.Random(7))
    assert second != first


# --- Create ---

def test_create_task_persists(temp_data_path):
    task = add("  Buy milk  ")
    assert task.name == "Buy milk"
    assert task.parent_id == ROOT_ID
    assert temp_data_path.exists()
    assert service.get_task(task.id).name == "Buy milk"


def test_create_task_empty_name_fails(temp_data_path):
    with pytest.raises(InvalidInputError):
        add("   ")
    assert not temp_data_path.exists()


def test_create_task_under_parent_by_prefix():
    parent = add("Groceries")
    child = add("Milk", parent=parent.id[:5])
    assert child.parent_id == parent.id
    assert [c.id for c in service.get_task(parent.id).children] == [child.id]


def test_create_task_inherits_parent_category():
    parent = add("Work")
    service.set_category(parent.id, "job")
    child = add("Report", parent=parent.id)
    assert child.info.category == "job"


def test_create_task_with_due_text():
    task = add("Pay rent", due="in 3 days")
    assert task.info.due_rules == [DayOffset(3)]
    assert task.due == T0 + timedelta(days=3)


def test_create_task_bad_due_text_creates_nothing():
    with pytest.raises(ParseFailureError):
        add("Pay rent", due="someday")
    assert service.all_tasks() == []


def test_create_task_unknown_parent():
    with pytest.raises(TaskNotFoundError):
        add("Orphan", parent="zzzzzz")


# --- Lookup ---

def test_get_task_ambiguous_prefix(monkeypatch):
    ids = iter(["abc11111", "abc22222"])
    monkeypatch.setattr(service, "new_task_id", lambda store, rng=None: next(ids))
    add("One")
    add("Two")
    with pytest.raises(AmbiguousIdError):
        service.get_task("abc")
    assert service.get_task("abc2").name == "Two"


def test_all_tasks_in_outline_order():
    a = add("A")
    b = add("B")
    c = add("C", parent=a.id)
    assert [t.id for t in service.all_tasks()] == [a.id, c.id, b.id]


# --- Mutations ---

def test_rename_and_notes():
    task = add("Old")
    assert service.rename_task(task.id, "New").name == "New"
    assert service.set_notes(task.id, " ask Sam ").info.notes == "ask Sam"
    with pytest.raises(InvalidInputError):
        service.rename_task(task.id, "")


def test_complete_task_and_parent_propagation():
    parent = add("Trip")
    child = add("Pack", parent=parent.id)
    done = service.complete_task(child.id, now=T0)
    assert done.done
    assert service.get_task(parent.id).done


def test_complete_repeating_task_advances_due():
    habit = add("Water plants", due="7 days")
    service.set_repeats(habit.id)
    with pytest.raises(InvariantViolationError):
        service.complete_task(habit.id, now=T0 + timedelta(days=3))
    after = service.complete_task(habit.id, now=T0 + timedelta(days=8))
    assert after.due == T0 + timedelta(days=15)
    assert not after.done


def test_set_due_and_clear_due():
    task = add("Report")
    updated = service.set_due_from_text(task.id, "20/04", now=T0)
    assert updated.info.due_rules == [Once(datetime(2026, 4, 20))]
    assert service.clear_due(task.id, now=T0).due is None


def test_set_due_bad_text_keeps_old_rule():
    task = add("Report", due="tomorrow")
    with pytest.raises(ParseFailureError):
        service.set_due_from_text(task.id, "whenever", now=T0)
    assert service.get_task(task.id).info.due_rules == [DayOffset(1)]


def test_set_due_beyond_calendar_range_is_rejected():
    task = add("Report", due="tomorrow")
    for text in ("in 9999 years", "9999 years ago"):
        with pytest.raises(ParseFailureError):
            service.set_due_from_text(task.id, text, now=T0)
    assert service.get_task(task.id).info.due_rules == [DayOffset(1)]
    assert service.list_outline().children[0].id == task.id


def test_set_repeats_on_nested_task_fails():
    parent = add("Parent")
    child = add("Child", parent=parent.id)
    with pytest.raises(InvariantViolationError):
        service.set_repeats(child.id)


def test_log_time():
    task = add("Write")
    logged = service.log_time(task.id, 25, now=T0)
    assert logged.info.time_logged() == timedelta(minutes=25)
    assert logged.info.logs[0].end == T0
    for minutes in (0, -5):
        with pytest.raises(InvalidInputError):
            service.log_time(task.id, minutes, now=T0)


def test_move_task_positions():
    a = add("A")
    b = add("B")
    c = add("C")
    service.move_task(c.id, a.id, "above")
    assert [t.id for t in service.list_outline().children] == [c.id, a.id, b.id]
    moved = service.move_task(b.id, a.id)
    assert moved.parent_id == a.id
    service.move_task(b.id, "root", "into")
    assert service.get_task(b.id).parent_id == ROOT_ID


def test_move_task_invalid_position():
    a = add("A")
    b = add("B")
    with pytest.raises(InvalidInputError):
        service.move_task(a.id, b.id, "beside")


def test_delete_task_counts_subtree():
    a = add("A")
    b = add("B", parent=a.id)
    add("C", parent=b.id)
    keep = add("Keep")
    assert service.delete_task(a.id) == 3
    assert [t.id for t in service.all_tasks()] == [keep.id]


def test_archive_and_fold():
    task = add("Old project")
    assert service.set_archived(task.id).info.archived
    assert not service.set_archived(task.id, False).info.archived
    assert service.set_folded(task.id).info.folded


# --- Views ---

def test_outline_hides_done_and_archived_by_default():
    open_task = add("Open")
    done_task = add("Done")
    archived = add("Archived")
    add("Under archived", parent=archived.id)
    service.complete_task(done_task.id, now=T0)
    service.set_archived(archived.id)

    visible = [t.id for t in service.list_outline().children]
    assert visible == [open_task.id]

    everything = service.list_outline(include_all=True)
    assert [t.id for t in everything.children] == [open_task.id, done_task.id, archived.id]
    assert len(everything.children[2].children) == 1


def test_today_lists_due_and_overdue_tasks():
    overdue = add("Overdue", due="2 days ago")
    today = add("Today", due="today")
    add("Later", due="in 3 days")
    add("No due date")
    child = add("Inherits", parent=overdue.id)

    listed = [t.id for t in service.list_today(now=T0)]
    assert set(listed) == {overdue.id, child.id, today.id}
    assert listed[-1] == today.id


def test_today_skips_done_tasks():
    task = add("Done already", due="today")
    service.complete_task(task.id, now=T0)
    assert service.list_today(now=T0) == []


def test_habits_view():
    later = add("Stretch", due="in 5 days")
    sooner = add("Floss", due="tomorrow")
    undated = add("Read")
    add("Not a habit", due="tomorrow")
    for task in (later, sooner, undated):
        service.set_repeats(task.id)

    assert [t.id for t in service.list_habits()] == [sooner.id, later.id, undated.id]


def test_list_view_dispatch_and_validation():
    add("A", due="today")
    assert service.list_view("outline").id == ROOT_ID
    assert len(service.list_view("today", now=T0)) == 1
    assert service.list_view("habits") == []
    with pytest.raises(InvalidInputError):
        service.list_view("calendar")


def test_task_counts():
    add("Open", due="today")
    add("Also open")
    done = add("Done")
    service.complete_task(done.id, now=T0)
    assert service.task_counts(now=T0) == {"open": 2, "done": 1, "due": 1}
