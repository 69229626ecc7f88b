"""Tests for display helpers and the due date prompt preview."""

from datetime import datetime, timedelta

import pytest
from prompt_toolkit.document import Document
from prompt_toolkit.validation import ValidationError

from taskman.core.recurrence import DayOffset, Weekday, Day
from taskman.core.store import TaskStore
from taskman.formatting import (
    TaskFormatter,
    days_until,
    due_style,
    format_due,
    format_duration,
    format_rules,
)
from taskman.repl.dateprompt import DueDateValidator, preview_due

NOW = datetime(2026, 3, 2, 15, 30)


def test_days_until_counts_from_start_of_today():
    assert days_until(datetime(2026, 3, 2, 8), NOW) == 0
    assert days_until(datetime(2026, 3, 3), NOW) == 1
    assert days_until(datetime(2026, 3, 1, 23), NOW) == -1


def test_format_due_buckets():
    cases = [
        (None, ""),
        (NOW - timedelta(days=1), "overdue"),
        (NOW - timedelta(hours=2), "today"),
        (NOW + timedelta(days=1), "1 day"),
        (NOW + timedelta(days=5), "5 days"),
        (NOW + timedelta(days=14), "2 weeks"),
        (NOW + timedelta(days=30), "4 weeks"),
        (NOW + timedelta(days=40), "1 month"),
        (NOW + timedelta(days=100), "3 months"),
    ]
    for due, expected in cases:
        assert format_due(due, NOW) == expected, due


def test_due_style_gets_calmer_further_out():
    assert due_style(None, NOW) == "dim"
    assert due_style(NOW, NOW) == "bold red"
    assert due_style(NOW + timedelta(days=1), NOW) == "dark_orange"
    assert due_style(NOW + timedelta(days=5), NOW) == "yellow"
    assert due_style(NOW + timedelta(days=20), NOW) == "dim"


def test_format_duration():
    assert format_duration(timedelta(minutes=12)) == "12m"
    assert format_duration(timedelta(minutes=65)) == "1h 05m"
    assert format_duration(timedelta()) == "0m"


def test_format_rules():
    assert format_rules([]) == "-"
    assert format_rules([DayOffset(2), Weekday(Day.MONDAY)]) == "in 2 days, monday"


def test_raw_lines_indent_by_depth():
    store = TaskStore(now=NOW)
    for task_id, name in (("a", "Trip"), ("b", "Pack"), ("c", "Book hotel")):
        store.create(task_id, NOW)
        store.rename(task_id, name)
    store.move("b", "a", "into")
    store.complete("c", NOW)

    views = list(store.root().walk())[1:]
    assert TaskFormatter.to_raw_lines(views, NOW) == [
        "a: [ ] Trip",
        "  b: [ ] Pack",
        "c: [✓] Book hotel",
    ]


def test_json_dict_has_computed_fields():
    store = TaskStore(now=NOW)
    store.create("a", NOW)
    store.set_due("a", [DayOffset(1)], NOW)
    data = TaskFormatter.to_json_dict(store.view("a"))
    assert data["id"] == "a"
    assert data["parent"] == "root"
    assert data["children"] == []
    assert data["done"] is False
    assert data["due"] == (NOW + timedelta(days=1)).isoformat()


# --- Due date prompt ---

def test_preview_due():
    now = datetime(2026, 3, 2, 9)
    assert preview_due("", now) == ""
    assert preview_due("blah", now) == "✗"
    assert preview_due("0", now) == "✓ no due date"
    assert preview_due("tomorrow", now) == "✓ in 1 day → Tue 03 Mar 2026"
    assert preview_due("fri", now) == "✓ friday → Fri 06 Mar 2026"


def test_validator_accepts_dates_and_empty_input():
    validator = DueDateValidator(NOW)
    validator.validate(Document(""))
    validator.validate(Document("in 2 weeks"))
    with pytest.raises(ValidationError):
        validator.validate(Document("whenever"))
