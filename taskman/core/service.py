"""
FILE: taskman/core/service.py
PURPOSE: Business logic layer: one function per user-facing task operation
EXPORTS:
  - new_task_id(store, rng) -> str
  - get_task(task_ref) -> TaskView
  - create_task(name, parent_ref, due_text, now) -> TaskView
  - rename_task(task_ref, name) -> TaskView
  - complete_task(task_ref, now) -> TaskView
  - set_due_from_text(task_ref, text, now) -> TaskView
  - clear_due(task_ref, now) -> TaskView
  - set_category(task_ref, category) -> TaskView
  - set_repeats(task_ref, repeats) -> TaskView
  - log_time(task_ref, minutes, now) -> TaskView
  - move_task(task_ref, anchor_ref, position) -> TaskView
  - delete_task(task_ref) -> int
  - set_notes(task_ref, notes) -> TaskView
  - set_archived(task_ref, archived) -> TaskView
  - set_folded(task_ref, folded) -> TaskView
  - list_outline(include_all) -> TaskView
  - list_today(now, include_all) -> List[TaskView]
  - list_habits(include_all) -> List[TaskView]
  - list_view(view, now, include_all) -> TaskView | List[TaskView]
  - task_counts(now) -> Dict[str, int]
  - all_tasks() -> List[TaskView]
DEPENDENCIES:
  - taskman.core.repository (load_store, save_store)
  - taskman.core.store (TaskStore)
  - taskman.core.dateparse (parse_date)
  - taskman.core.models (Position, TaskView)
  - taskman.core.exceptions (InvalidInputError)
NOTES:
  - Every mutation loads the store, applies one change, saves, and returns a
    fresh view of the affected task
  - Task references may be a full ID or any unique prefix of one
  - Input is validated (and dates are parsed) before the store is touched
  - `now` parameters default to datetime.now() and exist for tests
"""

import dataclasses
import logging
import random
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Union

from . import repository
from .constants import (
    ID_ALPHABET,
    ID_LENGTH,
    ROOT_ID,
    VALID_VIEWS,
    VIEW_HABITS,
    VIEW_OUTLINE,
    VIEW_TODAY,
)
from .dateparse import parse_date
from .exceptions import InvalidInputError
from .models import Position, TaskView
from .recurrence import start_of_day
from .store import TaskStore

logger = logging.getLogger(__name__)

_rng = random.Random()


def new_task_id(store: TaskStore, rng: Optional[random.Random] = None) -> str:
    """
    Generate a random task ID not used in store.

    Args:
        store: Store the ID must be unique in
        rng: Random source (defaults to a module-level generator; tests pass a seeded one)

    Returns:
        An ID_LENGTH character alphanumeric string
    """
    rng = rng or _rng
    while True:
        task_id = "".join(rng.choice(ID_ALPHABET) for _ in range(ID_LENGTH))
        if task_id not in store:
            return task_id


def _clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise InvalidInputError("Task name cannot be empty")
    return name


def _resolve(store: TaskStore, task_ref: str) -> str:
    return store.resolve_id(task_ref.strip())


def get_task(task_ref: str) -> TaskView:
    """
    Fetch a task and its subtree.

    Raises:
        TaskNotFoundError: If nothing matches task_ref
        AmbiguousIdError: If task_ref is a prefix of several IDs
    """
    store = repository.load_store()
    return store.view(_resolve(store, task_ref))


def all_tasks() -> List[TaskView]:
    """Every task (without root) in outline order, for pickers and completion."""
    store = repository.load_store()
    return [store.view(task_id) for task_id in store.ids()]


def create_task(
    name: str,
    parent_ref: Optional[str] = None,
    due_text: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TaskView:
    """
    Create a task, optionally under a parent and with a due date.

    Args:
        name: Task name (required, must not be empty)
        parent_ref: Parent task ID or prefix (None = top level)
        due_text: Due date text understood by parse_date()
        now: Creation instant

    Returns:
        The new task

    Raises:
        InvalidInputError: If name is empty or whitespace-only
        ParseFailureError: If due_text can't be parsed
        TaskNotFoundError: If parent_ref doesn't match a task

    Notes:
        - New tasks are appended as the last child of their parent
        - A task created under a parent takes the parent's category, since a
          category always covers a whole subtree
    """
    name = _clean_name(name)
    now = now or datetime.now()
    rule = parse_date(due_text, now) if due_text else None

    store = repository.load_store()
    parent_id = _resolve(store, parent_ref) if parent_ref else ROOT_ID

    task_id = new_task_id(store)
    store.create(task_id, now)
    store.rename(task_id, name)
    if parent_id != ROOT_ID:
        store.move(task_id, parent_id, Position.INTO)
        category = store.get(parent_id).category
        if category:
            store.set_category(task_id, category)
    if rule is not None:
        store.set_due(task_id, [rule], now)

    repository.save_store(store)
    logger.info("Created task %s %r", task_id, name)
    return store.view(task_id)


def rename_task(task_ref: str, name: str) -> TaskView:
    """
    Rename a task.

    Raises:
        InvalidInputError: If name is empty
        TaskNotFoundError: If task_ref doesn't match a task
    """
    name = _clean_name(name)
    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    store.rename(task_id, name)
    repository.save_store(store)
    return store.view(task_id)


def complete_task(task_ref: str, now: Optional[datetime] = None) -> TaskView:
    """
    Complete a task (and its subtree, and ancestors left with nothing to do).

    Args:
        task_ref: Task ID or prefix
        now: Completion instant

    Returns:
        The task after completion; a repeating task comes back with its next due date

    Raises:
        TaskNotFoundError: If task_ref doesn't match a task
        InvariantViolationError: If the task is already done, or repeats and isn't due yet
    """
    now = now or datetime.now()
    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    store.complete(task_id, now)
    repository.save_store(store)
    logger.info("Completed task %s", task_id)
    return store.view(task_id)


def set_due_from_text(task_ref: str, text: str, now: Optional[datetime] = None) -> TaskView:
    """
    Parse due date text and make it the task's only due rule.

    Raises:
        ParseFailureError: If text can't be parsed (store is not touched)
        TaskNotFoundError: If task_ref doesn't match a task
    """
    now = now or datetime.now()
    rule = parse_date(text, now)

    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    store.set_due(task_id, [rule], now)
    repository.save_store(store)
    return store.view(task_id)


def clear_due(task_ref: str, now: Optional[datetime] = None) -> TaskView:
    """Remove all due rules of a task (it may still inherit a parent's due date)."""
    now = now or datetime.now()
    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    store.set_due(task_id, [], now)
    repository.save_store(store)
    return store.view(task_id)


def set_category(task_ref: str, category: str) -> TaskView:
    """
    Set the category of a task and its whole subtree.

    An empty category clears it.
    """
    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    store.set_category(task_id, category.strip())
    repository.save_store(store)
    return store.view(task_id)


def set_repeats(task_ref: str, repeats: bool = True) -> TaskView:
    """
    Turn repetition on or off.

    Raises:
        InvariantViolationError: If the task is not a top-level task
    """
    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    store.set_repeats(task_id, repeats)
    repository.save_store(store)
    return store.view(task_id)


def log_time(task_ref: str, minutes: int, now: Optional[datetime] = None) -> TaskView:
    """
    Log minutes of work ending now.

    Args:
        task_ref: Task ID or prefix
        minutes: Length of the interval (must be positive)
        now: End of the interval

    Raises:
        InvalidInputError: If minutes is not positive
        InvariantViolationError: If the task has children
    """
    if minutes <= 0:
        raise InvalidInputError(f"Minutes must be positive, got {minutes}")
    now = now or datetime.now()

    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    store.log(task_id, now - timedelta(minutes=minutes), now)
    repository.save_store(store)
    return store.view(task_id)


def move_task(task_ref: str, anchor_ref: str, position: Union[Position, str] = Position.INTO) -> TaskView:
    """
    Move a task next to or into another task.

    Args:
        task_ref: Task to move (ID or prefix)
        anchor_ref: Task the position is relative to (ID or prefix, "root" for top level)
        position: "above", "below" or "into"

    Raises:
        InvalidInputError: If position is not a valid position
        TaskNotFoundError, AnchorNotFoundError, ParentNotFoundError,
        InvariantViolationError: See TaskStore.move()
    """
    try:
        position = Position(position)
    except ValueError:
        valid = ", ".join(p.value for p in Position)
        raise InvalidInputError(f"Invalid position '{position}'. Must be one of: {valid}")

    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    anchor_id = _resolve(store, anchor_ref)
    store.move(task_id, anchor_id, position)
    repository.save_store(store)
    return store.view(task_id)


def delete_task(task_ref: str) -> int:
    """
    Delete a task and its subtree permanently.

    Returns:
        Number of tasks removed (the task plus its descendants)
    """
    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    count = 1 + len(list(store.walk(task_id)))
    store.delete(task_id)
    repository.save_store(store)
    logger.info("Deleted task %s (%d tasks)", task_id, count)
    return count


def set_notes(task_ref: str, notes: str) -> TaskView:
    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    store.set_notes(task_id, notes.strip())
    repository.save_store(store)
    return store.view(task_id)


def set_archived(task_ref: str, archived: bool = True) -> TaskView:
    """Archive (or restore) a task; archived subtrees are hidden from default listings."""
    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    store.set_archived(task_id, archived)
    repository.save_store(store)
    return store.view(task_id)


def set_folded(task_ref: str, folded: bool = True) -> TaskView:
    """Collapse (or expand) a task's children in outline listings."""
    store = repository.load_store()
    task_id = _resolve(store, task_ref)
    store.set_folded(task_id, folded)
    repository.save_store(store)
    return store.view(task_id)


# --- Views ---


def _visible(view: TaskView, include_all: bool) -> bool:
    return include_all or not (view.done or view.info.archived)


def _prune(view: TaskView, include_all: bool) -> TaskView:
    children = tuple(
        _prune(child, include_all) for child in view.children if _visible(child, include_all)
    )
    return dataclasses.replace(view, children=children)


def list_outline(include_all: bool = False) -> TaskView:
    """
    The task tree from root.

    Args:
        include_all: Keep done and archived tasks (hidden by default, with their subtrees)
    """
    store = repository.load_store()
    return _prune(store.root(), include_all)


def list_today(now: Optional[datetime] = None, include_all: bool = False) -> List[TaskView]:
    """
    Tasks due today or overdue, earliest first.

    Notes:
        - Due dates are effective ones, so children of an overdue task show up too
        - Done tasks never show; archived ones only with include_all
    """
    now = now or datetime.now()
    cutoff = start_of_day(now) + timedelta(days=1)

    store = repository.load_store()
    due = [
        view
        for view in store.root().walk()
        if view.id != ROOT_ID
        and not view.done
        and (include_all or not view.info.archived)
        and view.due is not None
        and view.due < cutoff
    ]
    return sorted(due, key=lambda view: view.due)


def list_habits(include_all: bool = False) -> List[TaskView]:
    """Repeating tasks, soonest due first (no due date last)."""
    store = repository.load_store()
    habits = [
        view
        for view in store.root().children
        if view.info.repeats and (include_all or not view.info.archived)
    ]
    return sorted(habits, key=lambda view: (view.due is None, view.due or datetime.min))


def list_view(
    view: str = VIEW_OUTLINE,
    now: Optional[datetime] = None,
    include_all: bool = False,
) -> Union[TaskView, List[TaskView]]:
    """
    Dispatch to a named listing.

    Raises:
        InvalidInputError: If view is not outline, today or habits
    """
    if view not in VALID_VIEWS:
        raise InvalidInputError(
            f"Invalid view '{view}'. Must be one of: {', '.join(VALID_VIEWS)}"
        )
    if view == VIEW_TODAY:
        return list_today(now, include_all)
    if view == VIEW_HABITS:
        return list_habits(include_all)
    return list_outline(include_all)


def task_counts(now: Optional[datetime] = None) -> Dict[str, int]:
    """Open, done and due-today totals for status lines."""
    now = now or datetime.now()
    cutoff = start_of_day(now) + timedelta(days=1)

    store = repository.load_store()
    views = [view for view in store.root().walk() if view.id != ROOT_ID]
    return {
        "open": sum(1 for view in views if not view.done),
        "done": sum(1 for view in views if view.done),
        "due": sum(1 for view in views if not view.done and view.due is not None and view.due < cutoff),
    }
