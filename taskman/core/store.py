"""
FILE: taskman/core/store.py
PURPOSE: Task tree store: owns the task graph and enforces its invariants
EXPORTS:
  - TaskStore (class)
DEPENDENCIES:
  - copy, datetime, logging (stdlib)
  - taskman.core.models (Info, TimeLog, Position, TaskView)
  - taskman.core.recurrence (Rule)
  - taskman.core.constants (ROOT_ID)
  - taskman.core.exceptions (TaskNotFoundError, AlreadyExistsError, ...)
NOTES:
  - The tree lives in three dicts keyed by task ID: node data, parent
    pointer (absent only for root) and ordered child list per parent
  - Moves are list splices, never pointer rewiring
  - Every mutation validates all preconditions before its first write, so a
    failed call leaves the store untouched
  - Invariants (checked by check() on load, kept by every mutation):
      1. exactly one node has no parent: the root
      2. every non-root node appears in its parent's child list exactly once
      3. no cycles, every node is reachable from root
      4. repeats=True only on direct children of root
      5. only leaf tasks carry time logs
  - Read accessors hand out copies; root() builds an immutable TaskView tree
  - Not thread-safe: callers serialize access (the CLI and REPL are single-threaded)
"""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .constants import ROOT_ID
from .exceptions import (
    AlreadyExistsError,
    AmbiguousIdError,
    AnchorNotFoundError,
    InvalidInputError,
    InvariantViolationError,
    ParentNotFoundError,
    StoreLoadError,
    TaskNotFoundError,
)
from .models import Info, Position, TaskView, TimeLog
from .recurrence import Rule

logger = logging.getLogger(__name__)


class TaskStore:
    """A tree of tasks under a single reserved root."""

    def __init__(self, now: Optional[datetime] = None):
        self._nodes: Dict[str, Info] = {ROOT_ID: Info(created=now or datetime.now())}
        self._parent: Dict[str, str] = {}
        self._children: Dict[str, List[str]] = {}

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._nodes

    def __len__(self) -> int:
        """Number of tasks, not counting the root."""
        return len(self._nodes) - 1

    # --- Read API ---

    def exists(self, task_id: str) -> bool:
        return task_id in self._nodes

    def get(self, task_id: str) -> Info:
        """
        Return a copy of a task's data.

        Raises:
            TaskNotFoundError: If task_id doesn't exist
        """
        return copy.deepcopy(self._require(task_id))

    def get_children(self, task_id: str) -> List[str]:
        """Ordered child IDs; empty for leaves and unknown IDs."""
        return list(self._children.get(task_id, []))

    def get_parent(self, task_id: str) -> Optional[str]:
        """Parent ID; None for the root and unknown IDs."""
        return self._parent.get(task_id)

    def ids(self) -> List[str]:
        """All task IDs except root, in outline (depth-first) order."""
        return list(self.walk())

    def walk(self, task_id: str = ROOT_ID) -> Iterator[str]:
        """Yield the IDs below task_id depth first, parents before children."""
        for child in self._children.get(task_id, []):
            yield child
            yield from self.walk(child)

    def depth(self, task_id: str) -> int:
        """Number of edges between task_id and root (root itself is 0)."""
        self._require(task_id)
        depth = 0
        while task_id in self._parent:
            task_id = self._parent[task_id]
            depth += 1
        return depth

    def resolve_id(self, prefix: str) -> str:
        """
        Resolve a full task ID or a unique prefix of one.

        Args:
            prefix: Task ID as typed by a user

        Returns:
            The matching task ID

        Raises:
            TaskNotFoundError: If nothing matches
            AmbiguousIdError: If the prefix matches more than one task
        """
        if prefix in self._nodes:
            return prefix
        matches = [task_id for task_id in self._nodes if task_id != ROOT_ID and task_id.startswith(prefix)]
        if not prefix or not matches:
            raise TaskNotFoundError(prefix)
        if len(matches) > 1:
            raise AmbiguousIdError(prefix, matches)
        return matches[0]

    def next_due(self, task_id: str) -> Optional[datetime]:
        """
        Effective due date of a task.

        A task without rules of its own inherits the nearest ancestor's due
        date, and a task with rules is still clamped by an earlier ancestor
        due date.

        Returns:
            The earlier of the task's own next due date and its parent's
            effective due date, or None when neither exists (or task_id is unknown)
        """
        info = self._nodes.get(task_id)
        if info is None:
            return None

        own = info.next_due()
        parent_id = self._parent.get(task_id)
        inherited = self.next_due(parent_id) if parent_id is not None else None

        if inherited is not None and (own is None or inherited < own):
            return inherited
        return own

    def root(self) -> TaskView:
        """Materialize the whole tree as an immutable TaskView."""
        return self._view(ROOT_ID)

    def view(self, task_id: str) -> TaskView:
        """
        Materialize one task and its subtree.

        Raises:
            TaskNotFoundError: If task_id doesn't exist
        """
        self._require(task_id)
        return self._view(task_id)

    def _view(self, task_id: str) -> TaskView:
        return TaskView(
            id=task_id,
            info=copy.deepcopy(self._nodes[task_id]),
            parent_id=self._parent.get(task_id),
            due=self.next_due(task_id),
            children=tuple(self._view(child) for child in self._children.get(task_id, [])),
        )

    # --- Mutations ---

    def create(self, task_id: str, now: datetime) -> None:
        """
        Create a task as the last child of root.

        Raises:
            InvalidInputError: If task_id is empty
            AlreadyExistsError: If task_id exists (the root ID always does)
        """
        if not task_id:
            raise InvalidInputError("Task ID cannot be empty")
        if task_id in self._nodes:
            raise AlreadyExistsError(task_id)

        self._nodes[task_id] = Info(created=now)
        self._attach(ROOT_ID, task_id, len(self._children.get(ROOT_ID, [])))
        logger.debug("Created task %s", task_id)

    def rename(self, task_id: str, name: str) -> None:
        self._require(task_id).name = name
        logger.debug("Renamed task %s to %r", task_id, name)

    def set_notes(self, task_id: str, notes: str) -> None:
        self._require(task_id).notes = notes

    def set_archived(self, task_id: str, archived: bool) -> None:
        self._require(task_id).archived = archived

    def set_folded(self, task_id: str, folded: bool) -> None:
        self._require(task_id).folded = folded

    def set_category(self, task_id: str, category: str) -> None:
        """
        Set the category of a task and all of its descendants.

        Descendant categories are overwritten, not merged.

        Raises:
            TaskNotFoundError: If task_id doesn't exist
            InvariantViolationError: If task_id is the root
        """
        self._require(task_id)
        if task_id == ROOT_ID:
            raise InvariantViolationError("Cannot set the category of the root task")

        self._nodes[task_id].category = category
        for descendant in self.walk(task_id):
            self._nodes[descendant].category = category
        logger.debug("Set category of %s (and descendants) to %r", task_id, category)

    def set_repeats(self, task_id: str, repeats: bool) -> None:
        """
        Mark a task as repeating or not.

        Raises:
            TaskNotFoundError: If task_id doesn't exist
            InvariantViolationError: If task_id is not a direct child of root
        """
        info = self._require(task_id)
        if self._parent.get(task_id) != ROOT_ID:
            raise InvariantViolationError(
                f"Only top-level tasks can repeat, {task_id} is not a direct child of root"
            )
        info.repeats = repeats
        logger.debug("Set repeats of %s to %s", task_id, repeats)

    def set_due(self, task_id: str, rules: Sequence[Rule], now: datetime) -> None:
        """Replace a task's due rules; now becomes their reference instant."""
        info = self._require(task_id)
        info.due_rules = list(rules)
        info.due_rules_changed_at = now
        logger.debug("Set due rules of %s to %r", task_id, info.due_rules)

    def log(self, task_id: str, start: datetime, end: datetime) -> None:
        """
        Record a time-tracking interval. Overlaps are not checked.

        Raises:
            TaskNotFoundError: If task_id doesn't exist
            InvariantViolationError: If the task has children
        """
        info = self._require(task_id)
        if self._children.get(task_id):
            raise InvariantViolationError(f"Cannot log time on {task_id}: only leaf tasks can be logged")
        info.logs.append(TimeLog(start=start, end=end))

    def complete(self, task_id: str, at: datetime) -> None:
        """
        Complete a task, its whole subtree, and any ancestor left with only done children.

        Args:
            task_id: Task to complete
            at: Completion instant

        Raises:
            TaskNotFoundError: If task_id doesn't exist
            InvariantViolationError: If the task is the root, is already done,
                or repeats and is not due yet at `at`

        Notes:
            - Descendants are completed top-down; ones already done keep their history
            - Completing a repeating task moves its rules' reference instant
              to `at`, which shifts its next due date forward
            - Upward propagation stops below root and at repeating ancestors
        """
        info = self._require(task_id)
        if task_id == ROOT_ID:
            raise InvariantViolationError("Cannot complete the root task")
        if info.done:
            raise InvariantViolationError(f"Task {task_id} is already done")
        if info.repeats:
            due = self.next_due(task_id)
            if due is not None and at < due:
                raise InvariantViolationError(
                    f"Cannot complete repeating task {task_id} before it is due ({due.isoformat()})"
                )

        self._mark_done(task_id, at)
        if info.repeats:
            info.due_rules_changed_at = at
        self._propagate_done_up(task_id, at)
        logger.debug("Completed task %s at %s", task_id, at.isoformat())

    def _mark_done(self, task_id: str, at: datetime) -> None:
        info = self._nodes[task_id]
        if not info.done:
            info.completion_history.append(at)
        for child in self._children.get(task_id, []):
            self._mark_done(child, at)

    def _propagate_done_up(self, task_id: str, at: datetime) -> None:
        parent_id = self._parent.get(task_id)
        if parent_id is None or parent_id == ROOT_ID:
            return
        parent = self._nodes[parent_id]
        if parent.repeats or parent.done:
            return
        if not all(self._nodes[child].done for child in self._children.get(parent_id, [])):
            return
        parent.completion_history.append(at)
        logger.debug("All children of %s done, completed it too", parent_id)
        self._propagate_done_up(parent_id, at)

    def move(self, target: str, anchor: str, position: Position) -> None:
        """
        Move a task (with its subtree) next to or into another task.

        Args:
            target: Task to move
            anchor: Task the new position is relative to
            position: ABOVE/BELOW insert into the anchor's parent right
                before/after the anchor, INTO appends as the anchor's last child

        Raises:
            TaskNotFoundError: If target doesn't exist
            AnchorNotFoundError: If anchor doesn't exist
            ParentNotFoundError: If target is the root, or the anchor is the
                root and position is ABOVE/BELOW
            InvariantViolationError: If the move would put target inside its
                own subtree, or a repeating task below another task

        Notes:
            - Detach and attach happen only after every check passed
            - Correction pass: if the moved task is not done, every done
              ancestor above its new position loses its last completion,
              stopping at the first ancestor that is not done
        """
        if target not in self._nodes:
            raise TaskNotFoundError(target)
        if anchor not in self._nodes:
            raise AnchorNotFoundError(anchor)
        if target not in self._parent:
            raise ParentNotFoundError(target)

        position = Position(position)
        if position is Position.INTO:
            new_parent = anchor
        else:
            new_parent = self._parent.get(anchor)
            if new_parent is None:
                raise ParentNotFoundError(anchor)
            if anchor == target:
                # Above or below itself is where it already is
                return

        if new_parent == target or self._is_ancestor(target, new_parent):
            raise InvariantViolationError(f"Cannot move {target} into its own subtree")
        if self._nodes[target].repeats and new_parent != ROOT_ID:
            raise InvariantViolationError(
                f"Cannot move repeating task {target} below {new_parent}: only top-level tasks can repeat"
            )

        self._detach(target)
        siblings = self._children.get(new_parent, [])
        if position is Position.INTO:
            index = len(siblings)
        else:
            index = siblings.index(anchor) + (1 if position is Position.BELOW else 0)
        self._attach(new_parent, target, index)
        logger.debug("Moved %s %s %s", target, position.value, anchor)

        self._undo_stale_completions(target)

    def _undo_stale_completions(self, task_id: str) -> None:
        if self._nodes[task_id].done:
            return
        parent_id = self._parent.get(task_id)
        while parent_id is not None:
            parent = self._nodes[parent_id]
            if not parent.done:
                break
            parent.completion_history.pop()
            logger.debug("Un-completed %s after an unfinished task moved in", parent_id)
            parent_id = self._parent.get(parent_id)

    def delete(self, task_id: str) -> None:
        """
        Delete a task and its entire subtree.

        Raises:
            TaskNotFoundError: If task_id doesn't exist (including a second delete)
            InvariantViolationError: If task_id is the root
        """
        self._require(task_id)
        if task_id == ROOT_ID:
            raise InvariantViolationError("Cannot delete the root task")

        self._detach(task_id)
        self._delete_subtree(task_id)
        logger.debug("Deleted task %s", task_id)

    def _delete_subtree(self, task_id: str) -> None:
        for child in self._children.get(task_id, []):
            self._delete_subtree(child)
        self._children.pop(task_id, None)
        self._parent.pop(task_id, None)
        del self._nodes[task_id]

    # --- Structure helpers ---

    def _require(self, task_id: str) -> Info:
        info = self._nodes.get(task_id)
        if info is None:
            raise TaskNotFoundError(task_id)
        return info

    def _is_ancestor(self, ancestor: str, task_id: str) -> bool:
        current = self._parent.get(task_id)
        while current is not None:
            if current == ancestor:
                return True
            current = self._parent.get(current)
        return False

    def _detach(self, child: str) -> None:
        parent = self._parent.pop(child)
        siblings = self._children[parent]
        siblings.remove(child)
        if not siblings:
            del self._children[parent]

    def _attach(self, parent: str, child: str, index: int) -> None:
        self._parent[child] = parent
        self._children.setdefault(parent, []).insert(index, child)

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the three-map document: nodes, parent, children."""
        return {
            "nodes": {task_id: info.to_dict() for task_id, info in self._nodes.items()},
            "parent": dict(self._parent),
            "children": {task_id: list(ids) for task_id, ids in self._children.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskStore":
        """
        Rebuild a store from to_dict() output and validate it.

        Raises:
            StoreLoadError: If the document is malformed
            InvariantViolationError: If the tree breaks an invariant
        """
        if not isinstance(data, dict):
            raise StoreLoadError("Task data must be a JSON object")

        nodes = data.get("nodes")
        parent = data.get("parent", {})
        children = data.get("children", {})
        if not isinstance(nodes, dict) or not isinstance(parent, dict) or not isinstance(children, dict):
            raise StoreLoadError("Task data must contain 'nodes', 'parent' and 'children' objects")
        if not all(isinstance(ids, list) for ids in children.values()):
            raise StoreLoadError("Every 'children' entry must be a list of task IDs")
        if not all(isinstance(task_id, str) for task_id in parent.values()):
            raise StoreLoadError("Every 'parent' entry must be a task ID")
        if not all(isinstance(task_id, str) for ids in children.values() for task_id in ids):
            raise StoreLoadError("Every 'children' list must contain only task IDs")

        store = cls()
        store._nodes = {task_id: Info.from_dict(info) for task_id, info in nodes.items()}
        store._parent = dict(parent)
        store._children = {task_id: list(ids) for task_id, ids in children.items() if ids}
        store.check()
        return store

    def check(self) -> None:
        """
        Validate every tree invariant.

        Raises:
            InvariantViolationError: Describing the first violation found
        """
        if ROOT_ID not in self._nodes:
            raise InvariantViolationError("Task tree has no root")
        if ROOT_ID in self._parent:
            raise InvariantViolationError("The root task cannot have a parent")

        orphans = sorted(task_id for task_id in self._nodes if task_id not in self._parent and task_id != ROOT_ID)
        if orphans:
            raise InvariantViolationError(
                f"More than one root: {', '.join(orphans)} have no parent"
            )

        for child, parent in self._parent.items():
            if child not in self._nodes:
                raise InvariantViolationError(f"Parent entry for unknown task {child}")
            if parent not in self._nodes:
                raise InvariantViolationError(f"Task {child} has unknown parent {parent}")
            if self._children.get(parent, []).count(child) != 1:
                raise InvariantViolationError(
                    f"Task {child} must appear exactly once in the children of {parent}"
                )

        for parent, ids in self._children.items():
            for child in ids:
                if self._parent.get(child) != parent:
                    raise InvariantViolationError(f"Task {child} is listed under {parent} but its parent differs")

        reachable = {ROOT_ID, *self.walk()}
        unreachable = sorted(set(self._nodes) - reachable)
        if unreachable:
            raise InvariantViolationError(f"Tasks not reachable from root (cycle): {', '.join(unreachable)}")

        for task_id, info in self._nodes.items():
            if info.repeats and self._parent.get(task_id) != ROOT_ID:
                raise InvariantViolationError(f"Task {task_id} repeats but is not a direct child of root")
            if info.logs and self._children.get(task_id):
                raise InvariantViolationError(f"Task {task_id} has time logs but is not a leaf")
