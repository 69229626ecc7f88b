"""
FILE: taskman/core/models.py
PURPOSE: Domain models for task nodes, time logs and the read-only tree view
EXPORTS:
  - Position (enum: above, below, into)
  - TimeLog (dataclass)
  - Info (dataclass)
  - TaskView (frozen dataclass)
DEPENDENCIES:
  - dataclasses, datetime, enum, json (stdlib)
  - taskman.core.recurrence (rules, earliest, serialization)
  - taskman.core.exceptions (StoreLoadError)
NOTES:
  - Info holds a task's own data only; tree structure lives in TaskStore
  - All models have to_dict()/from_dict() for JSON serialization
  - Timestamps serialized as ISO-8601 strings
  - Missing optional fields default on load so older task files still open
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import StoreLoadError
from .recurrence import Rule, earliest, rule_from_dict, rule_to_dict


class Position(str, Enum):
    """Where a moved task lands relative to its anchor."""

    ABOVE = "above"
    BELOW = "below"
    INTO = "into"


@dataclass
class TimeLog:
    """A tracked interval of work on a leaf task."""

    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "TimeLog":
        return cls(
            start=datetime.fromisoformat(data["start"]),
            end=datetime.fromisoformat(data["end"]),
        )


@dataclass
class Info:
    """
    Data of a single task node.

    Attributes:
        created: Creation instant (never changes)
        name: Display text
        category: Free-text tag, shared by a task and all its descendants
        repeats: Whether the task recurs (direct children of root only)
        due_rules: Recurrence rules, the earliest result is the due date
        due_rules_changed_at: Reference instant for the rules
        completion_history: Every instant the task was completed
        logs: Time tracked on the task (leaf tasks only)
        notes: Free text notes
        archived: Hidden from default listings
        folded: Children hidden in tree listings
    """

    created: datetime
    name: str = ""
    category: str = ""
    repeats: bool = False
    due_rules: List[Rule] = field(default_factory=list)
    due_rules_changed_at: Optional[datetime] = None
    completion_history: List[datetime] = field(default_factory=list)
    logs: List[TimeLog] = field(default_factory=list)
    notes: str = ""
    archived: bool = False
    folded: bool = False

    @property
    def done(self) -> bool:
        """A task is done when it doesn't repeat and has been completed at least once."""
        return not self.repeats and len(self.completion_history) > 0

    @property
    def last_completed(self) -> Optional[datetime]:
        return self.completion_history[-1] if self.completion_history else None

    def next_due(self) -> Optional[datetime]:
        """Next due date from this task's own rules, ignoring ancestors."""
        if not self.due_rules:
            return None
        reference = self.due_rules_changed_at or self.created
        return earliest(self.due_rules, reference)

    def time_logged(self) -> timedelta:
        return sum((log.duration for log in self.logs), timedelta())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "created": self.created.isoformat(),
            "name": self.name,
            "category": self.category,
            "repeats": self.repeats,
            "due_rules": [rule_to_dict(rule) for rule in self.due_rules],
            "due_rules_changed_at": (
                self.due_rules_changed_at.isoformat() if self.due_rules_changed_at else None
            ),
            "completion_history": [at.isoformat() for at in self.completion_history],
            "logs": [log.to_dict() for log in self.logs],
            "notes": self.notes,
            "archived": self.archived,
            "folded": self.folded,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Info":
        """
        Build Info from a dict written by to_dict().

        Raises:
            StoreLoadError: If a required field is missing or a value is malformed
        """
        try:
            changed_at = data.get("due_rules_changed_at")
            return cls(
                created=datetime.fromisoformat(data["created"]),
                name=data.get("name", ""),
                category=data.get("category", ""),
                repeats=bool(data.get("repeats", False)),
                due_rules=[rule_from_dict(rule) for rule in data.get("due_rules", [])],
                due_rules_changed_at=datetime.fromisoformat(changed_at) if changed_at else None,
                completion_history=[
                    datetime.fromisoformat(at) for at in data.get("completion_history", [])
                ],
                logs=[TimeLog.from_dict(log) for log in data.get("logs", [])],
                notes=data.get("notes", ""),
                archived=bool(data.get("archived", False)),
                folded=bool(data.get("folded", False)),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StoreLoadError(f"Malformed task data: {e}")

    def to_json(self) -> str:
        """Serialize task data to JSON string."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class TaskView:
    """
    Read-only snapshot of a task and its subtree, built by TaskStore.root().

    Holds copies of the store's data: changing a view never changes the store.
    `due` is the effective due date (own rules clamped by ancestors).
    """

    id: str
    info: Info
    parent_id: Optional[str] = None
    due: Optional[datetime] = None
    children: Tuple["TaskView", ...] = ()

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def done(self) -> bool:
        return self.info.done

    def walk(self):
        """Yield this view and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()
