"""
FILE: taskman/core/__init__.py
PURPOSE: Task tree, recurrence rules, date parsing, persistence and services
EXPORTS:
  - TaskStore (from core.store)
  - Info, TimeLog, Position, TaskView (from core.models)
  - parse_date, try_parse_date (from core.dateparse)
NOTES:
  - No UI imports here; cli and repl depend on core, never the other way round
"""

from .dateparse import parse_date, try_parse_date
from .models import Info, Position, TaskView, TimeLog
from .store import TaskStore

__all__ = [
    "TaskStore",
    "Info",
    "TimeLog",
    "Position",
    "TaskView",
    "parse_date",
    "try_parse_date",
]
