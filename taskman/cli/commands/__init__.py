"""
FILE: taskman/cli/commands/__init__.py
PURPOSE: CLI command modules
"""

# Export all command handlers for easy importing
from .tasks import (
    add,
    ls,
    show,
    rename,
    done,
    due,
    category,
    repeat,
    log,
    mv,
    rm,
    archive,
    note,
)
from .system import (
    version,
    help,
    repl,
)

__all__ = [
    "add",
    "ls",
    "show",
    "rename",
    "done",
    "due",
    "category",
    "repeat",
    "log",
    "mv",
    "rm",
    "archive",
    "note",
    "version",
    "help",
    "repl",
]
