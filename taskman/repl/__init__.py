"""
FILE: taskman/repl/__init__.py
PURPOSE: REPL package for interactive task management
EXPORTS:
  - main() (from repl.main)
DEPENDENCIES:
  - prompt_toolkit (REPL interface)
  - rich (formatted output)
  - taskman.core.service (business logic)
NOTES:
  - Entry point for interactive mode
  - Provides autocomplete for commands and task IDs, and command history
"""

from .main import main

__all__ = ["main"]
