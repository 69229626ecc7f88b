"""
FILE: taskman/__init__.py
PURPOSE: Hierarchical task tracker with recurring due dates
EXPORTS:
  - __version__
NOTES:
  - Core logic lives in taskman.core, user interfaces in taskman.cli and taskman.repl
"""

__version__ = "0.1.0"
