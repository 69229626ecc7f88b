"""
FILE: taskman/cli/__init__.py
PURPOSE: One-shot command line interface
EXPORTS:
  - app, main (from cli.main)
"""

from .main import app, main

__all__ = ["app", "main"]
