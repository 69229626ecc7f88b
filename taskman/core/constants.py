"""
FILE: taskman/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - ROOT_ID: Reserved identifier of the tree root
  - ID_ALPHABET, ID_LENGTH: Shape of generated task IDs
  - UNIT_MULTIPLIERS: Relative date units and their length in days
  - KEYWORDS_TODAY, KEYWORDS_TOMORROW, KEYWORDS_YESTERDAY: Date parser keywords
  - VIEW_OUTLINE, VIEW_TODAY, VIEW_HABITS, VALID_VIEWS: Named task views
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - Centralized constants to avoid magic strings
  - UNIT_MULTIPLIERS order matters: units are matched by prefix, first hit wins
"""

import string

# Tree root
ROOT_ID = "root"

# Generated IDs
ID_ALPHABET = string.ascii_letters + string.digits
ID_LENGTH = 8

# Relative date units (matched by prefix, so "w" -> weeks, "mo" -> months)
UNIT_MULTIPLIERS = (
    ("days", 1),
    ("weeks", 7),
    ("months", 30),
    ("years", 365),
)

# Date parser keywords
KEYWORDS_TODAY = ("today", "tod", "now")
KEYWORDS_TOMORROW = ("tomorrow", "tom")
KEYWORDS_YESTERDAY = ("yesterday", "yday")

# Views
VIEW_OUTLINE = "outline"
VIEW_TODAY = "today"
VIEW_HABITS = "habits"
VALID_VIEWS = (VIEW_OUTLINE, VIEW_TODAY, VIEW_HABITS)
DEFAULT_VIEW = VIEW_OUTLINE

# Due date display thresholds (days)
DUE_URGENT_DAYS = 2
DUE_SOON_DAYS = 14
