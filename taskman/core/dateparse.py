"""
FILE: taskman/core/dateparse.py
PURPOSE: Turn free-text due date input into a recurrence rule
EXPORTS:
  - parse_date(text, now) -> Rule
  - try_parse_date(text, now) -> Rule | None
DEPENDENCIES:
  - re, datetime (stdlib)
  - taskman.core.recurrence (rule types, helpers)
  - taskman.core.constants (keywords, unit multipliers)
  - taskman.core.exceptions (ParseFailureError)
NOTES:
  - Interpretations are tried in a fixed order, first match wins:
      1. keywords (today, tomorrow, yesterday)
      2. weekday names (monday, mon)
      3. relative offsets (3, +3, in 2 weeks, 1d ago)
      4. absolute dates (20/04/21, 5 jan, january 5 2027)
      5. ordinal days (21st, 1st jan)
  - Input is lower-cased and stripped before matching
  - The REPL re-parses on every keystroke, so failure is cheap and expected
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Optional

from .constants import (
    KEYWORDS_TODAY,
    KEYWORDS_TOMORROW,
    KEYWORDS_YESTERDAY,
    UNIT_MULTIPLIERS,
)
from .exceptions import ParseFailureError
from .recurrence import (
    Day,
    DayOfTheMonth,
    DayOffset,
    Once,
    OnceAYear,
    Rule,
    Weekday,
    month_from_name,
    ordinal_suffix,
    start_of_day,
)

logger = logging.getLogger(__name__)


_RELATIVE_RE = re.compile(
    r"^(?:in\s*)?(?P<sign>[+-])?(?P<quantity>\d+)\s*(?P<unit>[a-z]+)?(?:\s+(?P<ago>ago))?$"
)
_ORDINAL_RE = re.compile(r"^(?P<day>\d+)(?P<suffix>st|nd|rd|th)(?:\s+(?P<month>[a-z]+))?$")

# (format, has_year); formats without a year are parsed against the current one
_ABSOLUTE_FORMATS = (
    ("%d/%m", False),
    ("%d/%m/%y", True),
    ("%d/%m/%Y", True),
    ("%d-%m", False),
    ("%d-%m-%y", True),
    ("%d-%m-%Y", True),
    ("%b %d", False),
    ("%b %d %y", True),
    ("%b %d %Y", True),
    ("%B %d", False),
    ("%B %d %y", True),
    ("%B %d %Y", True),
    ("%d %b", False),
    ("%d %b %y", True),
    ("%d %b %Y", True),
    ("%d %B", False),
    ("%d %B %y", True),
    ("%d %B %Y", True),
)


def parse_date(text: str, now: Optional[datetime] = None) -> Rule:
    """
    Parse due date text into a recurrence rule.

    Args:
        text: User input, e.g. "tomorrow", "fri", "in 2 weeks", "1st jan"
        now: Current instant (defaults to datetime.now()); only used for
             "today" and for absolute dates without a year

    Returns:
        The first rule whose grammar matches

    Raises:
        ParseFailureError: If no interpretation matches

    Examples:
        >>> parse_date("in 2 weeks")
        DayOffset(days=14)
        >>> parse_date("1st jan")
        OnceAYear(day=1, month=1)
    """
    now = now or datetime.now()
    normalized = text.strip().lower()

    parsers = (
        _parse_keyword,
        _parse_weekday,
        _parse_relative,
        _parse_absolute,
        _parse_ordinal,
    )
    for parser in parsers:
        rule = parser(normalized, now)
        if rule is not None:
            logger.debug("Parsed %r as %r", text, rule)
            return rule

    raise ParseFailureError(text)


def try_parse_date(text: str, now: Optional[datetime] = None) -> Optional[Rule]:
    """Like parse_date(), but return None instead of raising."""
    try:
        return parse_date(text, now)
    except ParseFailureError:
        return None


def _parse_keyword(text: str, now: datetime) -> Optional[Rule]:
    if text in KEYWORDS_TODAY:
        # Absolute: a relative "today" would move with every reference change
        return Once(start_of_day(now))
    if text in KEYWORDS_TOMORROW:
        return DayOffset(1)
    if text in KEYWORDS_YESTERDAY:
        return DayOffset(-1)
    return None


def _parse_weekday(text: str, now: datetime) -> Optional[Rule]:
    day = Day.from_name(text)
    return Weekday(day) if day is not None else None


def _parse_relative(text: str, now: datetime) -> Optional[Rule]:
    match = _RELATIVE_RE.match(text)
    if not match:
        return None

    days = int(match.group("quantity"))

    unit = match.group("unit")
    if unit:
        multiplier = _unit_multiplier(unit)
        if multiplier is None:
            return None
        days *= multiplier

    if match.group("sign") == "-" or match.group("ago"):
        days = -days

    # Offsets landing outside the datetime range can never become a due date
    try:
        now + timedelta(days=days)
    except OverflowError:
        return None

    return DayOffset(days)


def _unit_multiplier(word: str) -> Optional[int]:
    """Match a unit word as a prefix of a unit name ("d", "day" and "days" all mean days)."""
    for unit, multiplier in UNIT_MULTIPLIERS:
        if unit.startswith(word):
            return multiplier
    return None


def _parse_absolute(text: str, now: datetime) -> Optional[Rule]:
    for fmt, has_year in _ABSOLUTE_FORMATS:
        candidate, pattern = text, fmt
        if not has_year:
            # strptime defaults to 1900, which has no 29 February
            candidate, pattern = f"{text} {now.year}", f"{fmt} %Y"
        try:
            parsed = datetime.strptime(candidate, pattern)
        except ValueError:
            continue
        return Once(parsed)
    return None


def _parse_ordinal(text: str, now: datetime) -> Optional[Rule]:
    match = _ORDINAL_RE.match(text)
    if not match:
        return None

    day = int(match.group("day"))
    if not 1 <= day <= 31 or match.group("suffix") != ordinal_suffix(day):
        return None

    month_name = match.group("month")
    if month_name is None:
        return DayOfTheMonth(day)

    month = month_from_name(month_name)
    if month is None:
        return None
    try:
        return OnceAYear(day, month)
    except ValueError:
        # e.g. "31st feb"
        return None
