"""
FILE: taskman/core/recurrence.py
PURPOSE: Recurrence rules that compute concrete due dates from a reference instant
EXPORTS:
  - Day (IntEnum of weekdays, Monday=0 like datetime.weekday())
  - Once, OnceAYear, DayOfTheMonth, Weekday, DayOffset (rule dataclasses)
  - Rule (union of all rule types)
  - earliest(rules, reference) -> datetime | None
  - start_of_day(instant) -> datetime
  - ordinal_suffix(n) -> str
  - month_from_name(name) -> int | None
  - rule_to_dict(rule) -> dict
  - rule_from_dict(data) -> Rule
DEPENDENCIES:
  - python-dateutil (relativedelta for calendar month/year arithmetic)
  - dataclasses, datetime, enum, calendar (stdlib)
  - taskman.core.exceptions (StoreLoadError)
NOTES:
  - Rules are immutable and pure: next() never looks at the wall clock
  - Every rule keeps the reference's time of day, except Once
  - DayOffset(0) means "no recurrence" and yields None, as does an offset
    that lands outside the datetime range
  - OnceAYear treats the same calendar day as due today, DayOfTheMonth rolls
    it to next month; both behaviours are kept for compatibility with
    existing task files
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import IntEnum
from typing import ClassVar, Iterable, Optional, Union

from dateutil.relativedelta import relativedelta

from .exceptions import StoreLoadError

logger = logging.getLogger(__name__)


MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)


class Day(IntEnum):
    """Day of the week, numbered like datetime.weekday()."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_name(cls, name: str) -> Optional["Day"]:
        """Match a full weekday name or its 3-letter abbreviation (case-insensitive)."""
        name = name.strip().lower()
        for day in cls:
            full = day.name.lower()
            if name == full or name == full[:3]:
                return day
        return None


def start_of_day(instant: datetime) -> datetime:
    """Truncate an instant to midnight, keeping its tzinfo."""
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def ordinal_suffix(n: int) -> str:
    """
    Return the English ordinal suffix for n.

    11, 12 and 13 always take "th" (11th, 12th, 13th), everything else
    follows the last digit (1st, 22nd, 33rd, 44th).
    """
    if n % 100 in (11, 12, 13):
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def month_from_name(name: str) -> Optional[int]:
    """Match a full month name or its 3-letter abbreviation, returning 1-12."""
    name = name.strip().lower()
    for number, full in enumerate(MONTH_NAMES, start=1):
        if name == full or name == full[:3]:
            return number
    return None


def _max_day(month: int) -> int:
    # Leap year so that 29 February is a valid yearly date
    return calendar.monthrange(2000, month)[1]


@dataclass(frozen=True)
class Once:
    """A fixed calendar instant. Callers decide whether it is stale."""

    at: datetime

    kind: ClassVar[str] = "once"

    def next(self, reference: datetime) -> Optional[datetime]:
        return self.at

    def to_text(self) -> str:
        return self.at.strftime("%d/%m/%Y")

    def dump_value(self):
        return self.at.isoformat()

    @classmethod
    def load_value(cls, value) -> "Once":
        return cls(at=datetime.fromisoformat(value))


@dataclass(frozen=True)
class OnceAYear:
    """The same day and month every year (birthdays, renewals)."""

    day: int
    month: int

    kind: ClassVar[str] = "once_a_year"

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")
        if not 1 <= self.day <= _max_day(self.month):
            raise ValueError(f"Invalid day {self.day} for month {self.month}")

    def next(self, reference: datetime) -> Optional[datetime]:
        candidate = reference + relativedelta(month=self.month, day=self.day)
        # Same calendar day is due today, earlier days roll to next year
        if candidate.date() < reference.date():
            candidate = reference + relativedelta(years=1, month=self.month, day=self.day)
        return candidate

    def to_text(self) -> str:
        return f"{self.day}{ordinal_suffix(self.day)} {MONTH_NAMES[self.month - 1][:3]}"

    def dump_value(self):
        return {"day": self.day, "month": self.month}

    @classmethod
    def load_value(cls, value) -> "OnceAYear":
        return cls(day=int(value["day"]), month=int(value["month"]))


@dataclass(frozen=True)
class DayOfTheMonth:
    """A day of the month, every month. Days past a short month's end clamp to its last day."""

    day: int

    kind: ClassVar[str] = "day_of_the_month"

    def __post_init__(self):
        if not 1 <= self.day <= 31:
            raise ValueError(f"Invalid day of the month: {self.day}")

    def next(self, reference: datetime) -> Optional[datetime]:
        candidate = reference + relativedelta(day=self.day)
        # Today counts as already passed
        if candidate.day <= reference.day:
            candidate = reference + relativedelta(months=1, day=self.day)
        return candidate

    def to_text(self) -> str:
        return f"{self.day}{ordinal_suffix(self.day)}"

    def dump_value(self):
        return self.day

    @classmethod
    def load_value(cls, value) -> "DayOfTheMonth":
        return cls(day=int(value))


@dataclass(frozen=True)
class Weekday:
    """A day of the week. The same weekday rolls a full week forward."""

    day: Day

    kind: ClassVar[str] = "weekday"

    def next(self, reference: datetime) -> Optional[datetime]:
        days = (self.day - reference.weekday()) % 7 or 7
        return reference + timedelta(days=days)

    def to_text(self) -> str:
        return self.day.name.lower()

    def dump_value(self):
        return self.day.name.lower()

    @classmethod
    def load_value(cls, value) -> "Weekday":
        day = Day.from_name(value) if isinstance(value, str) else Day(int(value))
        if day is None:
            raise ValueError(f"Invalid weekday: {value}")
        return cls(day=day)


@dataclass(frozen=True)
class DayOffset:
    """A number of days after (or before, when negative) the reference."""

    days: int

    kind: ClassVar[str] = "day_offset"

    def next(self, reference: datetime) -> Optional[datetime]:
        if self.days == 0:
            return None
        try:
            return reference + timedelta(days=self.days)
        except OverflowError:
            logger.warning("Day offset %d from %s is out of range", self.days, reference)
            return None

    def to_text(self) -> str:
        count = abs(self.days)
        unit = "day" if count == 1 else "days"
        if self.days < 0:
            return f"{count} {unit} ago"
        if self.days == 0:
            return "0"
        return f"in {count} {unit}"

    def dump_value(self):
        return self.days

    @classmethod
    def load_value(cls, value) -> "DayOffset":
        return cls(days=int(value))


Rule = Union[Once, OnceAYear, DayOfTheMonth, Weekday, DayOffset]

RULE_TYPES = {cls.kind: cls for cls in (Once, OnceAYear, DayOfTheMonth, Weekday, DayOffset)}


def earliest(rules: Iterable[Rule], reference: datetime) -> Optional[datetime]:
    """
    Earliest next occurrence across rules, all evaluated from the same reference.

    Args:
        rules: Recurrence rules of a task
        reference: Instant the rules are anchored to

    Returns:
        The minimum non-None result, or None when no rule yields a date
    """
    candidates = [due for due in (rule.next(reference) for rule in rules) if due is not None]
    return min(candidates, default=None)


def rule_to_dict(rule: Rule) -> dict:
    """Serialize a rule as a {"kind", "value"} tagged union."""
    return {"kind": rule.kind, "value": rule.dump_value()}


def rule_from_dict(data: dict) -> Rule:
    """
    Deserialize a rule written by rule_to_dict().

    Raises:
        StoreLoadError: If the kind is unknown or the value doesn't fit it
    """
    try:
        kind = data["kind"]
        value = data["value"]
    except (KeyError, TypeError):
        raise StoreLoadError(f"Malformed due rule: {data!r}")

    rule_type = RULE_TYPES.get(kind)
    if rule_type is None:
        raise StoreLoadError(f"Unknown due rule kind: {kind!r}")

    try:
        return rule_type.load_value(value)
    except (KeyError, TypeError, ValueError) as e:
        raise StoreLoadError(f"Invalid value for due rule {kind!r}: {e}")
