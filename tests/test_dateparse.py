"""
Tests for free-text due date parsing.

"now" is Monday 2 March 2026, 09:00.
"""

from datetime import datetime

import pytest

from taskman.core.dateparse import parse_date, try_parse_date
from taskman.core.exceptions import ParseFailureError
from taskman.core.recurrence import (
    Day,
    DayOfTheMonth,
    DayOffset,
    Once,
    OnceAYear,
    Weekday,
)

NOW = datetime(2026, 3, 2, 9, 0)


def parse(text):
    return parse_date(text, NOW)


# --- Keywords ---

def test_today_is_an_absolute_start_of_day():
    assert parse("today") == Once(datetime(2026, 3, 2))
    assert parse("now") == Once(datetime(2026, 3, 2))
    assert parse("  Tod ") == Once(datetime(2026, 3, 2))


def test_tomorrow_and_yesterday_are_offsets():
    assert parse("tomorrow") == DayOffset(1)
    assert parse("tom") == DayOffset(1)
    assert parse("yesterday") == DayOffset(-1)


# --- Weekdays ---

def test_weekday_names():
    assert parse("fri") == Weekday(Day.FRIDAY)
    assert parse("Monday") == Weekday(Day.MONDAY)
    assert parse("sun") == Weekday(Day.SUNDAY)


# --- Relative offsets ---

def test_bare_numbers_are_days():
    assert parse("3") == DayOffset(3)
    assert parse("+3") == DayOffset(3)
    assert parse("-2") == DayOffset(-2)


def test_units_are_matched_by_prefix():
    assert parse("in 2 weeks") == DayOffset(14)
    assert parse("2w") == DayOffset(14)
    assert parse("in 3 months") == DayOffset(90)
    assert parse("1 year") == DayOffset(365)
    assert parse("10 days") == DayOffset(10)


def test_ago_makes_offsets_negative():
    assert parse("1d ago") == DayOffset(-1)
    assert parse("2 weeks ago") == DayOffset(-14)


def test_offsets_beyond_calendar_range_fail():
    for text in ("in 9999 years", "9999 years ago", "99999999999999999999"):
        with pytest.raises(ParseFailureError):
            parse(text)
    assert parse("in 100 years") == DayOffset(36500)


def test_unknown_unit_fails():
    with pytest.raises(ParseFailureError):
        parse("1wek")
    with pytest.raises(ParseFailureError):
        parse("3 fortnights")


# --- Absolute dates ---

def test_numeric_dates():
    assert parse("20/04") == Once(datetime(2026, 4, 20))
    assert parse("20-04") == Once(datetime(2026, 4, 20))
    assert parse("20/04/27") == Once(datetime(2027, 4, 20))
    assert parse("20/04/2027") == Once(datetime(2027, 4, 20))


def test_month_name_dates():
    assert parse("5 jan") == Once(datetime(2026, 1, 5))
    assert parse("jan 5") == Once(datetime(2026, 1, 5))
    assert parse("january 5 2027") == Once(datetime(2027, 1, 5))
    assert parse("5 March 27") == Once(datetime(2027, 3, 5))


def test_leap_day_without_year_uses_current_year():
    with pytest.raises(ParseFailureError):
        parse_date("29/02", NOW)
    assert parse_date("29/02", datetime(2028, 1, 10)) == Once(datetime(2028, 2, 29))


# --- Ordinals ---

def test_ordinal_is_day_of_the_month():
    assert parse("21st") == DayOfTheMonth(21)
    assert parse("22nd") == DayOfTheMonth(22)
    assert parse("3rd") == DayOfTheMonth(3)
    assert parse("11th") == DayOfTheMonth(11)


def test_ordinal_with_month_is_once_a_year():
    assert parse("1st Jan") == OnceAYear(1, 1)
    assert parse("2nd december") == OnceAYear(2, 12)


def test_ordinal_suffix_must_match_number():
    for text in ("21th", "1nd", "12nd", "32nd", "31st feb", "1st smarch"):
        with pytest.raises(ParseFailureError):
            parse(text)


# --- Failures ---

def test_unparseable_text():
    for text in ("", "   ", "next tuesday", "soonish"):
        with pytest.raises(ParseFailureError):
            parse(text)


def test_try_parse_date_returns_none_on_failure():
    assert try_parse_date("soonish", NOW) is None
    assert try_parse_date("fri", NOW) == Weekday(Day.FRIDAY)


def test_parse_failure_keeps_text():
    with pytest.raises(ParseFailureError) as excinfo:
        parse("soonish")
    assert excinfo.value.text == "soonish"


# --- Idempotence ---

def test_text_form_parses_back_to_same_rule():
    """Every rule's to_text() is accepted by the parser and yields the same rule."""
    rules = [
        Once(datetime(2027, 4, 20)),
        OnceAYear(14, 2),
        DayOfTheMonth(3),
        Weekday(Day.TUESDAY),
        DayOffset(1),
        DayOffset(5),
        DayOffset(-2),
    ]
    for rule in rules:
        assert parse(rule.to_text()) == rule, rule.to_text()
