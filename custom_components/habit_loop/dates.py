"""Date-key helpers for the Habit Loop integration.

A date-key is ``YYYY/MM/DD``, zero padded so that plain string ordering is
calendar ordering.  Keys always use the local wall-clock date reported by
Home Assistant, never UTC.
"""
from __future__ import annotations

import calendar
from datetime import date, timedelta

from homeassistant.util import dt as dt_util

from .const import FALLBACK_YEAR, WEEKDAY_LABELS


def key_of(day: date) -> str:
    """Return the date-key for *day*."""
    return f"{day.year:04d}/{day.month:02d}/{day.day:02d}"


def today_key() -> str:
    """Return the date-key for the current local day."""
    return key_of(dt_util.now().date())


def _int_part(parts: list[str], index: int) -> int | None:
    if index >= len(parts):
        return None
    try:
        return int(parts[index])
    except ValueError:
        return None


def date_of(key: str) -> date:
    """Parse a date-key back into a date.

    Never raises.  A missing, non-numeric or out-of-range month or day
    becomes 1; an unusable year becomes FALLBACK_YEAR.
    """
    parts = key.split("/")

    year = _int_part(parts, 0)
    if year is None or not date.min.year <= year <= date.max.year:
        year = FALLBACK_YEAR

    month = _int_part(parts, 1)
    if month is None or not 1 <= month <= 12:
        month = 1

    day = _int_part(parts, 2)
    if day is None or not 1 <= day <= calendar.monthrange(year, month)[1]:
        day = 1

    return date(year, month, day)


def add_days(day: date, diff: int) -> date:
    """Shift *day* by *diff* calendar days, saturating at the date range."""
    try:
        return day + timedelta(days=diff)
    except OverflowError:
        return date.min if diff < 0 else date.max


def previous_key(key: str) -> str:
    """Return the key of the calendar day before *key*."""
    return key_of(add_days(date_of(key), -1))


def is_immediate_predecessor(key: str, prev_key: str) -> bool:
    """Return True if *prev_key* is the day right before *key*."""
    return previous_key(key) == prev_key


def weekday_label(day: date) -> str:
    return WEEKDAY_LABELS[day.weekday()]


def label_from_key(key: str) -> str:
    """Human label for a history row, e.g. ``2024/01/03(Wed)``."""
    return f"{key}({weekday_label(date_of(key))})"
