"""
Calendar date utilities.

Day keys (``YYYY-MM-DD``) are the boundary format everywhere. Internally a day
key maps to a ``datetime.date``, or to the UTC-midnight instant of that day when
an absolute timestamp is needed. All range arithmetic uses half-open
``[start, end)`` semantics: the end (checkout) day is not part of the range.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone

from stay_ledger.errors import InvalidDateKey, InvalidDateRange

_DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and stored in UTC.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def today_key() -> str:
    """Today's UTC calendar date as a day key."""
    return utc_now().date().isoformat()


def parse_day_key(value: str) -> date:
    """
    Parse a ``YYYY-MM-DD`` day key into a date.

    Raises:
        InvalidDateKey: If the value is not a well-formed calendar date.

    Example:
        >>> parse_day_key("2024-06-01")
        datetime.date(2024, 6, 1)
    """
    if not isinstance(value, str) or not _DAY_KEY_RE.match(value):
        raise InvalidDateKey(value)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidDateKey(value) from None


def format_day_key(value: date) -> str:
    """Format a date (or the UTC date of a datetime) as a day key."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    return value.isoformat()


def to_utc_midnight(value: str) -> datetime:
    """Absolute UTC-midnight instant for a day key."""
    return datetime.combine(parse_day_key(value), time.min, tzinfo=timezone.utc)


def add_days(value: str, delta_days: int) -> str:
    """
    Shift a day key by ``delta_days``.

    Raises:
        InvalidDateKey: If the key is malformed or the result leaves the calendar.
    """
    try:
        return format_day_key(parse_day_key(value) + timedelta(days=delta_days))
    except OverflowError:
        raise InvalidDateKey(value) from None


def parse_stay_dates(start_key: str, end_key: str) -> tuple[date, date]:
    """
    Parse a half-open stay range and enforce ``end > start``.

    Raises:
        InvalidDateKey: If either key is malformed.
        InvalidDateRange: If the checkout day is not after the arrival day.
    """
    start = parse_day_key(start_key)
    end = parse_day_key(end_key)
    if not end > start:
        raise InvalidDateRange()
    return start, end


def nights_between(start: date, end: date) -> int:
    """Number of nights in ``[start, end)``, never less than one."""
    return max(1, (end - start).days)


def enumerate_day_keys(start: date, end_exclusive: date) -> list[str]:
    """Every day key in ``[start, end_exclusive)``."""
    keys: list[str] = []
    cursor = start
    while cursor < end_exclusive:
        keys.append(cursor.isoformat())
        cursor += timedelta(days=1)
    return keys


def day_series_inclusive(start_key: str, end_key: str) -> list[str]:
    """Every day key from start_key through end_key, both included."""
    start = parse_day_key(start_key)
    end = parse_day_key(end_key)
    keys = enumerate_day_keys(start, end)
    if end >= start:
        keys.append(end.isoformat())
    return keys
