"""
Unit tests for day-key parsing and range helpers.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from stay_ledger.errors import InvalidDateKey, InvalidDateRange
from stay_ledger.utils.dates import (
    add_days,
    day_series_inclusive,
    enumerate_day_keys,
    format_day_key,
    nights_between,
    parse_day_key,
    parse_stay_dates,
    to_utc_midnight,
)


@pytest.mark.unit
def test_parse_day_key_returns_date() -> None:
    assert parse_day_key("2024-06-01") == date(2024, 6, 1)


@pytest.mark.unit
@pytest.mark.parametrize("value", ["2024-6-1", "2024-02-30", "20240601", "", "2024-06-01T00:00"])
def test_parse_day_key_rejects_malformed(value: str) -> None:
    with pytest.raises(InvalidDateKey):
        parse_day_key(value)


@pytest.mark.unit
def test_to_utc_midnight_is_timezone_aware() -> None:
    instant = to_utc_midnight("2024-06-01")
    assert instant == datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.mark.unit
def test_format_day_key_uses_utc_date_of_datetime() -> None:
    late_evening_utc = datetime(2024, 6, 1, 23, 30, tzinfo=timezone.utc)
    assert format_day_key(late_evening_utc) == "2024-06-01"
    assert format_day_key(date(2024, 12, 31)) == "2024-12-31"


@pytest.mark.unit
def test_add_days_crosses_month_and_leap_day() -> None:
    assert add_days("2024-02-28", 1) == "2024-02-29"
    assert add_days("2024-03-01", -1) == "2024-02-29"
    assert add_days("2024-12-31", 1) == "2025-01-01"


@pytest.mark.unit
def test_parse_stay_dates_requires_end_after_start() -> None:
    assert parse_stay_dates("2024-06-01", "2024-06-02") == (date(2024, 6, 1), date(2024, 6, 2))

    with pytest.raises(InvalidDateRange):
        parse_stay_dates("2024-06-05", "2024-06-05")
    with pytest.raises(InvalidDateRange):
        parse_stay_dates("2024-06-05", "2024-06-01")


@pytest.mark.unit
def test_nights_between_has_minimum_of_one() -> None:
    assert nights_between(date(2024, 6, 1), date(2024, 6, 4)) == 3
    assert nights_between(date(2024, 6, 1), date(2024, 6, 1)) == 1


@pytest.mark.unit
def test_enumerate_day_keys_excludes_end() -> None:
    assert enumerate_day_keys(date(2024, 6, 1), date(2024, 6, 4)) == [
        "2024-06-01",
        "2024-06-02",
        "2024-06-03",
    ]
    assert enumerate_day_keys(date(2024, 6, 1), date(2024, 6, 1)) == []


@pytest.mark.unit
def test_day_series_inclusive_includes_both_ends() -> None:
    assert day_series_inclusive("2024-06-30", "2024-07-02") == [
        "2024-06-30",
        "2024-07-01",
        "2024-07-02",
    ]


@pytest.mark.unit
def test_day_series_reaches_last_calendar_day() -> None:
    assert day_series_inclusive("9999-12-30", "9999-12-31") == ["9999-12-30", "9999-12-31"]


@pytest.mark.unit
def test_day_series_of_reversed_range_is_empty() -> None:
    assert day_series_inclusive("2024-06-02", "2024-06-01") == []


@pytest.mark.unit
@pytest.mark.parametrize("value, delta", [("9999-12-31", 1), ("0001-01-01", -1)])
def test_add_days_past_calendar_edge_is_invalid(value: str, delta: int) -> None:
    with pytest.raises(InvalidDateKey):
        add_days(value, delta)
