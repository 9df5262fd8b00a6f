"""
Daily cash and accrual reports over folio lines. Read-only.

Cash basis buckets PAYMENT and REFUND lines per day:
    cash_in  = -sum(PAYMENT)   (payments are stored negative)
    refunds  =  sum(REFUND)
    net_cash = cash_in - refunds

Accrual basis buckets CHARGE lines per day by charge type, with untagged
charges under UNCATEGORIZED.

Ranges are inclusive day keys and every day in the range gets a row.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine

from stay_ledger.db.readers.folios import (
    sum_charges_by_day_and_category,
    sum_lines_by_day_and_type,
)
from stay_ledger.errors import InvalidDateKey, InvalidDateRange
from stay_ledger.metrics import operation_duration
from stay_ledger.models.enums import ChargeType, FolioLineType, ReportMode
from stay_ledger.utils.dates import add_days, day_series_inclusive, format_day_key, parse_day_key

logger = structlog.get_logger(__name__)

UNCATEGORIZED = "UNCATEGORIZED"
MAX_REPORT_DAYS = 366

ACCRUAL_COLUMNS: dict[str, str] = {
    ChargeType.ROOM.value: "room_cents",
    ChargeType.FEE.value: "fee_cents",
    ChargeType.TAX.value: "tax_cents",
    ChargeType.DISCOUNT.value: "discount_cents",
    ChargeType.ADJUSTMENT.value: "adjustment_cents",
    UNCATEGORIZED: "uncategorized_cents",
}


class ReportPreset(str, Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST7 = "last7"
    LAST30 = "last30"
    THIS_MONTH = "thisMonth"
    LAST_MONTH = "lastMonth"
    CUSTOM = "custom"


def parse_mode(value: Optional[str]) -> ReportMode:
    """Anything other than ``cash`` means accrual."""
    return ReportMode.CASH if value == ReportMode.CASH.value else ReportMode.ACCRUAL


def parse_preset(value: Optional[str]) -> ReportPreset:
    """Unknown or missing presets fall back to ``today``."""
    try:
        return ReportPreset(value)
    except ValueError:
        return ReportPreset.TODAY


def resolve_range(
    today: str,
    preset: ReportPreset,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> tuple[str, str]:
    """
    Resolve a preset into an inclusive ``(start_key, end_key)`` pair.

    Example:
        >>> resolve_range("2024-03-15", ReportPreset.LAST_MONTH)
        ('2024-02-01', '2024-02-29')
    """
    if preset == ReportPreset.CUSTOM:
        start_key = start or today
        return start_key, end or start_key
    if preset == ReportPreset.YESTERDAY:
        day = add_days(today, -1)
        return day, day
    if preset == ReportPreset.LAST7:
        return add_days(today, -6), today
    if preset == ReportPreset.LAST30:
        return add_days(today, -29), today

    first_of_month = parse_day_key(today).replace(day=1)
    if preset == ReportPreset.THIS_MONTH:
        return format_day_key(first_of_month), today
    if preset == ReportPreset.LAST_MONTH:
        last_of_previous = first_of_month - timedelta(days=1)
        return format_day_key(last_of_previous.replace(day=1)), format_day_key(last_of_previous)

    return today, today


def normalize_range(today: str, start_key: str, end_key: str) -> tuple[str, str]:
    """Swap a reversed range; fall back to ``today`` when either key is malformed."""
    try:
        start = parse_day_key(start_key)
        end = parse_day_key(end_key)
    except InvalidDateKey:
        return today, today
    if end < start:
        return end_key, start_key
    return start_key, end_key


def _cash_report(engine: Engine, property_id: str, start_key: str, end_key: str) -> dict[str, Any]:
    with engine.connect() as conn:
        grouped = sum_lines_by_day_and_type(
            conn,
            property_id,
            [FolioLineType.PAYMENT, FolioLineType.REFUND],
            start_key,
            end_key,
        )

    by_day: dict[str, dict[str, int]] = {}
    for row in grouped:
        bucket = by_day.setdefault(row["date_key"], {"payment": 0, "refund": 0})
        amount = int(row["amount_cents"] or 0)
        if row["type"] == FolioLineType.PAYMENT.value:
            bucket["payment"] += amount
        elif row["type"] == FolioLineType.REFUND.value:
            bucket["refund"] += amount

    rows = []
    for day in day_series_inclusive(start_key, end_key):
        raw = by_day.get(day, {"payment": 0, "refund": 0})
        cash_in = -raw["payment"]
        refunds = raw["refund"]
        rows.append(
            {
                "date_key": day,
                "cash_in_cents": cash_in,
                "refunds_cents": refunds,
                "net_cash_cents": cash_in - refunds,
            }
        )

    return {
        "mode": ReportMode.CASH.value,
        "start_key": start_key,
        "end_key": end_key,
        "rows": rows,
        "total_net_cash_cents": sum(r["net_cash_cents"] for r in rows),
    }


def _accrual_report(engine: Engine, property_id: str, start_key: str, end_key: str) -> dict[str, Any]:
    with engine.connect() as conn:
        grouped = sum_charges_by_day_and_category(conn, property_id, start_key, end_key)

    by_day: dict[str, dict[str, int]] = {}
    for row in grouped:
        column = ACCRUAL_COLUMNS.get(row["charge_type"] or UNCATEGORIZED, "uncategorized_cents")
        bucket = by_day.setdefault(row["date_key"], {})
        bucket[column] = bucket.get(column, 0) + int(row["amount_cents"] or 0)

    rows = []
    for day in day_series_inclusive(start_key, end_key):
        bucket = by_day.get(day, {})
        row: dict[str, Any] = {"date_key": day}
        for column in ACCRUAL_COLUMNS.values():
            row[column] = bucket.get(column, 0)
        row["total_cents"] = sum(row[column] for column in ACCRUAL_COLUMNS.values())
        rows.append(row)

    return {
        "mode": ReportMode.ACCRUAL.value,
        "start_key": start_key,
        "end_key": end_key,
        "rows": rows,
        "total_charges_cents": sum(r["total_cents"] for r in rows),
    }


def get_daily_report(
    engine: Engine, property_id: str, mode: ReportMode, start_key: str, end_key: str
) -> dict[str, Any]:
    """
    Build a per-day report for an inclusive day-key range.

    Args:
        engine (Engine): SQLAlchemy engine.
        property_id (str): Property scope.
        mode (ReportMode): cash or accrual.
        start_key (str): First day (inclusive).
        end_key (str): Last day (inclusive).

    Returns:
        dict[str, Any]: ``mode``, ``start_key``, ``end_key``, zero-filled ``rows``,
        and ``total_net_cash_cents`` (cash) or ``total_charges_cents`` (accrual).

    Raises:
        InvalidDateKey: Malformed day key.
        InvalidDateRange: The range covers more than ``MAX_REPORT_DAYS`` days.
    """
    days = (parse_day_key(end_key) - parse_day_key(start_key)).days + 1
    if days > MAX_REPORT_DAYS:
        raise InvalidDateRange(f"Report range cannot exceed {MAX_REPORT_DAYS} days")
    mode = ReportMode(mode)

    with operation_duration.labels(operation="daily_report").time():
        if mode == ReportMode.CASH:
            report = _cash_report(engine, property_id, start_key, end_key)
        else:
            report = _accrual_report(engine, property_id, start_key, end_key)

    logger.debug(
        "daily_report_built",
        property_id=property_id,
        mode=mode.value,
        start=start_key,
        end=end_key,
        days=len(report["rows"]),
    )
    return report
