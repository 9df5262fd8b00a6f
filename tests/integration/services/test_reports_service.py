"""
Integration tests for daily cash and accrual reports.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest
from sqlalchemy import insert
from sqlalchemy.engine import Engine

from stay_ledger.errors import InvalidDateKey, InvalidDateRange
from stay_ledger.models.enums import ChargeType, ReportMode
from stay_ledger.models.folios import FolioLine
from stay_ledger.services.folio import add_charge, add_payment, get_folio_summary
from stay_ledger.services.reports import MAX_REPORT_DAYS, get_daily_report
from stay_ledger.services.stays import create_stay


@pytest.fixture
def ledger(engine: Engine, seeded: dict[str, Any]) -> dict[str, Any]:
    """Two stays with charges and payments spread over 2024-06-01..2024-06-03."""
    pid = seeded["property_id"]
    first = create_stay(engine, pid, seeded["r1"], "2024-06-01", "2024-06-03", "A")["reservation"]["id"]
    second = create_stay(engine, pid, seeded["r2"], "2024-06-01", "2024-06-03", "B")["reservation"]["id"]

    add_charge(engine, pid, first, 20000, charge_type=ChargeType.ROOM, date_key="2024-06-01")
    add_charge(engine, pid, first, 1500, charge_type=ChargeType.TAX, date_key="2024-06-01")
    add_charge(engine, pid, second, 20000, charge_type=ChargeType.ROOM, date_key="2024-06-01")
    add_charge(engine, pid, second, 700, date_key="2024-06-03")
    add_payment(engine, pid, first, 10000, date_key="2024-06-01")
    add_payment(engine, pid, second, 5000, date_key="2024-06-03")

    folio_id = get_folio_summary(engine, pid, first)["folio_id"]
    with engine.begin() as conn:
        conn.execute(
            insert(FolioLine).values(
                id="refund-1",
                property_id=pid,
                folio_id=folio_id,
                type="REFUND",
                amount_cents=2000,
                currency="USD",
                description="Refund recorded by payment gateway",
                date_key="2024-06-03",
                posted_at=datetime(2024, 6, 3, 12, tzinfo=timezone.utc),
            )
        )

    return {"property_id": pid}


@pytest.mark.integration
def test_cash_report_rows_and_total(engine: Engine, ledger: dict[str, Any]) -> None:
    report = get_daily_report(engine, ledger["property_id"], ReportMode.CASH, "2024-06-01", "2024-06-03")

    assert report["mode"] == "cash"
    assert report["rows"] == [
        {"date_key": "2024-06-01", "cash_in_cents": 10000, "refunds_cents": 0, "net_cash_cents": 10000},
        {"date_key": "2024-06-02", "cash_in_cents": 0, "refunds_cents": 0, "net_cash_cents": 0},
        {"date_key": "2024-06-03", "cash_in_cents": 5000, "refunds_cents": 2000, "net_cash_cents": 3000},
    ]
    assert report["total_net_cash_cents"] == 13000


@pytest.mark.integration
def test_accrual_report_buckets_by_charge_type(engine: Engine, ledger: dict[str, Any]) -> None:
    report = get_daily_report(
        engine, ledger["property_id"], ReportMode.ACCRUAL, "2024-06-01", "2024-06-03"
    )

    first_day, empty_day, last_day = report["rows"]
    assert first_day["room_cents"] == 40000
    assert first_day["tax_cents"] == 1500
    assert first_day["total_cents"] == 41500
    assert empty_day == {
        "date_key": "2024-06-02",
        "room_cents": 0,
        "fee_cents": 0,
        "tax_cents": 0,
        "discount_cents": 0,
        "adjustment_cents": 0,
        "uncategorized_cents": 0,
        "total_cents": 0,
    }
    assert last_day["uncategorized_cents"] == 700
    assert last_day["total_cents"] == 700
    assert report["total_charges_cents"] == 42200


@pytest.mark.integration
def test_reports_zero_fill_days_without_activity(engine: Engine, seeded: dict[str, Any]) -> None:
    report = get_daily_report(
        engine, seeded["property_id"], ReportMode.CASH, "2024-02-27", "2024-03-01"
    )

    assert [row["date_key"] for row in report["rows"]] == [
        "2024-02-27",
        "2024-02-28",
        "2024-02-29",
        "2024-03-01",
    ]
    assert report["total_net_cash_cents"] == 0


@pytest.mark.integration
def test_reports_are_property_scoped(engine: Engine, ledger: dict[str, Any], seeded: dict[str, Any]) -> None:
    report = get_daily_report(
        engine, seeded["other_property_id"], ReportMode.ACCRUAL, "2024-06-01", "2024-06-03"
    )

    assert report["total_charges_cents"] == 0


@pytest.mark.integration
def test_report_rejects_malformed_keys(engine: Engine, seeded: dict[str, Any]) -> None:
    with pytest.raises(InvalidDateKey):
        get_daily_report(engine, seeded["property_id"], ReportMode.CASH, "June 1", "2024-06-03")


@pytest.mark.integration
def test_report_range_is_capped(engine: Engine, seeded: dict[str, Any]) -> None:
    pid = seeded["property_id"]

    full_year = get_daily_report(engine, pid, ReportMode.ACCRUAL, "2024-01-01", "2024-12-31")
    assert len(full_year["rows"]) == MAX_REPORT_DAYS

    with pytest.raises(InvalidDateRange):
        get_daily_report(engine, pid, ReportMode.CASH, "0001-01-01", "9999-12-31")


@pytest.mark.integration
def test_report_on_last_calendar_days(engine: Engine, seeded: dict[str, Any]) -> None:
    report = get_daily_report(engine, seeded["property_id"], ReportMode.CASH, "9999-12-30", "9999-12-31")

    assert [row["date_key"] for row in report["rows"]] == ["9999-12-30", "9999-12-31"]
    assert report["total_net_cash_cents"] == 0
