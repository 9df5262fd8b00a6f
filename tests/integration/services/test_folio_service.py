"""
Integration tests for the folio ledger: charges, payments, reversals, closing.
"""

from __future__ import annotations

from typing import Any

from unittest.mock import patch

import pytest
from sqlalchemy import insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from stay_ledger.errors import (
    AlreadyReversed,
    FolioClosed,
    FolioNotFound,
    InvalidAmount,
    InvalidDateKey,
    LineNotFound,
)
from stay_ledger.models.enums import ChargeType, FolioLineType, PaymentMethod
from stay_ledger.models.folios import FolioLine
from stay_ledger.models.reservations import Reservation
from stay_ledger.services.folio import (
    add_charge,
    add_line,
    add_payment,
    close_folio,
    get_folio_summary,
    list_lines,
    reverse_line,
)
from stay_ledger.services.stays import create_stay


@pytest.fixture
def reservation_id(engine: Engine, seeded: dict[str, Any]) -> str:
    details = create_stay(
        engine, seeded["property_id"], seeded["r1"], "2024-06-01", "2024-06-04", "Folio Guest"
    )
    return details["reservation"]["id"]


def _cached_payment_status(engine: Engine, reservation_id: str) -> str:
    with engine.connect() as conn:
        return conn.execute(
            select(Reservation.payment_status).where(Reservation.id == reservation_id)
        ).scalar_one()


@pytest.mark.integration
def test_charge_pay_and_reverse_payment(
    engine: Engine, seeded: dict[str, Any], reservation_id: str
) -> None:
    pid = seeded["property_id"]

    add_charge(engine, pid, reservation_id, 30000, description="Room", charge_type=ChargeType.ROOM)
    summary = get_folio_summary(engine, pid, reservation_id)
    assert summary["subtotal_cents"] == 30000
    assert summary["payment_status"] == "UNPAID"

    payment = add_payment(engine, pid, reservation_id, 30000, payment_method=PaymentMethod.CARD)
    assert payment["amount_cents"] == -30000
    summary = get_folio_summary(engine, pid, reservation_id)
    assert summary["payment_status"] == "PAID"
    assert summary["balance_cents"] == 0
    assert _cached_payment_status(engine, reservation_id) == "PAID"

    reverse_line(engine, pid, reservation_id, payment["id"])
    summary = get_folio_summary(engine, pid, reservation_id)
    assert summary["payment_status"] == "UNPAID"
    assert summary["balance_cents"] == 30000
    assert summary["subtotal_cents"] == summary["balance_cents"] + summary["paid_cents"]
    assert _cached_payment_status(engine, reservation_id) == "UNPAID"


@pytest.mark.integration
def test_partial_payment(engine: Engine, seeded: dict[str, Any], reservation_id: str) -> None:
    pid = seeded["property_id"]
    add_charge(engine, pid, reservation_id, 20000)
    add_payment(engine, pid, reservation_id, 5000)

    summary = get_folio_summary(engine, pid, reservation_id)

    assert summary["paid_cents"] == 5000
    assert summary["balance_cents"] == 15000
    assert summary["payment_status"] == "PARTIALLY_PAID"
    assert _cached_payment_status(engine, reservation_id) == "PARTIALLY_PAID"


@pytest.mark.integration
def test_second_reversal_is_rejected(engine: Engine, seeded: dict[str, Any], reservation_id: str) -> None:
    pid = seeded["property_id"]
    add_charge(engine, pid, reservation_id, 12000)
    before = get_folio_summary(engine, pid, reservation_id)["balance_cents"]
    extra = add_charge(engine, pid, reservation_id, 2500, charge_type=ChargeType.FEE)

    reversal = reverse_line(engine, pid, reservation_id, extra["id"])

    assert reversal["type"] == "REVERSAL"
    assert reversal["amount_cents"] == -2500
    assert reversal["reversal_of_line_id"] == extra["id"]
    assert reversal["charge_type"] == "FEE"
    assert get_folio_summary(engine, pid, reservation_id)["balance_cents"] == before

    with pytest.raises(AlreadyReversed):
        reverse_line(engine, pid, reservation_id, extra["id"])

    # The original line is untouched.
    lines = {line["id"]: line for line in list_lines(engine, pid, reservation_id)}
    assert lines[extra["id"]]["amount_cents"] == 2500
    assert len(lines) == 3


@pytest.mark.integration
def test_reversal_can_itself_be_reversed_once(
    engine: Engine, seeded: dict[str, Any], reservation_id: str
) -> None:
    pid = seeded["property_id"]
    charge = add_charge(engine, pid, reservation_id, 4000)
    first = reverse_line(engine, pid, reservation_id, charge["id"])

    second = reverse_line(engine, pid, reservation_id, first["id"])

    assert second["amount_cents"] == 4000
    assert get_folio_summary(engine, pid, reservation_id)["balance_cents"] == 4000
    with pytest.raises(AlreadyReversed):
        reverse_line(engine, pid, reservation_id, first["id"])


@pytest.mark.integration
def test_reverse_unknown_line(engine: Engine, seeded: dict[str, Any], reservation_id: str) -> None:
    with pytest.raises(LineNotFound):
        reverse_line(engine, seeded["property_id"], reservation_id, "no-such-line")


@pytest.mark.integration
def test_unique_constraint_backs_single_reversal(
    engine: Engine, seeded: dict[str, Any], reservation_id: str
) -> None:
    pid = seeded["property_id"]
    charge = add_charge(engine, pid, reservation_id, 1000)
    reversal = reverse_line(engine, pid, reservation_id, charge["id"])

    with pytest.raises(IntegrityError):
        with engine.begin() as conn:
            conn.execute(
                insert(FolioLine).values(
                    id="dup-reversal",
                    property_id=pid,
                    folio_id=get_folio_summary(engine, pid, reservation_id)["folio_id"],
                    type="REVERSAL",
                    amount_cents=-1000,
                    currency="USD",
                    date_key="2024-06-01",
                    posted_at=reversal["posted_at"],
                    reversal_of_line_id=charge["id"],
                )
            )


@pytest.mark.integration
@pytest.mark.parametrize("amount", [0, -100, 10.5, "100", True])
def test_non_positive_or_non_integer_amount_is_rejected(
    engine: Engine, seeded: dict[str, Any], reservation_id: str, amount: Any
) -> None:
    with pytest.raises(InvalidAmount):
        add_line(engine, seeded["property_id"], reservation_id, FolioLineType.CHARGE, amount)


@pytest.mark.integration
def test_add_line_only_posts_charges_and_payments(
    engine: Engine, seeded: dict[str, Any], reservation_id: str
) -> None:
    with pytest.raises(ValueError):
        add_line(engine, seeded["property_id"], reservation_id, FolioLineType.REVERSAL, 100)


@pytest.mark.integration
def test_charge_quantity_and_labels(engine: Engine, seeded: dict[str, Any], reservation_id: str) -> None:
    pid = seeded["property_id"]

    line = add_charge(
        engine,
        pid,
        reservation_id,
        350,
        description="Minibar water",
        charge_type=ChargeType.FEE,
        quantity=3,
        date_key="2024-06-02",
        created_by="user-7",
    )

    assert line["amount_cents"] == 1050
    assert line["description"] == "Minibar water (x3)"
    assert line["charge_type"] == "FEE"
    assert line["date_key"] == "2024-06-02"
    assert line["currency"] == "USD"
    assert line["payment_method"] is None

    with pytest.raises(InvalidAmount):
        add_charge(engine, pid, reservation_id, 100, quantity=0)
    with pytest.raises(InvalidAmount):
        add_charge(engine, pid, reservation_id, 100, quantity=1000)
    with pytest.raises(InvalidDateKey):
        add_charge(engine, pid, reservation_id, 100, date_key="02/06/2024")


@pytest.mark.integration
def test_payment_description_carries_method_and_reference(
    engine: Engine, seeded: dict[str, Any], reservation_id: str
) -> None:
    line = add_payment(
        engine,
        seeded["property_id"],
        reservation_id,
        8000,
        payment_method=PaymentMethod.BANK_TRANSFER,
        reference="INV-2024-001",
    )

    assert line["type"] == "PAYMENT"
    assert line["payment_method"] == "BANK_TRANSFER"
    assert line["charge_type"] is None
    assert line["description"] == "Payment (BANK_TRANSFER) - Ref: INV-2024-001"


@pytest.mark.integration
def test_closed_folio_rejects_mutations(engine: Engine, seeded: dict[str, Any], reservation_id: str) -> None:
    pid = seeded["property_id"]
    charge = add_charge(engine, pid, reservation_id, 5000)

    closed = close_folio(engine, pid, reservation_id)
    assert closed["status"] == "CLOSED"
    assert close_folio(engine, pid, reservation_id)["status"] == "CLOSED"

    with pytest.raises(FolioClosed):
        add_charge(engine, pid, reservation_id, 100)
    with pytest.raises(FolioClosed):
        add_payment(engine, pid, reservation_id, 100)
    with pytest.raises(FolioClosed):
        reverse_line(engine, pid, reservation_id, charge["id"])

    assert get_folio_summary(engine, pid, reservation_id)["balance_cents"] == 5000


@pytest.mark.integration
def test_unknown_reservation_has_no_folio(engine: Engine, seeded: dict[str, Any]) -> None:
    with pytest.raises(FolioNotFound):
        get_folio_summary(engine, seeded["property_id"], "missing")
    with pytest.raises(FolioNotFound):
        add_charge(engine, seeded["property_id"], "missing", 100)


@pytest.mark.integration
def test_concurrent_reversal_is_caught_by_unique_constraint(
    engine: Engine, seeded: dict[str, Any], reservation_id: str
) -> None:
    """A reversal that slips past the lookup still fails on reversal_of_line_id."""
    pid = seeded["property_id"]
    charge = add_charge(engine, pid, reservation_id, 4000)
    reverse_line(engine, pid, reservation_id, charge["id"])

    with patch("stay_ledger.services.folio.find_reversal_id", return_value=None):
        with pytest.raises(AlreadyReversed):
            reverse_line(engine, pid, reservation_id, charge["id"])

    lines = list_lines(engine, pid, reservation_id)
    assert [line["type"] for line in lines] == ["CHARGE", "REVERSAL"]
    assert get_folio_summary(engine, pid, reservation_id)["balance_cents"] == 0
