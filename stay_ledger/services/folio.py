"""
Folio ledger: append-only signed lines per reservation.

Sign convention (integer minor units):
    CHARGE    +amount
    PAYMENT   -amount tendered
    REVERSAL  exact negation of the line it reverses

Every mutating operation locks the folio row, appends exactly one line, and
re-derives the reservation's cached payment status in the same transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from stay_ledger.db.readers.folios import (
    find_reversal_id,
    get_folio_for_reservation,
    get_folio_line,
    list_folio_lines,
)
from stay_ledger.db.readers.stays import get_reservation
from stay_ledger.db.writers.folios import insert_folio_line, update_folio_status
from stay_ledger.db.writers.stays import update_payment_status
from stay_ledger.errors import (
    AlreadyReversed,
    FolioClosed,
    FolioNotFound,
    InvalidAmount,
    LineNotFound,
    ReservationNotFound,
)
from stay_ledger.metrics import folio_lines_posted, operation_duration
from stay_ledger.models.enums import (
    ChargeType,
    FolioLineType,
    FolioStatus,
    PaymentMethod,
    PaymentStatus,
)
from stay_ledger.utils.dates import format_day_key, parse_day_key, today_key
from stay_ledger.utils.money import is_positive_cents

logger = structlog.get_logger(__name__)

MAX_CHARGE_QUANTITY = 999
MAX_DESCRIPTION_LENGTH = 255


@dataclass(frozen=True)
class FolioSummary:
    subtotal_cents: int
    paid_cents: int
    balance_cents: int
    payment_status: PaymentStatus

    def as_dict(self) -> dict[str, Any]:
        return {
            "subtotal_cents": self.subtotal_cents,
            "paid_cents": self.paid_cents,
            "balance_cents": self.balance_cents,
            "payment_status": self.payment_status.value,
        }


def derive_payment_status(subtotal_cents: int, paid_cents: int, balance_cents: int) -> PaymentStatus:
    """
    Derive the payment status from folio totals.

    Rules, first match wins:
        subtotal <= 0 -> PAID
        paid <= 0     -> UNPAID
        balance > 0   -> PARTIALLY_PAID
        otherwise     -> PAID
    """
    if subtotal_cents <= 0:
        return PaymentStatus.PAID
    if paid_cents <= 0:
        return PaymentStatus.UNPAID
    if balance_cents > 0:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.PAID


def _effective_type(line: dict[str, Any], lines_by_id: dict[str, dict[str, Any]]) -> str:
    """Resolve a reversal to the type of the line it ultimately reverses."""
    current = line
    seen: set[str] = set()
    while current["type"] == FolioLineType.REVERSAL.value:
        target_id = current.get("reversal_of_line_id")
        if target_id is None or target_id in seen or target_id not in lines_by_id:
            return FolioLineType.CHARGE.value
        seen.add(target_id)
        current = lines_by_id[target_id]
    return current["type"]


def compute_folio_totals(lines: Iterable[dict[str, Any]]) -> FolioSummary:
    """
    Fold folio lines into subtotal, paid, balance, and payment status.

    ``balance`` is the plain sum of all signed amounts. ``paid`` is the total
    tendered: payment lines plus any reversals of payment lines, sign flipped.
    ``subtotal = balance + paid`` always holds.

    Args:
        lines (Iterable[dict]): Line rows with ``id``, ``type``, ``amount_cents``,
            and ``reversal_of_line_id``.

    Returns:
        FolioSummary: The folded totals.
    """
    line_list = list(lines)
    lines_by_id = {line["id"]: line for line in line_list}

    balance_cents = 0
    paid_cents = 0
    for line in line_list:
        amount = int(line["amount_cents"])
        balance_cents += amount
        if _effective_type(line, lines_by_id) == FolioLineType.PAYMENT.value:
            paid_cents -= amount

    subtotal_cents = balance_cents + paid_cents
    return FolioSummary(
        subtotal_cents=subtotal_cents,
        paid_cents=paid_cents,
        balance_cents=balance_cents,
        payment_status=derive_payment_status(subtotal_cents, paid_cents, balance_cents),
    )


def load_open_folio(conn: Connection, property_id: str, reservation_id: str) -> dict[str, Any]:
    folio = get_folio_for_reservation(conn, property_id, reservation_id, lock=True)
    if folio is None:
        raise FolioNotFound(reservation_id)
    if folio["status"] != FolioStatus.OPEN.value:
        raise FolioClosed()
    return folio


def sync_payment_status(
    conn: Connection, property_id: str, reservation_id: str, folio_id: str
) -> FolioSummary:
    summary = compute_folio_totals(list_folio_lines(conn, property_id, folio_id))
    update_payment_status(conn, property_id, reservation_id, summary.payment_status)
    return summary


def add_line(
    engine: Engine,
    property_id: str,
    reservation_id: str,
    line_type: FolioLineType,
    amount_cents: int,
    description: Optional[str] = None,
    charge_type: Optional[ChargeType] = None,
    payment_method: Optional[PaymentMethod] = None,
    date_key: Optional[str] = None,
    created_by: Optional[str] = None,
) -> dict[str, Any]:
    """
    Append a CHARGE or PAYMENT line to a reservation's folio.

    Args:
        engine (Engine): SQLAlchemy engine.
        property_id (str): Property scope.
        reservation_id (str): Reservation owning the folio.
        line_type (FolioLineType): CHARGE or PAYMENT.
        amount_cents (int): Positive amount in minor units. Payments are stored negated.
        description (Optional[str]): Free-text label.
        charge_type (Optional[ChargeType]): Category tag, CHARGE lines only.
        payment_method (Optional[PaymentMethod]): Tender, PAYMENT lines only.
        date_key (Optional[str]): Reporting day; defaults to today (UTC).
        created_by (Optional[str]): Acting user id.

    Returns:
        dict[str, Any]: The stored line.

    Raises:
        InvalidAmount: ``amount_cents`` is not a positive integer.
        FolioNotFound: Reservation has no folio.
        FolioClosed: Folio is not OPEN.
    """
    line_type = FolioLineType(line_type)
    if line_type not in (FolioLineType.CHARGE, FolioLineType.PAYMENT):
        raise ValueError(f"add_line only posts CHARGE or PAYMENT lines, got {line_type.value}")
    if not is_positive_cents(amount_cents):
        raise InvalidAmount(amount_cents)
    day_key = format_day_key(parse_day_key(date_key)) if date_key else today_key()

    is_charge = line_type == FolioLineType.CHARGE
    with operation_duration.labels(operation="add_line").time():
        with engine.begin() as conn:
            folio = load_open_folio(conn, property_id, reservation_id)
            line = insert_folio_line(
                conn,
                property_id,
                folio["id"],
                {
                    "type": line_type.value,
                    "amount_cents": amount_cents if is_charge else -amount_cents,
                    "currency": folio["currency"],
                    "description": description,
                    "charge_type": ChargeType(charge_type).value if is_charge and charge_type else None,
                    "payment_method": (
                        PaymentMethod(payment_method).value
                        if not is_charge and payment_method
                        else None
                    ),
                    "date_key": day_key,
                    "created_by": created_by,
                },
            )
            summary = sync_payment_status(conn, property_id, reservation_id, folio["id"])

    folio_lines_posted.labels(line_type=line_type.value).inc()
    logger.info(
        "folio_line_added",
        reservation_id=reservation_id,
        line_id=line["id"],
        line_type=line_type.value,
        amount_cents=line["amount_cents"],
        payment_status=summary.payment_status.value,
    )
    return line


def add_charge(
    engine: Engine,
    property_id: str,
    reservation_id: str,
    unit_amount_cents: int,
    description: Optional[str] = None,
    charge_type: Optional[ChargeType] = None,
    quantity: int = 1,
    date_key: Optional[str] = None,
    created_by: Optional[str] = None,
) -> dict[str, Any]:
    """Post ``quantity`` units of a charge as one CHARGE line."""
    if not is_positive_cents(quantity) or quantity > MAX_CHARGE_QUANTITY:
        raise InvalidAmount(quantity)
    if not is_positive_cents(unit_amount_cents):
        raise InvalidAmount(unit_amount_cents)

    label = description or (ChargeType(charge_type).value.title() if charge_type else "Charge")
    if quantity != 1:
        label = f"{label} (x{quantity})"
    return add_line(
        engine,
        property_id,
        reservation_id,
        FolioLineType.CHARGE,
        unit_amount_cents * quantity,
        description=label,
        charge_type=charge_type,
        date_key=date_key,
        created_by=created_by,
    )


def add_payment(
    engine: Engine,
    property_id: str,
    reservation_id: str,
    amount_cents: int,
    payment_method: PaymentMethod = PaymentMethod.CASH,
    reference: Optional[str] = None,
    description: Optional[str] = None,
    date_key: Optional[str] = None,
    created_by: Optional[str] = None,
) -> dict[str, Any]:
    """Record a payment captured elsewhere; stored as a negative PAYMENT line."""
    method = PaymentMethod(payment_method)
    label = description or f"Payment ({method.value})"
    if reference:
        label = f"{label} - Ref: {reference}"
    return add_line(
        engine,
        property_id,
        reservation_id,
        FolioLineType.PAYMENT,
        amount_cents,
        description=label,
        payment_method=method,
        date_key=date_key,
        created_by=created_by,
    )


def reverse_line(
    engine: Engine,
    property_id: str,
    reservation_id: str,
    line_id: str,
    created_by: Optional[str] = None,
) -> dict[str, Any]:
    """
    Post a REVERSAL line negating an existing line. Each line can be reversed once.

    The original line is never modified. The reversal inherits the original's
    charge type and payment method so reports bucket it with the original.

    Raises:
        FolioNotFound: Reservation has no folio.
        FolioClosed: Folio is not OPEN.
        LineNotFound: ``line_id`` is not a line of this folio.
        AlreadyReversed: A reversal of ``line_id`` already exists.
    """
    with operation_duration.labels(operation="reverse_line").time():
        try:
            with engine.begin() as conn:
                folio = load_open_folio(conn, property_id, reservation_id)
                original = get_folio_line(conn, property_id, folio["id"], line_id)
                if original is None:
                    raise LineNotFound(line_id)
                if find_reversal_id(conn, property_id, folio["id"], line_id) is not None:
                    raise AlreadyReversed(line_id)

                reversal = insert_folio_line(
                    conn,
                    property_id,
                    folio["id"],
                    {
                        "type": FolioLineType.REVERSAL.value,
                        "amount_cents": -int(original["amount_cents"]),
                        "currency": original["currency"],
                        "description": (
                            f"Reversal of: {original['description'] or original['type']}"
                        )[:MAX_DESCRIPTION_LENGTH],
                        "charge_type": original["charge_type"],
                        "payment_method": original["payment_method"],
                        "date_key": today_key(),
                        "reversal_of_line_id": line_id,
                        "created_by": created_by,
                    },
                )
                summary = sync_payment_status(conn, property_id, reservation_id, folio["id"])
        except IntegrityError:
            # Unique reversal_of_line_id caught a concurrent reversal.
            raise AlreadyReversed(line_id) from None

    folio_lines_posted.labels(line_type=FolioLineType.REVERSAL.value).inc()
    logger.info(
        "folio_line_reversed",
        reservation_id=reservation_id,
        line_id=line_id,
        reversal_id=reversal["id"],
        amount_cents=reversal["amount_cents"],
        payment_status=summary.payment_status.value,
    )
    return reversal


def get_folio_summary(engine: Engine, property_id: str, reservation_id: str) -> dict[str, Any]:
    """
    Folio header plus totals computed from its lines.

    Returns:
        dict[str, Any]: ``folio_id``, ``currency``, ``status`` and the summary totals.

    Raises:
        FolioNotFound: Reservation has no folio.
    """
    with engine.connect() as conn:
        folio = get_folio_for_reservation(conn, property_id, reservation_id)
        if folio is None:
            raise FolioNotFound(reservation_id)
        summary = compute_folio_totals(list_folio_lines(conn, property_id, folio["id"]))

    return {
        "folio_id": folio["id"],
        "currency": folio["currency"],
        "status": folio["status"],
        **summary.as_dict(),
    }


def list_lines(engine: Engine, property_id: str, reservation_id: str) -> list[dict[str, Any]]:
    with engine.connect() as conn:
        folio = get_folio_for_reservation(conn, property_id, reservation_id)
        if folio is None:
            raise FolioNotFound(reservation_id)
        return list_folio_lines(conn, property_id, folio["id"])


def close_folio(engine: Engine, property_id: str, reservation_id: str) -> dict[str, Any]:
    """Close a folio to new lines. Closing an already closed folio is a no-op."""
    with engine.begin() as conn:
        if get_reservation(conn, property_id, reservation_id) is None:
            raise ReservationNotFound(reservation_id)
        folio = get_folio_for_reservation(conn, property_id, reservation_id, lock=True)
        if folio is None:
            raise FolioNotFound(reservation_id)
        if folio["status"] != FolioStatus.CLOSED.value:
            update_folio_status(conn, property_id, folio["id"], FolioStatus.CLOSED)
            logger.info("folio_closed", reservation_id=reservation_id, folio_id=folio["id"])

    return get_folio_summary(engine, property_id, reservation_id)
