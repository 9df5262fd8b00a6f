"""Read access to folios and folio lines."""

from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from stay_ledger.models.enums import FolioLineType
from stay_ledger.models.folios import Folio, FolioLine

LINE_COLUMNS = (
    FolioLine.id,
    FolioLine.type,
    FolioLine.amount_cents,
    FolioLine.currency,
    FolioLine.description,
    FolioLine.charge_type,
    FolioLine.payment_method,
    FolioLine.date_key,
    FolioLine.posted_at,
    FolioLine.reversal_of_line_id,
)


def get_folio_for_reservation(
    conn: Connection, property_id: str, reservation_id: str, lock: bool = False
) -> Optional[dict[str, Any]]:
    """
    Fetch the folio owned by a reservation.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property scope.
        reservation_id (str): Owning reservation.
        lock (bool): If True, lock the folio row; ledger mutations serialize on it.

    Returns:
        Optional[dict[str, Any]]: Folio columns or None.
    """
    stmt = select(Folio).where(
        Folio.reservation_id == reservation_id, Folio.property_id == property_id
    )
    if lock:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_folio_lines(conn: Connection, property_id: str, folio_id: str) -> list[dict[str, Any]]:
    """All lines of a folio in posting order."""
    result = conn.execute(
        select(*LINE_COLUMNS)
        .where(FolioLine.folio_id == folio_id, FolioLine.property_id == property_id)
        .order_by(FolioLine.posted_at, FolioLine.id)
    )
    return [dict(row) for row in result.mappings()]


def get_folio_line(
    conn: Connection, property_id: str, folio_id: str, line_id: str
) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(
            select(*LINE_COLUMNS).where(
                FolioLine.id == line_id,
                FolioLine.folio_id == folio_id,
                FolioLine.property_id == property_id,
            )
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def find_reversal_id(conn: Connection, property_id: str, folio_id: str, line_id: str) -> Optional[str]:
    """Id of the line reversing ``line_id``, if one exists."""
    row = conn.execute(
        select(FolioLine.id).where(
            FolioLine.property_id == property_id,
            FolioLine.folio_id == folio_id,
            FolioLine.reversal_of_line_id == line_id,
        )
    ).fetchone()
    return row[0] if row else None


def sum_lines_by_day_and_type(
    conn: Connection,
    property_id: str,
    line_types: list[FolioLineType],
    start_key: str,
    end_key: str,
) -> list[dict[str, Any]]:
    """
    Sum amount_cents grouped by (date_key, type) over an inclusive day-key range.

    Day keys are fixed-width ISO strings, so lexicographic range filters match
    calendar order.
    """
    result = conn.execute(
        select(
            FolioLine.date_key,
            FolioLine.type,
            func.sum(FolioLine.amount_cents).label("amount_cents"),
        )
        .where(
            FolioLine.property_id == property_id,
            FolioLine.type.in_([t.value for t in line_types]),
            FolioLine.date_key >= start_key,
            FolioLine.date_key <= end_key,
        )
        .group_by(FolioLine.date_key, FolioLine.type)
        .order_by(FolioLine.date_key, FolioLine.type)
    )
    return [dict(row) for row in result.mappings()]


def sum_charges_by_day_and_category(
    conn: Connection, property_id: str, start_key: str, end_key: str
) -> list[dict[str, Any]]:
    """Sum CHARGE amount_cents grouped by (date_key, charge_type)."""
    result = conn.execute(
        select(
            FolioLine.date_key,
            FolioLine.charge_type,
            func.sum(FolioLine.amount_cents).label("amount_cents"),
        )
        .where(
            FolioLine.property_id == property_id,
            FolioLine.type == FolioLineType.CHARGE.value,
            FolioLine.date_key >= start_key,
            FolioLine.date_key <= end_key,
        )
        .group_by(FolioLine.date_key, FolioLine.charge_type)
        .order_by(FolioLine.date_key, FolioLine.charge_type)
    )
    return [dict(row) for row in result.mappings()]
