"""Write access to folios and folio lines. Lines are insert-only."""

import uuid
from typing import Any

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from stay_ledger.models.enums import FolioStatus
from stay_ledger.models.folios import Folio, FolioLine
from stay_ledger.utils.dates import utc_now


def insert_folio(conn: Connection, property_id: str, reservation_id: str, currency: str) -> str:
    """
    Open a zero-balance folio for a reservation.

    Args:
        conn (Connection): SQLAlchemy DB connection (inside a transaction).
        property_id (str): Property scope.
        reservation_id (str): Owning reservation.
        currency (str): ISO currency code of the folio.

    Returns:
        str: New folio id.
    """
    folio_id = str(uuid.uuid4())
    conn.execute(
        insert(Folio).values(
            id=folio_id,
            property_id=property_id,
            reservation_id=reservation_id,
            currency=currency,
            status=FolioStatus.OPEN.value,
            created_at=utc_now(),
        )
    )
    return folio_id


def insert_folio_line(
    conn: Connection, property_id: str, folio_id: str, data: dict[str, Any]
) -> dict[str, Any]:
    """
    Append one line to a folio and return the stored row.

    ``data`` must carry the already-signed ``amount_cents``; this writer does
    not interpret line types.
    """
    row = {
        "id": str(uuid.uuid4()),
        "property_id": property_id,
        "folio_id": folio_id,
        "type": data["type"],
        "amount_cents": data["amount_cents"],
        "currency": data["currency"],
        "description": data.get("description"),
        "charge_type": data.get("charge_type"),
        "payment_method": data.get("payment_method"),
        "date_key": data["date_key"],
        "posted_at": data.get("posted_at") or utc_now(),
        "reversal_of_line_id": data.get("reversal_of_line_id"),
        "created_by": data.get("created_by"),
    }
    conn.execute(insert(FolioLine).values(**row))
    return row


def update_folio_status(
    conn: Connection, property_id: str, folio_id: str, status: FolioStatus
) -> None:
    conn.execute(
        update(Folio)
        .where(Folio.id == folio_id, Folio.property_id == property_id)
        .values(status=status.value)
    )
