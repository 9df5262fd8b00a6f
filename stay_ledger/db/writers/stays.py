"""Write access to reservations and stay segments. Callers own the transaction."""

import uuid
from datetime import date
from typing import Any

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from stay_ledger.models.enums import PaymentStatus, StayStatus
from stay_ledger.models.reservations import Reservation, StaySegment
from stay_ledger.utils.dates import utc_now


def insert_reservation(conn: Connection, property_id: str, data: dict[str, Any]) -> str:
    """
    Insert a reservation header and return its id.

    Args:
        conn (Connection): SQLAlchemy DB connection (inside a transaction).
        property_id (str): Property scope.
        data (dict): status, guest_name, guest_email, source, channel, notes, created_by.

    Returns:
        str: New reservation id.
    """
    reservation_id = str(uuid.uuid4())
    now = utc_now()
    conn.execute(
        insert(Reservation).values(
            id=reservation_id,
            property_id=property_id,
            status=data["status"],
            payment_status=PaymentStatus.UNPAID.value,
            guest_name=data["guest_name"],
            guest_email=data.get("guest_email"),
            source=data["source"],
            channel=data.get("channel"),
            notes=data.get("notes"),
            created_by=data.get("created_by"),
            created_at=now,
            updated_at=now,
        )
    )
    return reservation_id


def insert_stay_segment(
    conn: Connection,
    property_id: str,
    reservation_id: str,
    room: dict[str, Any],
    start: date,
    end: date,
    adults: int,
    children: int,
) -> str:
    segment_id = str(uuid.uuid4())
    conn.execute(
        insert(StaySegment).values(
            id=segment_id,
            property_id=property_id,
            reservation_id=reservation_id,
            room_id=room["id"],
            room_type_id=room["room_type_id"],
            start_date=start,
            end_date=end,
            adults=adults,
            children=children,
        )
    )
    return segment_id


def update_stay_dates(
    conn: Connection, property_id: str, reservation_id: str, start: date, end: date
) -> None:
    conn.execute(
        update(StaySegment)
        .where(
            StaySegment.reservation_id == reservation_id,
            StaySegment.property_id == property_id,
        )
        .values(start_date=start, end_date=end)
    )


def update_stay_room(
    conn: Connection, property_id: str, reservation_id: str, room: dict[str, Any]
) -> None:
    conn.execute(
        update(StaySegment)
        .where(
            StaySegment.reservation_id == reservation_id,
            StaySegment.property_id == property_id,
        )
        .values(room_id=room["id"], room_type_id=room["room_type_id"])
    )


def update_reservation_status(
    conn: Connection, property_id: str, reservation_id: str, status: StayStatus
) -> None:
    conn.execute(
        update(Reservation)
        .where(Reservation.id == reservation_id, Reservation.property_id == property_id)
        .values(status=status.value, updated_at=utc_now())
    )


def update_payment_status(
    conn: Connection, property_id: str, reservation_id: str, payment_status: PaymentStatus
) -> None:
    """Persist the cached payment status derived from the folio lines."""
    conn.execute(
        update(Reservation)
        .where(Reservation.id == reservation_id, Reservation.property_id == property_id)
        .values(payment_status=payment_status.value, updated_at=utc_now())
    )
