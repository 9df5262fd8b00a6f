"""Read access to reservations and their stay segments."""

from datetime import date
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from stay_ledger.models.enums import ACTIVE_STAY_STATUSES, StayStatus
from stay_ledger.models.properties import Room, RoomType
from stay_ledger.models.reservations import Reservation, StaySegment


def get_reservation(
    conn: Connection, property_id: str, reservation_id: str, lock: bool = False
) -> Optional[dict[str, Any]]:
    """
    Fetch a reservation header scoped to a property.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property scope.
        reservation_id (str): Reservation identifier.
        lock (bool): If True, lock the row for the rest of the transaction.

    Returns:
        Optional[dict[str, Any]]: Reservation columns or None if not found.
    """
    stmt = select(Reservation).where(
        Reservation.id == reservation_id, Reservation.property_id == property_id
    )
    if lock:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def get_stay_segment(
    conn: Connection, property_id: str, reservation_id: str
) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(
            select(StaySegment).where(
                StaySegment.reservation_id == reservation_id,
                StaySegment.property_id == property_id,
            )
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_stay_with_room(
    conn: Connection, property_id: str, reservation_id: str
) -> Optional[dict[str, Any]]:
    """Stay segment joined with its room name and room type code/name."""
    row = (
        conn.execute(
            select(
                StaySegment.id,
                StaySegment.room_id,
                StaySegment.room_type_id,
                StaySegment.start_date,
                StaySegment.end_date,
                StaySegment.adults,
                StaySegment.children,
                Room.name.label("room_name"),
                RoomType.code.label("room_type_code"),
                RoomType.name.label("room_type_name"),
                RoomType.base_rate_cents.label("room_type_base_rate_cents"),
            )
            .join(Room, Room.id == StaySegment.room_id)
            .join(RoomType, RoomType.id == StaySegment.room_type_id)
            .where(
                StaySegment.reservation_id == reservation_id,
                StaySegment.property_id == property_id,
            )
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def find_overlapping_stay_reservation_id(
    conn: Connection,
    property_id: str,
    room_id: str,
    start: date,
    end: date,
    exclude_reservation_id: str | None = None,
) -> Optional[str]:
    """
    Return the reservation id of any active stay on the room intersecting ``[start, end)``.

    Only stays whose reservation is DRAFT, CONFIRMED, or CHECKED_IN count.
    """
    stmt = (
        select(StaySegment.reservation_id)
        .join(Reservation, Reservation.id == StaySegment.reservation_id)
        .where(
            StaySegment.property_id == property_id,
            StaySegment.room_id == room_id,
            StaySegment.start_date < end,
            StaySegment.end_date > start,
            Reservation.status.in_([s.value for s in ACTIVE_STAY_STATUSES]),
        )
    )
    if exclude_reservation_id is not None:
        stmt = stmt.where(StaySegment.reservation_id != exclude_reservation_id)
    row = conn.execute(stmt.limit(1)).fetchone()
    return row[0] if row else None


def list_stays_in_range(
    conn: Connection,
    property_id: str,
    start: date,
    end: date,
    statuses: Iterable[StayStatus],
) -> list[dict[str, Any]]:
    """Stay segments intersecting ``[start, end)`` whose reservation is in ``statuses``."""
    result = conn.execute(
        select(
            StaySegment.reservation_id,
            StaySegment.room_id,
            StaySegment.start_date,
            StaySegment.end_date,
            Reservation.status,
            Reservation.guest_name,
            Reservation.source,
            Reservation.channel,
        )
        .join(Reservation, Reservation.id == StaySegment.reservation_id)
        .where(
            StaySegment.property_id == property_id,
            StaySegment.start_date < end,
            StaySegment.end_date > start,
            Reservation.status.in_([s.value for s in statuses]),
        )
        .order_by(StaySegment.start_date)
    )
    return [dict(row) for row in result.mappings()]


def list_occupied_room_ids(
    conn: Connection, property_id: str, room_type_id: str, start: date, end: date
) -> set[str]:
    """Ids of rooms of the type holding an active stay that intersects ``[start, end)``."""
    result = conn.execute(
        select(StaySegment.room_id)
        .join(Reservation, Reservation.id == StaySegment.reservation_id)
        .join(Room, Room.id == StaySegment.room_id)
        .where(
            StaySegment.property_id == property_id,
            Room.room_type_id == room_type_id,
            StaySegment.start_date < end,
            StaySegment.end_date > start,
            Reservation.status.in_([s.value for s in ACTIVE_STAY_STATUSES]),
        )
    )
    return {row[0] for row in result}


def list_reservations(
    conn: Connection,
    property_id: str,
    status: Optional[StayStatus] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    limit: int = 100,
) -> list[dict[str, Any]]:
    """
    List reservations newest first with their stay dates and room.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property scope.
        status (Optional[StayStatus]): Only reservations in this status.
        start (Optional[date]): With ``end``, keep stays intersecting ``[start, end)``.
        end (Optional[date]): Exclusive end of the overlap window.
        limit (int): Maximum number of rows.

    Returns:
        list[dict[str, Any]]: Reservation columns plus ``start_date``, ``end_date``,
        ``room_id`` and ``room_name``.
    """
    stmt = (
        select(
            Reservation.id,
            Reservation.status,
            Reservation.payment_status,
            Reservation.guest_name,
            Reservation.guest_email,
            Reservation.source,
            Reservation.channel,
            Reservation.created_at,
            StaySegment.start_date,
            StaySegment.end_date,
            Room.id.label("room_id"),
            Room.name.label("room_name"),
        )
        .outerjoin(StaySegment, StaySegment.reservation_id == Reservation.id)
        .outerjoin(Room, Room.id == StaySegment.room_id)
        .where(Reservation.property_id == property_id)
    )
    if status is not None:
        stmt = stmt.where(Reservation.status == StayStatus(status).value)
    if start is not None and end is not None:
        stmt = stmt.where(StaySegment.start_date < end, StaySegment.end_date > start)
    stmt = stmt.order_by(Reservation.created_at.desc(), Reservation.id).limit(limit)
    return [dict(row) for row in conn.execute(stmt).mappings()]
