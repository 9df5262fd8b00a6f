"""
Booking operations: create a stay, change its dates, move it to another room.

A booking writes the reservation header, its single stay segment, and an
empty OPEN folio in one transaction. Every write path locks the room row
before checking availability so two bookings of the same room serialize.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection, Engine

from stay_ledger.db.readers.folios import get_folio_for_reservation, list_folio_lines
from stay_ledger.db.readers.rooms import get_bookable_room, get_property, lock_room
from stay_ledger.db.readers.stays import (
    get_reservation,
    get_stay_segment,
    get_stay_with_room,
    list_reservations,
)
from stay_ledger.db.writers.folios import insert_folio
from stay_ledger.db.writers.stays import (
    insert_reservation,
    insert_stay_segment,
    update_stay_dates,
    update_stay_room,
)
from stay_ledger.errors import (
    InvalidRoom,
    InvalidTransition,
    ReservationNotFound,
    StayLedgerError,
    StayNotModifiable,
)
from stay_ledger.metrics import bookings_total, operation_duration
from stay_ledger.models.enums import ACTIVE_STAY_STATUSES, ReservationSource, StayStatus
from stay_ledger.services.availability import assert_room_available
from stay_ledger.services.folio import compute_folio_totals
from stay_ledger.utils.dates import format_day_key, nights_between, parse_stay_dates

logger = structlog.get_logger(__name__)

BOOKABLE_STATUSES = (StayStatus.DRAFT, StayStatus.CONFIRMED)
STAY_LIST_LIMIT = 100


def load_stay_details(conn: Connection, property_id: str, reservation_id: str) -> dict[str, Any]:
    """
    Reservation header, stay segment, folio summary and lines as one dict.

    Raises:
        ReservationNotFound: Unknown reservation.
    """
    reservation = get_reservation(conn, property_id, reservation_id)
    if reservation is None:
        raise ReservationNotFound(reservation_id)

    stay = get_stay_with_room(conn, property_id, reservation_id)
    if stay is not None:
        stay["nights"] = nights_between(stay["start_date"], stay["end_date"])
        stay["start_date"] = format_day_key(stay["start_date"])
        stay["end_date"] = format_day_key(stay["end_date"])

    folio = get_folio_for_reservation(conn, property_id, reservation_id)
    lines: list[dict[str, Any]] = []
    if folio is not None:
        lines = list_folio_lines(conn, property_id, folio["id"])
        folio = {**folio, **compute_folio_totals(lines).as_dict()}

    return {"reservation": reservation, "stay": stay, "folio": folio, "lines": lines}


def get_stay_details(engine: Engine, property_id: str, reservation_id: str) -> dict[str, Any]:
    with engine.connect() as conn:
        return load_stay_details(conn, property_id, reservation_id)


def list_stays(
    engine: Engine,
    property_id: str,
    status: Optional[StayStatus] = None,
    from_key: Optional[str] = None,
    to_key: Optional[str] = None,
) -> list[dict[str, Any]]:
    """
    Newest reservations of a property, at most ``STAY_LIST_LIMIT``.

    The date window only applies when both ``from_key`` and ``to_key`` are
    given; it keeps stays intersecting ``[from_key, to_key)``.

    Raises:
        InvalidDateKey: Malformed day key.
        InvalidDateRange: ``to_key`` is not after ``from_key``.
    """
    start = end = None
    if from_key and to_key:
        start, end = parse_stay_dates(from_key, to_key)

    with engine.connect() as conn:
        rows = list_reservations(
            conn, property_id, status=status, start=start, end=end, limit=STAY_LIST_LIMIT
        )

    stays = []
    for row in rows:
        stays.append(
            {
                "id": row["id"],
                "status": row["status"],
                "payment_status": row["payment_status"],
                "guest_name": row["guest_name"],
                "guest_email": row["guest_email"],
                "source": row["source"],
                "channel": row["channel"],
                "created_at": row["created_at"],
                "start_date": format_day_key(row["start_date"]) if row["start_date"] else None,
                "end_date": format_day_key(row["end_date"]) if row["end_date"] else None,
                "room": {"id": row["room_id"], "name": row["room_name"]} if row["room_id"] else None,
            }
        )
    return stays


def create_stay(
    engine: Engine,
    property_id: str,
    room_id: str,
    start_key: str,
    end_key: str,
    guest_name: str,
    guest_email: Optional[str] = None,
    adults: int = 1,
    children: int = 0,
    source: ReservationSource = ReservationSource.MANUAL,
    status: StayStatus = StayStatus.CONFIRMED,
    channel: Optional[str] = None,
    notes: Optional[str] = None,
    created_by: Optional[str] = None,
) -> dict[str, Any]:
    """
    Book a room for ``[start_key, end_key)``.

    Args:
        engine (Engine): SQLAlchemy engine.
        property_id (str): Property scope.
        room_id (str): Room to book.
        start_key (str): Arrival day key.
        end_key (str): Checkout day key (exclusive).
        guest_name (str): Guest display name.
        guest_email (Optional[str]): Guest email.
        adults (int): Adult count.
        children (int): Child count.
        source (ReservationSource): Booking origin.
        status (StayStatus): DRAFT (hold) or CONFIRMED.
        channel (Optional[str]): Sales channel label.
        notes (Optional[str]): Free-text notes.
        created_by (Optional[str]): Acting user id.

    Returns:
        dict[str, Any]: Stay details (reservation, stay, folio, lines).

    Raises:
        InvalidDateKey: Malformed day key.
        InvalidDateRange: ``end_key`` is not after ``start_key``.
        InvalidTransition: ``status`` is neither DRAFT nor CONFIRMED.
        InvalidRoom: Room is missing, inactive, or out of order.
        RoomBlocked: A block intersects the range.
        RoomOccupied: Another active stay intersects the range.

    Example:
        >>> create_stay(engine, "prop-1", "room-1", "2024-06-01", "2024-06-05", "Ada")
    """
    try:
        start, end = parse_stay_dates(start_key, end_key)
        initial_status = StayStatus(status)
        if initial_status not in BOOKABLE_STATUSES:
            raise InvalidTransition("NEW", initial_status.value)

        with operation_duration.labels(operation="create_stay").time():
            with engine.begin() as conn:
                room = get_bookable_room(conn, property_id, room_id, lock=True)
                prop = get_property(conn, property_id)
                if room is None or prop is None:
                    raise InvalidRoom(room_id)

                assert_room_available(conn, property_id, room_id, start, end)

                reservation_id = insert_reservation(
                    conn,
                    property_id,
                    {
                        "status": initial_status.value,
                        "guest_name": guest_name,
                        "guest_email": guest_email,
                        "source": ReservationSource(source).value,
                        "channel": channel,
                        "notes": notes,
                        "created_by": created_by,
                    },
                )
                insert_stay_segment(
                    conn, property_id, reservation_id, room, start, end, adults, children
                )
                insert_folio(conn, property_id, reservation_id, prop["currency"])
                details = load_stay_details(conn, property_id, reservation_id)
    except StayLedgerError as e:
        bookings_total.labels(outcome=e.code).inc()
        raise

    bookings_total.labels(outcome="success").inc()
    logger.info(
        "stay_created",
        reservation_id=reservation_id,
        room_id=room_id,
        start=start_key,
        end=end_key,
        status=initial_status.value,
    )
    return details


def _load_modifiable_stay(conn: Connection, property_id: str, reservation_id: str) -> dict[str, Any]:
    reservation = get_reservation(conn, property_id, reservation_id, lock=True)
    if reservation is None:
        raise ReservationNotFound(reservation_id)
    if StayStatus(reservation["status"]) not in ACTIVE_STAY_STATUSES:
        raise StayNotModifiable(reservation["status"])
    segment = get_stay_segment(conn, property_id, reservation_id)
    if segment is None:
        raise ReservationNotFound(reservation_id)
    return segment


def change_stay_dates(
    engine: Engine, property_id: str, reservation_id: str, start_key: str, end_key: str
) -> dict[str, Any]:
    """
    Rewrite the stay's date range on its current room.

    The reservation's own current occupancy is ignored by the availability
    check, so shrinking or shifting within the old range always succeeds.

    Raises:
        ReservationNotFound: Unknown reservation.
        StayNotModifiable: Reservation is not DRAFT, CONFIRMED, or CHECKED_IN.
        InvalidDateRange: ``end_key`` is not after ``start_key``.
        RoomBlocked: A block intersects the new range.
        RoomOccupied: Another active stay intersects the new range.
    """
    start, end = parse_stay_dates(start_key, end_key)
    with operation_duration.labels(operation="change_stay_dates").time():
        with engine.begin() as conn:
            segment = _load_modifiable_stay(conn, property_id, reservation_id)
            lock_room(conn, property_id, segment["room_id"])
            assert_room_available(
                conn,
                property_id,
                segment["room_id"],
                start,
                end,
                exclude_reservation_id=reservation_id,
            )
            update_stay_dates(conn, property_id, reservation_id, start, end)
            details = load_stay_details(conn, property_id, reservation_id)

    logger.info(
        "stay_dates_changed",
        reservation_id=reservation_id,
        previous_start=format_day_key(segment["start_date"]),
        previous_end=format_day_key(segment["end_date"]),
        start=start_key,
        end=end_key,
    )
    return details


def move_room(engine: Engine, property_id: str, reservation_id: str, new_room_id: str) -> dict[str, Any]:
    """
    Move the whole stay to another room for the same dates.

    Moving to the room the stay already occupies is a no-op.

    Raises:
        ReservationNotFound: Unknown reservation.
        StayNotModifiable: Reservation is not DRAFT, CONFIRMED, or CHECKED_IN.
        InvalidRoom: Target room is missing, inactive, or out of order.
        RoomBlocked: A block on the target room intersects the stay.
        RoomOccupied: Another active stay on the target room intersects the stay.
    """
    with operation_duration.labels(operation="move_room").time():
        with engine.begin() as conn:
            segment = _load_modifiable_stay(conn, property_id, reservation_id)
            if segment["room_id"] != new_room_id:
                room = get_bookable_room(conn, property_id, new_room_id, lock=True)
                if room is None:
                    raise InvalidRoom(new_room_id)
                assert_room_available(
                    conn,
                    property_id,
                    new_room_id,
                    segment["start_date"],
                    segment["end_date"],
                    exclude_reservation_id=reservation_id,
                )
                update_stay_room(conn, property_id, reservation_id, room)
                logger.info(
                    "stay_room_moved",
                    reservation_id=reservation_id,
                    from_room_id=segment["room_id"],
                    to_room_id=new_room_id,
                )
            details = load_stay_details(conn, property_id, reservation_id)

    return details
