"""
Room availability checks over half-open date ranges.

A room is available for ``[start, end)`` when no block on the room and no
active stay (DRAFT, CONFIRMED, CHECKED_IN) intersects the range. Blocks are
checked first and always conflict.

The ``conn``-level functions run inside the caller's transaction. Callers
that go on to write a stay segment must hold the room row lock
(``lock_room``) before calling them so the decision and the write are atomic.
"""

from datetime import date
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection, Engine

from stay_ledger.db.readers.rooms import (
    find_overlapping_block_id,
    get_bookable_room,
    get_room_type,
    list_blocked_room_ids,
    list_bookable_rooms_of_type,
)
from stay_ledger.db.readers.stays import find_overlapping_stay_reservation_id, list_occupied_room_ids
from stay_ledger.errors import InvalidRoom, InvalidRoomType, RoomBlocked, RoomOccupied
from stay_ledger.metrics import availability_conflicts
from stay_ledger.utils.dates import parse_stay_dates

logger = structlog.get_logger(__name__)


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """
    True iff half-open ranges ``[start_a, end_a)`` and ``[start_b, end_b)`` intersect.

    Example:
        >>> ranges_overlap(date(2024, 6, 1), date(2024, 6, 5), date(2024, 6, 5), date(2024, 6, 7))
        False
    """
    return start_a < end_b and start_b < end_a


def is_room_available(
    conn: Connection,
    property_id: str,
    room_id: str,
    start: date,
    end: date,
    exclude_reservation_id: Optional[str] = None,
) -> bool:
    if find_overlapping_block_id(conn, property_id, room_id, start, end) is not None:
        return False
    conflicting = find_overlapping_stay_reservation_id(
        conn, property_id, room_id, start, end, exclude_reservation_id
    )
    return conflicting is None


def assert_room_available(
    conn: Connection,
    property_id: str,
    room_id: str,
    start: date,
    end: date,
    exclude_reservation_id: Optional[str] = None,
) -> None:
    """
    Fail unless the room is free for ``[start, end)``.

    Args:
        conn (Connection): Connection inside the caller's transaction.
        property_id (str): Property scope.
        room_id (str): Room to check.
        start (date): Arrival day (inclusive).
        end (date): Checkout day (exclusive).
        exclude_reservation_id (Optional[str]): Reservation whose own stay is ignored,
            used when moving or extending that reservation.

    Raises:
        RoomBlocked: A block on the room intersects the range.
        RoomOccupied: An active stay on the room intersects the range.
    """
    block_id = find_overlapping_block_id(conn, property_id, room_id, start, end)
    if block_id is not None:
        availability_conflicts.labels(reason="block").inc()
        logger.info(
            "availability_conflict",
            reason="block",
            room_id=room_id,
            block_id=block_id,
            start=start.isoformat(),
            end=end.isoformat(),
        )
        raise RoomBlocked(room_id)

    reservation_id = find_overlapping_stay_reservation_id(
        conn, property_id, room_id, start, end, exclude_reservation_id
    )
    if reservation_id is not None:
        availability_conflicts.labels(reason="stay").inc()
        logger.info(
            "availability_conflict",
            reason="stay",
            room_id=room_id,
            conflicting_reservation_id=reservation_id,
            start=start.isoformat(),
            end=end.isoformat(),
        )
        raise RoomOccupied(room_id)


def check_availability(
    engine: Engine,
    property_id: str,
    room_id: str,
    start_key: str,
    end_key: str,
    exclude_reservation_id: Optional[str] = None,
) -> bool:
    """
    Answer whether a room can be booked for a day-key range.

    Args:
        engine (Engine): SQLAlchemy engine.
        property_id (str): Property scope.
        room_id (str): Room to check.
        start_key (str): Arrival day key.
        end_key (str): Checkout day key (exclusive).
        exclude_reservation_id (Optional[str]): Reservation to ignore.

    Returns:
        bool: True if no block or active stay intersects the range.

    Raises:
        InvalidDateKey: Malformed day key.
        InvalidDateRange: ``end_key`` is not after ``start_key``.
        InvalidRoom: Room is missing, inactive, or out of order.
    """
    start, end = parse_stay_dates(start_key, end_key)
    with engine.connect() as conn:
        if get_bookable_room(conn, property_id, room_id) is None:
            raise InvalidRoom(room_id)
        return is_room_available(conn, property_id, room_id, start, end, exclude_reservation_id)


def find_available_rooms(
    engine: Engine, property_id: str, room_type_id: str, start_key: str, end_key: str
) -> list[dict[str, Any]]:
    """
    Search the bookable rooms of one room type that are free for a day-key range.

    Out-of-order and inactive rooms are never offered. A room drops out when a
    block or an active stay intersects ``[start_key, end_key)``.

    Args:
        engine (Engine): SQLAlchemy engine.
        property_id (str): Property scope.
        room_type_id (str): Room type to search.
        start_key (str): Arrival day key.
        end_key (str): Checkout day key (exclusive).

    Returns:
        list[dict[str, Any]]: Free rooms ordered by name, each with its room type code and name.

    Raises:
        InvalidDateKey: Malformed day key.
        InvalidDateRange: ``end_key`` is not after ``start_key``.
        InvalidRoomType: Room type does not belong to the property.

    Example:
        >>> find_available_rooms(engine, "prop-1", "rt-std", "2024-06-01", "2024-06-05")
        [{'id': 'room-2', 'name': '102', 'room_type_code': 'STD', ...}]
    """
    start, end = parse_stay_dates(start_key, end_key)
    with engine.connect() as conn:
        if get_room_type(conn, property_id, room_type_id) is None:
            raise InvalidRoomType(room_type_id)
        rooms = list_bookable_rooms_of_type(conn, property_id, room_type_id)
        taken = list_blocked_room_ids(conn, property_id, room_type_id, start, end)
        taken |= list_occupied_room_ids(conn, property_id, room_type_id, start, end)

    return [room for room in rooms if room["id"] not in taken]
