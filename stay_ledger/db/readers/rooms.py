"""Read access to properties, rooms, blocks, and rate plans."""

from datetime import date
from typing import Any, Optional

from sqlalchemy import and_, select
from sqlalchemy.engine import Connection

from stay_ledger.models.enums import RoomStatus
from stay_ledger.models.properties import (
    Block,
    Property,
    RatePlan,
    RatePlanRoomType,
    Room,
    RoomType,
)


def get_property(conn: Connection, property_id: str) -> Optional[dict[str, Any]]:
    """
    Fetch a property row.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property identifier.

    Returns:
        Optional[dict[str, Any]]: Property columns or None if not found.
    """
    row = (
        conn.execute(select(Property).where(Property.id == property_id)).mappings().fetchone()
    )
    return dict(row) if row else None


def get_bookable_room(
    conn: Connection, property_id: str, room_id: str, lock: bool = False
) -> Optional[dict[str, Any]]:
    """
    Fetch a room that can take bookings: in the property, active, not out of order.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property scope.
        room_id (str): Room identifier.
        lock (bool): If True, take a row lock (SELECT ... FOR UPDATE) so that
            concurrent bookings of the same room serialize on it.

    Returns:
        Optional[dict[str, Any]]: Room columns or None.
    """
    stmt = select(Room).where(
        Room.id == room_id,
        Room.property_id == property_id,
        Room.is_active.is_(True),
        Room.status == RoomStatus.ACTIVE.value,
    )
    if lock:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def lock_room(conn: Connection, property_id: str, room_id: str) -> None:
    """Take the per-room row lock without any bookability filter."""
    conn.execute(
        select(Room.id)
        .where(Room.id == room_id, Room.property_id == property_id)
        .with_for_update()
    )


def list_active_rooms(conn: Connection, property_id: str) -> list[dict[str, Any]]:
    """Active rooms of a property with their room type, ordered by name."""
    result = conn.execute(
        select(
            Room.id,
            Room.name,
            Room.status,
            Room.housekeeping_status,
            RoomType.id.label("room_type_id"),
            RoomType.code.label("room_type_code"),
            RoomType.name.label("room_type_name"),
        )
        .join(RoomType, RoomType.id == Room.room_type_id)
        .where(Room.property_id == property_id, Room.is_active.is_(True))
        .order_by(Room.name)
    )
    return [dict(row) for row in result.mappings()]


def get_room_type(conn: Connection, property_id: str, room_type_id: str) -> Optional[dict[str, Any]]:
    """Room type row scoped to the property, or None."""
    row = (
        conn.execute(
            select(RoomType).where(
                RoomType.id == room_type_id, RoomType.property_id == property_id
            )
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def find_overlapping_block_id(
    conn: Connection, property_id: str, room_id: str, start: date, end: date
) -> Optional[str]:
    """
    Return the id of any block on the room intersecting ``[start, end)``.

    Two half-open ranges conflict iff ``s1 < e2 AND s2 < e1``.
    """
    row = conn.execute(
        select(Block.id)
        .where(
            Block.property_id == property_id,
            Block.room_id == room_id,
            Block.start_date < end,
            Block.end_date > start,
        )
        .limit(1)
    ).fetchone()
    return row[0] if row else None


def list_blocks_in_range(
    conn: Connection, property_id: str, start: date, end: date
) -> list[dict[str, Any]]:
    result = conn.execute(
        select(Block)
        .where(
            Block.property_id == property_id,
            Block.start_date < end,
            Block.end_date > start,
        )
        .order_by(Block.start_date)
    )
    return [dict(row) for row in result.mappings()]


def find_default_rate_plan(conn: Connection, property_id: str) -> Optional[dict[str, Any]]:
    """
    Resolve the property's default rate plan.

    The property's ``default_rate_plan_id`` wins when that plan is active;
    otherwise any active plan flagged ``is_default`` is used.
    """
    prop = get_property(conn, property_id)
    if prop is None:
        return None

    if prop["default_rate_plan_id"]:
        row = (
            conn.execute(
                select(RatePlan).where(
                    RatePlan.id == prop["default_rate_plan_id"],
                    RatePlan.property_id == property_id,
                    RatePlan.is_active.is_(True),
                )
            )
            .mappings()
            .fetchone()
        )
        if row:
            return dict(row)

    row = (
        conn.execute(
            select(RatePlan)
            .where(
                RatePlan.property_id == property_id,
                RatePlan.is_default.is_(True),
                RatePlan.is_active.is_(True),
            )
            .order_by(RatePlan.name)
            .limit(1)
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_nightly_rate_cents(conn: Connection, rate_plan_id: str, room_type_id: str) -> Optional[int]:
    """Nightly rate of a room type in a rate plan, or None when not priced."""
    row = conn.execute(
        select(RatePlanRoomType.nightly_rate_cents).where(
            and_(
                RatePlanRoomType.rate_plan_id == rate_plan_id,
                RatePlanRoomType.room_type_id == room_type_id,
            )
        )
    ).fetchone()
    return row[0] if row else None


def list_bookable_rooms_of_type(
    conn: Connection, property_id: str, room_type_id: str
) -> list[dict[str, Any]]:
    """Active, in-order rooms of one room type with their type code/name, ordered by name."""
    result = conn.execute(
        select(
            Room.id,
            Room.name,
            Room.housekeeping_status,
            RoomType.id.label("room_type_id"),
            RoomType.code.label("room_type_code"),
            RoomType.name.label("room_type_name"),
        )
        .join(RoomType, RoomType.id == Room.room_type_id)
        .where(
            Room.property_id == property_id,
            Room.room_type_id == room_type_id,
            Room.is_active.is_(True),
            Room.status == RoomStatus.ACTIVE.value,
        )
        .order_by(Room.name)
    )
    return [dict(row) for row in result.mappings()]


def list_blocked_room_ids(
    conn: Connection, property_id: str, room_type_id: str, start: date, end: date
) -> set[str]:
    """Ids of rooms of the type carrying a block that intersects ``[start, end)``."""
    result = conn.execute(
        select(Block.room_id)
        .join(Room, Room.id == Block.room_id)
        .where(
            Block.property_id == property_id,
            Room.room_type_id == room_type_id,
            Block.start_date < end,
            Block.end_date > start,
        )
    )
    return {row[0] for row in result}
