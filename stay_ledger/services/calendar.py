"""Per-room availability grid for a half-open day range."""

from typing import Any

from sqlalchemy.engine import Engine

from stay_ledger.db.readers.rooms import list_active_rooms, list_blocks_in_range
from stay_ledger.db.readers.stays import list_stays_in_range
from stay_ledger.errors import InvalidDateRange
from stay_ledger.models.enums import StayStatus
from stay_ledger.utils.dates import enumerate_day_keys, format_day_key, parse_stay_dates

# Checked-out stays still show on the calendar but no longer hold the room.
CALENDAR_STAY_STATUSES = (
    StayStatus.DRAFT,
    StayStatus.CONFIRMED,
    StayStatus.CHECKED_IN,
    StayStatus.CHECKED_OUT,
)

OCCUPANCY_STAY = "STAY"
OCCUPANCY_BLOCK = "BLOCK"
OCCUPANCY_FREE = ""
MAX_CALENDAR_DAYS = 366


def _occupancy(day_key: str, stays: list[dict[str, Any]], blocks: list[dict[str, Any]]) -> str:
    for stay in stays:
        if stay["start_date"] <= day_key < stay["end_date"]:
            return OCCUPANCY_STAY
    for block in blocks:
        if block["start_date"] <= day_key < block["end_date"]:
            return OCCUPANCY_BLOCK
    return OCCUPANCY_FREE


def get_availability_calendar(
    engine: Engine, property_id: str, from_key: str, to_key: str
) -> dict[str, Any]:
    """
    Build the availability grid for ``[from_key, to_key)``.

    Each active room carries the blocks and stays intersecting the range and an
    ``occupancy`` list aligned with ``dates``: ``STAY``, ``BLOCK`` or ``""``.
    A stay wins over a block on the same day. Days are compared as day keys.

    Raises:
        InvalidDateKey: Malformed day key.
        InvalidDateRange: ``to_key`` is not after ``from_key``, or the range
            spans more than ``MAX_CALENDAR_DAYS`` days.
    """
    start, end = parse_stay_dates(from_key, to_key)
    if (end - start).days > MAX_CALENDAR_DAYS:
        raise InvalidDateRange(f"Calendar range cannot exceed {MAX_CALENDAR_DAYS} days")
    with engine.connect() as conn:
        rooms = list_active_rooms(conn, property_id)
        blocks = list_blocks_in_range(conn, property_id, start, end)
        stays = list_stays_in_range(conn, property_id, start, end, CALENDAR_STAY_STATUSES)

    blocks_by_room: dict[str, list[dict[str, Any]]] = {}
    for block in blocks:
        blocks_by_room.setdefault(block["room_id"], []).append(
            {
                "id": block["id"],
                "room_id": block["room_id"],
                "start_date": format_day_key(block["start_date"]),
                "end_date": format_day_key(block["end_date"]),
                "reason": block["reason"],
            }
        )

    stays_by_room: dict[str, list[dict[str, Any]]] = {}
    for stay in stays:
        stays_by_room.setdefault(stay["room_id"], []).append(
            {
                "reservation_id": stay["reservation_id"],
                "room_id": stay["room_id"],
                "start_date": format_day_key(stay["start_date"]),
                "end_date": format_day_key(stay["end_date"]),
                "status": stay["status"],
                "guest_name": stay["guest_name"],
                "source": stay["source"],
                "channel": stay["channel"],
            }
        )

    dates = enumerate_day_keys(start, end)
    grid = []
    for room in rooms:
        room_blocks = blocks_by_room.get(room["id"], [])
        room_stays = stays_by_room.get(room["id"], [])
        grid.append(
            {
                **room,
                "blocks": room_blocks,
                "stays": room_stays,
                "occupancy": [_occupancy(day, room_stays, room_blocks) for day in dates],
            }
        )

    return {"from": from_key, "to": to_key, "dates": dates, "rooms": grid}
