from sqlalchemy import update
from sqlalchemy.engine import Connection

from stay_ledger.models.enums import HousekeepingStatus
from stay_ledger.models.properties import Room


def set_housekeeping_status(
    conn: Connection, property_id: str, room_id: str, status: HousekeepingStatus
) -> None:
    """
    Set a room's housekeeping status.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        property_id (str): Property scope.
        room_id (str): Room identifier.
        status (HousekeepingStatus): New status.
    """
    conn.execute(
        update(Room)
        .where(Room.id == room_id, Room.property_id == property_id)
        .values(housekeeping_status=status.value)
    )
