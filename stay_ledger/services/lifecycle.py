"""
Reservation status state machine.

    DRAFT -> CONFIRMED -> CHECKED_IN -> CHECKED_OUT
    DRAFT -> CANCELLED
    CONFIRMED -> CANCELLED | NO_SHOW

CHECKED_OUT, CANCELLED and NO_SHOW are terminal. Nothing transitions to DRAFT.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine

from stay_ledger.db.readers.rooms import lock_room
from stay_ledger.db.readers.stays import get_reservation, get_stay_segment
from stay_ledger.db.writers.rooms import set_housekeeping_status
from stay_ledger.db.writers.stays import update_reservation_status
from stay_ledger.errors import InvalidTransition, ReservationNotFound
from stay_ledger.metrics import operation_duration, status_transitions
from stay_ledger.models.enums import HousekeepingStatus, StayStatus
from stay_ledger.services.availability import assert_room_available

logger = structlog.get_logger(__name__)

ALLOWED_TRANSITIONS: dict[StayStatus, frozenset[StayStatus]] = {
    StayStatus.DRAFT: frozenset({StayStatus.CONFIRMED, StayStatus.CANCELLED}),
    StayStatus.CONFIRMED: frozenset(
        {StayStatus.CHECKED_IN, StayStatus.CANCELLED, StayStatus.NO_SHOW}
    ),
    StayStatus.CHECKED_IN: frozenset({StayStatus.CHECKED_OUT}),
    StayStatus.CHECKED_OUT: frozenset(),
    StayStatus.CANCELLED: frozenset(),
    StayStatus.NO_SHOW: frozenset(),
}

# Entering these statuses re-checks that the room is still free.
OCCUPYING_TARGETS: frozenset[StayStatus] = frozenset({StayStatus.CONFIRMED, StayStatus.CHECKED_IN})


def is_valid_transition(from_status: StayStatus, to_status: StayStatus) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


def transition_status(
    engine: Engine,
    property_id: str,
    reservation_id: str,
    to_status: str,
    actor_id: Optional[str] = None,
) -> dict[str, Any]:
    """
    Move a reservation to a new status.

    Entering CONFIRMED or CHECKED_IN re-runs the availability check for the
    stay's room, ignoring the reservation itself. Reaching CHECKED_OUT marks
    the room DIRTY in the same transaction.

    Args:
        engine (Engine): SQLAlchemy engine.
        property_id (str): Property scope.
        reservation_id (str): Reservation to transition.
        to_status (str): Target status.
        actor_id (Optional[str]): Acting user id, for the log.

    Returns:
        dict[str, Any]: The updated reservation row.

    Raises:
        ReservationNotFound: Unknown reservation.
        InvalidTransition: Pair not in the transition table, or unknown target.
        RoomBlocked: Re-check found a block.
        RoomOccupied: Re-check found another active stay.
    """
    with operation_duration.labels(operation="transition_status").time():
        with engine.begin() as conn:
            reservation = get_reservation(conn, property_id, reservation_id, lock=True)
            if reservation is None:
                raise ReservationNotFound(reservation_id)

            from_status = StayStatus(reservation["status"])
            try:
                target = StayStatus(to_status)
            except ValueError:
                raise InvalidTransition(from_status.value, str(to_status)) from None

            if not is_valid_transition(from_status, target):
                raise InvalidTransition(from_status.value, target.value)

            segment = get_stay_segment(conn, property_id, reservation_id)
            if target in OCCUPYING_TARGETS and segment is not None:
                lock_room(conn, property_id, segment["room_id"])
                assert_room_available(
                    conn,
                    property_id,
                    segment["room_id"],
                    segment["start_date"],
                    segment["end_date"],
                    exclude_reservation_id=reservation_id,
                )

            update_reservation_status(conn, property_id, reservation_id, target)

            if target == StayStatus.CHECKED_OUT and segment is not None:
                set_housekeeping_status(
                    conn, property_id, segment["room_id"], HousekeepingStatus.DIRTY
                )

            updated = get_reservation(conn, property_id, reservation_id)

    status_transitions.labels(from_status=from_status.value, to_status=target.value).inc()
    logger.info(
        "status_transitioned",
        reservation_id=reservation_id,
        from_status=from_status.value,
        to_status=target.value,
        actor_id=actor_id,
    )
    return updated
