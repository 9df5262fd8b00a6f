from __future__ import annotations

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from stay_ledger.config import STAY_MANAGER_ROLES
from stay_ledger.dependencies import Caller, get_caller, get_db_engine
from stay_ledger.errors import StayLedgerError
from stay_ledger.routes._helpers import require_role_or_403, to_http_error
from stay_ledger.services.availability import check_availability, find_available_rooms
from stay_ledger.services.calendar import get_availability_calendar

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/properties/{property_id}/availability")
def availability_calendar(
    property_id: str,
    from_: str = Query(..., alias="from", description="First day (YYYY-MM-DD)"),
    to: str = Query(..., description="Day after the last day shown (YYYY-MM-DD)"),
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """
    Availability grid: per active room, its blocks, stays, and daily occupancy.

    Args:
        property_id: Property scope
        from_: First day of the grid
        to: Exclusive end of the grid
        engine: Database engine
        caller: Authenticated caller

    Returns:
        dict: ``from``, ``to``, ``dates`` and ``rooms``
    """
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        return get_availability_calendar(engine, property_id, from_, to)
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("availability_calendar_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/properties/{property_id}/rooms/{room_id}/availability")
def room_availability(
    property_id: str,
    room_id: str,
    start_date: str = Query(..., description="Arrival day (YYYY-MM-DD)"),
    end_date: str = Query(..., description="Checkout day, exclusive (YYYY-MM-DD)"),
    exclude_reservation_id: Optional[str] = Query(None),
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """Answer whether one room is free for a date range."""
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        available = check_availability(
            engine, property_id, room_id, start_date, end_date, exclude_reservation_id
        )
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("availability_check_failed", room_id=room_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    return {
        "room_id": room_id,
        "start_date": start_date,
        "end_date": end_date,
        "available": available,
    }


@router.get("/properties/{property_id}/room-types/{room_type_id}/available-rooms")
def available_rooms(
    property_id: str,
    room_type_id: str,
    start_date: str = Query(..., description="Arrival day (YYYY-MM-DD)"),
    end_date: str = Query(..., description="Checkout day, exclusive (YYYY-MM-DD)"),
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """
    Rooms of a type that can be booked for the range, for the new-booking flow.

    Returns:
        dict: The echoed query plus ``rooms``, ordered by name
    """
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        rooms = find_available_rooms(engine, property_id, room_type_id, start_date, end_date)
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("room_search_failed", room_type_id=room_type_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    return {
        "room_type_id": room_type_id,
        "start_date": start_date,
        "end_date": end_date,
        "rooms": rooms,
    }
