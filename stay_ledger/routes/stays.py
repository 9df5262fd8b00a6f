from __future__ import annotations

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from stay_ledger.config import STAY_MANAGER_ROLES
from stay_ledger.dependencies import Caller, get_caller, get_db_engine
from stay_ledger.errors import StayLedgerError
from stay_ledger.models.enums import StayStatus
from stay_ledger.routes._helpers import require_role_or_403, to_http_error
from stay_ledger.schemas.stays import (
    StayCreatePayload,
    StayDatesPayload,
    StayRoomPayload,
    StayStatusPayload,
)
from stay_ledger.services.lifecycle import transition_status
from stay_ledger.services.stays import (
    change_stay_dates,
    create_stay,
    get_stay_details,
    list_stays,
    move_room,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/properties/{property_id}/stays")
def list_stays_endpoint(
    property_id: str,
    status_filter: Optional[StayStatus] = Query(None, alias="status"),
    from_: Optional[str] = Query(None, alias="from", description="Window start (YYYY-MM-DD)"),
    to: Optional[str] = Query(None, description="Window end, exclusive (YYYY-MM-DD)"),
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """
    Newest stays first, at most 100.

    Example:
        >>> GET /properties/p1/stays?status=CONFIRMED&from=2024-06-01&to=2024-07-01
        {"stays": [{"id": "...", "status": "CONFIRMED", "start_date": "2024-06-03", ...}]}
    """
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        return {"stays": list_stays(engine, property_id, status_filter, from_, to)}
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("stay_list_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/properties/{property_id}/stays", status_code=status.HTTP_201_CREATED)
def create_stay_endpoint(
    property_id: str,
    payload: StayCreatePayload,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """
    Book a room: reservation, stay segment and an open folio, all or nothing.

    Args:
        property_id: Property scope
        payload: Room, dates, guest and initial status
        engine: Database engine
        caller: Authenticated caller

    Returns:
        dict: Stay details of the new reservation

    Raises:
        HTTPException: 409 on a block or overlapping stay, 422 on bad input
    """
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        return create_stay(
            engine,
            property_id,
            room_id=payload.room_id,
            start_key=payload.start_date,
            end_key=payload.end_date,
            guest_name=payload.guest_name.strip(),
            guest_email=payload.guest_email,
            adults=payload.adults,
            children=payload.children,
            source=payload.source,
            status=payload.status,
            channel=payload.channel,
            notes=payload.notes,
            created_by=caller.user_id,
        )
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("stay_creation_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/properties/{property_id}/stays/{reservation_id}")
def get_stay_endpoint(
    property_id: str,
    reservation_id: str,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """Reservation header, stay segment, folio summary and folio lines."""
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        return get_stay_details(engine, property_id, reservation_id)
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("stay_fetch_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/properties/{property_id}/stays/{reservation_id}/dates")
def change_dates_endpoint(
    property_id: str,
    reservation_id: str,
    payload: StayDatesPayload,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """Change the stay's dates on its current room."""
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        return change_stay_dates(
            engine, property_id, reservation_id, payload.start_date, payload.end_date
        )
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("stay_dates_change_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/properties/{property_id}/stays/{reservation_id}/room")
def move_room_endpoint(
    property_id: str,
    reservation_id: str,
    payload: StayRoomPayload,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """Move the stay to another room for the same dates."""
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        return move_room(engine, property_id, reservation_id, payload.room_id)
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("stay_room_move_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/properties/{property_id}/stays/{reservation_id}/status")
def transition_status_endpoint(
    property_id: str,
    reservation_id: str,
    payload: StayStatusPayload,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """
    Apply a lifecycle transition (confirm, check in, check out, cancel, no-show).

    Returns:
        dict: The updated reservation

    Raises:
        HTTPException: 409 on an illegal transition or a failed availability re-check
    """
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        return transition_status(
            engine, property_id, reservation_id, payload.status, actor_id=caller.user_id
        )
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("status_transition_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
