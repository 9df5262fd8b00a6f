"""
Folio routes. Charges may be posted by any stay manager; payments, reversals,
room-charge posting and closing require a finance manager role.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from stay_ledger.config import FINANCE_MANAGER_ROLES, STAY_MANAGER_ROLES
from stay_ledger.dependencies import Caller, get_caller, get_db_engine
from stay_ledger.errors import StayLedgerError
from stay_ledger.routes._helpers import require_role_or_403, to_http_error
from stay_ledger.schemas.folios import ChargePayload, PaymentPayload
from stay_ledger.services.folio import (
    add_charge,
    add_payment,
    close_folio,
    get_folio_summary,
    list_lines,
    reverse_line,
)
from stay_ledger.services.room_charges import post_room_charges

logger = structlog.get_logger(__name__)
router = APIRouter()

FOLIO_PATH = "/properties/{property_id}/stays/{reservation_id}/folio"


@router.get(FOLIO_PATH)
def folio_summary_endpoint(
    property_id: str,
    reservation_id: str,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """
    Folio totals.

    Example:
        >>> GET /properties/p1/stays/r1/folio
        {"folio_id": "...", "currency": "USD", "status": "OPEN",
         "subtotal_cents": 30000, "paid_cents": 0, "balance_cents": 30000,
         "payment_status": "UNPAID"}
    """
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        return get_folio_summary(engine, property_id, reservation_id)
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("folio_summary_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(f"{FOLIO_PATH}/lines")
def folio_lines_endpoint(
    property_id: str,
    reservation_id: str,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> list[dict[str, Any]]:
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        return list_lines(engine, property_id, reservation_id)
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("folio_lines_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(f"{FOLIO_PATH}/charges", status_code=status.HTTP_201_CREATED)
def add_charge_endpoint(
    property_id: str,
    reservation_id: str,
    payload: ChargePayload,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """Post a charge of ``amount_cents * quantity``."""
    require_role_or_403(caller, STAY_MANAGER_ROLES)
    try:
        return add_charge(
            engine,
            property_id,
            reservation_id,
            payload.amount_cents,
            description=payload.description,
            charge_type=payload.charge_type,
            quantity=payload.quantity,
            date_key=payload.date_key,
            created_by=caller.user_id,
        )
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("charge_post_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(f"{FOLIO_PATH}/payments", status_code=status.HTTP_201_CREATED)
def add_payment_endpoint(
    property_id: str,
    reservation_id: str,
    payload: PaymentPayload,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """Record a payment; the stored line amount is negative."""
    require_role_or_403(caller, FINANCE_MANAGER_ROLES)
    try:
        return add_payment(
            engine,
            property_id,
            reservation_id,
            payload.amount_cents,
            payment_method=payload.payment_method,
            reference=payload.reference,
            description=payload.description,
            date_key=payload.date_key,
            created_by=caller.user_id,
        )
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("payment_record_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(f"{FOLIO_PATH}/lines/{{line_id}}/reversal", status_code=status.HTTP_201_CREATED)
def reverse_line_endpoint(
    property_id: str,
    reservation_id: str,
    line_id: str,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """
    Reverse one line. A second reversal of the same line is rejected.

    Raises:
        HTTPException: 404 unknown line, 409 already reversed or folio closed
    """
    require_role_or_403(caller, FINANCE_MANAGER_ROLES)
    try:
        return reverse_line(engine, property_id, reservation_id, line_id, created_by=caller.user_id)
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("line_reversal_failed", line_id=line_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(f"{FOLIO_PATH}/room-charges", status_code=status.HTTP_201_CREATED)
def post_room_charges_endpoint(
    property_id: str,
    reservation_id: str,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """Post the stay's room charge. Each call posts a new line."""
    require_role_or_403(caller, FINANCE_MANAGER_ROLES)
    try:
        return post_room_charges(engine, property_id, reservation_id, created_by=caller.user_id)
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("room_charge_post_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(f"{FOLIO_PATH}/close")
def close_folio_endpoint(
    property_id: str,
    reservation_id: str,
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    require_role_or_403(caller, FINANCE_MANAGER_ROLES)
    try:
        return close_folio(engine, property_id, reservation_id)
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("folio_close_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
