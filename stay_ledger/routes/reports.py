from __future__ import annotations

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from stay_ledger.config import FINANCE_MANAGER_ROLES
from stay_ledger.dependencies import Caller, get_caller, get_db_engine
from stay_ledger.errors import StayLedgerError
from stay_ledger.routes._helpers import require_role_or_403, to_http_error
from stay_ledger.services.reports import (
    get_daily_report,
    normalize_range,
    parse_mode,
    parse_preset,
    resolve_range,
)
from stay_ledger.utils.dates import today_key

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/properties/{property_id}/reports/daily")
def daily_report_endpoint(
    property_id: str,
    mode: Optional[str] = Query(None, description="cash or accrual (default)"),
    preset: Optional[str] = Query(None, description="today, yesterday, last7, last30, thisMonth, lastMonth, custom"),
    start: Optional[str] = Query(None, description="Custom range start (YYYY-MM-DD)"),
    end: Optional[str] = Query(None, description="Custom range end, inclusive (YYYY-MM-DD)"),
    engine: Engine = Depends(get_db_engine),
    caller: Caller = Depends(get_caller),
) -> dict[str, Any]:
    """
    Per-day cash or accrual report.

    Unknown modes mean accrual and unknown presets mean today. A reversed
    custom range is swapped; a malformed one falls back to today.

    Returns:
        dict: ``mode``, ``start_key``, ``end_key``, ``rows`` and the range total
    """
    require_role_or_403(caller, FINANCE_MANAGER_ROLES)
    today = today_key()
    try:
        start_key, end_key = resolve_range(today, parse_preset(preset), start, end)
        start_key, end_key = normalize_range(today, start_key, end_key)
        return get_daily_report(engine, property_id, parse_mode(mode), start_key, end_key)
    except StayLedgerError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.exception("daily_report_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
