"""
Internal helpers shared by the property-scoped route handlers.
"""

from __future__ import annotations

from typing import Iterable

from fastapi import HTTPException, status

from stay_ledger.dependencies import Caller
from stay_ledger.errors import StayLedgerError


def require_role_or_403(caller: Caller, allowed: Iterable[str]) -> None:
    """
    Reject callers whose role is not in ``allowed``.

    Args:
        caller: Identity forwarded by the auth layer
        allowed: Role names permitted for the operation

    Raises:
        HTTPException: 403 if the role is not allowed
    """
    if caller.role not in allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role {caller.role} is not allowed to perform this action",
        )


def to_http_error(error: StayLedgerError) -> HTTPException:
    """Map a domain error onto an HTTPException carrying its status and message."""
    return HTTPException(
        status_code=error.status_code,
        detail={"code": error.code, "message": str(error)},
    )
