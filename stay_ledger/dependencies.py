"""
FastAPI dependency injection providers.

Dependencies can be overridden in tests using app.dependency_overrides.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generator, Optional

from fastapi import Header, HTTPException, status
from sqlalchemy.engine import Engine

from stay_ledger.db.engine import engine


@dataclass(frozen=True)
class Caller:
    """Authenticated caller as forwarded by the upstream auth layer."""

    user_id: Optional[str]
    role: str


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> test_engine = build_engine("sqlite://")
        >>> app.dependency_overrides[get_db_engine] = lambda: test_engine
    """
    yield engine


def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Caller:
    """
    Read the caller identity from ``X-User-Id`` / ``X-User-Role``.

    Raises:
        HTTPException: 401 if no role header is present.
    """
    if not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Role header",
        )
    return Caller(user_id=x_user_id, role=x_user_role.strip().upper())
