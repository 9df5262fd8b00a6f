"""
Shared fixtures: environment, a fresh in-memory database per test, and a
seeded property with rooms, blocks and rate plans.
"""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ALLOWED_ORIGINS"] = "*"

from datetime import date  # noqa: E402
from typing import Any, Callable, Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import insert, update  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402

from stay_ledger.db.engine import build_engine  # noqa: E402
from stay_ledger.models.base import Base  # noqa: E402
from stay_ledger.models.enums import RoomStatus  # noqa: E402
from stay_ledger.models.properties import (  # noqa: E402
    Block,
    Property,
    RatePlan,
    RatePlanRoomType,
    Room,
    RoomType,
)

PROPERTY_ID = "prop-1"
OTHER_PROPERTY_ID = "prop-2"



@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory SQLite database with the full schema."""
    test_engine = build_engine("sqlite://")
    Base.metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def seeded(engine: Engine) -> dict[str, Any]:
    """
    Seed one USD property with:

    - room type STD (legacy base rate 90.00) priced 100.00 in the default rate plan
    - room type STE with no base rate and no plan price
    - rooms R1, R2 (STD), R3 (STD, out of order), S1 (STE)
    - a second property with its own room, for scoping checks
    """
    with engine.begin() as conn:
        conn.execute(
            insert(Property).values(
                id=PROPERTY_ID, name="Harbour Inn", currency="USD", default_rate_plan_id="plan-1"
            )
        )
        conn.execute(insert(Property).values(id=OTHER_PROPERTY_ID, name="Hill Lodge", currency="EUR"))
        conn.execute(
            insert(RoomType),
            [
                {
                    "id": "rt-std",
                    "property_id": PROPERTY_ID,
                    "code": "STD",
                    "name": "Standard",
                    "base_rate_cents": 9000,
                },
                {
                    "id": "rt-ste",
                    "property_id": PROPERTY_ID,
                    "code": "STE",
                    "name": "Suite",
                    "base_rate_cents": None,
                },
                {
                    "id": "rt-other",
                    "property_id": OTHER_PROPERTY_ID,
                    "code": "DBL",
                    "name": "Double",
                    "base_rate_cents": 8000,
                },
            ],
        )
        conn.execute(
            insert(Room),
            [
                _room("room-r1", PROPERTY_ID, "rt-std", "R1"),
                _room("room-r2", PROPERTY_ID, "rt-std", "R2"),
                _room("room-r3", PROPERTY_ID, "rt-std", "R3", RoomStatus.OUT_OF_ORDER),
                _room("room-s1", PROPERTY_ID, "rt-ste", "S1"),
                _room("room-x1", OTHER_PROPERTY_ID, "rt-other", "X1"),
            ],
        )
        conn.execute(
            insert(RatePlan).values(
                id="plan-1",
                property_id=PROPERTY_ID,
                name="BAR",
                currency="USD",
                is_default=True,
                is_active=True,
            )
        )
        conn.execute(
            insert(RatePlanRoomType).values(
                id="plan-1-std", rate_plan_id="plan-1", room_type_id="rt-std", nightly_rate_cents=10000
            )
        )

    return {
        "property_id": PROPERTY_ID,
        "other_property_id": OTHER_PROPERTY_ID,
        "r1": "room-r1",
        "r2": "room-r2",
        "out_of_order": "room-r3",
        "suite": "room-s1",
        "other_room": "room-x1",
    }


def _room(
    room_id: str,
    property_id: str,
    room_type_id: str,
    name: str,
    status: RoomStatus = RoomStatus.ACTIVE,
) -> dict[str, Any]:
    return {
        "id": room_id,
        "property_id": property_id,
        "room_type_id": room_type_id,
        "name": name,
        "is_active": True,
        "status": status.value,
        "housekeeping_status": "CLEAN",
    }


@pytest.fixture
def make_block(engine: Engine, seeded: dict[str, Any]) -> Callable[..., str]:
    """Insert a maintenance block on a room; returns the block id."""
    counter = {"n": 0}

    def _make(room_id: str, start: str, end: str, reason: str = "Maintenance") -> str:
        counter["n"] += 1
        block_id = f"block-{counter['n']}"
        with engine.begin() as conn:
            conn.execute(
                insert(Block).values(
                    id=block_id,
                    property_id=seeded["property_id"],
                    room_id=room_id,
                    start_date=date.fromisoformat(start),
                    end_date=date.fromisoformat(end),
                    reason=reason,
                )
            )
        return block_id

    return _make


@pytest.fixture
def drop_plan_rate(engine: Engine) -> Callable[[], None]:
    """Deactivate the default rate plan so pricing falls back to the room type."""

    def _drop() -> None:
        with engine.begin() as conn:
            conn.execute(update(RatePlan).where(RatePlan.id == "plan-1").values(is_active=False))

    return _drop


@pytest.fixture
def client(engine: Engine, seeded: dict[str, Any]) -> Generator[TestClient, None, None]:
    """TestClient wired to the per-test database."""
    from stay_ledger.dependencies import get_db_engine
    from stay_ledger.main import app

    app.dependency_overrides[get_db_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()
