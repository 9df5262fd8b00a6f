"""
Room-charge posting.

Nightly rate resolution, first positive value wins:
    1. the property's default rate plan price for the stay's room type
    2. the room type's legacy flat ``base_rate_cents``
Otherwise posting fails with NoRateConfigured and nothing is written.

Posting is not idempotent: each call appends a new CHARGE line.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection, Engine

from stay_ledger.db.readers.rooms import find_default_rate_plan, get_nightly_rate_cents
from stay_ledger.db.readers.stays import get_reservation, get_stay_with_room
from stay_ledger.db.writers.folios import insert_folio_line
from stay_ledger.errors import NoRateConfigured, ReservationNotFound
from stay_ledger.metrics import folio_lines_posted, operation_duration, room_charges_posted
from stay_ledger.models.enums import ChargeType, FolioLineType
from stay_ledger.services.folio import (
    MAX_DESCRIPTION_LENGTH,
    load_open_folio,
    sync_payment_status,
)
from stay_ledger.utils.dates import nights_between, today_key
from stay_ledger.utils.money import format_money

logger = structlog.get_logger(__name__)

RATE_SOURCE_PLAN = "rate_plan"
RATE_SOURCE_ROOM_TYPE = "room_type"


def resolve_nightly_rate(
    conn: Connection, property_id: str, room_type_id: str, base_rate_cents: Optional[int]
) -> tuple[int, str]:
    """
    Pick the nightly rate for a room type.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        property_id (str): Property scope.
        room_type_id (str): Room type of the stay.
        base_rate_cents (Optional[int]): The room type's legacy flat rate.

    Returns:
        tuple[int, str]: Rate in minor units and its source (rate_plan or room_type).

    Raises:
        NoRateConfigured: Neither source yields a positive rate.
    """
    plan = find_default_rate_plan(conn, property_id)
    if plan is not None:
        plan_rate = get_nightly_rate_cents(conn, plan["id"], room_type_id)
        if plan_rate is not None and plan_rate > 0:
            return int(plan_rate), RATE_SOURCE_PLAN

    if base_rate_cents is not None and base_rate_cents > 0:
        return int(base_rate_cents), RATE_SOURCE_ROOM_TYPE

    if plan is None:
        raise NoRateConfigured(
            "No default rate plan configured and room type has no base rate"
        )
    raise NoRateConfigured(
        f"Rate plan {plan['name']} has no rate for this room type and room type has no base rate"
    )


def post_room_charges(
    engine: Engine,
    property_id: str,
    reservation_id: str,
    created_by: Optional[str] = None,
) -> dict[str, Any]:
    """
    Post the whole stay's room charge as a single CHARGE line.

    The amount is ``nights * nightly rate`` with nights at least one. The line
    is tagged ``ROOM`` and described as
    ``Room charge: <room type> (<n> nights @ <CUR> <rate>)``.

    Args:
        engine (Engine): SQLAlchemy engine.
        property_id (str): Property scope.
        reservation_id (str): Reservation to charge.
        created_by (Optional[str]): Acting user id.

    Returns:
        dict[str, Any]: The posted line.

    Raises:
        ReservationNotFound: Unknown reservation or stay segment.
        FolioNotFound: Reservation has no folio.
        FolioClosed: Folio is not OPEN.
        NoRateConfigured: No positive rate could be resolved.
    """
    with operation_duration.labels(operation="post_room_charges").time():
        with engine.begin() as conn:
            if get_reservation(conn, property_id, reservation_id) is None:
                raise ReservationNotFound(reservation_id)
            stay = get_stay_with_room(conn, property_id, reservation_id)
            if stay is None:
                raise ReservationNotFound(reservation_id)

            folio = load_open_folio(conn, property_id, reservation_id)
            nights = nights_between(stay["start_date"], stay["end_date"])
            rate_cents, rate_source = resolve_nightly_rate(
                conn, property_id, stay["room_type_id"], stay["room_type_base_rate_cents"]
            )
            rate_label = format_money(rate_cents, folio["currency"])

            line = insert_folio_line(
                conn,
                property_id,
                folio["id"],
                {
                    "type": FolioLineType.CHARGE.value,
                    "amount_cents": nights * rate_cents,
                    "currency": folio["currency"],
                    "description": (
                        f"Room charge: {stay['room_type_name']} ({nights} nights @ {rate_label})"
                    )[:MAX_DESCRIPTION_LENGTH],
                    "charge_type": ChargeType.ROOM.value,
                    "date_key": today_key(),
                    "created_by": created_by,
                },
            )
            summary = sync_payment_status(conn, property_id, reservation_id, folio["id"])

    room_charges_posted.labels(rate_source=rate_source).inc()
    folio_lines_posted.labels(line_type=FolioLineType.CHARGE.value).inc()
    logger.info(
        "room_charges_posted",
        reservation_id=reservation_id,
        line_id=line["id"],
        nights=nights,
        rate_cents=rate_cents,
        rate_source=rate_source,
        payment_status=summary.payment_status.value,
    )
    return line
