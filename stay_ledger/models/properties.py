"""SQLAlchemy models for the property inventory the booking engine reads."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.sql import func

from stay_ledger.models.base import Base
from stay_ledger.models.enums import HousekeepingStatus, RoomStatus


class Property(Base):
    """
    ORM model for a hotel property.

    ``default_rate_plan_id`` points at the rate plan used when posting room
    charges. It is a plain reference (no FK) to avoid a cycle with rate_plans.
    """

    __tablename__ = "properties"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    currency = Column(String(3), nullable=False, server_default=text("'USD'"))
    default_rate_plan_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class RoomType(Base):
    """
    ORM model for a room category.

    ``base_rate_cents`` is the legacy flat nightly rate used when no rate plan
    provides a price for this type.
    """

    __tablename__ = "room_types"

    id = Column(String(36), primary_key=True)
    property_id = Column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    code = Column(String(16), nullable=False)
    name = Column(String, nullable=False)
    base_rate_cents = Column(Integer, nullable=True)


class Room(Base):
    """
    ORM model for a physical room.

    Read-only to the booking engine except for ``housekeeping_status``, which is
    set to DIRTY on checkout. Booking operations lock the room row to serialize
    competing availability checks.
    """

    __tablename__ = "rooms"

    id = Column(String(36), primary_key=True)
    property_id = Column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_type_id = Column(String(36), ForeignKey("room_types.id"), nullable=False)
    name = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=text("TRUE"))
    status = Column(String(20), nullable=False, default=RoomStatus.ACTIVE.value)
    housekeeping_status = Column(String(20), nullable=False, default=HousekeepingStatus.CLEAN.value)


class Block(Base):
    """Maintenance window on one room over ``[start_date, end_date)``."""

    __tablename__ = "blocks"

    id = Column(String(36), primary_key=True)
    property_id = Column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(String, nullable=True)


class RatePlan(Base):
    __tablename__ = "rate_plans"

    id = Column(String(36), primary_key=True)
    property_id = Column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String, nullable=False)
    currency = Column(String(3), nullable=False)
    is_default = Column(Boolean, nullable=False, server_default=text("FALSE"))
    is_active = Column(Boolean, nullable=False, server_default=text("TRUE"))


class RatePlanRoomType(Base):
    """Nightly rate of one room type inside one rate plan."""

    __tablename__ = "rate_plan_room_types"
    __table_args__ = (UniqueConstraint("rate_plan_id", "room_type_id"),)

    id = Column(String(36), primary_key=True)
    rate_plan_id = Column(
        String(36), ForeignKey("rate_plans.id", ondelete="CASCADE"), nullable=False
    )
    room_type_id = Column(
        String(36), ForeignKey("room_types.id", ondelete="CASCADE"), nullable=False
    )
    nightly_rate_cents = Column(Integer, nullable=False)
