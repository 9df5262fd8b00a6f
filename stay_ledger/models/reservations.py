"""SQLAlchemy models for reservation headers and their stay segments."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from stay_ledger.models.base import Base
from stay_ledger.models.enums import PaymentStatus, StayStatus


class Reservation(Base):
    """
    ORM model for a booking header.

    ``status`` follows the stay lifecycle. ``payment_status`` is a cache of the
    value derived from the folio lines; it is recomputed inside the same
    transaction as every ledger mutation and never written independently.
    """

    __tablename__ = "reservations"

    id = Column(String(36), primary_key=True)
    property_id = Column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(String(20), nullable=False, default=StayStatus.CONFIRMED.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.UNPAID.value)
    guest_name = Column(String(120), nullable=False)
    guest_email = Column(String, nullable=True)
    source = Column(String(20), nullable=False)
    channel = Column(String, nullable=True)
    notes = Column(String(500), nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class StaySegment(Base):
    """
    Room and half-open date range ``[start_date, end_date)`` of a reservation.

    Exactly one segment per reservation; room moves and date changes rewrite it.
    """

    __tablename__ = "stay_segments"
    __table_args__ = (CheckConstraint("end_date > start_date", name="ck_stay_segments_dates"),)

    id = Column(String(36), primary_key=True)
    property_id = Column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reservation_id = Column(
        String(36),
        ForeignKey("reservations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    room_id = Column(String(36), ForeignKey("rooms.id"), nullable=False, index=True)
    room_type_id = Column(String(36), ForeignKey("room_types.id"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    adults = Column(Integer, nullable=False, default=1)
    children = Column(Integer, nullable=False, default=0)
