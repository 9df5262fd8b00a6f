"""SQLAlchemy models for the per-reservation folio and its append-only lines."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from stay_ledger.models.base import Base
from stay_ledger.models.enums import FolioStatus


class Folio(Base):
    """Financial account of one reservation. Only OPEN folios accept lines."""

    __tablename__ = "folios"

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
    currency = Column(String(3), nullable=False)
    status = Column(String(10), nullable=False, default=FolioStatus.OPEN.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class FolioLine(Base):
    """
    ORM model for one signed ledger entry.

    Sign convention: CHARGE positive, PAYMENT stored as the negative of the
    tendered amount, REVERSAL the exact negation of the line it reverses.
    Rows are never updated or deleted. The UNIQUE constraint on
    ``reversal_of_line_id`` is the storage-level guarantee that a line is
    reversed at most once.

    ``charge_type`` and ``payment_method`` are captured at creation time;
    ``date_key`` is the reporting day bucket (YYYY-MM-DD).
    """

    __tablename__ = "folio_lines"

    id = Column(String(36), primary_key=True)
    property_id = Column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    folio_id = Column(
        String(36), ForeignKey("folios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(10), nullable=False)
    amount_cents = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False)
    description = Column(String(255), nullable=True)
    charge_type = Column(String(20), nullable=True)
    payment_method = Column(String(20), nullable=True)
    date_key = Column(String(10), nullable=False, index=True)
    posted_at = Column(DateTime(timezone=True), nullable=False)
    reversal_of_line_id = Column(
        String(36), ForeignKey("folio_lines.id"), nullable=True, unique=True
    )
    created_by = Column(String, nullable=True)
