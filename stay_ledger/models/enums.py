"""Status and classification enums stored as strings on the models."""

from enum import Enum


class StayStatus(str, Enum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


# Stays in these statuses hold their room; everything else never conflicts.
ACTIVE_STAY_STATUSES: frozenset[StayStatus] = frozenset(
    {StayStatus.DRAFT, StayStatus.CONFIRMED, StayStatus.CHECKED_IN}
)


class PaymentStatus(str, Enum):
    UNPAID = "UNPAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"


class ReservationSource(str, Enum):
    MANUAL = "MANUAL"
    DIRECT = "DIRECT"


class RoomStatus(str, Enum):
    ACTIVE = "ACTIVE"
    OUT_OF_ORDER = "OUT_OF_ORDER"


class HousekeepingStatus(str, Enum):
    CLEAN = "CLEAN"
    DIRTY = "DIRTY"
    INSPECTED = "INSPECTED"


class FolioStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class FolioLineType(str, Enum):
    CHARGE = "CHARGE"
    PAYMENT = "PAYMENT"
    REVERSAL = "REVERSAL"
    # Recorded by external systems only; read by the cash report.
    REFUND = "REFUND"


class ChargeType(str, Enum):
    ROOM = "ROOM"
    FEE = "FEE"
    TAX = "TAX"
    DISCOUNT = "DISCOUNT"
    ADJUSTMENT = "ADJUSTMENT"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    OTHER = "OTHER"


class ReportMode(str, Enum):
    CASH = "cash"
    ACCRUAL = "accrual"
