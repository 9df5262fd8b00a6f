"""
Exception hierarchy for the booking and folio services.

Every error is scoped to a single request. Services raise these; the route
layer maps ``status_code`` onto an HTTP response. No error here is fatal to
the process and none is retried automatically.
"""

from __future__ import annotations


class StayLedgerError(Exception):
    """Base class for all caller-recoverable booking and ledger errors."""

    status_code = 400
    code = "stay_ledger_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message())

    def default_message(self) -> str:
        return "Request could not be completed"


# =============================================================================
# Availability
# =============================================================================


class RoomBlocked(StayLedgerError):
    status_code = 409
    code = "room_blocked"

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__("Room is blocked for selected dates")


class RoomOccupied(StayLedgerError):
    status_code = 409
    code = "room_occupied"

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__("Room is occupied for selected dates")


class InvalidRoom(StayLedgerError):
    """Room does not exist in the property, is inactive, or is out of order."""

    status_code = 422
    code = "invalid_room"

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Invalid room {room_id}")


class InvalidRoomType(StayLedgerError):
    status_code = 422
    code = "invalid_room_type"

    def __init__(self, room_type_id: str):
        self.room_type_id = room_type_id
        super().__init__(f"Invalid room type {room_type_id}")


# =============================================================================
# Dates
# =============================================================================


class InvalidDateKey(StayLedgerError):
    status_code = 422
    code = "invalid_date_key"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid date {value!r}, expected YYYY-MM-DD")


class InvalidDateRange(StayLedgerError):
    status_code = 422
    code = "invalid_date_range"

    def default_message(self) -> str:
        return "endDate must be after startDate"


# =============================================================================
# Lifecycle
# =============================================================================


class ReservationNotFound(StayLedgerError):
    status_code = 404
    code = "reservation_not_found"

    def __init__(self, reservation_id: str):
        self.reservation_id = reservation_id
        super().__init__(f"Reservation {reservation_id} not found")


class InvalidTransition(StayLedgerError):
    status_code = 409
    code = "invalid_transition"

    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid transition {from_status} -> {to_status}")


class StayNotModifiable(StayLedgerError):
    """Dates or room of a stay in a terminal status cannot be changed."""

    status_code = 409
    code = "stay_not_modifiable"

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Cannot modify a stay in status {status}")


# =============================================================================
# Folio ledger
# =============================================================================


class FolioNotFound(StayLedgerError):
    status_code = 404
    code = "folio_not_found"

    def __init__(self, reservation_id: str):
        self.reservation_id = reservation_id
        super().__init__(f"Folio for reservation {reservation_id} not found")


class FolioClosed(StayLedgerError):
    status_code = 409
    code = "folio_closed"

    def default_message(self) -> str:
        return "Folio is closed"


class InvalidAmount(StayLedgerError):
    status_code = 422
    code = "invalid_amount"

    def __init__(self, amount: object):
        self.amount = amount
        super().__init__(f"amountCents must be a positive integer, got {amount!r}")


class LineNotFound(StayLedgerError):
    status_code = 404
    code = "line_not_found"

    def __init__(self, line_id: str):
        self.line_id = line_id
        super().__init__(f"Line {line_id} not found")


class AlreadyReversed(StayLedgerError):
    status_code = 409
    code = "already_reversed"

    def __init__(self, line_id: str):
        self.line_id = line_id
        super().__init__(f"Line {line_id} already reversed")


class NoRateConfigured(StayLedgerError):
    status_code = 422
    code = "no_rate_configured"
