from typing import Literal, Optional

from pydantic import BaseModel, Field

from stay_ledger.models.enums import ReservationSource, StayStatus


class StayCreatePayload(BaseModel):
    """
    Schema for booking a room. Dates are ``YYYY-MM-DD``; ``end_date`` is the
    checkout day and is not occupied.
    """

    room_id: str = Field(..., description="Room to book")
    start_date: str = Field(..., description="Arrival day (YYYY-MM-DD)")
    end_date: str = Field(..., description="Checkout day, exclusive (YYYY-MM-DD)")
    guest_name: str = Field(..., min_length=1, max_length=120)
    guest_email: Optional[str] = Field(None, max_length=254)
    adults: int = Field(1, ge=1, le=20)
    children: int = Field(0, ge=0, le=20)
    source: ReservationSource = Field(ReservationSource.MANUAL)
    status: Literal["DRAFT", "CONFIRMED"] = Field("CONFIRMED", description="Initial status")
    channel: Optional[str] = Field(None, max_length=60)
    notes: Optional[str] = Field(None, max_length=500)


class StayDatesPayload(BaseModel):
    start_date: str = Field(..., description="New arrival day (YYYY-MM-DD)")
    end_date: str = Field(..., description="New checkout day, exclusive (YYYY-MM-DD)")


class StayRoomPayload(BaseModel):
    room_id: str = Field(..., description="Room to move the stay to")


class StayStatusPayload(BaseModel):
    status: StayStatus = Field(..., description="Target lifecycle status")
