from typing import Optional

from pydantic import BaseModel, Field

from stay_ledger.models.enums import ChargeType, PaymentMethod


class ChargePayload(BaseModel):
    """
    Schema for posting a charge. The line amount is ``amount_cents * quantity``.
    """

    amount_cents: int = Field(..., gt=0, description="Unit amount in minor units")
    description: Optional[str] = Field(None, max_length=200)
    charge_type: Optional[ChargeType] = Field(None, description="Category tag for reporting")
    quantity: int = Field(1, ge=1, le=999)
    date_key: Optional[str] = Field(None, description="Reporting day (YYYY-MM-DD), defaults to today")


class PaymentPayload(BaseModel):
    """Schema for recording a payment already captured elsewhere."""

    amount_cents: int = Field(..., gt=0, description="Amount tendered in minor units")
    payment_method: PaymentMethod = Field(PaymentMethod.CASH)
    reference: Optional[str] = Field(None, max_length=80)
    description: Optional[str] = Field(None, max_length=120)
    date_key: Optional[str] = Field(None, description="Reporting day (YYYY-MM-DD), defaults to today")
