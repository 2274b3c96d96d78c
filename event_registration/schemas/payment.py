# event_registration/schemas/payment.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from decimal import Decimal
from datetime import datetime

from event_registration.constants.payment import PaymentStatus
from event_registration.schemas.registration import Registration


class PaymentCreate(BaseModel):
    """Payment request for a registration. Amount defaults to the event price."""
    amount: Optional[Decimal] = Field(None, gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    bank_account_id: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, value: str) -> str:
        value = value.upper()
        if not PaymentStatus.is_valid(value):
            raise ValueError(f"Unknown payment status: {value}")
        return value


class Payment(BaseModel):
    id: str
    registration_id: Optional[str] = None
    event_id: Optional[str] = None
    bank_account_id: Optional[str] = None
    user_id: str
    amount: Decimal
    currency: str
    status: str
    variable_symbol: str
    paid_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PaymentStatusOutcome(BaseModel):
    payment: Payment
    registration: Optional[Registration] = None
    # 'confirmed' or 'cancelled' when the registration moved, else None
    registration_action: Optional[str] = None
    promoted: Optional[Registration] = None
