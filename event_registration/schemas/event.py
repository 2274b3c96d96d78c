# event_registration/schemas/event.py
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Union
from decimal import Decimal
from datetime import datetime

from event_registration.schemas.registration import Registration


class EventBase(BaseModel):
    title: str = Field(..., json_schema_extra={"example": "Summer LAN Party"})
    description: Optional[str] = None
    category: Optional[str] = None
    start_date: datetime
    end_date: datetime
    # Omit or send null for an unlimited event.
    capacity: Optional[int] = Field(None, ge=0)
    requires_payment: bool = False
    price: Optional[Decimal] = Field(None, ge=0)
    currency: str = Field("EUR", min_length=3, max_length=3)


class EventCreate(EventBase):
    @model_validator(mode="after")
    def check_dates_and_price(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.requires_payment and self.price is None:
            raise ValueError("price is required when the event requires payment")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class CapacityUpdate(BaseModel):
    capacity: Optional[int] = Field(
        None, ge=0, description="New seat limit; null switches the event to unlimited"
    )


class Event(EventBase):
    id: str
    manager_id: str

    model_config = {"from_attributes": True}


class Availability(BaseModel):
    event_id: str
    capacity: Union[int, str]
    taken: int
    confirmed: int
    pending: int
    waiting: int
    available: Union[int, str]


class CapacityChange(BaseModel):
    event: Event
    availability: Availability
    promoted: List[Registration] = Field(default_factory=list)
