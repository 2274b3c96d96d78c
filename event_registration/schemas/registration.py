# event_registration/schemas/registration.py
from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime

from event_registration.constants.registration import RegistrationStatus
from event_registration.schemas.waitlist import WaitlistEntry


class RegistrationCreate(BaseModel):
    # Managers may register someone else; defaults to the caller.
    user_id: Optional[str] = None


class Registration(BaseModel):
    id: str
    event_id: str
    user_id: str
    status: RegistrationStatus
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegistrationOutcome(BaseModel):
    """Result of a register call: a seat (possibly awaiting payment) or a queue spot."""
    result: Literal["registered", "waitlisted"]
    registration: Optional[Registration] = None
    waitlist_entry: Optional[WaitlistEntry] = None

    @property
    def waitlisted(self) -> bool:
        return self.result == "waitlisted"


class CancellationOutcome(BaseModel):
    registration: Registration
    promoted: Optional[Registration] = None


class RegistrationHistoryEntry(BaseModel):
    id: str
    registration_id: Optional[str] = None
    event_id: str
    user_id: str
    action: str
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    performed_by: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class RegistrationList(BaseModel):
    items: List[Registration]
    total: int
