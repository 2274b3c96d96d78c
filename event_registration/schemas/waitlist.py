# event_registration/schemas/waitlist.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class WaitlistEntry(BaseModel):
    id: int
    event_id: str
    user_id: str
    created_at: datetime
    position: Optional[int] = None

    model_config = {"from_attributes": True}


class WaitlistPosition(BaseModel):
    event_id: str
    user_id: str
    position: int
    total_waiting: int
