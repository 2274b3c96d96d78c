# event_registration/schemas/notification.py
from pydantic import BaseModel, Field
from typing import Literal


class RegistrationNotification(BaseModel):
    """Wire shape consumed by the email notification service."""
    type: Literal["registration_confirmed", "waitlist_promoted"]
    user_id: str = Field(..., alias="userId")
    event_id: str = Field(..., alias="eventId")

    model_config = {"populate_by_name": True}

    def to_message(self) -> dict:
        return self.model_dump(by_alias=True)
