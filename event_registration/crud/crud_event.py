# event_registration/crud/crud_event.py
from typing import Optional
from sqlalchemy.orm import Session
from .base import CRUDBase
from event_registration.models.event import Event
from event_registration.schemas.event import EventCreate, EventUpdate


class CRUDEvent(CRUDBase[Event, EventCreate, EventUpdate]):

    def get_for_update(self, db: Session, *, event_id: str) -> Optional[Event]:
        """
        Loads the event row with SELECT ... FOR UPDATE. Every operation that
        changes how many seats are taken serializes on this lock.
        """
        return (
            db.query(self.model)
            .filter(self.model.id == event_id)
            .with_for_update()
            .first()
        )

    def create_with_manager(
        self, db: Session, *, obj_in: EventCreate, manager_id: str
    ) -> Event:
        return self.create(db, obj_in=obj_in, manager_id=manager_id)


event = CRUDEvent(Event)
