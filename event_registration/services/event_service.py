# event_registration/services/event_service.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from event_registration import crud
from event_registration.core.capacity import Capacity
from event_registration.core.clock import Clock, as_utc, utcnow
from event_registration.core.exceptions import CapacityExceeded, InvalidEventDates
from event_registration.db.transaction import transactional
from event_registration.models.event import Event
from event_registration.schemas.event import (
    CapacityChange,
    Event as EventSchema,
    EventCreate,
    EventUpdate,
)
from event_registration.schemas.registration import Registration as RegistrationSchema
from event_registration.services.capacity_ledger import CapacityLedger
from event_registration.services.waitlist_queue import WaitlistQueue

logger = logging.getLogger(__name__)


class EventService:
    """Event administration: creation, updates and capacity changes."""

    def __init__(self, db: Session, *, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.ledger = CapacityLedger(db)

    def get(self, event_id: str) -> Event:
        return self.ledger.get_event(event_id)

    @transactional
    def create_event(self, obj_in: EventCreate, manager_id: str) -> EventSchema:
        now = self.clock()
        event = crud.event.create_with_manager(self.db, obj_in=obj_in, manager_id=manager_id)
        event.created_at = now
        event.updated_at = now
        self.db.flush()
        logger.info(f"Event {event.id} created by {manager_id} with capacity {event.capacity_limit}")
        return EventSchema.model_validate(event)

    @transactional
    def update_event(self, event_id: str, obj_in: EventUpdate) -> EventSchema:
        event = self.ledger.lock_event(event_id)
        changes = obj_in.model_dump(exclude_unset=True)
        start_date = as_utc(changes.get("start_date") or event.start_date)
        end_date = as_utc(changes.get("end_date") or event.end_date)
        if end_date < start_date:
            raise InvalidEventDates(
                f"Event {event_id} would end before it starts", event_id=event_id
            )
        crud.event.update(self.db, db_obj=event, obj_in=obj_in)
        event.updated_at = self.clock()
        self.db.flush()
        return EventSchema.model_validate(event)

    @transactional
    def change_capacity(
        self, event_id: str, capacity: Optional[int], actor_id: str
    ) -> CapacityChange:
        """
        Set a new seat limit (None = unlimited).

        Shrinking below the seats already taken is rejected. Every seat the
        change frees goes to the waiting list, one promotion per seat.
        """
        event = self.ledger.lock_event(event_id)
        new_capacity = Capacity(capacity)
        taken = self.ledger.taken_slots(event)
        if not new_capacity.is_unlimited and new_capacity.limit < taken:
            raise CapacityExceeded(
                f"Cannot set capacity of event {event_id} to {capacity}: "
                f"{taken} seats are already taken",
                event_id=event_id,
            )

        previous = event.capacity
        event.capacity = capacity
        event.updated_at = self.clock()
        self.db.flush()
        crud.audit_log.log_action(
            self.db,
            action="event.capacity_changed",
            actor_id=actor_id,
            entity_type="event",
            entity_id=event.id,
            details={"from": previous, "to": capacity},
            now=self.clock(),
        )

        promoted = WaitlistQueue(self.db, clock=self.clock).drain_locked(event)
        logger.info(
            f"Capacity of event {event_id} changed {previous} -> {capacity}, "
            f"promoted {len(promoted)}"
        )
        return CapacityChange(
            event=EventSchema.model_validate(event),
            availability=self.ledger.availability(event.id),
            promoted=[RegistrationSchema.model_validate(r) for r in promoted],
        )
