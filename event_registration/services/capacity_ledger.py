# event_registration/services/capacity_ledger.py
"""
Capacity Ledger: live seat accounting for events.

Seats are never cached. Every figure is a count query over registrations,
and capacity-affecting operations read it only while holding the event row
lock taken by ``lock_event``.
"""

import logging

from sqlalchemy.orm import Session

from event_registration import crud
from event_registration.constants.registration import RegistrationStatus
from event_registration.core.capacity import SlotCount
from event_registration.core.exceptions import EventNotFound
from event_registration.db.transaction import set_lock_timeout
from event_registration.models.event import Event
from event_registration.schemas.event import Availability

logger = logging.getLogger(__name__)


class CapacityLedger:
    def __init__(self, db: Session):
        self.db = db

    def get_event(self, event_id: str) -> Event:
        event = crud.event.get(self.db, event_id)
        if not event:
            raise EventNotFound(event_id)
        return event

    def lock_event(self, event_id: str) -> Event:
        """SELECT ... FOR UPDATE on the event; held until the transaction ends."""
        set_lock_timeout(self.db)
        event = crud.event.get_for_update(self.db, event_id=event_id)
        if not event:
            raise EventNotFound(event_id)
        return event

    def taken_slots(self, event: Event) -> int:
        """Seats held by PENDING and CONFIRMED registrations."""
        return crud.registration.count_active(self.db, event_id=event.id)

    def confirmed_count(self, event: Event) -> int:
        return crud.registration.count_by_status(
            self.db, event_id=event.id, statuses=(RegistrationStatus.CONFIRMED.value,)
        )

    def slots_for(self, event: Event) -> SlotCount:
        return event.capacity_limit.remaining(self.taken_slots(event))

    def has_free_slot(self, event: Event) -> bool:
        return event.capacity_limit.has_room(self.taken_slots(event))

    def available_slots(self, event_id: str) -> SlotCount:
        """
        Remaining seats for ``event_id``: a non-negative int, or "unlimited".

        Raises EventNotFound when the id does not resolve.
        """
        return self.slots_for(self.get_event(event_id))

    def availability(self, event_id: str) -> Availability:
        event = self.get_event(event_id)
        confirmed = self.confirmed_count(event)
        pending = crud.registration.count_by_status(
            self.db, event_id=event.id, statuses=(RegistrationStatus.PENDING.value,)
        )
        taken = confirmed + pending
        return Availability(
            event_id=event.id,
            capacity=str(event.capacity_limit) if event.capacity is None else event.capacity,
            taken=taken,
            confirmed=confirmed,
            pending=pending,
            waiting=crud.waitlist.count(self.db, event_id=event.id),
            available=event.capacity_limit.remaining(taken),
        )
