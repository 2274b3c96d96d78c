# event_registration/services/waitlist_queue.py
"""
Waiting List Queue: FIFO hand-off of freed seats.

Entries are ordered by (created_at, id). Promotion pops the head entry and
registers that user without re-running the "is it full" decision made by the
caller. If the head user cannot be registered (they registered some other way
in the meantime) the next entry is tried instead of stalling the queue.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from event_registration import crud
from event_registration.constants.registration import ACTIVE_STATUSES, HistoryAction
from event_registration.core.clock import Clock, utcnow
from event_registration.core.exceptions import (
    DuplicateRegistration,
    DuplicateWaitlist,
    WaitlistEntryNotFound,
)
from event_registration.db.transaction import transactional
from event_registration.models.event import Event
from event_registration.models.registration import Registration
from event_registration.models.waiting_list import WaitingListEntry
from event_registration.schemas.registration import Registration as RegistrationSchema
from event_registration.schemas.waitlist import WaitlistEntry, WaitlistPosition

logger = logging.getLogger(__name__)


class WaitlistQueue:
    def __init__(self, db: Session, *, clock: Clock = utcnow, registrations=None):
        if registrations is None:
            from event_registration.services.registration_service import RegistrationService

            registrations = RegistrationService(db, clock=clock)
        self.db = db
        self.clock = clock
        self.registrations = registrations
        self.ledger = registrations.ledger

    # ------------------------------------------------------------------ #
    # Public operations
    # ------------------------------------------------------------------ #

    @transactional
    def enqueue(self, user_id: str, event_id: str) -> WaitlistEntry:
        event = self.ledger.lock_event(event_id)
        entry = self.enqueue_locked(event, user_id, performed_by=user_id)
        return self.to_schema(entry)

    @transactional
    def promote_next(self, event_id: str) -> Optional[RegistrationSchema]:
        """
        Hand one free seat to the head of the queue.

        No-op when the queue is empty or the event has no free seat.
        """
        event = self.ledger.lock_event(event_id)
        if not self.ledger.has_free_slot(event):
            logger.info(f"No free seat on event {event_id}, nothing to promote")
            return None
        promoted = self.promote_locked(event)
        return RegistrationSchema.model_validate(promoted) if promoted else None

    @transactional
    def leave(self, user_id: str, event_id: str) -> None:
        event = self.ledger.lock_event(event_id)
        entry = crud.waitlist.get_entry(self.db, event_id=event.id, user_id=user_id)
        if not entry:
            raise WaitlistEntryNotFound(user_id, event_id)
        crud.waitlist.remove(self.db, entry=entry)
        crud.registration_history.log_transition(
            self.db,
            event_id=event.id,
            user_id=user_id,
            action=HistoryAction.WAITLIST_LEFT,
            performed_by=user_id,
            now=self.clock(),
        )
        logger.info(f"User {user_id} left the waiting list for event {event_id}")

    def position(self, user_id: str, event_id: str) -> WaitlistPosition:
        event = self.ledger.get_event(event_id)
        entry = crud.waitlist.get_entry(self.db, event_id=event.id, user_id=user_id)
        if not entry:
            raise WaitlistEntryNotFound(user_id, event_id)
        return WaitlistPosition(
            event_id=event.id,
            user_id=user_id,
            position=crud.waitlist.get_position(self.db, entry=entry),
            total_waiting=crud.waitlist.count(self.db, event_id=event.id),
        )

    def list_for_event(
        self, event_id: str, *, skip: int = 0, limit: int = 100
    ) -> List[WaitlistEntry]:
        self.ledger.get_event(event_id)
        entries = crud.waitlist.get_queue(self.db, event_id=event_id, skip=skip, limit=limit)
        return [
            self.to_schema(entry, position=skip + index + 1)
            for index, entry in enumerate(entries)
        ]

    # ------------------------------------------------------------------ #
    # Building blocks. Callers must hold the event lock.
    # ------------------------------------------------------------------ #

    def enqueue_locked(
        self, event: Event, user_id: str, *, performed_by: str
    ) -> WaitingListEntry:
        if crud.waitlist.get_entry(self.db, event_id=event.id, user_id=user_id):
            raise DuplicateWaitlist(user_id, event.id)
        registration = crud.registration.get_by_user(
            self.db, event_id=event.id, user_id=user_id
        )
        if registration and registration.status in ACTIVE_STATUSES:
            raise DuplicateRegistration(user_id, event.id)

        now = self.clock()
        entry = crud.waitlist.create(self.db, event_id=event.id, user_id=user_id, now=now)
        crud.registration_history.log_transition(
            self.db,
            event_id=event.id,
            user_id=user_id,
            action=HistoryAction.WAITLISTED,
            performed_by=performed_by,
            now=now,
        )
        return entry

    def promote_locked(self, event: Event) -> Optional[Registration]:
        """Pop entries until one user is registered or the queue runs dry."""
        while True:
            entry = crud.waitlist.get_first_in_queue(self.db, event_id=event.id)
            if entry is None:
                return None
            # A skipped waiter may have taken the freed seat themselves.
            if not self.ledger.has_free_slot(event):
                return None

            user_id = entry.user_id
            crud.waitlist.remove(self.db, entry=entry)
            try:
                return self.registrations.admit_locked(
                    event, user_id, performed_by="system", promoted=True
                )
            except DuplicateRegistration:
                logger.warning(
                    f"Skipping waiting list entry for user {user_id} on event {event.id}: "
                    f"already registered"
                )

    def drain_locked(self, event: Event) -> List[Registration]:
        """Promote waiters while the event has free seats."""
        promoted: List[Registration] = []
        while self.ledger.has_free_slot(event):
            registration = self.promote_locked(event)
            if registration is None:
                break
            promoted.append(registration)
        if promoted:
            logger.info(f"Promoted {len(promoted)} waiting users on event {event.id}")
        return promoted

    def to_schema(self, entry: WaitingListEntry, position: Optional[int] = None) -> WaitlistEntry:
        schema = WaitlistEntry.model_validate(entry)
        schema.position = (
            position if position is not None
            else crud.waitlist.get_position(self.db, entry=entry)
        )
        return schema
