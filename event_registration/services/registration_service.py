# event_registration/services/registration_service.py
"""
Registration state machine.

Every status change goes through ``next_status`` and happens while the
event row is locked, so seat counts read by the Capacity Ledger cannot move
underneath a decision. Each transition writes one registration_history row.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from event_registration import crud
from event_registration.constants.notifications import NotificationType
from event_registration.constants.registration import (
    ACTIVE_STATUSES,
    HistoryAction,
    RegistrationAction,
    RegistrationStatus,
    next_status,
)
from event_registration.core.clock import Clock, utcnow
from event_registration.core.exceptions import (
    CapacityExceeded,
    DuplicateRegistration,
    InvalidTransition,
    RegistrationNotFound,
)
from event_registration.db.transaction import transactional
from event_registration.models.event import Event
from event_registration.models.registration import Registration
from event_registration.models.registration_history import RegistrationHistory
from event_registration.schemas.registration import (
    CancellationOutcome,
    Registration as RegistrationSchema,
    RegistrationOutcome,
)
from event_registration.services import notifications
from event_registration.services.capacity_ledger import CapacityLedger
from event_registration.services.waitlist_queue import WaitlistQueue

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


class RegistrationService:
    """
    Registration lifecycle: PENDING -> CONFIRMED -> CANCELLED.

    PENDING exists only for events that require payment and holds a seat
    just like CONFIRMED does.
    """

    def __init__(self, db: Session, *, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.ledger = CapacityLedger(db)

    @property
    def waitlist(self) -> WaitlistQueue:
        return WaitlistQueue(self.db, clock=self.clock, registrations=self)

    # ------------------------------------------------------------------ #
    # Public operations (one transaction each)
    # ------------------------------------------------------------------ #

    @transactional
    def register(
        self, user_id: str, event_id: str, actor_id: Optional[str] = None
    ) -> RegistrationOutcome:
        """
        Give ``user_id`` a seat at ``event_id`` or put them on the waiting list.

        Being waitlisted is a normal outcome, not an error.
        """
        event = self.ledger.lock_event(event_id)
        self._ensure_not_enrolled(event, user_id)

        queue = self.waitlist
        # Anyone already queued goes first if seats are free.
        queue.drain_locked(event)

        performed_by = actor_id or user_id
        if self.ledger.has_free_slot(event):
            registration = self.admit_locked(event, user_id, performed_by=performed_by)
            return RegistrationOutcome(
                result="registered",
                registration=RegistrationSchema.model_validate(registration),
            )

        entry = queue.enqueue_locked(event, user_id, performed_by=performed_by)
        logger.info(f"Event {event.id} is full, user {user_id} waitlisted")
        return RegistrationOutcome(
            result="waitlisted",
            waitlist_entry=queue.to_schema(entry),
        )

    @transactional
    def confirm_payment(
        self, registration_id: str, actor_id: Optional[str] = None
    ) -> RegistrationSchema:
        """PENDING -> CONFIRMED once the linked payment has succeeded."""
        registration, event = self.load_locked(registration_id)
        self.confirm_locked(registration, event, performed_by=actor_id or SYSTEM_ACTOR)
        return RegistrationSchema.model_validate(registration)

    @transactional
    def cancel(self, registration_id: str, actor_id: str) -> CancellationOutcome:
        """
        PENDING|CONFIRMED -> CANCELLED. The freed seat goes to the head of the
        waiting list in the same transaction.
        """
        registration, event = self.load_locked(registration_id)
        promoted = self.cancel_locked(registration, event, performed_by=actor_id)
        return CancellationOutcome(
            registration=RegistrationSchema.model_validate(registration),
            promoted=RegistrationSchema.model_validate(promoted) if promoted else None,
        )

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get(self, registration_id: str) -> Registration:
        registration = crud.registration.get(self.db, id=registration_id)
        if not registration:
            raise RegistrationNotFound(registration_id)
        return registration

    def list_for_event(
        self,
        event_id: str,
        *,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Registration]:
        self.ledger.get_event(event_id)
        return crud.registration.get_multi_by_event(
            self.db, event_id=event_id, status=status, skip=skip, limit=limit
        )

    def history(self, registration_id: str) -> List[RegistrationHistory]:
        self.get(registration_id)
        return crud.registration_history.get_by_registration(
            self.db, registration_id=registration_id
        )

    # ------------------------------------------------------------------ #
    # Building blocks. Callers must hold the event lock.
    # ------------------------------------------------------------------ #

    def load_locked(self, registration_id: str) -> Tuple[Registration, Event]:
        """Lock the registration's event, then re-read the registration."""
        registration = self.get(registration_id)
        event = self.ledger.lock_event(registration.event_id)
        self.db.refresh(registration)
        return registration, event

    def admit_locked(
        self,
        event: Event,
        user_id: str,
        *,
        performed_by: str,
        promoted: bool = False,
    ) -> Registration:
        """
        Create (or reactivate) a seat-holding registration.

        The caller has already decided a seat is free. Raises CapacityExceeded
        if the event is full anyway.
        """
        existing = crud.registration.get_by_user(self.db, event_id=event.id, user_id=user_id)
        current = existing.status if existing else None
        if current in ACTIVE_STATUSES:
            raise DuplicateRegistration(user_id, event.id)

        taken = self.ledger.taken_slots(event)
        if not event.capacity_limit.has_room(taken):
            raise CapacityExceeded(
                f"Event {event.id} has no free seat ({taken}/{event.capacity})",
                event_id=event.id,
            )

        status = next_status(
            current, RegistrationAction.REGISTER, requires_payment=event.requires_payment
        )
        now = self.clock()
        if existing:
            self._detach_previous_payment(existing, performed_by=performed_by)
            registration = crud.registration.reactivate(
                self.db, db_obj=existing, status=status, now=now
            )
        else:
            registration = crud.registration.create(
                self.db, event_id=event.id, user_id=user_id, status=status, now=now
            )

        self._log(
            registration,
            HistoryAction.PROMOTED if promoted else HistoryAction.REGISTERED,
            from_status=current,
            performed_by=performed_by,
        )

        if promoted:
            notifications.queue_notification(
                self.db,
                type=NotificationType.WAITLIST_PROMOTED,
                user_id=user_id,
                event_id=event.id,
            )
        elif status == RegistrationStatus.CONFIRMED:
            notifications.queue_notification(
                self.db,
                type=NotificationType.REGISTRATION_CONFIRMED,
                user_id=user_id,
                event_id=event.id,
            )

        logger.info(
            f"Registration {registration.id} for user {user_id}, event {event.id} "
            f"is {status.value}{' (promoted from waiting list)' if promoted else ''}"
        )
        return registration

    def confirm_locked(
        self, registration: Registration, event: Event, *, performed_by: str
    ) -> Registration:
        previous = registration.status
        status = next_status(previous, RegistrationAction.CONFIRM_PAYMENT)

        if event.requires_payment:
            payment = crud.payment.get_by_registration(self.db, registration_id=registration.id)
            if not payment or not payment.is_successful:
                raise InvalidTransition(
                    f"Registration {registration.id} has no successful payment",
                    registration_id=registration.id,
                )

        crud.registration.set_status(
            self.db, db_obj=registration, status=status, now=self.clock()
        )
        self._log(
            registration,
            HistoryAction.PAYMENT_CONFIRMED,
            from_status=previous,
            performed_by=performed_by,
        )
        notifications.queue_notification(
            self.db,
            type=NotificationType.REGISTRATION_CONFIRMED,
            user_id=registration.user_id,
            event_id=event.id,
        )
        logger.info(f"Registration {registration.id} confirmed after payment")
        return registration

    def cancel_locked(
        self, registration: Registration, event: Event, *, performed_by: str
    ) -> Optional[Registration]:
        """Cancel and promote the next waiter. Returns the promoted registration."""
        previous = registration.status
        status = next_status(previous, RegistrationAction.CANCEL)

        crud.registration.set_status(
            self.db, db_obj=registration, status=status, now=self.clock()
        )
        self._log(
            registration,
            HistoryAction.CANCELLED,
            from_status=previous,
            performed_by=performed_by,
        )
        logger.info(
            f"Registration {registration.id} cancelled by {performed_by} (was {previous})"
        )

        # Both PENDING and CONFIRMED held a seat, which is now free.
        return self.waitlist.promote_locked(event)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _ensure_not_enrolled(self, event: Event, user_id: str) -> None:
        existing = crud.registration.get_by_user(self.db, event_id=event.id, user_id=user_id)
        if existing and existing.status in ACTIVE_STATUSES:
            raise DuplicateRegistration(user_id, event.id)
        if crud.waitlist.get_entry(self.db, event_id=event.id, user_id=user_id):
            raise DuplicateRegistration(
                user_id,
                event.id,
                reason=f"User {user_id} is already on the waiting list for event {event.id}",
            )

    def _detach_previous_payment(self, registration: Registration, *, performed_by: str) -> None:
        """A reactivated registration starts without the old attempt's payment."""
        payment = crud.payment.get_by_registration(self.db, registration_id=registration.id)
        if not payment:
            return
        crud.payment.unlink(self.db, db_obj=payment)
        crud.audit_log.log_action(
            self.db,
            action="payment.unlinked",
            actor_id=performed_by,
            entity_type="payment",
            entity_id=payment.id,
            details={"registration_id": registration.id, "status": payment.status},
            now=self.clock(),
        )

    def _log(
        self,
        registration: Registration,
        action: str,
        *,
        from_status: Optional[str],
        performed_by: Optional[str],
    ) -> None:
        crud.registration_history.log_transition(
            self.db,
            registration_id=registration.id,
            event_id=registration.event_id,
            user_id=registration.user_id,
            action=action,
            from_status=from_status,
            to_status=registration.status,
            performed_by=performed_by,
            now=self.clock(),
        )
