# event_registration/services/payment_correlator.py
"""
Payment Correlator: ties payments to registrations and turns payment status
changes into registration transitions.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from event_registration import crud
from event_registration.constants.payment import PaymentStatus
from event_registration.constants.registration import ACTIVE_STATUSES, RegistrationStatus
from event_registration.core.clock import Clock, utcnow
from event_registration.core.exceptions import (
    BankAccountNotFound,
    InvalidTransition,
    PaymentAlreadyLinked,
    PaymentNotFound,
)
from event_registration.db.transaction import transactional
from event_registration.models.payment import Payment
from event_registration.models.registration import Registration
from event_registration.schemas.payment import (
    Payment as PaymentSchema,
    PaymentCreate,
    PaymentStatusOutcome,
)
from event_registration.schemas.registration import Registration as RegistrationSchema
from event_registration.services.registration_service import RegistrationService, SYSTEM_ACTOR

logger = logging.getLogger(__name__)


class PaymentCorrelator:
    def __init__(self, db: Session, *, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.registrations = RegistrationService(db, clock=clock)

    def get(self, payment_id: str) -> Payment:
        payment = crud.payment.get(self.db, id=payment_id)
        if not payment:
            raise PaymentNotFound(payment_id)
        return payment

    @transactional
    def create_payment(
        self, registration_id: str, obj_in: PaymentCreate, actor_id: str
    ) -> PaymentSchema:
        """Open a PENDING payment for a registration that awaits payment and link it."""
        registration, event = self.registrations.load_locked(registration_id)
        if registration.status != RegistrationStatus.PENDING.value:
            raise InvalidTransition(
                f"Registration {registration_id} is {registration.status}, not awaiting payment",
                registration_id=registration_id,
            )
        self._ensure_unlinked(registration)

        bank_account_id = obj_in.bank_account_id
        if bank_account_id:
            if not crud.bank_account.get_active(self.db, id=bank_account_id):
                raise BankAccountNotFound(bank_account_id)
        else:
            default_account = crud.bank_account.get_default(self.db)
            bank_account_id = default_account.id if default_account else None

        amount = obj_in.amount if obj_in.amount is not None else event.price
        if amount is None:
            raise InvalidTransition(
                f"Event {event.id} has no price and no amount was given",
                event_id=event.id,
            )

        payment = crud.payment.create(
            self.db,
            user_id=registration.user_id,
            event_id=event.id,
            bank_account_id=bank_account_id,
            amount=amount,
            currency=obj_in.currency or event.currency,
            now=self.clock(),
        )
        crud.payment.link(self.db, db_obj=payment, registration_id=registration.id)
        self._audit(
            "payment.created",
            payment,
            actor_id=actor_id,
            details={"registration_id": registration.id, "amount": str(amount)},
        )
        logger.info(
            f"Payment {payment.id} (VS {payment.variable_symbol}) opened for "
            f"registration {registration.id}"
        )
        return PaymentSchema.model_validate(payment)

    @transactional
    def link_payment(
        self, registration_id: str, payment_id: str, actor_id: Optional[str] = None
    ) -> PaymentStatusOutcome:
        """
        Attach an existing payment to a registration (1:1).

        A payment that already succeeded confirms a PENDING registration
        immediately. The payment must come from the same user, for the same
        event, and cover the event price. Failed payments cannot be linked.
        """
        registration, event = self.registrations.load_locked(registration_id)
        payment = self.get(payment_id)
        self._ensure_unlinked(registration)
        if payment.registration_id and payment.registration_id != registration.id:
            raise PaymentAlreadyLinked(
                f"Payment {payment_id} is already linked to registration {payment.registration_id}",
                payment_id=payment_id,
            )
        self._ensure_matches(payment, registration, event)

        crud.payment.link(self.db, db_obj=payment, registration_id=registration.id)
        self._audit(
            "payment.linked",
            payment,
            actor_id=actor_id or SYSTEM_ACTOR,
            details={"registration_id": registration.id},
        )

        action = None
        if payment.is_successful and registration.status == RegistrationStatus.PENDING.value:
            self.registrations.confirm_locked(
                registration, event, performed_by=actor_id or SYSTEM_ACTOR
            )
            action = "confirmed"
        return PaymentStatusOutcome(
            payment=PaymentSchema.model_validate(payment),
            registration=RegistrationSchema.model_validate(registration),
            registration_action=action,
        )

    @transactional
    def on_payment_status_change(
        self, payment_id: str, new_status: str, actor_id: str = SYSTEM_ACTOR
    ) -> PaymentStatusOutcome:
        """
        Apply a payment status report.

        Success confirms a PENDING registration; a terminal failure cancels an
        active one, which frees its seat for the waiting list. Reporting the
        current status again changes nothing.
        """
        if not PaymentStatus.is_valid(new_status):
            raise InvalidTransition(f"Unknown payment status {new_status}")

        payment = self.get(payment_id)
        registration: Optional[Registration] = None
        event = None
        if payment.registration_id:
            registration, event = self.registrations.load_locked(payment.registration_id)
            self.db.refresh(payment)

        outcome = PaymentStatusOutcome(payment=PaymentSchema.model_validate(payment))
        if payment.status == new_status:
            outcome.registration = (
                RegistrationSchema.model_validate(registration) if registration else None
            )
            return outcome

        if not PaymentStatus.can_change(payment.status, new_status):
            raise InvalidTransition(
                f"Payment {payment_id} cannot move from {payment.status} to {new_status}",
                payment_id=payment_id,
            )

        previous = payment.status
        crud.payment.set_status(self.db, db_obj=payment, status=new_status, now=self.clock())
        self._audit(
            "payment.status_changed",
            payment,
            actor_id=actor_id,
            details={"from": previous, "to": new_status},
        )
        logger.info(f"Payment {payment_id} moved {previous} -> {new_status}")

        promoted = None
        if registration is not None:
            if (
                PaymentStatus.is_success(new_status)
                and registration.status == RegistrationStatus.PENDING.value
            ):
                self.registrations.confirm_locked(registration, event, performed_by=actor_id)
                outcome.registration_action = "confirmed"
            elif (
                PaymentStatus.is_terminal_failure(new_status)
                and registration.status in ACTIVE_STATUSES
            ):
                promoted = self.registrations.cancel_locked(
                    registration, event, performed_by=actor_id
                )
                outcome.registration_action = "cancelled"
            elif (
                PaymentStatus.is_success(new_status)
                and registration.status == RegistrationStatus.CANCELLED.value
            ):
                logger.warning(
                    f"Payment {payment_id} succeeded but registration {registration.id} "
                    f"is {registration.status}"
                )

        outcome.payment = PaymentSchema.model_validate(payment)
        outcome.registration = (
            RegistrationSchema.model_validate(registration) if registration else None
        )
        outcome.promoted = RegistrationSchema.model_validate(promoted) if promoted else None
        return outcome

    def _ensure_unlinked(self, registration: Registration) -> None:
        linked = crud.payment.get_by_registration(self.db, registration_id=registration.id)
        if linked:
            raise PaymentAlreadyLinked(
                f"Registration {registration.id} already has payment {linked.id}",
                registration_id=registration.id,
            )

    def _ensure_matches(self, payment: Payment, registration: Registration, event) -> None:
        if payment.user_id != registration.user_id:
            raise InvalidTransition(
                f"Payment {payment.id} belongs to another user",
                payment_id=payment.id,
            )
        if payment.event_id and payment.event_id != event.id:
            raise InvalidTransition(
                f"Payment {payment.id} was made for event {payment.event_id}, not {event.id}",
                payment_id=payment.id,
            )
        if event.price is not None and payment.amount < event.price:
            raise InvalidTransition(
                f"Payment {payment.id} of {payment.amount} does not cover the price {event.price}",
                payment_id=payment.id,
            )
        if PaymentStatus.is_terminal_failure(payment.status):
            raise InvalidTransition(
                f"Payment {payment.id} is {payment.status} and cannot be linked",
                payment_id=payment.id,
            )

    def _audit(self, action: str, payment: Payment, *, actor_id: str, details: dict) -> None:
        crud.audit_log.log_action(
            self.db,
            action=action,
            actor_id=actor_id,
            entity_type="payment",
            entity_id=payment.id,
            details=details,
            now=self.clock(),
        )
