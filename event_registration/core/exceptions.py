# event_registration/core/exceptions.py
"""
Typed failures raised by the registration services.

Business-rule outcomes (not found, duplicates, invalid transitions) are never
retried. PersistenceError wraps database failures that survived the internal
retry.
"""

from typing import Any, Dict, Optional


class RegistrationError(Exception):
    """Base class for every failure the service layer reports to callers."""

    code = "registration_error"
    status_code = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class NotFoundError(RegistrationError):
    code = "not_found"
    status_code = 404


class EventNotFound(NotFoundError):
    code = "event_not_found"

    def __init__(self, event_id: str):
        super().__init__(f"Event {event_id} not found", event_id=event_id)


class RegistrationNotFound(NotFoundError):
    code = "registration_not_found"

    def __init__(self, registration_id: str):
        super().__init__(
            f"Registration {registration_id} not found",
            registration_id=registration_id,
        )


class PaymentNotFound(NotFoundError):
    code = "payment_not_found"

    def __init__(self, payment_id: str):
        super().__init__(f"Payment {payment_id} not found", payment_id=payment_id)


class BankAccountNotFound(NotFoundError):
    code = "bank_account_not_found"

    def __init__(self, bank_account_id: str):
        super().__init__(
            f"Bank account {bank_account_id} not found",
            bank_account_id=bank_account_id,
        )


class WaitlistEntryNotFound(NotFoundError):
    code = "waitlist_entry_not_found"

    def __init__(self, user_id: str, event_id: str):
        super().__init__(
            f"User {user_id} is not on the waiting list for event {event_id}",
            user_id=user_id,
            event_id=event_id,
        )


class DuplicateRegistration(RegistrationError):
    code = "duplicate_registration"
    status_code = 409

    def __init__(self, user_id: str, event_id: str, reason: Optional[str] = None):
        super().__init__(
            reason or f"User {user_id} is already registered for event {event_id}",
            user_id=user_id,
            event_id=event_id,
        )


class DuplicateWaitlist(RegistrationError):
    code = "duplicate_waitlist"
    status_code = 409

    def __init__(self, user_id: str, event_id: str):
        super().__init__(
            f"User {user_id} is already on the waiting list for event {event_id}",
            user_id=user_id,
            event_id=event_id,
        )


class InvalidTransition(RegistrationError):
    code = "invalid_transition"
    status_code = 409


class InvalidEventDates(RegistrationError):
    code = "invalid_event_dates"
    status_code = 422


class CapacityExceeded(RegistrationError):
    code = "capacity_exceeded"
    status_code = 409


class PaymentAlreadyLinked(RegistrationError):
    code = "payment_already_linked"
    status_code = 409


class PersistenceError(RegistrationError):
    code = "persistence_error"
    status_code = 500
