# event_registration/constants/registration.py
"""
Registration lifecycle: the closed set of statuses and the single transition
table every state change goes through.
"""

from enum import Enum
from typing import Optional

from event_registration.core.exceptions import InvalidTransition


class RegistrationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


# Statuses that hold a seat (reserve-on-PENDING).
ACTIVE_STATUSES = (RegistrationStatus.PENDING.value, RegistrationStatus.CONFIRMED.value)


class RegistrationAction(str, Enum):
    REGISTER = "REGISTER"
    CONFIRM_PAYMENT = "CONFIRM_PAYMENT"
    CANCEL = "CANCEL"


class HistoryAction:
    """Action names written to registration_history."""
    REGISTERED = "REGISTERED"
    WAITLISTED = "WAITLISTED"
    PROMOTED = "PROMOTED"
    PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"
    CANCELLED = "CANCELLED"
    WAITLIST_LEFT = "WAITLIST_LEFT"


# (current status, action) -> allowed targets. None stands for "no row yet".
# REGISTER from CANCELLED reuses the row because (user_id, event_id) is unique.
_TRANSITIONS = {
    (None, RegistrationAction.REGISTER): (
        RegistrationStatus.PENDING,
        RegistrationStatus.CONFIRMED,
    ),
    (RegistrationStatus.CANCELLED, RegistrationAction.REGISTER): (
        RegistrationStatus.PENDING,
        RegistrationStatus.CONFIRMED,
    ),
    (RegistrationStatus.PENDING, RegistrationAction.CONFIRM_PAYMENT): (
        RegistrationStatus.CONFIRMED,
    ),
    (RegistrationStatus.PENDING, RegistrationAction.CANCEL): (
        RegistrationStatus.CANCELLED,
    ),
    (RegistrationStatus.CONFIRMED, RegistrationAction.CANCEL): (
        RegistrationStatus.CANCELLED,
    ),
}


def next_status(
    current: Optional[str],
    action: RegistrationAction,
    *,
    requires_payment: bool = False,
) -> RegistrationStatus:
    """
    Resolve the status a registration moves to for ``action``.

    Raises InvalidTransition for any pair missing from the table.
    """
    current_status = RegistrationStatus(current) if current is not None else None
    targets = _TRANSITIONS.get((current_status, action))
    if not targets:
        raise InvalidTransition(
            f"Cannot {action.value.lower().replace('_', ' ')} a registration "
            f"in status {current_status.value if current_status else 'NONE'}",
            current=current,
            action=action.value,
        )
    if action == RegistrationAction.REGISTER:
        return RegistrationStatus.PENDING if requires_payment else RegistrationStatus.CONFIRMED
    return targets[0]
