# event_registration/api/v1/endpoints/payments.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from event_registration.api import deps
from event_registration.schemas.payment import (
    Payment,
    PaymentCreate,
    PaymentStatusOutcome,
    PaymentStatusUpdate,
)
from event_registration.schemas.result import OperationResult
from event_registration.schemas.token import TokenPayload
from event_registration.services.payment_correlator import PaymentCorrelator
from event_registration.services.registration_service import RegistrationService

router = APIRouter(tags=["Payments"])


@router.post(
    "/registrations/{registration_id}/payments",
    response_model=OperationResult[Payment],
    status_code=status.HTTP_201_CREATED,
)
def create_payment(
    registration_id: str,
    payment_in: PaymentCreate,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Open a bank-transfer payment for a PENDING registration.

    The returned `variable_symbol` identifies the transfer.
    """
    registration = RegistrationService(db).get(registration_id)
    if registration.user_id != current_user.sub:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the registrant may pay for this registration",
        )
    payment = PaymentCorrelator(db).create_payment(
        registration_id, payment_in, actor_id=current_user.sub
    )
    return OperationResult[Payment].ok(payment)


@router.post(
    "/payments/{payment_id}/status",
    response_model=OperationResult[PaymentStatusOutcome],
)
def update_payment_status(
    payment_id: str,
    status_in: PaymentStatusUpdate,
    db: Session = Depends(deps.get_db),
    api_key: str = Depends(deps.get_internal_api_key),
):
    """
    Report a payment status change from the bank reconciliation job.

    Success confirms the PENDING registration; FAILED, CANCELLED and REFUNDED
    cancel it and promote the next waiting user.
    """
    outcome = PaymentCorrelator(db).on_payment_status_change(payment_id, status_in.status)
    return OperationResult[PaymentStatusOutcome].ok(outcome)
