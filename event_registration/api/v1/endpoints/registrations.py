# event_registration/api/v1/endpoints/registrations.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from event_registration.api import deps
from event_registration.constants.registration import RegistrationStatus
from event_registration.core.config import settings
from event_registration.core.limiter import limiter
from event_registration.schemas.registration import (
    CancellationOutcome,
    Registration,
    RegistrationCreate,
    RegistrationHistoryEntry,
    RegistrationList,
    RegistrationOutcome,
)
from event_registration.schemas.result import OperationResult
from event_registration.schemas.token import TokenPayload
from event_registration.services.registration_service import RegistrationService

router = APIRouter(tags=["Registrations"])

def _ensure_owner_or_manager(db: Session, registration, current_user: TokenPayload) -> None:
    if registration.user_id != current_user.sub and not deps.is_manager(db, current_user.sub):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to act on this registration",
        )


@router.post(
    "/events/{event_id}/registrations",
    response_model=OperationResult[RegistrationOutcome],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.REGISTRATION_RATE_LIMIT)
def register_for_event(
    event_id: str,
    request: Request,  # Required for rate limiting
    registration_in: Optional[RegistrationCreate] = None,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Register for an event.

    When the event is full the caller is put on the waiting list instead and
    `data.result` is "waitlisted". Events that require payment start in
    PENDING until the payment is confirmed.

    **Errors**:
    - 403: Registering another user without the manager role
    - 404: Event not found
    - 409: Already registered or already waiting
    """
    user_id = current_user.sub
    if registration_in and registration_in.user_id and registration_in.user_id != user_id:
        if not deps.is_manager(db, current_user.sub):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only managers may register other users",
            )
        user_id = registration_in.user_id

    outcome = RegistrationService(db).register(user_id, event_id, actor_id=current_user.sub)
    return OperationResult[RegistrationOutcome].ok(outcome)


@router.get(
    "/events/{event_id}/registrations",
    response_model=OperationResult[RegistrationList],
)
def list_event_registrations(
    event_id: str,
    status_filter: Optional[RegistrationStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.require_manager),
):
    registrations = RegistrationService(db).list_for_event(
        event_id,
        status=status_filter.value if status_filter else None,
        skip=skip,
        limit=limit,
    )
    items = [Registration.model_validate(r) for r in registrations]
    return OperationResult[RegistrationList].ok(RegistrationList(items=items, total=len(items)))


@router.get("/registrations/{registration_id}", response_model=OperationResult[Registration])
def get_registration(
    registration_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    registration = RegistrationService(db).get(registration_id)
    _ensure_owner_or_manager(db, registration, current_user)
    return OperationResult[Registration].ok(Registration.model_validate(registration))


@router.get(
    "/registrations/{registration_id}/history",
    response_model=OperationResult[List[RegistrationHistoryEntry]],
)
def get_registration_history(
    registration_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    service = RegistrationService(db)
    _ensure_owner_or_manager(db, service.get(registration_id), current_user)
    entries = [RegistrationHistoryEntry.model_validate(h) for h in service.history(registration_id)]
    return OperationResult[List[RegistrationHistoryEntry]].ok(entries)


@router.post(
    "/registrations/{registration_id}/cancel",
    response_model=OperationResult[CancellationOutcome],
)
def cancel_registration(
    registration_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Cancel a registration. The freed seat goes to the first user on the
    waiting list, reported as `data.promoted`.
    """
    service = RegistrationService(db)
    _ensure_owner_or_manager(db, service.get(registration_id), current_user)
    outcome = service.cancel(registration_id, actor_id=current_user.sub)
    return OperationResult[CancellationOutcome].ok(outcome)


@router.post(
    "/registrations/{registration_id}/confirm",
    response_model=OperationResult[Registration],
)
def confirm_registration(
    registration_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.require_manager),
):
    """Confirm a PENDING registration whose payment has succeeded."""
    registration = RegistrationService(db).confirm_payment(
        registration_id, actor_id=current_user.sub
    )
    return OperationResult[Registration].ok(registration)
