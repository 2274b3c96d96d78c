# event_registration/api/v1/endpoints/events.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from event_registration.api import deps
from event_registration.schemas.event import (
    Availability,
    CapacityChange,
    CapacityUpdate,
    Event,
    EventCreate,
    EventUpdate,
)
from event_registration.schemas.result import OperationResult
from event_registration.schemas.token import TokenPayload
from event_registration.services.capacity_ledger import CapacityLedger
from event_registration.services.event_service import EventService

router = APIRouter(prefix="/events", tags=["Events"])


@router.post(
    "", response_model=OperationResult[Event], status_code=status.HTTP_201_CREATED
)
def create_event(
    *,
    event_in: EventCreate,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.require_manager),
):
    """
    Create a new event. The caller becomes its manager.

    Omit `capacity` (or send null) for an event without a seat limit.
    """
    event = EventService(db).create_event(event_in, manager_id=current_user.sub)
    return OperationResult[Event].ok(event)


@router.get("/{event_id}", response_model=OperationResult[Event])
def get_event(event_id: str, db: Session = Depends(deps.get_db)):
    event = EventService(db).get(event_id)
    return OperationResult[Event].ok(Event.model_validate(event))


@router.patch("/{event_id}", response_model=OperationResult[Event])
def update_event(
    event_id: str,
    event_in: EventUpdate,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.require_manager),
):
    event = EventService(db).update_event(event_id, event_in)
    return OperationResult[Event].ok(event)


@router.get("/{event_id}/availability", response_model=OperationResult[Availability])
def get_availability(event_id: str, db: Session = Depends(deps.get_db)):
    """Seat summary. `capacity` and `available` are "unlimited" for events without a limit."""
    return OperationResult[Availability].ok(CapacityLedger(db).availability(event_id))


@router.patch("/{event_id}/capacity", response_model=OperationResult[CapacityChange])
def change_capacity(
    event_id: str,
    capacity_in: CapacityUpdate,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.require_manager),
):
    """
    Change the seat limit. Freed seats are handed to the waiting list right away.

    **Errors**:
    - 404: Event not found
    - 409: New limit is below the number of seats already taken
    """
    change = EventService(db).change_capacity(
        event_id, capacity_in.capacity, actor_id=current_user.sub
    )
    return OperationResult[CapacityChange].ok(change)
