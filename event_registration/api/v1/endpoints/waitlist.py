# event_registration/api/v1/endpoints/waitlist.py
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from event_registration.api import deps
from event_registration.schemas.registration import Registration
from event_registration.schemas.result import OperationResult
from event_registration.schemas.token import TokenPayload
from event_registration.schemas.waitlist import WaitlistEntry, WaitlistPosition
from event_registration.services.waitlist_queue import WaitlistQueue

router = APIRouter(prefix="/events/{event_id}/waitlist", tags=["Waitlist"])


@router.get("", response_model=OperationResult[List[WaitlistEntry]])
def list_waitlist(
    event_id: str,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.require_manager),
):
    entries = WaitlistQueue(db).list_for_event(event_id, skip=skip, limit=limit)
    return OperationResult[List[WaitlistEntry]].ok(entries)


@router.get("/me", response_model=OperationResult[WaitlistPosition])
def get_my_position(
    event_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    position = WaitlistQueue(db).position(current_user.sub, event_id)
    return OperationResult[WaitlistPosition].ok(position)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def leave_waitlist(
    event_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    WaitlistQueue(db).leave(current_user.sub, event_id)


@router.post("/promote", response_model=OperationResult[Optional[Registration]])
def promote_next(
    event_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.require_manager),
):
    """
    Hand a free seat to the head of the queue. `data` is null when the
    queue is empty or the event is full.
    """
    promoted = WaitlistQueue(db).promote_next(event_id)
    return OperationResult[Optional[Registration]].ok(promoted)
