# event_registration/crud/crud_waitlist.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from event_registration.models.event import Event
from event_registration.models.waiting_list import WaitingListEntry


class CRUDWaitlist:
    """Queue storage for full events. Order is (created_at, id) ascending."""

    def __init__(self, model):
        self.model = model

    def _ordered(self, db: Session, *, event_id: str):
        return (
            db.query(self.model)
            .filter(self.model.event_id == event_id)
            .order_by(self.model.created_at.asc(), self.model.id.asc())
        )

    def get_first_in_queue(
        self, db: Session, *, event_id: str
    ) -> Optional[WaitingListEntry]:
        """
        Gets the first user in the waiting list for an event, ordered by creation time.
        """
        return self._ordered(db, event_id=event_id).first()

    def get_entry(
        self, db: Session, *, event_id: str, user_id: str
    ) -> Optional[WaitingListEntry]:
        return (
            db.query(self.model)
            .filter(self.model.event_id == event_id, self.model.user_id == user_id)
            .first()
        )

    def get_queue(
        self, db: Session, *, event_id: str, skip: int = 0, limit: int = 100
    ) -> List[WaitingListEntry]:
        return self._ordered(db, event_id=event_id).offset(skip).limit(limit).all()

    def count(self, db: Session, *, event_id: str) -> int:
        return (
            db.query(func.count(self.model.id))
            .filter(self.model.event_id == event_id)
            .scalar()
            or 0
        )

    def get_position(self, db: Session, *, entry: WaitingListEntry) -> int:
        """1-based position of ``entry`` within its event's queue."""
        ahead = (
            db.query(func.count(self.model.id))
            .filter(
                self.model.event_id == entry.event_id,
                (self.model.created_at < entry.created_at)
                | (
                    (self.model.created_at == entry.created_at)
                    & (self.model.id < entry.id)
                ),
            )
            .scalar()
            or 0
        )
        return ahead + 1

    def create(
        self, db: Session, *, event_id: str, user_id: str, now: datetime
    ) -> WaitingListEntry:
        db_obj = self.model(event_id=event_id, user_id=user_id, created_at=now)
        db.add(db_obj)
        db.flush()
        return db_obj

    def remove(self, db: Session, *, entry: WaitingListEntry) -> None:
        db.delete(entry)
        db.flush()

    def delete_for_events_ended_before(self, db: Session, *, cutoff: datetime) -> int:
        ended = select(Event.id).where(Event.end_date < cutoff)
        return (
            db.query(self.model)
            .filter(self.model.event_id.in_(ended))
            .delete(synchronize_session=False)
        )


waitlist = CRUDWaitlist(WaitingListEntry)
