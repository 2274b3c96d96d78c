# event_registration/crud/crud_registration.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from event_registration.constants.registration import ACTIVE_STATUSES, RegistrationStatus
from event_registration.models.registration import Registration


class CRUDRegistration:
    """CRUD operations for event registrations. Callers own the transaction."""

    def __init__(self, model):
        self.model = model

    def get(self, db: Session, *, id: str) -> Optional[Registration]:
        return db.query(self.model).filter(self.model.id == id).first()

    def get_by_user(
        self, db: Session, *, event_id: str, user_id: str
    ) -> Optional[Registration]:
        """Get a user's registration for an event (any status)."""
        return (
            db.query(self.model)
            .filter(
                and_(self.model.event_id == event_id, self.model.user_id == user_id)
            )
            .first()
        )

    def get_multi_by_event(
        self,
        db: Session,
        *,
        event_id: str,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Registration]:
        query = db.query(self.model).filter(self.model.event_id == event_id)
        if status:
            query = query.filter(self.model.status == status)
        return (
            query.order_by(self.model.created_at.asc(), self.model.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_status(self, db: Session, *, event_id: str, statuses) -> int:
        return (
            db.query(func.count(self.model.id))
            .filter(
                self.model.event_id == event_id,
                self.model.status.in_(list(statuses)),
            )
            .scalar()
            or 0
        )

    def count_active(self, db: Session, *, event_id: str) -> int:
        """Seats held by PENDING and CONFIRMED registrations."""
        return self.count_by_status(db, event_id=event_id, statuses=ACTIVE_STATUSES)

    def create(
        self,
        db: Session,
        *,
        event_id: str,
        user_id: str,
        status: RegistrationStatus,
        now: datetime,
    ) -> Registration:
        db_obj = self.model(
            event_id=event_id,
            user_id=user_id,
            status=status.value,
            created_at=now,
            updated_at=now,
            confirmed_at=now if status == RegistrationStatus.CONFIRMED else None,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def reactivate(
        self,
        db: Session,
        *,
        db_obj: Registration,
        status: RegistrationStatus,
        now: datetime,
    ) -> Registration:
        """Reuse a cancelled row for a fresh registration by the same user."""
        db_obj.status = status.value
        db_obj.created_at = now
        db_obj.updated_at = now
        db_obj.cancelled_at = None
        db_obj.confirmed_at = now if status == RegistrationStatus.CONFIRMED else None
        db.flush()
        return db_obj

    def set_status(
        self,
        db: Session,
        *,
        db_obj: Registration,
        status: RegistrationStatus,
        now: datetime,
    ) -> Registration:
        db_obj.status = status.value
        db_obj.updated_at = now
        if status == RegistrationStatus.CONFIRMED:
            db_obj.confirmed_at = now
        elif status == RegistrationStatus.CANCELLED:
            db_obj.cancelled_at = now
        db.flush()
        return db_obj

    def delete_cancelled_before(self, db: Session, *, cutoff: datetime) -> int:
        return (
            db.query(self.model)
            .filter(
                self.model.status == RegistrationStatus.CANCELLED.value,
                self.model.cancelled_at < cutoff,
            )
            .delete(synchronize_session=False)
        )


registration = CRUDRegistration(Registration)
