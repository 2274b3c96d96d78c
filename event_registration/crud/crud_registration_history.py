# event_registration/crud/crud_registration_history.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from event_registration.models.registration_history import RegistrationHistory


class CRUDRegistrationHistory:
    """
    Append-only history of registration transitions.

    Rows are only ever inserted here.
    """

    def __init__(self, model):
        self.model = model

    def log_transition(
        self,
        db: Session,
        *,
        event_id: str,
        user_id: str,
        action: str,
        now: datetime,
        registration_id: Optional[str] = None,
        from_status: Optional[str] = None,
        to_status: Optional[str] = None,
        performed_by: Optional[str] = None,
    ) -> RegistrationHistory:
        db_obj = self.model(
            registration_id=registration_id,
            event_id=event_id,
            user_id=user_id,
            action=action,
            from_status=from_status,
            to_status=to_status,
            performed_by=performed_by,
            created_at=now,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def get_by_registration(
        self, db: Session, *, registration_id: str
    ) -> List[RegistrationHistory]:
        return (
            db.query(self.model)
            .filter(self.model.registration_id == registration_id)
            .order_by(self.model.created_at.asc())
            .all()
        )

    def get_by_event(
        self, db: Session, *, event_id: str, user_id: Optional[str] = None
    ) -> List[RegistrationHistory]:
        query = db.query(self.model).filter(self.model.event_id == event_id)
        if user_id:
            query = query.filter(self.model.user_id == user_id)
        return query.order_by(self.model.created_at.asc()).all()


registration_history = CRUDRegistrationHistory(RegistrationHistory)
