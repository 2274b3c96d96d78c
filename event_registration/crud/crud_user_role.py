# event_registration/crud/crud_user_role.py
from datetime import datetime
from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from event_registration.models.role import Role, UserRole


class CRUDUserRole:
    def __init__(self, model):
        self.model = model

    def get_active_role_names(
        self, db: Session, *, user_id: str, now: datetime
    ) -> List[str]:
        """Names of the roles a user currently holds (active and not expired)."""
        rows = (
            db.query(Role.name)
            .join(self.model, self.model.role_id == Role.id)
            .filter(
                self.model.user_id == user_id,
                self.model.is_active.is_(True),
                or_(self.model.expires_at.is_(None), self.model.expires_at > now),
            )
            .all()
        )
        return [name for (name,) in rows]

    def has_any_role(
        self, db: Session, *, user_id: str, roles, now: datetime
    ) -> bool:
        held = set(self.get_active_role_names(db, user_id=user_id, now=now))
        return bool(held.intersection(roles))

    def delete_expired_before(self, db: Session, *, cutoff: datetime) -> int:
        return (
            db.query(self.model)
            .filter(
                self.model.expires_at < cutoff,
                self.model.is_active.is_(False),
            )
            .delete(synchronize_session=False)
        )


user_role = CRUDUserRole(UserRole)
