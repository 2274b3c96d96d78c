# event_registration/crud/crud_audit_log.py
from typing import List, Optional, Any, Dict
from datetime import datetime
from sqlalchemy.orm import Session

from event_registration.models.audit_log import AuditLog


class CRUDAuditLog:
    """
    CRUD operations for AuditLog model.

    Audit logs are immutable: only create, read and the retention purge.
    """

    def __init__(self, model):
        self.model = model

    def log_action(
        self,
        db: Session,
        *,
        action: str,
        entity_type: str,
        entity_id: str,
        now: datetime,
        actor_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        """Convenience method to log an action."""
        db_obj = self.model(
            action=action,
            actor_id=actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            timestamp=now,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def get_by_entity(
        self,
        db: Session,
        *,
        entity_type: str,
        entity_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> List[AuditLog]:
        """Get audit logs for a specific entity."""
        return (
            db.query(self.model)
            .filter(
                self.model.entity_type == entity_type,
                self.model.entity_id == entity_id,
            )
            .order_by(self.model.timestamp.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def delete_before(self, db: Session, *, cutoff: datetime) -> int:
        return (
            db.query(self.model)
            .filter(self.model.timestamp < cutoff)
            .delete(synchronize_session=False)
        )


audit_log = CRUDAuditLog(AuditLog)
