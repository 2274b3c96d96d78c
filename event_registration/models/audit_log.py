# event_registration/models/audit_log.py
from sqlalchemy import Column, String, DateTime, JSON
from event_registration.db.base_class import Base
import uuid


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(
        String, primary_key=True, default=lambda: f"aud_{uuid.uuid4().hex[:12]}"
    )

    # What happened, e.g. 'payment.status_changed', 'event.capacity_changed'
    action = Column(String(100), nullable=False)

    # Who did it ('system' for scheduled jobs and webhooks)
    actor_id = Column(String, nullable=True)

    # What was affected
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String, nullable=False)

    details = Column(JSON, nullable=True)

    # Immutable timestamp
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
