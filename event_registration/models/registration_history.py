# event_registration/models/registration_history.py
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey
from event_registration.db.base_class import Base


class RegistrationHistory(Base):
    """Append-only record of every registration and waiting-list transition."""
    __tablename__ = "registration_history"

    id = Column(
        String, primary_key=True, default=lambda: f"rgh_{uuid.uuid4().hex[:12]}"
    )
    # Null for waiting-list rows that never produced a registration.
    registration_id = Column(
        String, ForeignKey("registrations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    event_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    action = Column(String(50), nullable=False)
    from_status = Column(String(20), nullable=True)
    to_status = Column(String(20), nullable=True)
    performed_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
