# event_registration/models/notification_log.py
import uuid
from sqlalchemy import Column, String, DateTime, Text
from event_registration.db.base_class import Base


class NotificationLog(Base):
    """Delivery record for each outbound registration notification."""
    __tablename__ = "notification_logs"

    id = Column(
        String, primary_key=True, default=lambda: f"ntf_{uuid.uuid4().hex[:12]}"
    )
    type = Column(String(50), nullable=False)  # 'registration_confirmed', 'waitlist_promoted'
    user_id = Column(String, nullable=False, index=True)
    event_id = Column(String, nullable=False, index=True)
    channel = Column(String(20), nullable=False, default="kafka")
    status = Column(String(20), nullable=False)  # PENDING, SENT, DELIVERED, FAILED, BOUNCED
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
