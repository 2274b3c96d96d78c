# event_registration/models/registration.py
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from event_registration.db.base_class import Base


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(
        String, primary_key=True, default=lambda: f"reg_{uuid.uuid4().hex[:12]}"
    )
    event_id = Column(String, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)

    status = Column(String(20), nullable=False, index=True)  # PENDING, CONFIRMED, CANCELLED

    created_at = Column(DateTime(timezone=True), nullable=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    event = relationship("Event", back_populates="registrations")
    payment = relationship("Payment", back_populates="registration", uselist=False)

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="unique_registration_user_event"),
    )
