# event_registration/models/event.py
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric, text
from sqlalchemy.orm import relationship
from event_registration.db.base_class import Base
from event_registration.core.capacity import Capacity
import uuid


class Event(Base):
    __tablename__ = "events"

    id = Column(
        String, primary_key=True, default=lambda: f"evt_{uuid.uuid4().hex[:12]}"
    )
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True, index=True)
    manager_id = Column(String, nullable=False, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)

    # NULL means unlimited; any integer (including 0) is a hard cap.
    capacity = Column(Integer, nullable=True)

    requires_payment = Column(Boolean, nullable=False, server_default=text("false"), default=False)
    price = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(3), nullable=False, server_default="EUR", default="EUR")

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    registrations = relationship("Registration", back_populates="event")
    waiting_list = relationship("WaitingListEntry", back_populates="event")

    @property
    def capacity_limit(self) -> Capacity:
        return Capacity(self.capacity)
