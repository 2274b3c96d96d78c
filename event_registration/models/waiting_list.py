# event_registration/models/waiting_list.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from event_registration.db.base_class import Base


class WaitingListEntry(Base):
    __tablename__ = "waiting_list"

    # Integer key so that entries sharing a created_at keep insertion order.
    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    event = relationship("Event", back_populates="waiting_list")

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="unique_waiting_list_user_event"),
    )
