# event_registration/models/role.py
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint, text
from sqlalchemy.orm import relationship
from event_registration.db.base_class import Base


class Role(Base):
    __tablename__ = "roles"

    id = Column(
        String, primary_key=True, default=lambda: f"role_{uuid.uuid4().hex[:12]}"
    )
    name = Column(String(50), nullable=False, unique=True)
    display_name = Column(String, nullable=False)
    priority = Column(Integer, nullable=False, server_default="1", default=1)


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(
        String, primary_key=True, default=lambda: f"urole_{uuid.uuid4().hex[:12]}"
    )
    user_id = Column(String, nullable=False, index=True)
    role_id = Column(String, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=text("true"), default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    role = relationship("Role")

    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="unique_user_role"),
    )
