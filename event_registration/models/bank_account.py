# event_registration/models/bank_account.py
from sqlalchemy import Column, String, Boolean, text
from event_registration.db.base_class import Base
import uuid


class BankAccount(Base):
    __tablename__ = "bank_accounts"

    id = Column(
        String, primary_key=True, default=lambda: f"bank_{uuid.uuid4().hex[:12]}"
    )
    name = Column(String, nullable=False)
    bank_name = Column(String, nullable=False)
    iban = Column(String(34), nullable=False, unique=True)
    swift = Column(String(11), nullable=True)
    is_default = Column(Boolean, nullable=False, server_default=text("false"), default=False)
    is_active = Column(Boolean, nullable=False, server_default=text("true"), default=True)
