# event_registration/models/payment.py
from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from event_registration.db.base_class import Base
from event_registration.constants.payment import PaymentStatus
import uuid


class Payment(Base):
    __tablename__ = "payments"

    id = Column(
        String, primary_key=True, default=lambda: f"pay_{uuid.uuid4().hex[:12]}"
    )
    # 1:1 with a registration; unique so a registration never has two payments.
    registration_id = Column(
        String, ForeignKey("registrations.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    event_id = Column(String, ForeignKey("events.id"), nullable=True, index=True)
    bank_account_id = Column(String, ForeignKey("bank_accounts.id"), nullable=True)
    user_id = Column(String, nullable=False, index=True)

    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(String(20), nullable=False, index=True)
    # Values: 'PENDING', 'PROCESSING', 'CONFIRMED', 'FAILED', 'CANCELLED', 'REFUNDED'

    # Bank reconciliation code printed on transfer orders.
    variable_symbol = Column(String(10), nullable=False, unique=True, index=True)

    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    registration = relationship("Registration", back_populates="payment")
    bank_account = relationship("BankAccount")

    @property
    def is_successful(self) -> bool:
        """Check if payment was successful."""
        return PaymentStatus.is_success(self.status)
