# event_registration/crud/crud_payment.py
import secrets
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from event_registration.constants.payment import PaymentStatus
from event_registration.models.payment import Payment


def generate_variable_symbol(length: int = 10) -> str:
    """Generates a numeric variable symbol for bank transfer reconciliation."""
    # First digit is never zero so the symbol survives numeric parsing by banks.
    first = str(secrets.randbelow(9) + 1)
    return first + "".join(str(secrets.randbelow(10)) for _ in range(length - 1))


class CRUDPayment:
    def __init__(self, model):
        self.model = model

    def get(self, db: Session, *, id: str) -> Optional[Payment]:
        return db.query(self.model).filter(self.model.id == id).first()

    def get_by_variable_symbol(
        self, db: Session, *, variable_symbol: str
    ) -> Optional[Payment]:
        return (
            db.query(self.model)
            .filter(self.model.variable_symbol == variable_symbol)
            .first()
        )

    def get_by_registration(
        self, db: Session, *, registration_id: str
    ) -> Optional[Payment]:
        return (
            db.query(self.model)
            .filter(self.model.registration_id == registration_id)
            .first()
        )

    def create(
        self,
        db: Session,
        *,
        user_id: str,
        amount: Decimal,
        currency: str,
        now: datetime,
        event_id: Optional[str] = None,
        bank_account_id: Optional[str] = None,
    ) -> Payment:
        """
        Creates a PENDING payment and generates a unique variable symbol.
        """
        while True:
            variable_symbol = generate_variable_symbol()
            if not self.get_by_variable_symbol(db, variable_symbol=variable_symbol):
                break

        db_obj = self.model(
            user_id=user_id,
            event_id=event_id,
            bank_account_id=bank_account_id,
            amount=amount,
            currency=currency,
            status=PaymentStatus.PENDING,
            variable_symbol=variable_symbol,
            created_at=now,
            updated_at=now,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def set_status(
        self, db: Session, *, db_obj: Payment, status: str, now: datetime
    ) -> Payment:
        db_obj.status = status
        db_obj.updated_at = now
        if PaymentStatus.is_success(status):
            db_obj.paid_at = now
        db.flush()
        return db_obj

    def link(self, db: Session, *, db_obj: Payment, registration_id: str) -> Payment:
        db_obj.registration_id = registration_id
        db.flush()
        return db_obj

    def unlink(self, db: Session, *, db_obj: Payment) -> Payment:
        db_obj.registration_id = None
        db.flush()
        return db_obj

    def delete_failed_before(self, db: Session, *, cutoff: datetime) -> int:
        return (
            db.query(self.model)
            .filter(
                self.model.status == PaymentStatus.FAILED,
                self.model.created_at < cutoff,
            )
            .delete(synchronize_session=False)
        )


payment = CRUDPayment(Payment)
