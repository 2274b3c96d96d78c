# event_registration/crud/crud_bank_account.py
from typing import Optional
from sqlalchemy.orm import Session
from event_registration.models.bank_account import BankAccount


class CRUDBankAccount:
    def __init__(self, model):
        self.model = model

    def get_active(self, db: Session, *, id: str) -> Optional[BankAccount]:
        return (
            db.query(self.model)
            .filter(self.model.id == id, self.model.is_active.is_(True))
            .first()
        )

    def get_default(self, db: Session) -> Optional[BankAccount]:
        return (
            db.query(self.model)
            .filter(self.model.is_default.is_(True), self.model.is_active.is_(True))
            .first()
        )


bank_account = CRUDBankAccount(BankAccount)
