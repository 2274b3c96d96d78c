from sqlalchemy.orm import Session

from event_registration import crud
from event_registration.constants.registration import RegistrationStatus
from event_registration.models.registration import Registration


def count_status(db: Session, event_id: str, status: RegistrationStatus) -> int:
    return crud.registration.count_by_status(db, event_id=event_id, statuses=(status.value,))


def queued_user_ids(db: Session, event_id: str) -> list[str]:
    return [entry.user_id for entry in crud.waitlist.get_queue(db, event_id=event_id)]


def registration_of(db: Session, event_id: str, user_id: str) -> Registration:
    db.expire_all()
    return crud.registration.get_by_user(db, event_id=event_id, user_id=user_id)
