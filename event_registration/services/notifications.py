# event_registration/services/notifications.py
"""
Outbound notifications for registration transitions.

Services queue notifications on the SQLAlchemy session while the transaction
is open. They are published only after a successful commit and dropped on
rollback, so consumers never hear about a seat that was not persisted.
"""
import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from event_registration.constants.notifications import NotificationStatus
from event_registration.core.clock import utcnow
from event_registration.crud import notification_log
from event_registration.schemas.notification import RegistrationNotification
from event_registration.utils import kafka_helpers

logger = logging.getLogger(__name__)

_PENDING_KEY = "pending_notifications"


def queue_notification(db: Session, *, type: str, user_id: str, event_id: str) -> None:
    pending: List[RegistrationNotification] = db.info.setdefault(_PENDING_KEY, [])
    pending.append(RegistrationNotification(type=type, user_id=user_id, event_id=event_id))


def pending_notifications(db: Session) -> List[RegistrationNotification]:
    return list(db.info.get(_PENDING_KEY, []))


def discard_pending(db: Session) -> None:
    db.info.pop(_PENDING_KEY, None)


def dispatch_pending(db: Session) -> int:
    """
    Publish everything queued on ``db`` and record one NotificationLog row per
    message. Delivery problems are logged, never raised.
    """
    pending = db.info.pop(_PENDING_KEY, [])
    if not pending:
        return 0

    sent = 0
    for notification in pending:
        published = kafka_helpers.publish_registration_event(notification)
        if published:
            sent += 1
        try:
            with db.begin_nested():
                notification_log.create_notification_log(
                    db,
                    type=notification.type,
                    user_id=notification.user_id,
                    event_id=notification.event_id,
                    status=NotificationStatus.SENT if published else NotificationStatus.FAILED,
                    error=None if published else "Kafka publish failed",
                    now=utcnow(),
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to record notification log: {e}")
    try:
        db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Failed to commit notification logs: {e}")
        db.rollback()
    return sent
