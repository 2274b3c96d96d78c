# event_registration/crud/crud_notification_log.py
"""
CRUD operations for registration notification delivery tracking.
"""
from typing import Optional
from sqlalchemy.orm import Session
from datetime import datetime

from event_registration.constants.cleanup import FINAL_NOTIFICATION_STATUSES
from event_registration.models.notification_log import NotificationLog


def create_notification_log(
    db: Session,
    *,
    type: str,
    user_id: str,
    event_id: str,
    status: str,
    now: datetime,
    channel: str = "kafka",
    error: Optional[str] = None,
) -> NotificationLog:
    """Create a notification log entry."""
    notif = NotificationLog(
        type=type,
        user_id=user_id,
        event_id=event_id,
        channel=channel,
        status=status,
        error=error,
        created_at=now,
    )
    db.add(notif)
    db.flush()
    return notif


def delete_final_before(db: Session, *, cutoff: datetime) -> int:
    return (
        db.query(NotificationLog)
        .filter(
            NotificationLog.created_at < cutoff,
            NotificationLog.status.in_(FINAL_NOTIFICATION_STATUSES),
        )
        .delete(synchronize_session=False)
    )
