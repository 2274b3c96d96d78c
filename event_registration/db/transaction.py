# event_registration/db/transaction.py
"""
Transaction boundary for service operations.

A decorated method runs as one database transaction: commit on success,
rollback on any exception. OperationalError (lock timeout, dropped
connection) is retried with exponential backoff; whatever database failure
survives the retry is surfaced as PersistenceError. Notifications queued on
the session are published only after the commit succeeds.
"""

import functools
import logging

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import (
    Retrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from event_registration.core.config import settings
from event_registration.core.exceptions import PersistenceError, RegistrationError

logger = logging.getLogger(__name__)


def _retrying() -> Retrying:
    return Retrying(
        stop=stop_after_attempt(settings.TRANSIENT_RETRY_ATTEMPTS),
        wait=wait_exponential(
            multiplier=settings.RETRY_BACKOFF_MIN_SECONDS,
            min=settings.RETRY_BACKOFF_MIN_SECONDS,
            max=settings.RETRY_BACKOFF_MAX_SECONDS,
        ),
        retry=retry_if_exception_type(OperationalError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def set_lock_timeout(db: Session) -> None:
    """Bound row-lock waits on PostgreSQL; other dialects have no equivalent."""
    if db.get_bind().dialect.name == "postgresql":
        db.execute(text(f"SET LOCAL lock_timeout = {int(settings.LOCK_TIMEOUT_MS)}"))


def transactional(method):
    """Wrap a service method (``self.db`` is the session) in a retried transaction."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        from event_registration.services import notifications

        db: Session = self.db
        try:
            for attempt in _retrying():
                with attempt:
                    try:
                        result = method(self, *args, **kwargs)
                        db.commit()
                    except Exception:
                        db.rollback()
                        notifications.discard_pending(db)
                        raise
        except RegistrationError:
            raise
        except SQLAlchemyError as e:
            logger.error(
                f"{method.__qualname__} failed after retries: {e}", exc_info=True
            )
            raise PersistenceError(f"Database operation failed: {e.__class__.__name__}") from e

        notifications.dispatch_pending(db)
        return result

    return wrapper
