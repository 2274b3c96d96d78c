# event_registration/services/cleanup_sweeper.py
"""
Retention sweeper.

Each category is purged in its own transaction so one failing category
never blocks the others. Failures are collected as messages in the summary;
the only fatal condition is not being able to reach the database at all.
"""

import logging
from datetime import timedelta
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from event_registration import crud
from event_registration.constants.cleanup import CleanupCategory
from event_registration.core.clock import Clock, utcnow
from event_registration.core.config import Settings, settings as default_settings
from event_registration.core.exceptions import PersistenceError
from event_registration.schemas.cleanup import CleanupSummary

logger = logging.getLogger(__name__)


class CleanupSweeper:
    def __init__(
        self,
        db: Session,
        *,
        clock: Clock = utcnow,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.clock = clock
        self.settings = settings or default_settings
        self._handlers: Dict[CleanupCategory, Callable[[], Optional[int]]] = {
            CleanupCategory.EXPIRED_USER_ROLES: self._expired_user_roles,
            CleanupCategory.OLD_AUDIT_LOGS: self._old_audit_logs,
            CleanupCategory.FAILED_PAYMENTS: self._failed_payments,
            CleanupCategory.EXPIRED_WAITING_LIST: self._expired_waiting_list,
            CleanupCategory.CANCELLED_REGISTRATIONS: self._cancelled_registrations,
            CleanupCategory.OLD_NOTIFICATION_LOGS: self._old_notification_logs,
            CleanupCategory.OPTIMIZE_DATABASE: self._optimize_database,
        }

    def run(
        self,
        categories: Union[Iterable[CleanupCategory], Mapping[str, bool], None] = None,
    ) -> CleanupSummary:
        """
        Purge the requested categories (all of them by default).

        ``categories`` is either a list of categories or a flag mapping such
        as ``{"oldAuditLogs": True}``.

        ``results`` only carries the categories that were requested and
        succeeded; optimizeDatabase never reports a count.
        """
        self._ensure_connection()

        if categories is None:
            requested = list(CleanupCategory)
        elif isinstance(categories, Mapping):
            requested = [name for name, enabled in categories.items() if enabled]
        else:
            requested = list(categories)
        results: Dict[str, int] = {}
        errors: List[str] = []

        selected: List[CleanupCategory] = []
        for name in requested:
            try:
                selected.append(CleanupCategory(name))
            except ValueError:
                message = f"Unknown cleanup category: {name}"
                logger.warning(message)
                errors.append(message)

        for category in selected:
            try:
                count = self._handlers[category]()
                self.db.commit()
            except Exception as e:
                self.db.rollback()
                message = f"Failed to clean {category.value}: {e}"
                logger.error(message, exc_info=True)
                errors.append(message)
                continue
            if count is not None:
                results[category.value] = count
                logger.info(f"Cleanup {category.value}: removed {count} rows")

        summary = CleanupSummary(success=not errors, results=results, errors=errors)
        logger.info(
            f"Cleanup finished: success={summary.success}, "
            f"removed={sum(results.values())}, errors={len(errors)}"
        )
        return summary

    def _ensure_connection(self) -> None:
        try:
            self.db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Cleanup aborted, database unreachable: {e}")
            raise PersistenceError("Database connection unavailable for cleanup") from e

    def _cutoff(self, days: int):
        return self.clock() - timedelta(days=days)

    def _expired_user_roles(self) -> int:
        return crud.user_role.delete_expired_before(
            self.db, cutoff=self._cutoff(self.settings.RETENTION_EXPIRED_USER_ROLES_DAYS)
        )

    def _old_audit_logs(self) -> int:
        return crud.audit_log.delete_before(
            self.db, cutoff=self._cutoff(self.settings.RETENTION_AUDIT_LOGS_DAYS)
        )

    def _failed_payments(self) -> int:
        return crud.payment.delete_failed_before(
            self.db, cutoff=self._cutoff(self.settings.RETENTION_FAILED_PAYMENTS_DAYS)
        )

    def _expired_waiting_list(self) -> int:
        # Entries of events that ended more than the retention window ago.
        return crud.waitlist.delete_for_events_ended_before(
            self.db, cutoff=self._cutoff(self.settings.RETENTION_WAITING_LIST_DAYS)
        )

    def _cancelled_registrations(self) -> int:
        return crud.registration.delete_cancelled_before(
            self.db,
            cutoff=self._cutoff(self.settings.RETENTION_CANCELLED_REGISTRATIONS_DAYS),
        )

    def _old_notification_logs(self) -> int:
        return crud.notification_log.delete_final_before(
            self.db, cutoff=self._cutoff(self.settings.RETENTION_NOTIFICATION_LOGS_DAYS)
        )

    def _optimize_database(self) -> None:
        self.db.execute(text("ANALYZE"))
        return None
