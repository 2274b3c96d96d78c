# event_registration/background_tasks/cleanup_tasks.py
"""
Scheduled database cleanup.
"""

import logging

from event_registration.core.exceptions import PersistenceError
from event_registration.db.session import SessionLocal
from event_registration.services.cleanup_sweeper import CleanupSweeper

logger = logging.getLogger(__name__)


def run_database_cleanup():
    """
    Run every retention category once.

    Runs daily from the scheduler. Per-category failures end up in the
    summary; an unreachable database is re-raised so the scheduler's error
    listener records the failed run.
    """
    db = SessionLocal()
    try:
        logger.info("Starting scheduled database cleanup...")
        summary = CleanupSweeper(db).run()
        if summary.success:
            logger.info(f"Database cleanup completed: {summary.results}")
        else:
            logger.warning(
                f"Database cleanup finished with {len(summary.errors)} errors: {summary.errors}"
            )
        return summary
    except PersistenceError as e:
        logger.error(f"Database cleanup could not run: {e.message}")
        raise
    finally:
        db.close()
