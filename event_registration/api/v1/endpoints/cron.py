# event_registration/api/v1/endpoints/cron.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from event_registration.api import deps
from event_registration.constants.cleanup import CleanupCategory
from event_registration.schemas.cleanup import CleanupSummary
from event_registration.services.cleanup_sweeper import CleanupSweeper

router = APIRouter(prefix="/cron", tags=["Cron"])
logger = logging.getLogger(__name__)


@router.get(
    "/cleanup",
    response_model=CleanupSummary,
    dependencies=[Depends(deps.verify_cron_secret)],
)
def run_cleanup(
    categories: Optional[List[CleanupCategory]] = Query(None),
    db: Session = Depends(deps.get_db),
):
    """
    Purge stale data. Requires `Authorization: Bearer <CRON_SECRET>`.

    Pass `categories` (repeatable) to run a subset; by default every
    category runs.
    """
    logger.info(f"Cleanup triggered over HTTP, categories={categories or 'all'}")
    return CleanupSweeper(db).run(categories)
