"""
Notification Background Jobs

- purge_read_notifications: daily, deletes read notifications older than
  RETENTION_DAYS.
"""

import logging
from datetime import UTC, datetime, timedelta

from apscheduler.triggers.interval import IntervalTrigger

from edutrack.core.database import get_session_maker
from edutrack.core.scheduler import register_job
from edutrack.modules.notifications import repository

logger = logging.getLogger(__name__)

RETENTION_DAYS = 90
JOB_ID = "notifications_purge_read"


async def purge_read_notifications() -> int:
    """Returns the number of notifications deleted."""
    cutoff = datetime.now(UTC) - timedelta(days=RETENTION_DAYS)

    async with get_session_maker()() as db:
        try:
            deleted = await repository.purge_read_before(db, cutoff)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    logger.info(f"Purged {deleted} read notification(s) older than {cutoff.date().isoformat()}")
    return deleted


def register_notification_jobs() -> None:
    register_job(
        job_id=JOB_ID,
        func=purge_read_notifications,
        trigger=IntervalTrigger(days=1),
    )
