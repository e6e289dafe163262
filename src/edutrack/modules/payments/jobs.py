"""
Payment Background Jobs

- settle_school_transfers: every 15 minutes, sends each completed payment's
  school amount to the school's transfer recipient.
"""

import logging

from apscheduler.triggers.interval import IntervalTrigger

from edutrack.core.database import get_session_maker
from edutrack.core.scheduler import register_job
from edutrack.modules.payments import service

logger = logging.getLogger(__name__)

JOB_ID = "payments_settle_school_transfers"
INTERVAL_MINUTES = 15


async def settle_school_transfers() -> int:
    """Returns the number of transfers initiated."""
    async with get_session_maker()() as db:
        try:
            initiated = await service.settle_school_transfers(db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    if initiated:
        logger.info(f"Settlement run initiated {initiated} transfer(s)")
    return initiated


def register_payment_jobs() -> None:
    register_job(
        job_id=JOB_ID,
        func=settle_school_transfers,
        trigger=IntervalTrigger(minutes=INTERVAL_MINUTES),
    )
