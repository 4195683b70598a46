"""
In-process scheduler for the daily accrual batch.

Started from the application lifespan when ACCRUAL_SCHEDULER_ENABLED is
set. The batch runs once a day at ACCRUAL_CRON_HOUR:ACCRUAL_CRON_MINUTE UTC
for the current UTC date. Missed runs are coalesced into one and a run is
never started while the previous one is still going. Run the batch from
cron with `python -m yieldwallet.jobs.run_accrual` instead if the API runs
more than one process.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from yieldwallet.config import settings
from yieldwallet.services.accrual_service import run_accrual_batch

logger = logging.getLogger(__name__)

ACCRUAL_JOB_ID = "daily_accrual"

_scheduler: AsyncIOScheduler | None = None


async def _accrual_job():
    report = await run_accrual_batch()
    if report.failures:
        logger.warning(
            f"Scheduled accrual for {report.run_date} left "
            f"{len(report.failures)} positions unpaid; they are retried on the next run"
        )


def start_scheduler() -> AsyncIOScheduler:
    """Start the scheduler on the running event loop (idempotent)."""
    global _scheduler
    if _scheduler is not None:
        return _scheduler

    _scheduler = AsyncIOScheduler(
        timezone="UTC",
        job_defaults={"coalesce": True, "max_instances": 1},
    )
    _scheduler.add_job(
        _accrual_job,
        trigger=CronTrigger(
            hour=settings.ACCRUAL_CRON_HOUR,
            minute=settings.ACCRUAL_CRON_MINUTE,
            timezone="UTC",
        ),
        id=ACCRUAL_JOB_ID,
        name="Daily profit accrual",
        replace_existing=True,
    )
    _scheduler.start()
    logger.info(
        f"Accrual scheduler started: daily at "
        f"{settings.ACCRUAL_CRON_HOUR:02d}:{settings.ACCRUAL_CRON_MINUTE:02d} UTC"
    )
    return _scheduler


def stop_scheduler():
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Accrual scheduler stopped")
