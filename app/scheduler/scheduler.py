"""
SCHEDULER BOOTSTRAP

Initializes and manages the APScheduler instance.
Scheduler is orchestration-only and contains no business logic.
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

import pytz

from app.config import settings
from app.scheduler.jobs import run_monthly_summary_sync_job

_logger = logging.getLogger(__name__)

_SCHEDULER: AsyncIOScheduler | None = None


def start_scheduler() -> AsyncIOScheduler:
    """
    Start the scheduler on the running event loop and register all jobs.
    """
    global _SCHEDULER

    if _SCHEDULER is not None:
        return _SCHEDULER

    timezone = pytz.timezone(settings.TIMEZONE)
    scheduler = AsyncIOScheduler(timezone=timezone)

    # ------------------------------------------------------------
    # MONTHLY SUMMARY SYNC JOB
    # Daily, current month
    # ------------------------------------------------------------
    scheduler.add_job(
        run_monthly_summary_sync_job,
        trigger=CronTrigger(
            hour=settings.MONTHLY_SYNC_CRON_HOUR,
            minute=settings.MONTHLY_SYNC_CRON_MINUTE,
            timezone=timezone,
        ),
        id="monthly_summary_sync_job",
        replace_existing=True,
        max_instances=1,
    )

    scheduler.start()
    _SCHEDULER = scheduler

    _logger.info("✅ Scheduler started with all jobs registered")
    return scheduler


def shutdown_scheduler():
    """
    Shutdown the scheduler safely.
    """
    global _SCHEDULER

    if _SCHEDULER:
        _SCHEDULER.shutdown(wait=False)
        _SCHEDULER = None
        _logger.info("🛑 Scheduler shut down")
