"""
SCHEDULER JOB DEFINITIONS

Jobs are thin wrappers that:
- Log execution
- Obtain DB session
- Call existing services
- Enforce idempotency by service design

NO business logic is allowed here.
"""

import logging
from typing import Optional

from app.infrastructure.db.database import async_session_factory
from app.services.service_factory import build_monthly_summary_service
from app.utils.year_month import current_year_month

_logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# MONTHLY SUMMARY SYNC JOB
# -------------------------------------------------------------------

async def run_monthly_summary_sync_job(year_month: Optional[str] = None):
    """
    Aggregate the month's daily records and upsert the summaries.
    Re-running is safe: unchanged timestamps are skipped by the sync engine.
    """
    year_month = year_month or current_year_month()
    _logger.info(f"📅 Running monthly summary sync job | month={year_month}")

    async with async_session_factory() as db:
        try:
            service = build_monthly_summary_service(session=db)
            run = await service.run(year_month)
            await db.commit()
            _logger.info(
                "Monthly summary sync finished | created=%s | updated=%s | skipped=%s",
                run.created, run.updated, run.skipped,
            )
        except Exception as exc:
            await db.rollback()
            _logger.warning(f"Monthly summary sync job skipped safely: {exc}")
