"""
MONTHLY SUMMARY SERVICE

Orchestrates one month's run:
load daily records -> aggregate per user -> sync summaries to the store.

NO KPI logic is allowed here.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from app.domain.models import (
    AggregationOptions,
    DailyRecord,
    MonthlyAggregationResult,
)
from app.domain.services.kpi_aggregator import aggregate_multiple_users
from app.infrastructure.sharepoint.daily_record_source import group_by_user
from app.services.summary_sync_engine import MonthlySummarySyncEngine
from app.utils.year_month import parse_year_month

_logger = logging.getLogger(__name__)


class DailyRecordSource(Protocol):
    """Protocol for the daily record loader - ASYNC"""

    async def load_month(
        self,
        year_month: str,
        user_ids: Optional[Sequence[str]] = None,
    ) -> List[DailyRecord]:
        """Records for the month, pre-filtered to it"""
        ...


@dataclass
class MonthlySyncRun:
    """Outcome of one monthly run"""
    year_month: str
    users: int = 0
    processed_records: int = 0
    skipped_records: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    aggregation_errors: Dict[str, List[str]] = field(default_factory=dict)
    sync_errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year_month": self.year_month,
            "users": self.users,
            "processed_records": self.processed_records,
            "skipped_records": self.skipped_records,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "aggregation_errors": self.aggregation_errors,
            "sync_errors": self.sync_errors,
        }


class MonthlySummaryService:
    """Runs the monthly aggregation and synchronization"""

    def __init__(
        self,
        source: DailyRecordSource,
        sync_engine: MonthlySummarySyncEngine,
        options: Optional[AggregationOptions] = None,
    ):
        self.source = source
        self.sync_engine = sync_engine
        self.options = options or AggregationOptions()

    async def build_summaries(
        self,
        year_month: str,
        user_ids: Optional[Sequence[str]] = None,
    ) -> List[MonthlyAggregationResult]:
        records = await self.source.load_month(year_month, user_ids=user_ids)
        return aggregate_multiple_users(group_by_user(records), year_month, self.options)

    async def run(
        self,
        year_month: str,
        user_ids: Optional[Sequence[str]] = None,
    ) -> MonthlySyncRun:
        """
        Aggregate and sync one month.

        Fallback summaries of users whose aggregation failed are reported,
        not persisted.

        Raises:
            ValueError: If year_month is not YYYY-MM
        """
        if parse_year_month(year_month) is None:
            raise ValueError(f"Invalid year_month: {year_month!r}")

        _logger.info(f"📅 Monthly summary run | month={year_month}")

        results = await self.build_summaries(year_month, user_ids=user_ids)
        run = MonthlySyncRun(year_month=year_month, users=len(results))

        to_sync = []
        for result in results:
            run.processed_records += result.processed_records
            run.skipped_records += result.skipped_records
            if result.succeeded:
                to_sync.append(result.summary)
            else:
                run.aggregation_errors[result.summary.user_id] = list(result.errors)

        report = await self.sync_engine.bulk_upsert(to_sync)
        run.created = report.created
        run.updated = report.updated
        run.skipped = report.skipped
        run.sync_errors = {e.summary.user_id: e.error for e in report.errors}

        _logger.info(
            "MONTHLY_RUN_DONE | month=%s | users=%s | created=%s | updated=%s | skipped=%s | errors=%s",
            year_month, run.users, run.created, run.updated, run.skipped,
            len(run.aggregation_errors) + len(run.sync_errors),
        )
        return run
