"""
Summary store / service factory (config-driven).
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings as default_settings
from app.domain.models import AggregationOptions
from app.infrastructure.db.repositories.monthly_summary_repository import MonthlySummaryRepository
from app.infrastructure.sharepoint.client import SharePointListClient
from app.infrastructure.sharepoint.daily_record_source import SharePointDailyRecordSource
from app.services.monthly_summary_service import MonthlySummaryService
from app.services.summary_sync_engine import MonthlySummarySyncEngine, SummaryStoreClient


def build_sharepoint_client(config: Settings) -> SharePointListClient:
    return SharePointListClient(
        site_url=config.SHAREPOINT_SITE_URL,
        access_token=config.SHAREPOINT_ACCESS_TOKEN,
        timeout_seconds=config.SHAREPOINT_TIMEOUT_SECONDS,
    )


def build_summary_store(
    config: Settings,
    session: Optional[AsyncSession] = None,
    sharepoint_client: Optional[SharePointListClient] = None,
) -> SummaryStoreClient:
    backend = (config.SUMMARY_STORE_BACKEND or "").lower()
    if backend == "database":
        if session is None:
            raise ValueError("Database summary store requires a session")
        return MonthlySummaryRepository(session)
    if backend == "sharepoint":
        return sharepoint_client or build_sharepoint_client(config)
    raise ValueError(f"Unknown SUMMARY_STORE_BACKEND: {config.SUMMARY_STORE_BACKEND}")


def build_monthly_summary_service(
    session: Optional[AsyncSession] = None,
    config: Optional[Settings] = None,
) -> MonthlySummaryService:
    config = config or default_settings
    sharepoint_client = build_sharepoint_client(config)

    store = build_summary_store(config, session=session, sharepoint_client=sharepoint_client)
    return MonthlySummaryService(
        source=SharePointDailyRecordSource(sharepoint_client, config.DAILY_RECORDS_LIST),
        sync_engine=MonthlySummarySyncEngine(store, list_name=config.MONTHLY_SUMMARY_LIST),
        options=AggregationOptions(
            use_working_days=config.KPI_USE_WORKING_DAYS,
            rows_per_day=config.KPI_ROWS_PER_DAY,
        ),
    )
