"""
Monthly KPI API Routes
Aggregate daily records and sync monthly summaries

Month Selection Rules:
- `year_month` is always explicit (YYYY-MM)
- Records posted to /aggregate are counted as-is; the caller pre-filters
  them to the month
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Callable, List, Optional

from app.domain.models import AggregationOptions
from app.domain.schemas.monthly import (
    AggregateRequest,
    AggregationResultOut,
    FilterOut,
    SyncRequest,
    SyncRunOut,
)
from app.domain.services.kpi_aggregator import aggregate_multiple_users
from app.infrastructure.db.database import get_db
from app.infrastructure.sharepoint.filters import (
    build_daily_record_filter,
    build_monthly_record_filter,
)
from app.services.monthly_summary_service import MonthlySummaryService
from app.services.service_factory import build_monthly_summary_service
from app.utils.year_month import parse_year_month

router = APIRouter()


async def get_monthly_summary_service_builder(
    db: AsyncSession = Depends(get_db),
) -> Callable[[], MonthlySummaryService]:
    """The service is built on call, after the request body is validated"""
    return lambda: build_monthly_summary_service(session=db)


@router.post("/aggregate", response_model=List[AggregationResultOut])
async def aggregate(request: AggregateRequest):
    """
    Aggregate posted daily records per user (no persistence)
    """
    options = AggregationOptions(
        use_working_days=request.use_working_days,
        rows_per_day=request.rows_per_day,
    )
    results = aggregate_multiple_users(
        [user.to_domain() for user in request.users],
        request.year_month,
        options,
    )
    return [AggregationResultOut.from_domain(r) for r in results]


@router.post("/sync", response_model=SyncRunOut)
async def sync(
    request: SyncRequest,
    build_service: Callable[[], MonthlySummaryService] = Depends(get_monthly_summary_service_builder),
):
    """
    Load the month's daily records, aggregate and upsert summaries
    """
    try:
        service = build_service()
    except ValueError as exc:
        raise HTTPException(status_code=503, detail=f"Summary sync not configured: {exc}")

    try:
        run = await service.run(request.year_month, user_ids=request.user_ids)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return SyncRunOut(**run.to_dict())


@router.get("/filters", response_model=FilterOut)
async def filters(
    year_month: str,
    user_id: Optional[str] = None,
    user_ids: Optional[str] = Query(default=None, description="Comma separated user codes"),
    min_completion_rate: Optional[float] = None,
):
    """
    Preview the list filters used for a month
    """
    if parse_year_month(year_month) is None:
        raise HTTPException(status_code=400, detail="Invalid month format. Use YYYY-MM")

    ids = [u.strip() for u in user_ids.split(",") if u.strip()] if user_ids else None
    return FilterOut(
        monthly_filter=build_monthly_record_filter(
            year_month=year_month,
            user_id=user_id,
            user_ids=ids,
            min_completion_rate=min_completion_rate,
        ),
        daily_filter=build_daily_record_filter(year_month, user_id=user_id, user_ids=ids),
    )
