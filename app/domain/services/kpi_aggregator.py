"""
KPI AGGREGATOR

Reduces a user's daily activity records into a monthly KPI snapshot.

RESPONSIBILITIES:
- Count completed / in-progress / noted / incident records
- Derive planned capacity from the month calendar
- Derive completion rate and first/last entry dates
- Build per-user summaries and fan out across users

RULES:
❌ No date filtering: every record passed in is counted.
   Callers pre-filter records to the target month.
❌ No I/O
✅ empty_rows is capacity minus activity, floored at 0
✅ One user's failure never aborts a batch
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence

from app.domain.models import (
    AggregationOptions,
    DailyRecord,
    DateRange,
    MonthlyAggregationResult,
    MonthlyKpi,
    MonthlySummary,
    UserDailyRecords,
)
from app.domain.services.month_calendar import total_calendar_days, working_days
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS = AggregationOptions()

# Minimum completion-rate delta that counts as a change
COMPLETION_RATE_TOLERANCE = 0.01

_KPI_COMPARED_FIELDS = (
    "completed_rows",
    "in_progress_rows",
    "empty_rows",
    "special_notes",
    "incidents",
)


def aggregate_monthly_kpi(
    records: Iterable[DailyRecord],
    year_month: str,
    options: Optional[AggregationOptions] = None,
) -> MonthlyKpi:
    """
    Aggregate daily records into a monthly KPI.

    Args:
        records: Daily records, already filtered to ``year_month`` by the caller
        year_month: ``YYYY-MM``
        options: Capacity policy (working days vs calendar days, rows per day)

    Returns:
        MonthlyKpi
    """
    options = options or DEFAULT_OPTIONS

    if options.use_working_days:
        total_days = working_days(year_month)
    else:
        total_days = total_calendar_days(year_month)
    planned_rows = total_days * options.rows_per_day

    completed_rows = 0
    in_progress_rows = 0
    special_notes = 0
    incidents = 0
    for record in records:
        if record.completed:
            completed_rows += 1
        elif not record.is_empty:
            in_progress_rows += 1
        if record.has_special_notes:
            special_notes += 1
        if record.has_incidents:
            incidents += 1

    empty_rows = max(0, planned_rows - completed_rows - in_progress_rows)

    return MonthlyKpi(
        total_days=total_days,
        planned_rows=planned_rows,
        completed_rows=completed_rows,
        in_progress_rows=in_progress_rows,
        empty_rows=empty_rows,
        special_notes=special_notes,
        incidents=incidents,
    )


def calculate_completion_rate(kpi: MonthlyKpi) -> float:
    """Completed share of planned rows, in percent, rounded half-up to 2 places."""
    if kpi.planned_rows == 0:
        return 0.0

    rate = Decimal(str(kpi.completed_rows / kpi.planned_rows * 100))
    return float(rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def extract_record_date_range(records: Iterable[DailyRecord]) -> DateRange:
    """
    First and last record dates among non-empty records.

    Dates are compared as ``YYYY-MM-DD`` strings.
    """
    dates = sorted(r.record_date for r in records if not r.is_empty)
    if not dates:
        return DateRange()
    return DateRange(first=dates[0], last=dates[-1])


def build_monthly_summary(
    user_id: str,
    display_name: str,
    records: Sequence[DailyRecord],
    year_month: str,
    options: Optional[AggregationOptions] = None,
) -> MonthlySummary:
    """
    Build a user's monthly summary, stamped with the current UTC instant.
    """
    kpi = aggregate_monthly_kpi(records, year_month, options)
    date_range = extract_record_date_range(records)

    return MonthlySummary(
        user_id=user_id,
        year_month=year_month,
        display_name=display_name,
        last_updated_utc=utc_now(),
        kpi=kpi,
        completion_rate=calculate_completion_rate(kpi),
        first_entry_date=date_range.first,
        last_entry_date=date_range.last,
    )


def _fallback_summary(user_id: str, display_name: str, year_month: str) -> MonthlySummary:
    return MonthlySummary(
        user_id=user_id,
        year_month=year_month,
        display_name=display_name,
        last_updated_utc=utc_now(),
        kpi=MonthlyKpi.empty(),
        completion_rate=0.0,
    )


def aggregate_multiple_users(
    user_records: Iterable[UserDailyRecords],
    year_month: str,
    options: Optional[AggregationOptions] = None,
) -> List[MonthlyAggregationResult]:
    """
    Build summaries for many users with per-user failure isolation.

    A user whose aggregation raises gets a zeroed summary, zero processed
    records, all records counted as skipped and the error message recorded.
    """
    results: List[MonthlyAggregationResult] = []

    for entry in user_records:
        record_count = len(entry.daily_records or ())
        try:
            summary = build_monthly_summary(
                entry.user_id,
                entry.display_name,
                entry.daily_records,
                year_month,
                options,
            )
            results.append(
                MonthlyAggregationResult(
                    summary=summary,
                    processed_records=record_count,
                    skipped_records=0,
                )
            )
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            logger.warning(
                "MONTHLY_AGGREGATION_FAILED | user=%s | month=%s | error=%s",
                entry.user_id, year_month, message,
            )
            results.append(
                MonthlyAggregationResult(
                    summary=_fallback_summary(entry.user_id, entry.display_name, year_month),
                    processed_records=0,
                    skipped_records=record_count,
                    errors=(message,),
                )
            )

    return results


def should_update_summary(existing: MonthlySummary, updated: MonthlySummary) -> bool:
    """
    Whether a persisted summary is stale compared to a fresh one.

    Only KPI counts and the completion rate are compared. The rate check is
    a strict float comparison, so a delta of exactly 0.01 may land on either
    side depending on binary representation.
    """
    for name in _KPI_COMPARED_FIELDS:
        if getattr(existing.kpi, name) != getattr(updated.kpi, name):
            return True

    return abs(existing.completion_rate - updated.completion_rate) > COMPLETION_RATE_TOLERANCE
