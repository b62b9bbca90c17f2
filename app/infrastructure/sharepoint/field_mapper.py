"""
Monthly summary <-> SharePoint list item mapping.

The list schema is flat; KPI counts carry a ``KPI_`` prefix and every item
holds an ``IdempotencyKey`` of the form ``{user_id}#{year_month}``.
"""

from typing import Any, Dict, Optional, TypedDict

from app.domain.models import MonthlyKpi, MonthlySummary
from app.utils.time import parse_instant, to_utc_iso
from app.utils.year_month import parse_iso_date, parse_year_month


class SharePointMonthlyItem(TypedDict, total=False):
    Id: int
    UserCode: str
    YearMonth: str
    DisplayName: str
    LastUpdated: str
    KPI_TotalDays: int
    KPI_PlannedRows: int
    KPI_CompletedRows: int
    KPI_InProgressRows: int
    KPI_EmptyRows: int
    KPI_SpecialNotes: int
    KPI_Incidents: int
    CompletionRate: float
    FirstEntryDate: Optional[str]
    LastEntryDate: Optional[str]
    IdempotencyKey: str


def generate_idempotency_key(user_id: str, year_month: str) -> str:
    return f"{user_id}#{year_month}"


def to_external_fields(summary: MonthlySummary) -> SharePointMonthlyItem:
    kpi = summary.kpi
    return SharePointMonthlyItem(
        UserCode=summary.user_id,
        YearMonth=summary.year_month,
        DisplayName=summary.display_name,
        LastUpdated=to_utc_iso(summary.last_updated_utc),
        KPI_TotalDays=kpi.total_days,
        KPI_PlannedRows=kpi.planned_rows,
        KPI_CompletedRows=kpi.completed_rows,
        KPI_InProgressRows=kpi.in_progress_rows,
        KPI_EmptyRows=kpi.empty_rows,
        KPI_SpecialNotes=kpi.special_notes,
        KPI_Incidents=kpi.incidents,
        CompletionRate=summary.completion_rate,
        FirstEntryDate=summary.first_entry_date or None,
        LastEntryDate=summary.last_entry_date or None,
        IdempotencyKey=generate_idempotency_key(summary.user_id, summary.year_month),
    )


def _count(fields: Dict[str, Any], name: str) -> int:
    return int(fields.get(name) or 0)


def from_external_fields(fields: Dict[str, Any]) -> MonthlySummary:
    """
    Convert a list item back into a MonthlySummary.

    Raises:
        ValueError: If YearMonth or LastUpdated is malformed
    """
    year_month = parse_year_month(fields.get("YearMonth"))
    if year_month is None:
        raise ValueError(f"Invalid YearMonth format: {fields.get('YearMonth')}")

    last_updated = parse_instant(fields.get("LastUpdated"))
    if last_updated is None:
        raise ValueError(f"Invalid LastUpdated value: {fields.get('LastUpdated')}")

    first_entry = fields.get("FirstEntryDate")
    last_entry = fields.get("LastEntryDate")

    return MonthlySummary(
        user_id=fields.get("UserCode") or "",
        year_month=year_month,
        display_name=fields.get("DisplayName") or "",
        last_updated_utc=last_updated,
        kpi=MonthlyKpi(
            total_days=_count(fields, "KPI_TotalDays"),
            planned_rows=_count(fields, "KPI_PlannedRows"),
            completed_rows=_count(fields, "KPI_CompletedRows"),
            in_progress_rows=_count(fields, "KPI_InProgressRows"),
            empty_rows=_count(fields, "KPI_EmptyRows"),
            special_notes=_count(fields, "KPI_SpecialNotes"),
            incidents=_count(fields, "KPI_Incidents"),
        ),
        completion_rate=float(fields.get("CompletionRate") or 0),
        first_entry_date=parse_iso_date(first_entry) if first_entry else None,
        last_entry_date=parse_iso_date(last_entry) if last_entry else None,
    )
