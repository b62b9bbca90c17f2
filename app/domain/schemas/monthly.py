from dataclasses import asdict

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Dict, List, Optional

from app.domain.models import (
    DailyRecord,
    MonthlyAggregationResult,
    UserDailyRecords,
)
from app.utils.year_month import parse_year_month


class DailyRecordIn(BaseModel):
    id: str
    user_id: str
    user_name: str = ""
    record_date: str
    completed: bool = False
    has_special_notes: bool = False
    has_incidents: bool = False
    is_empty: bool = False

    def to_domain(self) -> DailyRecord:
        return DailyRecord(**self.model_dump())


class UserRecordsIn(BaseModel):
    user_id: str
    display_name: str
    daily_records: List[DailyRecordIn] = Field(default_factory=list)

    def to_domain(self) -> UserDailyRecords:
        return UserDailyRecords(
            user_id=self.user_id,
            display_name=self.display_name,
            daily_records=tuple(r.to_domain() for r in self.daily_records),
        )


class AggregateRequest(BaseModel):
    year_month: str
    use_working_days: bool = True
    rows_per_day: int = Field(default=19, ge=0)
    users: List[UserRecordsIn] = Field(default_factory=list)

    @field_validator("year_month")
    @classmethod
    def check_year_month(cls, value: str) -> str:
        if parse_year_month(value) is None:
            raise ValueError("year_month must be YYYY-MM")
        return value


class MonthlyKpiOut(BaseModel):
    total_days: int
    planned_rows: int
    completed_rows: int
    in_progress_rows: int
    empty_rows: int
    special_notes: int
    incidents: int


class MonthlySummaryOut(BaseModel):
    user_id: str
    year_month: str
    display_name: str
    last_updated_utc: datetime
    kpi: MonthlyKpiOut
    completion_rate: float
    first_entry_date: Optional[str] = None
    last_entry_date: Optional[str] = None


class AggregationResultOut(BaseModel):
    summary: MonthlySummaryOut
    processed_records: int
    skipped_records: int
    errors: List[str]

    @staticmethod
    def from_domain(result: MonthlyAggregationResult) -> "AggregationResultOut":
        summary = result.summary
        return AggregationResultOut(
            summary=MonthlySummaryOut(
                user_id=summary.user_id,
                year_month=summary.year_month,
                display_name=summary.display_name,
                last_updated_utc=summary.last_updated_utc,
                kpi=MonthlyKpiOut(**asdict(summary.kpi)),
                completion_rate=summary.completion_rate,
                first_entry_date=summary.first_entry_date,
                last_entry_date=summary.last_entry_date,
            ),
            processed_records=result.processed_records,
            skipped_records=result.skipped_records,
            errors=list(result.errors),
        )


class SyncRequest(BaseModel):
    year_month: str
    user_ids: Optional[List[str]] = None

    @field_validator("year_month")
    @classmethod
    def check_year_month(cls, value: str) -> str:
        if parse_year_month(value) is None:
            raise ValueError("year_month must be YYYY-MM")
        return value


class SyncRunOut(BaseModel):
    year_month: str
    users: int
    processed_records: int
    skipped_records: int
    created: int
    updated: int
    skipped: int
    aggregation_errors: Dict[str, List[str]]
    sync_errors: Dict[str, str]


class FilterOut(BaseModel):
    monthly_filter: str
    daily_filter: str
