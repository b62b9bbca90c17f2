"""
DOMAIN MODELS - MONTHLY KPI

Pure, immutable data structures for monthly activity aggregation
and summary synchronization.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class DailyRecord:
    """
    One day's activity entry for one user.

    ``completed`` and ``is_empty`` are expected to be mutually exclusive,
    but records violating that are accepted as-is.
    """
    id: str
    user_id: str
    user_name: str
    record_date: str
    completed: bool = False
    has_special_notes: bool = False
    has_incidents: bool = False
    is_empty: bool = False


@dataclass(frozen=True)
class MonthlyKpi:
    """
    Monthly performance snapshot.

    completed_rows + in_progress_rows + empty_rows == planned_rows
    """
    total_days: int
    planned_rows: int
    completed_rows: int
    in_progress_rows: int
    empty_rows: int
    special_notes: int
    incidents: int

    @staticmethod
    def empty() -> "MonthlyKpi":
        return MonthlyKpi(
            total_days=0,
            planned_rows=0,
            completed_rows=0,
            in_progress_rows=0,
            empty_rows=0,
            special_notes=0,
            incidents=0,
        )


@dataclass(frozen=True)
class AggregationOptions:
    """Capacity policy for the monthly aggregation"""
    use_working_days: bool = True
    rows_per_day: int = 19


@dataclass(frozen=True)
class DateRange:
    first: Optional[str] = None
    last: Optional[str] = None


@dataclass(frozen=True)
class MonthlySummary:
    """
    Per-user, per-month summary. Unit of persistence.
    Key = (user_id, year_month)
    """
    user_id: str
    year_month: str
    display_name: str
    last_updated_utc: datetime
    kpi: MonthlyKpi
    completion_rate: float
    first_entry_date: Optional[str] = None
    last_entry_date: Optional[str] = None


@dataclass(frozen=True)
class UserDailyRecords:
    """Input envelope for one user in a batch aggregation"""
    user_id: str
    display_name: str
    daily_records: Tuple[DailyRecord, ...] = ()


@dataclass(frozen=True)
class MonthlyAggregationResult:
    summary: MonthlySummary
    processed_records: int
    skipped_records: int
    errors: Tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return not self.errors


class UpsertAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class UpsertResult:
    action: UpsertAction
    item_id: Optional[int] = None


@dataclass(frozen=True)
class SyncError:
    summary: MonthlySummary
    error: str


@dataclass
class BulkUpsertReport:
    """Counts accumulate only for items that did not raise"""
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[SyncError] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return self.created + self.updated + self.skipped
