"""
Domain Models Package
Export all domain entities
"""

from .monthly import (
    # Enums
    UpsertAction,

    # Entities
    AggregationOptions,
    BulkUpsertReport,
    DailyRecord,
    DateRange,
    MonthlyAggregationResult,
    MonthlyKpi,
    MonthlySummary,
    SyncError,
    UpsertResult,
    UserDailyRecords,
)

__all__ = [
    # Enums
    "UpsertAction",

    # Entities
    "AggregationOptions",
    "BulkUpsertReport",
    "DailyRecord",
    "DateRange",
    "MonthlyAggregationResult",
    "MonthlyKpi",
    "MonthlySummary",
    "SyncError",
    "UpsertResult",
    "UserDailyRecords",
]
