"""
OData filter builders for the monthly summary and daily record lists.

Values are interpolated into single-quoted literals without escaping.
Only internal identifiers (user codes, year-months) are expected here.
"""

from typing import List, Optional, Sequence

from app.utils.year_month import month_range


def _format_number(value: float) -> str:
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def _or_group(field: str, values: Sequence[str]) -> str:
    return "(" + " or ".join(f"{field} eq '{v}'" for v in values) + ")"


def build_monthly_record_filter(
    year_month: Optional[str] = None,
    user_id: Optional[str] = None,
    user_ids: Optional[Sequence[str]] = None,
    min_completion_rate: Optional[float] = None,
) -> str:
    """
    Filter for the monthly summary list. Returns "" when nothing is set.
    """
    filters: List[str] = []

    if year_month:
        filters.append(f"YearMonth eq '{year_month}'")

    if user_id:
        filters.append(f"UserCode eq '{user_id}'")

    if user_ids:
        filters.append(_or_group("UserCode", user_ids))

    if min_completion_rate is not None:
        filters.append(f"CompletionRate ge {_format_number(min_completion_rate)}")

    return " and ".join(filters)


def build_daily_record_filter(
    year_month: str,
    user_id: Optional[str] = None,
    user_ids: Optional[Sequence[str]] = None,
) -> str:
    """
    Filter for the daily record list: [month start, next month start).
    """
    span = month_range(year_month)
    filters = [
        f"(RecordDate ge datetime'{span.start_iso}')",
        f"(RecordDate lt datetime'{span.end_iso}')",
    ]

    if user_id:
        filters.append(f"(UserLookup/UserCode eq '{user_id}')")

    if user_ids:
        filters.append(_or_group("UserLookup/UserCode", user_ids))

    return " and ".join(filters)
