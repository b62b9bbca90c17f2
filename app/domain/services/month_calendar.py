"""
Month calendar arithmetic.

Working days are Monday-Friday only. No holiday calendar is consulted.
Inputs are well-formed ``YYYY-MM`` strings; callers validate upstream.
"""

import calendar
from datetime import date

from app.utils.year_month import split_year_month


def total_calendar_days(year_month: str) -> int:
    """Number of days in the month (leap-year aware)."""
    year, month = split_year_month(year_month)
    return calendar.monthrange(year, month)[1]


def working_days(year_month: str) -> int:
    """Number of days in the month that fall on Monday-Friday."""
    year, month = split_year_month(year_month)
    last_day = calendar.monthrange(year, month)[1]

    count = 0
    for day in range(1, last_day + 1):
        # Saturday=5, Sunday=6
        if date(year, month, day).weekday() < 5:
            count += 1
    return count
