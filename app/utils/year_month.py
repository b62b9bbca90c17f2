"""
Year-month helpers.

A year-month is the ``YYYY-MM`` string that scopes one monthly summary.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from app.utils.time import to_utc, utc_now

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")


@dataclass(frozen=True)
class MonthRange:
    """Half-open UTC interval covering one month."""
    start: datetime
    end: datetime

    @property
    def start_iso(self) -> str:
        return _to_millis_iso(self.start)

    @property
    def end_iso(self) -> str:
        return _to_millis_iso(self.end)


def _to_millis_iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_year_month(value: object) -> Optional[str]:
    """Return ``value`` if it is a ``YYYY-MM`` string with month 01-12."""
    if not isinstance(value, str):
        return None
    if not _YEAR_MONTH_RE.match(value):
        return None
    return value


def parse_iso_date(value: object) -> Optional[str]:
    """Return ``value`` if it looks like a ``YYYY-MM-DD`` date."""
    if not isinstance(value, str):
        return None
    if not _ISO_DATE_RE.match(value):
        return None
    return value


def split_year_month(year_month: str) -> tuple[int, int]:
    year, month = year_month.split("-")
    return int(year), int(month)


def to_year_month(dt: datetime) -> str:
    """UTC-based ``YYYY-MM`` for an instant. Naive values are taken as UTC."""
    dt = to_utc(dt)
    return f"{dt.year:04d}-{dt.month:02d}"


def current_year_month() -> str:
    return to_year_month(utc_now())


def month_range(year_month: str) -> MonthRange:
    """First instant of the month and first instant of the next month (exclusive)."""
    year, month = split_year_month(year_month)
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return MonthRange(start=start, end=end)


def generate_monthly_summary_id(user_id: str, year_month: str) -> str:
    return f"{user_id}__{year_month}"
