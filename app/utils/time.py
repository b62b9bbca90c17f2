"""Time utilities (UTC)."""

from datetime import datetime, timezone, tzinfo
from typing import Optional


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime, naive_assumed_tz: tzinfo = timezone.utc) -> datetime:
    """Convert datetime to a UTC timezone-aware value."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=naive_assumed_tz)
    return dt.astimezone(timezone.utc)


def to_utc_iso(dt: datetime) -> str:
    """
    Render an instant as ISO-8601 UTC with a trailing ``Z``.

    Naive values are interpreted as UTC.
    """
    return to_utc(dt).isoformat().replace("+00:00", "Z")


def parse_instant(value: object) -> Optional[datetime]:
    """
    Parse an ISO-8601 instant into an aware UTC datetime.

    Accepts a trailing ``Z``. Returns None for missing or unparsable input.
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return to_utc(datetime.fromisoformat(text))
    except ValueError:
        return None
