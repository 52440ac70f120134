from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


STATS_PERIODS = ("all", "today", "week", "month")


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def period_start(period: str, *, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Lower bound (inclusive) of a reporting window.

    - "all"   -> None (no bound)
    - "today" -> midnight UTC of the current day
    - "week"  -> now minus 7 days
    - "month" -> now minus 30 days

    Raises ValueError for anything else.
    """
    now = now or utcnow()
    if period == "all":
        return None
    if period == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now - timedelta(days=30)
    raise ValueError(f"Unknown period '{period}'. Must be one of: {', '.join(STATS_PERIODS)}")
