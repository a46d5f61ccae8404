# src/ccal/core/timeutil.py
from __future__ import annotations

from datetime import date, datetime, timezone
from functools import lru_cache
from typing import Union
from zoneinfo import ZoneInfo

UTC = timezone.utc

DateLike = Union[date, datetime]


def require_aware(dt: datetime, name: str = "dt") -> datetime:
    """
    Ensure a datetime is timezone-aware and return it converted to UTC.

    Raises
    ------
    ValueError
        If dt is naive.
    """
    if dt.tzinfo is None or dt.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (got naive datetime)")
    return dt.astimezone(UTC)


def require_utc_range(start_utc: datetime, end_utc: datetime) -> tuple[datetime, datetime]:
    """
    Validate [start_utc, end_utc] as aware datetimes and ensure end_utc > start_utc.
    """
    start_utc = require_aware(start_utc, "start_utc")
    end_utc = require_aware(end_utc, "end_utc")
    if end_utc <= start_utc:
        raise ValueError("end_utc must be greater than start_utc")
    return start_utc, end_utc


def calendar_day(x: DateLike) -> date:
    """
    Reduce a date or datetime to its calendar day.

    A datetime keeps its own wall-clock date: no timezone conversion is applied,
    so two datetimes on the same local day always map to the same key.
    """
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    raise TypeError(f"expected date or datetime (got {type(x).__name__})")


@lru_cache(maxsize=8)
def zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def local_date(dt_utc: datetime, tz_name: str) -> date:
    return require_aware(dt_utc, "dt_utc").astimezone(zone(tz_name)).date()

