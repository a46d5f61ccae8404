# src/ccal/core/lunisolar.py
"""
Chinese lunar calendar on top of lunar_python.

lunar_python marks a leap month with a negative month number; here the leap
flag is explicit (LunarYMD.is_leap). The supported window is lunar years
1900..2100, i.e. 1900-01-31 up to the last day of lunar 2100.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from typing import Tuple

from lunar_python import Lunar, LunarMonth, LunarYear, Solar

from .config import env_truthy
from .errors import DateOutOfRangeError, InvalidLunarDateError

log = logging.getLogger(__name__)

MIN_LUNAR_YEAR = 1900
MAX_LUNAR_YEAR = 2100


def _debug_enabled() -> bool:
    return env_truthy("CCAL_DEBUG_LUNISOLAR")


@dataclass(frozen=True, order=True)
class LunarYMD:
    """
    Bare lunar coordinates (no labels). Ordered by calendar position:
    a leap month sorts right after its regular month.
    """
    year: int
    month: int
    is_leap: bool
    day: int

    def __post_init__(self) -> None:
        if not (1 <= self.month <= 12):
            raise InvalidLunarDateError(f"lunar month must be 1..12 (got {self.month})")
        if not (1 <= self.day <= 30):
            raise InvalidLunarDateError(f"lunar day must be 1..30 (got {self.day})")


def _solar_date(s) -> date:
    return date(s.getYear(), s.getMonth(), s.getDay())


# ============================================================
# range
# ============================================================

def _check_year(year: int) -> None:
    if not (MIN_LUNAR_YEAR <= year <= MAX_LUNAR_YEAR):
        raise DateOutOfRangeError(
            f"lunar year {year} is outside the supported range {MIN_LUNAR_YEAR}..{MAX_LUNAR_YEAR}"
        )


@lru_cache(maxsize=1)
def supported_range() -> Tuple[date, date]:
    lo = _solar_date(Lunar.fromYmd(MIN_LUNAR_YEAR, 1, 1).getSolar())
    hi = _solar_date(Lunar.fromYmd(MAX_LUNAR_YEAR + 1, 1, 1).getSolar()) - timedelta(days=1)
    return lo, hi


# ============================================================
# month lengths
# ============================================================

@lru_cache(maxsize=512)
def leap_month_of_year(year: int) -> int:
    """Leap month number (1..12) of lunar year, 0 when there is none."""
    _check_year(year)
    return int(LunarYear.fromYear(year).getLeapMonth())


@lru_cache(maxsize=512)
def months_of_year(year: int) -> Tuple[Tuple[int, bool, int], ...]:
    """((month, is_leap, days), ...) in calendar order."""
    lm = leap_month_of_year(year)
    out = []
    for m in range(1, 13):
        out.append((m, False, int(LunarMonth.fromYm(year, m).getDayCount())))
        if m == lm:
            out.append((m, True, int(LunarMonth.fromYm(year, -m).getDayCount())))
    return tuple(out)


def lunar_month_day_count(year: int, month: int, is_leap: bool = False) -> int:
    """
    29 or 30. Combinations outside the calendar (out-of-range year, leap
    flag on a month that has no leap) answer 30.
    """
    if not (MIN_LUNAR_YEAR <= year <= MAX_LUNAR_YEAR) or not (1 <= month <= 12):
        return 30
    for m, leap, days in months_of_year(year):
        if m == month and leap == bool(is_leap):
            return days
    return 30


# ============================================================
# conversion
# ============================================================

@lru_cache(maxsize=4096)
def gregorian_to_lunar(d: date) -> LunarYMD:
    """
    Gregorian date -> lunar (year, month, is_leap, day).

    Raises DateOutOfRangeError outside supported_range().
    """
    if not isinstance(d, date):
        raise TypeError(f"expected date (got {type(d).__name__})")

    lo, hi = supported_range()
    if d < lo or d > hi:
        raise DateOutOfRangeError(f"{d} is outside {lo}..{hi}")

    lunar = Solar.fromYmd(d.year, d.month, d.day).getLunar()
    m = int(lunar.getMonth())
    out = LunarYMD(year=int(lunar.getYear()), month=abs(m), is_leap=m < 0, day=int(lunar.getDay()))
    if _debug_enabled():
        log.debug("gregorian_to_lunar: %s -> %s", d, out)
    return out


def lunar_to_gregorian(
    year: int,
    month: int,
    day: int,
    is_leap: bool = False,
    *,
    clamp: bool = False,
) -> date:
    """
    Lunar date -> Gregorian date.

    Raises InvalidLunarDateError when the leap month does not exist in that
    year, or the day exceeds the month length. With clamp=True an overlong
    day is clamped to the month's last day instead (the leap check stays).
    """
    if not (1 <= month <= 12):
        raise InvalidLunarDateError(f"lunar month must be 1..12 (got {month})")
    if day < 1:
        raise InvalidLunarDateError(f"lunar day must be >= 1 (got {day})")
    _check_year(year)

    lm = leap_month_of_year(year)
    if is_leap and lm != month:
        raise InvalidLunarDateError(f"lunar year {year} has no leap month {month} (leap={lm})")

    days = lunar_month_day_count(year, month, is_leap)
    if day > days:
        if not clamp:
            label = f"{'leap ' if is_leap else ''}{month}"
            raise InvalidLunarDateError(f"lunar {year}/{label} has {days} days (got day {day})")
        log.debug("clamping lunar day %d to %d (%d/%d leap=%s)", day, days, year, month, is_leap)
        day = days

    return _solar_date(Lunar.fromYmd(year, -month if is_leap else month, day).getSolar())
