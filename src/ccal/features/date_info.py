# src/ccal/features/date_info.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Literal, Optional

from ccal.core.config import CalendarConfig
from ccal.core.errors import DateOutOfRangeError, InvalidLunarDateError
from ccal.core.lunisolar import (
    gregorian_to_lunar,
    leap_month_of_year,
    lunar_month_day_count,
    lunar_to_gregorian,
)
from ccal.core.solarterms import TermSource, term_source_for_config
from ccal.core.timeutil import DateLike, calendar_day
from ccal.features.config import lunar_day_name, lunar_month_name, lunar_year_digits
from ccal.features.festivals import Festival, festivals_for_date
from ccal.features.sexagenary import day_ganzhi, month_ganzhi, year_ganzhi, zodiac
from ccal.features.solar_terms import SolarTerm, solar_term_for_date

log = logging.getLogger(__name__)

RepeatType = Literal["year", "month"]
LunarFormat = Literal["short", "full"]


@dataclass(frozen=True)
class LunarDate:
    """
    Lunar date with its display labels.

    month_cn is the bare month name (正月..腊月); the 闰 prefix is added by the
    formatters from is_leap_month.
    """
    year: int
    month: int
    day: int
    is_leap_month: bool
    year_ganzhi: str
    month_ganzhi: str
    day_ganzhi: str
    zodiac: str
    year_cn: str
    month_cn: str
    day_cn: str


@dataclass(frozen=True)
class DateInfo:
    solar: date
    lunar: Optional[LunarDate]
    solar_term: Optional[SolarTerm]
    festivals: tuple[Festival, ...]

    @property
    def is_festival(self) -> bool:
        return len(self.festivals) > 0

    @property
    def is_solar_term(self) -> bool:
        return self.solar_term is not None


@dataclass(frozen=True)
class PickerOption:
    value: int
    label: str
    is_leap: bool = False


class LunarCalendarService:
    """
    Composite per-day calendar info (lunar, solar term, festivals).

    Results are memoized per calendar date. A datetime is reduced to its own
    wall-clock date, so any two instants on the same local day share one entry.
    The cache is shared across threads and guarded by a lock; `computations`
    counts cache misses.
    """

    def __init__(
        self,
        config: Optional[CalendarConfig] = None,
        *,
        source: Optional[TermSource] = None,
    ) -> None:
        self.config = config if config is not None else CalendarConfig()
        self.source = source if source is not None else term_source_for_config(self.config)
        self._cache: Dict[date, DateInfo] = {}
        self._lock = threading.Lock()
        self.computations = 0

    # ------------------------------------------------------------
    # conversions
    # ------------------------------------------------------------

    def solar_to_lunar(self, d: DateLike) -> LunarDate:
        """Raises DateOutOfRangeError outside the lunar table."""
        day = calendar_day(d)
        ymd = gregorian_to_lunar(day)
        return LunarDate(
            year=ymd.year,
            month=ymd.month,
            day=ymd.day,
            is_leap_month=ymd.is_leap,
            year_ganzhi=year_ganzhi(ymd.year),
            month_ganzhi=month_ganzhi(day, source=self.source, config=self.config.solarterm),
            day_ganzhi=day_ganzhi(day),
            zodiac=zodiac(ymd.year),
            year_cn=lunar_year_digits(ymd.year),
            month_cn=lunar_month_name(ymd.month),
            day_cn=lunar_day_name(ymd.day),
        )

    def lunar_to_solar(
        self,
        year: int,
        month: int,
        day: int,
        is_leap: bool = False,
        *,
        clamp: bool = False,
    ) -> date:
        return lunar_to_gregorian(year, month, day, is_leap, clamp=clamp)

    def lunar_month_day_count(self, year: int, month: int, is_leap: bool = False) -> int:
        return lunar_month_day_count(year, month, is_leap)

    def leap_month(self, year: int) -> int:
        try:
            return leap_month_of_year(year)
        except DateOutOfRangeError:
            return 0

    def solar_term_for_date(self, d: DateLike) -> Optional[SolarTerm]:
        return solar_term_for_date(d, source=self.source, config=self.config.solarterm)

    def festivals_for_date(self, d: DateLike) -> List[Festival]:
        day = calendar_day(d)
        return festivals_for_date(day, solar_term=self.solar_term_for_date(day))

    # ------------------------------------------------------------
    # composite (cached)
    # ------------------------------------------------------------

    def _compute(self, day: date) -> DateInfo:
        try:
            lunar: Optional[LunarDate] = self.solar_to_lunar(day)
            ymd = gregorian_to_lunar(day)
        except DateOutOfRangeError as e:
            log.warning("no lunar label for %s: %s", day, e)
            lunar, ymd = None, None

        term = self.solar_term_for_date(day)
        fests = festivals_for_date(day, lunar=ymd, solar_term=term)
        return DateInfo(solar=day, lunar=lunar, solar_term=term, festivals=tuple(fests))

    def get_full_date_info(self, d: DateLike) -> DateInfo:
        day = calendar_day(d)
        with self._lock:
            hit = self._cache.get(day)
        if hit is not None:
            return hit

        info = self._compute(day)
        with self._lock:
            # another thread may have filled it meanwhile; keep the first entry
            cur = self._cache.get(day)
            if cur is not None:
                return cur
            self._cache[day] = info
            self.computations += 1
        log.debug("date info computed: %s", day)
        return info

    def batch_get_date_info(self, dates: Iterable[DateLike]) -> Dict[date, DateInfo]:
        return {calendar_day(d): self.get_full_date_info(d) for d in dates}

    def clear_cache(self) -> None:
        with self._lock:
            n = len(self._cache)
            self._cache.clear()
        log.debug("date info cache cleared (%d entries)", n)

    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    # ------------------------------------------------------------
    # display
    # ------------------------------------------------------------

    @staticmethod
    def format_lunar_date(lunar: LunarDate, style: LunarFormat = "short") -> str:
        """
        short: 初一 shows the month name (闰四月), other days the day name (十五)
        full : 丙午年 正月初一
        """
        month = f"闰{lunar.month_cn}" if lunar.is_leap_month else lunar.month_cn
        if style == "short":
            return month if lunar.day == 1 else lunar.day_cn
        if style == "full":
            return f"{lunar.year_ganzhi}年 {month}{lunar.day_cn}"
        raise ValueError(f"unknown lunar format: {style!r}")

    def display_text(
        self,
        info: DateInfo,
        show_festivals: bool = True,
        show_solar_terms: bool = True,
    ) -> str:
        """One short label for a calendar cell: festival, else term, else lunar day."""
        if show_festivals and info.festivals:
            return info.festivals[0].name
        if show_solar_terms and info.solar_term is not None:
            return info.solar_term.name
        if info.lunar is None:
            return ""
        return self.format_lunar_date(info.lunar, "short")

    # ------------------------------------------------------------
    # lunar repeats
    # ------------------------------------------------------------

    def next_lunar_occurrence(self, base: DateLike, count: int, repeat: RepeatType) -> date:
        """
        Gregorian date of the same lunar month/day `count` lunar years or months
        after base. The day is clamped to the target month's length.

        year : keeps the leap flag; if the target year has no such leap month
               the regular month is used
        month: steps over regular months only
        """
        b = gregorian_to_lunar(calendar_day(base))

        if repeat == "year":
            year, month = b.year + int(count), b.month
            is_leap = b.is_leap and self.leap_month(year) == month
            if b.is_leap and not is_leap:
                log.info("lunar year %d has no leap month %d; using the regular month", year, month)
        elif repeat == "month":
            idx = b.year * 12 + (b.month - 1) + int(count)
            year, month = divmod(idx, 12)
            month += 1
            is_leap = False
        else:
            raise ValueError(f"repeat must be 'year' or 'month' (got {repeat!r})")

        day = min(b.day, lunar_month_day_count(year, month, is_leap))
        return lunar_to_gregorian(year, month, day, is_leap)

    # ------------------------------------------------------------
    # pickers
    # ------------------------------------------------------------

    def lunar_year_list(self, min_year: int, max_year: int) -> List[PickerOption]:
        if min_year > max_year:
            raise InvalidLunarDateError(f"min_year > max_year ({min_year} > {max_year})")
        return [
            PickerOption(value=y, label=f"{y} ({year_ganzhi(y)}年)")
            for y in range(int(min_year), int(max_year) + 1)
        ]

    def lunar_month_list(self, year: int) -> List[PickerOption]:
        lm = self.leap_month(year)
        out: List[PickerOption] = []
        for m in range(1, 13):
            out.append(PickerOption(value=m, label=lunar_month_name(m)))
            if m == lm:
                out.append(PickerOption(value=m, label=lunar_month_name(m, True), is_leap=True))
        return out

    def lunar_day_list(self, year: int, month: int, is_leap: bool = False) -> List[PickerOption]:
        n = lunar_month_day_count(year, month, is_leap)
        return [PickerOption(value=d, label=lunar_day_name(d)) for d in range(1, n + 1)]


# ============================================================
# module-level shortcuts on a process-wide service
# ============================================================

_default_service: Optional[LunarCalendarService] = None
_default_lock = threading.Lock()


def default_service() -> LunarCalendarService:
    """Service built from CalendarConfig.from_env() on first use."""
    global _default_service
    with _default_lock:
        if _default_service is None:
            _default_service = LunarCalendarService(CalendarConfig.from_env())
        return _default_service


def solar_to_lunar(d: DateLike) -> LunarDate:
    return default_service().solar_to_lunar(d)


def lunar_to_solar(year: int, month: int, day: int, is_leap: bool = False, *, clamp: bool = False) -> date:
    return lunar_to_gregorian(year, month, day, is_leap, clamp=clamp)


def get_full_date_info(d: DateLike) -> DateInfo:
    return default_service().get_full_date_info(d)
