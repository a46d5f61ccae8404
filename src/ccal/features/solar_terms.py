# src/ccal/features/solar_terms.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from ccal.core.config import SolarTermConfig
from ccal.core.solarterms import TermEvent, TermSource, term_on_date, term_source_for, terms_for_year
from ccal.core.timeutil import calendar_day, DateLike
from ccal.features.config import term_info_from_deg


@dataclass(frozen=True)
class SolarTerm:
    """
    A solar term as shown on a calendar day.
    """
    name: str
    date: date
    kind: str             # "jie" or "qi"
    longitude: int        # 0,15,...,345
    instant_utc: datetime


def _to_solar_term(ev: TermEvent) -> SolarTerm:
    info = term_info_from_deg(ev.deg)
    return SolarTerm(
        name=info.name,
        date=ev.local_date,
        kind=info.kind,
        longitude=info.deg,
        instant_utc=ev.instant_utc,
    )


def _default_source(source: Optional[TermSource]) -> TermSource:
    return source if source is not None else term_source_for("lunar")


def solar_term_for_date(
    d: DateLike,
    *,
    source: Optional[TermSource] = None,
    config: SolarTermConfig = SolarTermConfig(),
) -> Optional[SolarTerm]:
    """
    The solar term whose instant falls on calendar day d (config.timezone),
    or None. At most one term can fall on a day.
    """
    ev = term_on_date(_default_source(source), calendar_day(d), config=config)
    return _to_solar_term(ev) if ev is not None else None


def solar_terms_for_year(
    year: int,
    *,
    source: Optional[TermSource] = None,
    config: SolarTermConfig = SolarTermConfig(),
) -> List[SolarTerm]:
    return [_to_solar_term(ev) for ev in terms_for_year(_default_source(source), year, config=config)]


def solar_terms_for_month(
    year: int,
    month: int,
    *,
    source: Optional[TermSource] = None,
    config: SolarTermConfig = SolarTermConfig(),
) -> List[SolarTerm]:
    """
    Terms dated in Gregorian (year, month); normally two.
    """
    if not (1 <= int(month) <= 12):
        raise ValueError(f"month must be 1..12 (got {month})")
    return [
        t for t in solar_terms_for_year(year, source=source, config=config)
        if t.date.month == int(month)
    ]
