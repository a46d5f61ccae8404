# src/ccal/features/sexagenary.py
"""
干支 labels.

- year : by lunar year (changes at 春节), (lunar_year - 4) % 60
- month: by jie (节) boundaries; the jie day itself belongs to the new month,
         the month stem follows the 立春-based year
- day  : continuous 60-day cycle, 1949-10-01 = 甲子
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from ccal.core.config import SolarTermConfig
from ccal.core.solarterms import TermSource, latest_term_on_or_before, term_source_for, terms_for_year
from ccal.features.config import (
    JIE_DEGS_FROM_LICHUN,
    LICHUN_DEG,
    ZODIAC_ANIMALS,
    ganzhi_from_index,
    ganzhi_from_stem_branch,
)

# date(1949, 10, 1).toordinal() + 14 is a multiple of 60
_DAY_CYCLE_OFFSET = 14


def year_ganzhi(lunar_year: int) -> str:
    return ganzhi_from_index(int(lunar_year) - 4)


def zodiac(lunar_year: int) -> str:
    return ZODIAC_ANIMALS[(int(lunar_year) - 4) % 12]


def day_ganzhi_index(d: date) -> int:
    return (d.toordinal() + _DAY_CYCLE_OFFSET) % 60


def day_ganzhi(d: date) -> str:
    return ganzhi_from_index(day_ganzhi_index(d))


def lichun_year(
    d: date,
    *,
    source: TermSource,
    config: SolarTermConfig = SolarTermConfig(),
) -> int:
    """Gregorian year of the 立春 that most recently started on or before d."""
    for ev in terms_for_year(source, d.year, config=config):
        if ev.deg == LICHUN_DEG:
            return d.year if d >= ev.local_date else d.year - 1
    # 立春 is always in early February; missing means the term source failed
    raise RuntimeError(f"立春 not found in {d.year}")


def month_ganzhi(
    d: date,
    *,
    source: Optional[TermSource] = None,
    config: SolarTermConfig = SolarTermConfig(),
) -> str:
    """
    k = position of the latest jie counted from 立春 (立春=0 .. 小寒=11)
    branch = 寅 + k
    stem   = (year_stem % 5) * 2 + 2 + k   (五虎遁)
    """
    source = source if source is not None else term_source_for("lunar")
    jie = latest_term_on_or_before(source, d, degrees=JIE_DEGS_FROM_LICHUN, config=config)
    k = JIE_DEGS_FROM_LICHUN.index(jie.deg)

    y_stem = (lichun_year(d, source=source, config=config) - 4) % 10
    return ganzhi_from_stem_branch((y_stem % 5) * 2 + 2 + k, 2 + k)
