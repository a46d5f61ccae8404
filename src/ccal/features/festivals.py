# src/ccal/features/festivals.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from ccal.core.errors import DateOutOfRangeError
from ccal.core.lunisolar import LunarYMD, gregorian_to_lunar
from ccal.features.config import (
    FESTIVAL_MODERN,
    FESTIVAL_SOLAR_TERM,
    FESTIVAL_TRADITIONAL,
    MODERN_FESTIVALS,
    NEW_YEARS_EVE,
    SOLAR_TERM_FESTIVALS,
    TRADITIONAL_FESTIVALS,
)
from ccal.features.solar_terms import SolarTerm

log = logging.getLogger(__name__)

_TRADITIONAL_BY_MD: Dict[Tuple[int, int], str] = dict(TRADITIONAL_FESTIVALS)
_MODERN_BY_MD: Dict[Tuple[int, int], str] = dict(MODERN_FESTIVALS)


@dataclass(frozen=True)
class Festival:
    name: str
    category: str       # traditional | solar_term | modern
    is_lunar: bool


def is_new_years_eve(d: date) -> bool:
    """
    Last day of the lunar year: the next day is 正月初一.
    Works for both 29- and 30-day 腊月.
    """
    try:
        nxt = gregorian_to_lunar(d + timedelta(days=1))
    except DateOutOfRangeError:
        return False
    return nxt.month == 1 and nxt.day == 1 and not nxt.is_leap


def festivals_for_date(
    d: date,
    *,
    lunar: Optional[LunarYMD] = None,
    solar_term: Optional[SolarTerm] = None,
) -> List[Festival]:
    """
    Festivals on d in display order: traditional, solar-term, modern.

    lunar: d's lunar coordinates (computed when omitted; None outside the table)
    solar_term: the term dated on d, if any
    """
    out: List[Festival] = []

    if lunar is None:
        try:
            lunar = gregorian_to_lunar(d)
        except DateOutOfRangeError:
            log.debug("festivals_for_date: %s outside lunar table, lunar festivals skipped", d)
            lunar = None

    if lunar is not None and not lunar.is_leap:
        name = _TRADITIONAL_BY_MD.get((lunar.month, lunar.day))
        if name is not None:
            out.append(Festival(name=name, category=FESTIVAL_TRADITIONAL, is_lunar=True))
    if lunar is not None and is_new_years_eve(d):
        out.append(Festival(name=NEW_YEARS_EVE, category=FESTIVAL_TRADITIONAL, is_lunar=True))

    if solar_term is not None and solar_term.name in SOLAR_TERM_FESTIVALS:
        out.append(Festival(name=solar_term.name, category=FESTIVAL_SOLAR_TERM, is_lunar=False))

    name = _MODERN_BY_MD.get((d.month, d.day))
    if name is not None:
        out.append(Festival(name=name, category=FESTIVAL_MODERN, is_lunar=False))

    return out
