# src/ccal/core/solarterms.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Protocol, Tuple

from .astronomy import AstronomyEngine, angdiff180, norm360
from .config import CalendarConfig, SolarTermConfig
from .providers.lunar_provider import LunarPythonTermSource
from .rootfind import solve_bracketed
from .timeutil import UTC, local_date, require_utc_range, zone

log = logging.getLogger(__name__)

TERM_STEP_DEG = 15
TERM_COUNT = 24

# padding a year by a day must stay inside datetime's range
TERM_MIN_YEAR = MINYEAR + 1
TERM_MAX_YEAR = MAXYEAR - 1


@dataclass(frozen=True)
class TermEvent:
    """
    One solar-term instant: the sun reaching deg (0, 15, ..., 345).
    """
    deg: int
    instant_utc: datetime
    local_date: date


class TermSource(Protocol):
    name: str

    def term_instants(self, year: int, config: SolarTermConfig) -> List[Tuple[int, datetime]]:
        """(deg, instant_utc) candidates covering Gregorian year on config.timezone."""
        ...


@dataclass(frozen=True)
class EphemerisTermSource:
    """
    Terms found by scanning the solar longitude of an AstronomyEngine.
    """
    eng: AstronomyEngine

    @property
    def name(self) -> str:
        return self.eng.name

    def term_instants(self, year: int, config: SolarTermConfig) -> List[Tuple[int, datetime]]:
        tz = zone(config.timezone)
        # local year bounds padded by a day on each side
        t0 = datetime(year, 1, 1, tzinfo=tz).astimezone(UTC) - timedelta(days=1)
        t1 = datetime(year + 1, 1, 1, tzinfo=tz).astimezone(UTC) + timedelta(days=1)
        return solar_term_crossings(self.eng, t0, t1, config=config)


# ============================================================
# Source cache
# ============================================================

@lru_cache(maxsize=4)
def term_source_for(
    provider: str = "lunar",
    ephemeris: Optional[str] = None,
    ephemeris_path: Optional[str] = None,
) -> TermSource:
    if provider == "lunar":
        return LunarPythonTermSource()
    if provider == "skyfield":
        # skyfield is only imported when asked for
        from .providers.skyfield_provider import SkyfieldProvider

        p = Path(ephemeris_path).expanduser() if ephemeris_path else None
        eng = AstronomyEngine(provider=SkyfieldProvider(ephemeris=ephemeris, ephemeris_path=p))
        return EphemerisTermSource(eng)
    raise ValueError(f"unknown solar term provider: {provider!r}")


def term_source_for_config(config: CalendarConfig) -> TermSource:
    return term_source_for(config.provider, config.ephemeris, config.ephemeris_path)


# ============================================================
# Crossing search
# ============================================================

def _sector(lon: float) -> int:
    return int(math.floor(norm360(lon) / TERM_STEP_DEG)) % TERM_COUNT


def _grid(start_utc: datetime, end_utc: datetime, step: timedelta) -> List[datetime]:
    """
    Inclusive grid: start, start+step, ..., end.
    """
    ts: List[datetime] = []
    t = start_utc
    while t < end_utc:
        ts.append(t)
        t = t + step
    ts.append(end_utc)
    return ts


def solar_term_crossings(
    eng: AstronomyEngine,
    start_utc: datetime,
    end_utc: datetime,
    *,
    config: SolarTermConfig = SolarTermConfig(),
) -> List[Tuple[int, datetime]]:
    """
    Every 15-degree solar longitude crossing in [start_utc, end_utc).

    The sun advances about 1 deg/day, so a scan step of a day or less sees at
    most one sector change per grid interval; that interval is then refined
    on g(t) = angdiff180(lon(t) - boundary).

    Returns list[(deg, instant_utc)] sorted by time.
    """
    start_utc, end_utc = require_utc_range(start_utc, end_utc)
    if config.scan_step_hours <= 0 or config.scan_step_hours > 72:
        raise ValueError("scan_step_hours must be in 1..72")

    ts = _grid(start_utc, end_utc, timedelta(hours=config.scan_step_hours))
    lons = eng.sun_lon_many(ts)

    out: List[Tuple[int, datetime]] = []
    for i in range(len(ts) - 1):
        s0 = _sector(lons[i])
        s1 = _sector(lons[i + 1])
        if s0 == s1:
            continue

        target = ((s0 + 1) % TERM_COUNT) * TERM_STEP_DEG

        def g(t: datetime, target: float = float(target)) -> float:
            return angdiff180(eng.sun_lon(t) - target)

        r = solve_bracketed(g, ts[i], ts[i + 1], tol_seconds=config.tol_seconds, max_iter=config.max_iter)
        if start_utc <= r.t < end_utc:
            out.append((target, r.t))

    out.sort(key=lambda x: x[1])
    return out


@lru_cache(maxsize=64)
def _terms_for_year_cached(
    source: TermSource,
    year: int,
    config: SolarTermConfig,
) -> Tuple[TermEvent, ...]:
    if not (TERM_MIN_YEAR <= year <= TERM_MAX_YEAR):
        log.debug("solar terms: year=%d outside %d..%d, none reported", year, TERM_MIN_YEAR, TERM_MAX_YEAR)
        return ()

    events: List[TermEvent] = []
    for deg, t in source.term_instants(year, config):
        d = local_date(t, config.timezone)
        if d.year != year:
            continue
        events.append(TermEvent(deg=int(deg), instant_utc=t, local_date=d))

    if len(events) != TERM_COUNT:
        log.warning(
            "solar terms for year=%d: expected %d, found %d (provider=%s)",
            year,
            TERM_COUNT,
            len(events),
            source.name,
        )
    log.debug("solar terms computed: year=%d provider=%s", year, source.name)
    return tuple(events)


def terms_for_year(
    source: TermSource,
    year: int,
    *,
    config: SolarTermConfig = SolarTermConfig(),
) -> Tuple[TermEvent, ...]:
    """
    The 24 solar terms whose local date (config.timezone) falls in Gregorian year.
    Memoized per (source, year, config). Years at the very ends of the
    datetime range have none.
    """
    return _terms_for_year_cached(source, int(year), config)


def term_on_date(
    source: TermSource,
    d: date,
    *,
    config: SolarTermConfig = SolarTermConfig(),
) -> Optional[TermEvent]:
    for ev in terms_for_year(source, d.year, config=config):
        if ev.local_date == d:
            return ev
    return None


def latest_term_on_or_before(
    source: TermSource,
    d: date,
    *,
    degrees: Tuple[int, ...],
    config: SolarTermConfig = SolarTermConfig(),
) -> TermEvent:
    """
    Most recent term among `degrees` whose local date is <= d.
    Looks back into the previous year when needed.
    """
    wanted = set(int(x) % 360 for x in degrees)
    for year in (d.year, d.year - 1):
        hits = [
            ev for ev in terms_for_year(source, year, config=config)
            if ev.deg in wanted and ev.local_date <= d
        ]
        if hits:
            return hits[-1]
    raise RuntimeError(f"no solar term among {sorted(wanted)} found before {d}")
