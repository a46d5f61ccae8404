from __future__ import annotations

import logging
import time
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ccal.core.config import CalendarConfig
from ccal.core.errors import CalendarError
from ccal.features.date_info import DateInfo, LunarCalendarService
from ccal.recurrence.expand import expand, occurrences_between
from ccal.recurrence.rules import generate_rule, load_rule
from ccal.recurrence.summary import human_readable_summary

router = APIRouter(prefix="/api/v1", tags=["public"])

log = logging.getLogger("ccal.api.public")


# ============================================================
# Response Models
# ============================================================
class LunarDateModel(BaseModel):
    year: int
    month: int
    day: int
    is_leap_month: bool = Field(default=False, description="true for a leap month (闰月)")
    year_ganzhi: str
    month_ganzhi: str
    day_ganzhi: str
    zodiac: str
    year_cn: str
    month_cn: str
    day_cn: str
    label: str = Field(description="full label, e.g. 丙午年 正月初一")


class SolarTermModel(BaseModel):
    name: str
    kind: str
    longitude: int
    instant_utc: datetime


class FestivalModel(BaseModel):
    name: str
    category: str
    is_lunar: bool


class DayResponse(BaseModel):
    date: date
    lunar: Optional[LunarDateModel] = None
    solar_term: Optional[SolarTermModel] = None
    festivals: List[FestivalModel] = Field(default_factory=list)
    display_text: str = ""


class RangeResponse(BaseModel):
    start: date
    end: date
    days: List[DayResponse]


class LunarToSolarResponse(BaseModel):
    year: int
    month: int
    day: int
    is_leap_month: bool
    date: date


class LunarMonthModel(BaseModel):
    value: int
    label: str
    is_leap: bool
    days: int


class LunarMonthsResponse(BaseModel):
    year: int
    leap_month: int
    months: List[LunarMonthModel]


class ExpandRequest(BaseModel):
    anchor: datetime
    rule: str
    max_occurrences: int = Field(default=365, ge=1, le=5000)
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None


class ExpandResponse(BaseModel):
    rule: str = Field(description="canonical rule text")
    occurrences: List[datetime]


class DescribeResponse(BaseModel):
    rule: str
    summary: str


# ============================================================
# dependencies / helpers
# ============================================================
@lru_cache(maxsize=1)
def get_service() -> LunarCalendarService:
    return LunarCalendarService(CalendarConfig.from_env())


def _parse_iso_date(s: str) -> date:
    try:
        return date.fromisoformat(s)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid date format: {s} (expected YYYY-MM-DD)") from e


def _day_response(svc: LunarCalendarService, info: DateInfo) -> DayResponse:
    lunar = None
    if info.lunar is not None:
        l = info.lunar
        lunar = LunarDateModel(
            year=l.year,
            month=l.month,
            day=l.day,
            is_leap_month=l.is_leap_month,
            year_ganzhi=l.year_ganzhi,
            month_ganzhi=l.month_ganzhi,
            day_ganzhi=l.day_ganzhi,
            zodiac=l.zodiac,
            year_cn=l.year_cn,
            month_cn=l.month_cn,
            day_cn=l.day_cn,
            label=svc.format_lunar_date(l, "full"),
        )

    term = None
    if info.solar_term is not None:
        t = info.solar_term
        term = SolarTermModel(name=t.name, kind=t.kind, longitude=t.longitude, instant_utc=t.instant_utc)

    return DayResponse(
        date=info.solar,
        lunar=lunar,
        solar_term=term,
        festivals=[FestivalModel(name=f.name, category=f.category, is_lunar=f.is_lunar) for f in info.festivals],
        display_text=svc.display_text(info),
    )


# ============================================================
# calendar days
# ============================================================
@router.get("/day", response_model=DayResponse)
def get_day(
    date_str: str = Query(..., alias="date", description="YYYY-MM-DD"),
    timing: bool = Query(False, description="log timing"),
    svc: LunarCalendarService = Depends(get_service),
) -> DayResponse:
    d = _parse_iso_date(date_str)

    t0 = time.perf_counter()
    info = svc.get_full_date_info(d)
    t1 = time.perf_counter()
    if timing:
        log.warning("timing /day date=%s total=%.3fs", d, t1 - t0)

    return _day_response(svc, info)


@router.get("/range", response_model=RangeResponse)
def get_range(
    start_str: str = Query(..., alias="start", description="YYYY-MM-DD"),
    end_str: str = Query(..., alias="end", description="YYYY-MM-DD"),
    limit_days: int = Query(370, ge=1, le=2000, description="maximum number of days"),
    timing: bool = Query(False, description="log timing"),
    svc: LunarCalendarService = Depends(get_service),
) -> RangeResponse:
    start = _parse_iso_date(start_str)
    end = _parse_iso_date(end_str)
    if end < start:
        raise HTTPException(status_code=422, detail="end must be >= start")

    days_count = (end - start).days + 1
    if days_count > limit_days:
        raise HTTPException(status_code=422, detail=f"range too large: {days_count} days (limit_days={limit_days})")

    t0 = time.perf_counter()
    infos = svc.batch_get_date_info(start + timedelta(days=i) for i in range(days_count))
    t1 = time.perf_counter()
    if timing:
        log.warning("timing /range start=%s end=%s days=%d total=%.3fs", start, end, days_count, t1 - t0)

    return RangeResponse(
        start=start,
        end=end,
        days=[_day_response(svc, infos[d]) for d in sorted(infos)],
    )


# ============================================================
# lunar
# ============================================================
@router.get("/lunar/to-solar", response_model=LunarToSolarResponse)
def get_lunar_to_solar(
    year: int = Query(...),
    month: int = Query(..., ge=1, le=12),
    day: int = Query(..., ge=1, le=30),
    leap: bool = Query(False, description="leap month (闰月)"),
    clamp: bool = Query(False, description="clamp an overlong day to the month's last day"),
    svc: LunarCalendarService = Depends(get_service),
) -> LunarToSolarResponse:
    try:
        d = svc.lunar_to_solar(year, month, day, leap, clamp=clamp)
    except CalendarError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return LunarToSolarResponse(year=year, month=month, day=day, is_leap_month=leap, date=d)


@router.get("/lunar/months", response_model=LunarMonthsResponse)
def get_lunar_months(
    year: int = Query(...),
    svc: LunarCalendarService = Depends(get_service),
) -> LunarMonthsResponse:
    try:
        leap = svc.leap_month(year)
        months = [
            LunarMonthModel(
                value=o.value,
                label=o.label,
                is_leap=o.is_leap,
                days=svc.lunar_month_day_count(year, o.value, o.is_leap),
            )
            for o in svc.lunar_month_list(year)
        ]
    except CalendarError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return LunarMonthsResponse(year=year, leap_month=leap, months=months)


# ============================================================
# recurrence
# ============================================================
@router.post("/recurrence/expand", response_model=ExpandResponse)
def post_recurrence_expand(req: ExpandRequest) -> ExpandResponse:
    try:
        rule = load_rule(req.rule)
    except CalendarError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    if (req.window_start is None) != (req.window_end is None):
        raise HTTPException(status_code=422, detail="window_start and window_end must be provided together")

    try:
        if req.window_start is not None and req.window_end is not None:
            occ = occurrences_between(req.anchor, rule, req.window_start, req.window_end, req.max_occurrences)
        else:
            occ = expand(req.anchor, rule, req.max_occurrences)
    except TypeError as e:
        # naive/aware mix between anchor and window
        raise HTTPException(status_code=422, detail=str(e)) from e

    return ExpandResponse(rule=generate_rule(rule), occurrences=occ)


@router.get("/recurrence/describe", response_model=DescribeResponse)
def get_recurrence_describe(
    rule: str = Query(..., description="RRULE text"),
    lang: Literal["en", "zh"] = Query("en"),
) -> DescribeResponse:
    try:
        r = load_rule(rule)
    except CalendarError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return DescribeResponse(rule=generate_rule(r), summary=human_readable_summary(r, lang) or "")
