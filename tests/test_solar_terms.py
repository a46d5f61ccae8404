from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from ccal.core.astronomy import AstronomyEngine
from ccal.core.config import SolarTermConfig
from ccal.core.providers.lunar_provider import LunarPythonTermSource
from ccal.core.solarterms import solar_term_crossings, terms_for_year
from ccal.features.config import term_info_from_deg, term_kind_from_deg, term_name_from_deg
from ccal.features.festivals import festivals_for_date
from ccal.features.sexagenary import month_ganzhi
from ccal.features.solar_terms import solar_term_for_date, solar_terms_for_month, solar_terms_for_year

UTC = timezone.utc


class _CircularSun:
    """Sun moving uniformly: 0 deg at 2024-03-20 03:06 UTC, one turn per 365.2422 days."""

    name = "circular"
    epoch = datetime(2024, 3, 20, 3, 6, tzinfo=UTC)

    def sun_ecliptic_longitude_deg(self, dt_utc: datetime) -> float:
        days = (dt_utc - self.epoch).total_seconds() / 86400.0
        return (days * 360.0 / 365.2422) % 360.0


@pytest.mark.parametrize(
    "d,name,kind,deg",
    [
        (date(2024, 2, 4), "立春", "jie", 315),
        (date(2026, 2, 4), "立春", "jie", 315),
        (date(2024, 4, 4), "清明", "jie", 15),
        (date(2025, 4, 4), "清明", "jie", 15),
        (date(2024, 12, 21), "冬至", "qi", 270),
    ],
)
def test_solar_term_on_its_day(d, name, kind, deg):
    t = solar_term_for_date(d)
    assert t is not None
    assert t.name == name
    assert t.kind == kind
    assert t.longitude == deg
    assert t.date == d


def test_no_solar_term_on_neighbouring_days():
    assert solar_term_for_date(date(2026, 2, 3)) is None
    assert solar_term_for_date(date(2026, 2, 5)) is None


def test_datetime_input_uses_its_own_calendar_day():
    t = solar_term_for_date(datetime(2026, 2, 4, 23, 59))
    assert t is not None and t.name == "立春"


def test_24_terms_per_year_alternating_kinds():
    terms = solar_terms_for_year(2025)
    assert len(terms) == 24
    assert [t.date for t in terms] == sorted(t.date for t in terms)
    assert len({t.date for t in terms}) == 24
    # a Gregorian year starts with 小寒 (jie) then 大寒 (qi)
    assert terms[0].name == "小寒"
    assert terms[1].name == "大寒"
    assert [t.kind for t in terms] == ["jie", "qi"] * 12


def test_solar_terms_for_month():
    names = [t.name for t in solar_terms_for_month(2024, 12)]
    assert names == ["大雪", "冬至"]
    with pytest.raises(ValueError):
        solar_terms_for_month(2024, 13)




@pytest.mark.parametrize(
    "d,name",
    [
        # instants within minutes of midnight China Standard Time
        (date(2014, 3, 6), "惊蛰"),
        (date(2016, 7, 7), "小暑"),
        (date(2008, 5, 21), "小满"),
        (date(1951, 12, 23), "冬至"),
    ],
)
def test_terms_near_midnight_land_on_their_own_day(d, name):
    t = solar_term_for_date(d)
    assert t is not None and t.name == name and t.date == d
    assert solar_term_for_date(d - timedelta(days=1)) is None


def test_jingzhe_2014_instant():
    t = solar_term_for_date(date(2014, 3, 6))
    # 2014-03-06 00:02 CST
    expected = datetime(2014, 3, 5, 16, 2, tzinfo=UTC)
    assert abs(t.instant_utc - expected) < timedelta(minutes=2)


@pytest.mark.parametrize(
    "before,on,month_before,month_on",
    [
        (date(2014, 3, 5), date(2014, 3, 6), "丙寅", "丁卯"),
        (date(2016, 7, 6), date(2016, 7, 7), "甲午", "乙未"),
    ],
)
def test_month_ganzhi_turns_on_the_jie_day(before, on, month_before, month_on):
    assert month_ganzhi(before) == month_before
    assert month_ganzhi(on) == month_on


def test_dongzhi_festival_1951():
    names = [f.name for f in festivals_for_date(date(1951, 12, 23), solar_term=solar_term_for_date(date(1951, 12, 23)))]
    assert "冬至" in names
    assert solar_term_for_date(date(1951, 12, 22)) is None


@pytest.mark.parametrize("year", [1901, 1951, 2008, 2014, 2016, 2099])
def test_terms_match_lunar_python_jieqi_days(year):
    from lunar_python import Solar

    ours = {t.date: t.name for t in solar_terms_for_year(year)}
    d = date(year, 1, 1)
    while d.year == year:
        ref = Solar.fromYmd(d.year, d.month, d.day).getLunar().getJieQi()
        assert ours.get(d, "") == (ref or "")
        d += timedelta(days=1)


@pytest.mark.parametrize("year", [2014, 2016])
def test_month_ganzhi_matches_lunar_python(year):
    from lunar_python import Solar

    d = date(year, 1, 1)
    while d.year == year:
        ref = Solar.fromYmd(d.year, d.month, d.day).getLunar().getMonthInGanZhi()
        assert month_ganzhi(d) == ref
        d += timedelta(days=1)


def test_extreme_years_have_no_terms():
    src = LunarPythonTermSource()
    assert terms_for_year(src, 1) == ()
    assert terms_for_year(src, 9999) == ()
    assert solar_term_for_date(date(1, 1, 1)) is None
    assert solar_term_for_date(date(9999, 12, 31)) is None


def test_crossing_scan_refines_to_the_second():
    eng = AstronomyEngine(provider=_CircularSun())
    t0 = datetime(2024, 12, 17, tzinfo=UTC)
    t1 = datetime(2024, 12, 21, tzinfo=UTC)
    hits = solar_term_crossings(eng, t0, t1, config=SolarTermConfig())
    assert [deg for deg, _ in hits] == [270]
    # 270/360 of 365.2422 days after the epoch
    expected = datetime(2024, 12, 19, 1, 27, 35, tzinfo=UTC)
    assert abs(hits[0][1] - expected) < timedelta(seconds=30)


def test_crossings_require_aware_range():
    eng = AstronomyEngine(provider=_CircularSun())
    with pytest.raises(ValueError):
        solar_term_crossings(eng, datetime(2024, 1, 1), datetime(2024, 2, 1))


def test_term_tables():
    assert term_name_from_deg(284.9999) == "小寒"
    assert term_kind_from_deg(270) == "qi"
    assert term_kind_from_deg(345) == "jie"
    info = term_info_from_deg(15)
    assert (info.n, info.name, info.kind) == (1, "清明", "jie")
