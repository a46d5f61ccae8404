from __future__ import annotations

from datetime import date

import pytest

from ccal.core.errors import MalformedRuleError
from ccal.recurrence.rules import Frequency, RecurrenceRule, generate_rule, load_rule, parse_rule


def test_weekly_mon_wed_fri_count_10():
    rule = RecurrenceRule(frequency=Frequency.WEEKLY, interval=1, by_weekday=(0, 2, 4), count=10)
    assert generate_rule(rule) == "FREQ=WEEKLY;BYDAY=MO,WE,FR;COUNT=10"


def test_canonical_ordering_and_interval():
    rule = RecurrenceRule(
        frequency=Frequency.MONTHLY,
        interval=2,
        by_weekday=(4, 0, 0),
        by_month_day=(15, 1),
        until=date(2026, 1, 1),
    )
    assert generate_rule(rule) == "FREQ=MONTHLY;INTERVAL=2;BYDAY=MO,FR;BYMONTHDAY=1,15;UNTIL=20260101"


@pytest.mark.parametrize(
    "rule",
    [
        RecurrenceRule(Frequency.DAILY),
        RecurrenceRule(Frequency.DAILY, interval=3, count=5),
        RecurrenceRule(Frequency.WEEKLY, by_weekday=(0, 2, 4), count=10),
        RecurrenceRule(Frequency.WEEKLY, interval=2, by_weekday=(5, 6), until=date(2026, 12, 31)),
        RecurrenceRule(Frequency.MONTHLY, by_month_day=(1, -1)),
        RecurrenceRule(Frequency.YEARLY, interval=4),
    ],
)
def test_round_trip(rule):
    assert parse_rule(generate_rule(rule)) == rule


def test_parse_tolerates_prefix_case_and_whitespace():
    r = parse_rule("  RRULE:freq=weekly;byday=fr,mo;wkst=SU;count=3 ")
    assert r == RecurrenceRule(Frequency.WEEKLY, by_weekday=(0, 4), count=3)


def test_parse_until_datetime_keeps_date_part():
    r = parse_rule("FREQ=DAILY;UNTIL=20260101T235959Z")
    assert r is not None
    assert r.until == date(2026, 1, 1)


@pytest.mark.parametrize(
    "text",
    [
        None,
        "",
        "   ",
        "FREQ=HOURLY",
        "INTERVAL=2",
        "FREQ=DAILY;INTERVAL=0",
        "FREQ=DAILY;INTERVAL=x",
        "FREQ=DAILY;COUNT=0",
        "FREQ=DAILY;COUNT=3;UNTIL=20260101",
        "FREQ=MONTHLY;BYDAY=1MO",
        "FREQ=MONTHLY;BYSETPOS=-1",
        "FREQ=MONTHLY;BYMONTHDAY=0",
        "FREQ=MONTHLY;BYMONTHDAY=32",
        "FREQ=DAILY;UNTIL=2026-01-01",
        "FREQ=DAILY;UNTIL=20261340",
        "FREQ=DAILY;FREQ=WEEKLY",
        "FREQ",
    ],
)
def test_malformed_text_parses_to_none(text):
    assert parse_rule(text) is None


def test_load_rule_raises():
    with pytest.raises(MalformedRuleError):
        load_rule("FREQ=DAILY;COUNT=3;UNTIL=20260101")
    with pytest.raises(MalformedRuleError):
        load_rule("FREQ=MONTHLY;BYSETPOS=-1")


def test_load_rule_is_memoized():
    load_rule.cache_clear()
    a = load_rule("FREQ=DAILY;COUNT=2")
    b = load_rule("FREQ=DAILY;COUNT=2")
    assert a is b
    assert load_rule.cache_info().hits == 1


def test_rule_validation():
    with pytest.raises(MalformedRuleError):
        RecurrenceRule(Frequency.DAILY, interval=0)
    with pytest.raises(MalformedRuleError):
        RecurrenceRule(Frequency.DAILY, count=2, until=date(2026, 1, 1))
    with pytest.raises(MalformedRuleError):
        RecurrenceRule(Frequency.WEEKLY, by_weekday=(7,))
    with pytest.raises(MalformedRuleError):
        RecurrenceRule("SECONDLY")


def test_rule_accepts_frequency_text():
    r = RecurrenceRule("WEEKLY", by_weekday=(2, 2, 0))
    assert r.frequency is Frequency.WEEKLY
    assert r.by_weekday == (0, 2)
    assert not r.is_bounded
