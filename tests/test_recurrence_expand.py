from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from ccal.recurrence.expand import (
    EventOccurrence,
    RecurringEvent,
    event_occurrences,
    expand,
    is_date_included,
    next_occurrence,
    occurrences_between,
)
from ccal.recurrence.rules import Frequency, RecurrenceRule

SH = ZoneInfo("Asia/Shanghai")
NY = ZoneInfo("America/New_York")

# Monday
ANCHOR = datetime(2026, 1, 5, 9, 0, tzinfo=SH)


def test_weekly_mon_wed_fri_from_a_monday():
    occ = expand(ANCHOR, "FREQ=WEEKLY;BYDAY=MO,WE,FR;COUNT=10")
    assert len(occ) == 10
    assert [d.date() for d in occ[:3]] == [date(2026, 1, 5), date(2026, 1, 7), date(2026, 1, 9)]
    assert [d.weekday() for d in occ] == [0, 2, 4, 0, 2, 4, 0, 2, 4, 0]
    assert all(d.time() == ANCHOR.time() for d in occ)


def test_occurrences_are_strictly_ascending():
    occ = expand(ANCHOR, RecurrenceRule(Frequency.MONTHLY, by_month_day=(1, 15, -1)), 40)
    assert all(a < b for a, b in zip(occ, occ[1:]))


def test_cap_applies_to_unbounded_rules():
    assert len(expand(ANCHOR, "FREQ=DAILY")) == 365
    assert len(expand(ANCHOR, "FREQ=DAILY", 10)) == 10


def test_cap_applies_to_long_count():
    assert len(expand(ANCHOR, "FREQ=DAILY;COUNT=1000", 50)) == 50
    assert len(expand(ANCHOR, "FREQ=DAILY;COUNT=7", 50)) == 7


def test_until_day_is_inclusive():
    occ = expand(ANCHOR, "FREQ=DAILY;UNTIL=20260110")
    assert occ[-1].date() == date(2026, 1, 10)
    assert len(occ) == 6


def test_interval():
    occ = expand(ANCHOR, "FREQ=WEEKLY;INTERVAL=2;COUNT=3")
    assert [d.date() for d in occ] == [date(2026, 1, 5), date(2026, 1, 19), date(2026, 2, 2)]


def test_monthly_skips_months_without_the_day():
    occ = expand(datetime(2026, 1, 31, 8, 0), "FREQ=MONTHLY;COUNT=3")
    assert [d.date() for d in occ] == [date(2026, 1, 31), date(2026, 3, 31), date(2026, 5, 31)]


def test_malformed_rule_expands_to_nothing():
    assert expand(ANCHOR, "FREQ=SOMETIMES") == []
    assert expand(ANCHOR, None) == []


def test_wall_clock_kept_across_dst():
    start = datetime(2026, 3, 6, 9, 0, tzinfo=NY)
    occ = expand(start, "FREQ=DAILY;COUNT=5")
    assert all(d.hour == 9 and d.minute == 0 for d in occ)
    assert occ[0].utcoffset() != occ[-1].utcoffset()


def test_date_anchor():
    occ = expand(date(2026, 1, 1), "FREQ=YEARLY;COUNT=2")
    assert occ == [datetime(2026, 1, 1), datetime(2027, 1, 1)]


def test_occurrences_between_window():
    ws = datetime(2026, 2, 1, tzinfo=SH)
    we = datetime(2026, 2, 8, tzinfo=SH)
    occ = occurrences_between(ANCHOR, "FREQ=WEEKLY;BYDAY=MO,WE,FR", ws, we)
    assert [d.date() for d in occ] == [date(2026, 2, 2), date(2026, 2, 4), date(2026, 2, 6)]
    assert occurrences_between(ANCHOR, "FREQ=DAILY", we, ws) == []


def test_occurrences_between_counts_from_anchor():
    ws = datetime(2026, 1, 8, tzinfo=SH)
    we = datetime(2026, 3, 1, tzinfo=SH)
    occ = occurrences_between(ANCHOR, "FREQ=DAILY;COUNT=5", ws, we)
    assert [d.day for d in occ] == [8, 9]


def test_next_occurrence():
    rule = "FREQ=WEEKLY;BYDAY=MO,WE,FR;COUNT=10"
    assert next_occurrence(ANCHOR, rule, ANCHOR) == ANCHOR
    after = datetime(2026, 1, 5, 9, 1, tzinfo=SH)
    assert next_occurrence(ANCHOR, rule, after) == datetime(2026, 1, 7, 9, 0, tzinfo=SH)
    assert next_occurrence(ANCHOR, rule, datetime(2026, 2, 1, tzinfo=SH)) is None


def test_next_occurrence_unbounded_far_future():
    got = next_occurrence(ANCHOR, "FREQ=DAILY", datetime(2030, 6, 1, tzinfo=SH))
    assert got == datetime(2030, 6, 1, 9, 0, tzinfo=SH)


def test_is_date_included_ignores_time_of_day():
    rule = "FREQ=WEEKLY;BYDAY=MO,WE,FR;COUNT=10"
    assert is_date_included(date(2026, 1, 7), ANCHOR, rule)
    assert is_date_included(datetime(2026, 1, 7, 23, 0), ANCHOR, rule)
    assert not is_date_included(date(2026, 1, 6), ANCHOR, rule)
    assert not is_date_included(date(2026, 1, 28), ANCHOR, rule)


def test_containment_matches_expansion():
    rule = RecurrenceRule(Frequency.DAILY, interval=3, count=20)
    occ = expand(ANCHOR, rule)
    days = {d.date() for d in occ}
    d = ANCHOR.date()
    while d <= occ[-1].date():
        assert is_date_included(d, ANCHOR, rule) == (d in days)
        d += timedelta(days=1)


def _event(**kw) -> RecurringEvent:
    base = dict(
        id="e1",
        start=datetime(2026, 1, 5, 9, 0, tzinfo=SH),
        end=datetime(2026, 1, 5, 10, 30, tzinfo=SH),
        rrule="FREQ=DAILY;COUNT=10",
    )
    base.update(kw)
    return RecurringEvent(**base)


def test_event_occurrences_apply_duration_and_exceptions():
    ev = _event(exception_dates=(date(2026, 1, 7),))
    ws = datetime(2026, 1, 6, tzinfo=SH)
    we = datetime(2026, 1, 9, tzinfo=SH)
    occ = event_occurrences(ev, ws, we)
    assert [o.start.day for o in occ] == [6, 8]
    assert all(o.end - o.start == timedelta(minutes=90) for o in occ)
    assert all(o.anchor_event_id == "e1" for o in occ)


def test_event_occurrence_running_at_window_start_is_included():
    ev = _event()
    ws = datetime(2026, 1, 6, 10, 0, tzinfo=SH)
    we = datetime(2026, 1, 6, 12, 0, tzinfo=SH)
    occ = event_occurrences(ev, ws, we)
    assert occ == [
        EventOccurrence("e1", datetime(2026, 1, 6, 9, 0, tzinfo=SH), datetime(2026, 1, 6, 10, 30, tzinfo=SH))
    ]


def test_single_event_without_rule():
    ev = _event(rrule=None)
    ws = datetime(2026, 1, 5, tzinfo=SH)
    we = datetime(2026, 1, 6, tzinfo=SH)
    assert [o.start for o in event_occurrences(ev, ws, we)] == [ev.start]
    assert event_occurrences(ev, we, we + timedelta(days=1)) == []


def test_event_with_malformed_rule_degrades_to_single_instance():
    ev = _event(rrule="FREQ=DAILY;COUNT=2;UNTIL=20260101")
    ws = datetime(2026, 1, 1, tzinfo=SH)
    we = datetime(2026, 2, 1, tzinfo=SH)
    assert len(event_occurrences(ev, ws, we)) == 1


@pytest.mark.parametrize("rrule", [None, "FREQ=DAILY;COUNT=3"])
def test_zero_length_event_at_window_start_is_kept(rrule):
    start = datetime(2026, 1, 5, 9, 0, tzinfo=SH)
    ev = _event(start=start, end=start, rrule=rrule)
    occ = event_occurrences(ev, start, start + timedelta(hours=1))
    assert occ == [EventOccurrence("e1", start, start)]
    # ends exactly where the window ends: outside
    assert event_occurrences(ev, start - timedelta(hours=1), start) == []


@pytest.mark.parametrize("cap", [1, 5, 365])
def test_cap_is_always_honored(cap):
    assert len(expand(ANCHOR, "FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR,SA,SU", cap)) == cap
