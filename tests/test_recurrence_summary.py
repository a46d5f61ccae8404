from __future__ import annotations

from datetime import date

import pytest

from ccal.recurrence.rules import Frequency, RecurrenceRule
from ccal.recurrence.summary import human_readable_summary


@pytest.mark.parametrize(
    "rule,text",
    [
        (RecurrenceRule(Frequency.WEEKLY, interval=2, count=10), "every 2 weeks for 10 occurrences"),
        (RecurrenceRule(Frequency.DAILY, until=date(2026, 1, 1)), "every day until 2026-01-01"),
        (RecurrenceRule(Frequency.MONTHLY), "every month"),
        (RecurrenceRule(Frequency.YEARLY, count=1), "every year for 1 occurrence"),
        (
            RecurrenceRule(Frequency.WEEKLY, by_weekday=(0, 2, 4), count=10),
            "every week on Mon, Wed, Fri for 10 occurrences",
        ),
        (RecurrenceRule(Frequency.MONTHLY, by_month_day=(1, 15)), "every month on day 1, 15"),
    ],
)
def test_english_summary(rule, text):
    assert human_readable_summary(rule) == text


def test_unbounded_rule_has_no_termination_clause():
    s = human_readable_summary(RecurrenceRule(Frequency.DAILY, interval=3))
    assert s == "every 3 days"


def test_chinese_summary():
    assert human_readable_summary(RecurrenceRule(Frequency.WEEKLY, interval=2, count=10), "zh") == "每 2 周，共 10 次"
    assert human_readable_summary(RecurrenceRule(Frequency.DAILY, until=date(2026, 1, 1)), "zh") == "每天，直到 2026-01-01"
    assert human_readable_summary("FREQ=WEEKLY;BYDAY=MO,FR", "zh") == "每周的周一、五"


def test_summary_from_text():
    assert human_readable_summary("FREQ=WEEKLY;INTERVAL=2;COUNT=10") == "every 2 weeks for 10 occurrences"
    assert human_readable_summary("FREQ=NEVER") is None


def test_unknown_language():
    with pytest.raises(ValueError):
        human_readable_summary(RecurrenceRule(Frequency.DAILY), "fr")
