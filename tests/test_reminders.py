from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from ccal.core.errors import ReminderTooCloseError
from ccal.recurrence.expand import expand
from ccal.recurrence.reminders import reminder_trigger_times, trigger_time, validate_reminder_lead

SH = ZoneInfo("Asia/Shanghai")
NOW = datetime(2026, 1, 5, 8, 0, tzinfo=SH)


def test_trigger_time_relative_and_fixed():
    start = datetime(2026, 1, 5, 9, 0, tzinfo=SH)
    assert trigger_time(start, 15) == datetime(2026, 1, 5, 8, 45, tzinfo=SH)
    # fixed time: 07:30 on the occurrence day
    assert trigger_time(start, -450) == datetime(2026, 1, 5, 7, 30, tzinfo=SH)


def test_lead_must_leave_two_minutes():
    start = NOW + timedelta(minutes=10)
    validate_reminder_lead(start, 5, NOW)
    with pytest.raises(ReminderTooCloseError):
        validate_reminder_lead(start, 9, NOW)
    with pytest.raises(ReminderTooCloseError):
        validate_reminder_lead(start, 30, NOW)


def test_fixed_time_and_all_day_skip_the_check(caplog):
    start = NOW + timedelta(minutes=10)
    with caplog.at_level("INFO", logger="ccal.recurrence.reminders"):
        validate_reminder_lead(start, -60, NOW)
        validate_reminder_lead(start, 30, NOW, is_all_day=True)
    skipped = [r for r in caplog.records if "lead check skipped" in r.getMessage()]
    assert len(skipped) == 2


def test_reminder_trigger_times_from_expansion():
    starts = expand(datetime(2026, 1, 5, 9, 0, tzinfo=SH), "FREQ=DAILY;COUNT=3")
    got = reminder_trigger_times(starts, 10)
    assert got == [s - timedelta(minutes=10) for s in starts]


def test_reminder_trigger_times_drop_triggers_too_close_to_now():
    starts = [NOW + timedelta(seconds=20), NOW + timedelta(minutes=1), NOW + timedelta(hours=1)]
    got = reminder_trigger_times(starts, 0, now=NOW)
    assert got == [NOW + timedelta(minutes=1), NOW + timedelta(hours=1)]
