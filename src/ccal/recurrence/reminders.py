# src/ccal/recurrence/reminders.py
"""
Reminder trigger times derived from occurrence starts.

Lead convention (minutes):
  lead >= 0 : fire `lead` minutes before the occurrence start
  lead <  0 : fixed time of day; -lead is minutes after local midnight of the
              occurrence day (e.g. -540 = 09:00 that day)

Delivery is not handled here; the scheduler only consumes these instants.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Iterable, List, Optional

from ccal.core.config import RecurrenceConfig
from ccal.core.errors import ReminderTooCloseError

log = logging.getLogger(__name__)

# scheduler refuses triggers closer than this to now
SCHEDULE_BUFFER_SECONDS = 30


def trigger_time(start: datetime, lead_minutes: int) -> datetime:
    if lead_minutes >= 0:
        return start - timedelta(minutes=lead_minutes)
    midnight = datetime.combine(start.date(), time(0, 0), tzinfo=start.tzinfo)
    return midnight + timedelta(minutes=-lead_minutes)


def validate_reminder_lead(
    start: datetime,
    lead_minutes: int,
    now: datetime,
    is_all_day: bool = False,
    *,
    config: RecurrenceConfig = RecurrenceConfig(),
) -> None:
    """
    Raise ReminderTooCloseError when the reminder would fire less than
    config.min_reminder_lead_seconds after now.

    Fixed-time reminders (negative lead) and all-day events are not checked.
    """
    if lead_minutes < 0 or is_all_day:
        log.info(
            "reminder lead check skipped (lead=%d, all_day=%s, start=%s)",
            lead_minutes,
            is_all_day,
            start.isoformat(),
        )
        return

    t = trigger_time(start, lead_minutes)
    remaining = (t - now).total_seconds()
    if remaining < config.min_reminder_lead_seconds:
        raise ReminderTooCloseError(
            f"reminder {lead_minutes} min before {start.isoformat()} fires at {t.isoformat()}, "
            f"which is less than {config.min_reminder_lead_seconds}s after {now.isoformat()}"
        )


def reminder_trigger_times(
    occurrence_starts: Iterable[datetime],
    lead_minutes: int,
    now: Optional[datetime] = None,
) -> List[datetime]:
    """
    Trigger instants for each occurrence start, ascending.
    With `now`, triggers not at least SCHEDULE_BUFFER_SECONDS ahead are dropped.
    """
    out: List[datetime] = []
    for s in occurrence_starts:
        t = trigger_time(s, lead_minutes)
        if now is not None and t <= now + timedelta(seconds=SCHEDULE_BUFFER_SECONDS):
            log.debug("reminder trigger %s too close to %s, skipped", t.isoformat(), now.isoformat())
            continue
        out.append(t)
    out.sort()
    return out
