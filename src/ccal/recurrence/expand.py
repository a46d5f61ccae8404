# src/ccal/recurrence/expand.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from itertools import islice
from typing import Iterator, List, Optional, Tuple, Union

from dateutil.rrule import DAILY, MONTHLY, WEEKLY, YEARLY, rrule

from ccal.core.config import DEFAULT_MAX_OCCURRENCES
from ccal.core.timeutil import DateLike, calendar_day
from ccal.recurrence.rules import Frequency, RecurrenceRule, parse_rule

log = logging.getLogger(__name__)

RuleLike = Union[RecurrenceRule, str]

_DATEUTIL_FREQ = {
    Frequency.DAILY: DAILY,
    Frequency.WEEKLY: WEEKLY,
    Frequency.MONTHLY: MONTHLY,
    Frequency.YEARLY: YEARLY,
}


def _coerce_rule(rule: Optional[RuleLike]) -> Optional[RecurrenceRule]:
    if rule is None or isinstance(rule, RecurrenceRule):
        return rule
    return parse_rule(rule)


def _coerce_anchor(anchor: DateLike) -> datetime:
    if isinstance(anchor, datetime):
        return anchor
    if isinstance(anchor, date):
        return datetime.combine(anchor, time(0, 0))
    raise TypeError(f"anchor must be date or datetime (got {type(anchor).__name__})")


def _to_dateutil(anchor: datetime, rule: RecurrenceRule) -> rrule:
    """
    The UNTIL day is inclusive: the bound is the last instant of that day on
    the anchor's wall clock.
    """
    until = None
    if rule.until is not None:
        until = datetime.combine(rule.until, time.max).replace(tzinfo=anchor.tzinfo)

    return rrule(
        _DATEUTIL_FREQ[rule.frequency],
        dtstart=anchor,
        interval=rule.interval,
        count=rule.count,
        until=until,
        byweekday=rule.by_weekday or None,
        bymonthday=rule.by_month_day or None,
    )


def iter_occurrences(anchor: DateLike, rule: RecurrenceRule) -> Iterator[datetime]:
    """
    Unbounded ascending iterator of occurrence starts.
    Callers must bound it (islice, window) for rules without COUNT/UNTIL.
    """
    return iter(_to_dateutil(_coerce_anchor(anchor), rule))


def expand(
    anchor: DateLike,
    rule: Optional[RuleLike],
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
) -> List[datetime]:
    """
    Ascending occurrence starts of rule from anchor, at most max_occurrences.

    - rule may be a RecurrenceRule or RRULE text; unparsable text yields []
    - aware anchors keep their wall-clock time across DST changes
    - hitting the cap is a normal, silent truncation
    """
    r = _coerce_rule(rule)
    if r is None:
        return []
    if max_occurrences < 1:
        raise ValueError(f"max_occurrences must be >= 1 (got {max_occurrences})")

    out = list(islice(iter_occurrences(anchor, r), max_occurrences))
    if len(out) == max_occurrences and not r.is_bounded:
        log.debug("expansion capped at %d occurrences (unbounded rule)", max_occurrences)
    return out


def occurrences_between(
    anchor: DateLike,
    rule: Optional[RuleLike],
    window_start: datetime,
    window_end: datetime,
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
) -> List[datetime]:
    """
    Occurrence starts in [window_start, window_end), at most max_occurrences.
    COUNT is still counted from the anchor, not from window_start.
    """
    r = _coerce_rule(rule)
    if r is None:
        return []
    if window_end <= window_start:
        return []

    out: List[datetime] = []
    for t in iter_occurrences(anchor, r):
        if t >= window_end:
            break
        if t >= window_start:
            out.append(t)
            if len(out) >= max_occurrences:
                break
    return out


def next_occurrence(
    anchor: DateLike,
    rule: Optional[RuleLike],
    after: DateLike,
) -> Optional[datetime]:
    """Earliest occurrence at or after `after`, or None if the rule ends first."""
    r = _coerce_rule(rule)
    if r is None:
        return None
    return _to_dateutil(_coerce_anchor(anchor), r).after(_coerce_anchor(after), inc=True)


def is_date_included(
    day: DateLike,
    anchor: DateLike,
    rule: Optional[RuleLike],
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
) -> bool:
    """
    Same-calendar-day membership against the capped expansion;
    time of day is ignored.
    """
    target = calendar_day(day)
    for t in expand(anchor, rule, max_occurrences):
        d = t.date()
        if d == target:
            return True
        if d > target:
            break
    return False


# ============================================================
# events
# ============================================================

@dataclass(frozen=True)
class RecurringEvent:
    """
    The part of a stored event that expansion needs.
    exception_dates are matched against the calendar day of an occurrence start.
    """
    id: str
    start: datetime
    end: datetime
    rrule: Optional[str] = None
    exception_dates: Tuple[date, ...] = field(default_factory=tuple)
    is_all_day: bool = False

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


def _overlaps(start: datetime, end: datetime, window_start: datetime, window_end: datetime) -> bool:
    # a zero-length instance counts when it starts inside the window
    if start == end:
        return window_start <= start < window_end
    return start < window_end and end > window_start


@dataclass(frozen=True)
class EventOccurrence:
    anchor_event_id: str
    start: datetime
    end: datetime


def event_occurrences(
    event: RecurringEvent,
    window_start: datetime,
    window_end: datetime,
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
) -> List[EventOccurrence]:
    """
    Instances of event overlapping [window_start, window_end).

    Events without a usable rule contribute their single stored instance.
    """
    dur = event.duration
    rule = parse_rule(event.rrule)

    if rule is None:
        if _overlaps(event.start, event.end, window_start, window_end):
            return [EventOccurrence(event.id, event.start, event.end)]
        return []

    skip = set(event.exception_dates)
    # widen by the duration so occurrences already running at window_start count
    starts = occurrences_between(event.start, rule, window_start - dur, window_end, max_occurrences)

    out: List[EventOccurrence] = []
    for s in starts:
        if s.date() in skip:
            continue
        e = s + dur
        if _overlaps(s, e, window_start, window_end):
            out.append(EventOccurrence(event.id, s, e))
    return out
