# src/ccal/recurrence/rules.py
"""
RFC 5545 RRULE subset: FREQ, INTERVAL, BYDAY, BYMONTHDAY, COUNT, UNTIL.

Canonical text (what generate_rule writes):
  FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE;BYMONTHDAY=1,15;COUNT=10
  - INTERVAL omitted when 1
  - BYDAY in MO..SU order, BYMONTHDAY ascending
  - COUNT or UNTIL=YYYYMMDD, never both

Weekday index: 0=MO .. 6=SU (same as datetime.weekday() and dateutil).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from ccal.core.errors import MalformedRuleError

log = logging.getLogger(__name__)

WEEKDAY_TOKENS: Tuple[str, ...] = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")
_WEEKDAY_INDEX: Dict[str, int] = {t: i for i, t in enumerate(WEEKDAY_TOKENS)}

_SUPPORTED_KEYS = ("FREQ", "INTERVAL", "BYDAY", "BYMONTHDAY", "COUNT", "UNTIL", "WKST")
_UNTIL_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})(?:T(\d{2})(\d{2})(\d{2})Z?)?$")


class Frequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


@dataclass(frozen=True)
class RecurrenceRule:
    """
    Immutable recurrence rule.

    by_weekday / by_month_day are normalized to sorted, de-duplicated tuples,
    so two rules describing the same pattern compare equal.
    """
    frequency: Frequency
    interval: int = 1
    count: Optional[int] = None
    until: Optional[date] = None
    by_weekday: Tuple[int, ...] = ()
    by_month_day: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        try:
            freq = Frequency(self.frequency)
        except ValueError as e:
            raise MalformedRuleError(f"unknown frequency: {self.frequency!r}") from e
        object.__setattr__(self, "frequency", freq)

        if isinstance(self.until, datetime):
            object.__setattr__(self, "until", self.until.date())

        if int(self.interval) < 1:
            raise MalformedRuleError(f"interval must be >= 1 (got {self.interval})")
        if self.count is not None and int(self.count) < 1:
            raise MalformedRuleError(f"count must be >= 1 (got {self.count})")
        if self.count is not None and self.until is not None:
            raise MalformedRuleError("count and until are mutually exclusive")

        days = tuple(sorted(set(int(x) for x in self.by_weekday)))
        if any(not (0 <= x <= 6) for x in days):
            raise MalformedRuleError(f"weekday index must be 0..6 (got {days})")
        mdays = tuple(sorted(set(int(x) for x in self.by_month_day)))
        if any(x == 0 or not (-31 <= x <= 31) for x in mdays):
            raise MalformedRuleError(f"month day must be 1..31 or -31..-1 (got {mdays})")

        object.__setattr__(self, "by_weekday", days)
        object.__setattr__(self, "by_month_day", mdays)

    @property
    def is_bounded(self) -> bool:
        return self.count is not None or self.until is not None


# ============================================================
# generate
# ============================================================

def generate_rule(rule: RecurrenceRule) -> str:
    """RecurrenceRule -> canonical RRULE text (no "RRULE:" prefix)."""
    parts: List[str] = [f"FREQ={rule.frequency.value}"]
    if rule.interval != 1:
        parts.append(f"INTERVAL={rule.interval}")
    if rule.by_weekday:
        parts.append("BYDAY=" + ",".join(WEEKDAY_TOKENS[i] for i in rule.by_weekday))
    if rule.by_month_day:
        parts.append("BYMONTHDAY=" + ",".join(str(d) for d in rule.by_month_day))
    if rule.count is not None:
        parts.append(f"COUNT={rule.count}")
    elif rule.until is not None:
        parts.append(f"UNTIL={rule.until.strftime('%Y%m%d')}")
    return ";".join(parts)


# ============================================================
# parse
# ============================================================

def _parse_int(key: str, value: str) -> int:
    if not re.fullmatch(r"[+-]?\d+", value):
        raise MalformedRuleError(f"{key} must be an integer (got {value!r})")
    return int(value)


def _parse_until(value: str) -> date:
    m = _UNTIL_RE.match(value)
    if m is None:
        raise MalformedRuleError(f"UNTIL must be YYYYMMDD or YYYYMMDDTHHMMSS[Z] (got {value!r})")
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError as e:
        raise MalformedRuleError(f"UNTIL is not a valid date: {value!r}") from e


def _parse_byday(value: str) -> Tuple[int, ...]:
    out: List[int] = []
    for tok in value.split(","):
        tok = tok.strip()
        if tok not in _WEEKDAY_INDEX:
            # ordinal forms such as 1MO / -1FR are not supported
            raise MalformedRuleError(f"unsupported BYDAY token: {tok!r}")
        out.append(_WEEKDAY_INDEX[tok])
    return tuple(out)


def _split_parts(text: str) -> Dict[str, str]:
    body = text.strip()
    if body.upper().startswith("RRULE:"):
        body = body[len("RRULE:"):]
    if not body:
        raise MalformedRuleError("empty rule")

    parts: Dict[str, str] = {}
    for chunk in body.split(";"):
        if not chunk.strip():
            continue
        if "=" not in chunk:
            raise MalformedRuleError(f"rule part without '=': {chunk!r}")
        key, value = chunk.split("=", 1)
        key = key.strip().upper()
        value = value.strip().upper()
        if key not in _SUPPORTED_KEYS:
            raise MalformedRuleError(f"unsupported rule part: {key}")
        if key in parts:
            raise MalformedRuleError(f"duplicate rule part: {key}")
        parts[key] = value
    return parts


@lru_cache(maxsize=512)
def load_rule(text: str) -> RecurrenceRule:
    """
    Strict parse: RRULE text -> RecurrenceRule, raising MalformedRuleError.
    Results are memoized by text.
    """
    if not isinstance(text, str):
        raise MalformedRuleError(f"rule text must be str (got {type(text).__name__})")

    parts = _split_parts(text)
    if "FREQ" not in parts:
        raise MalformedRuleError("FREQ is required")
    try:
        freq = Frequency(parts["FREQ"])
    except ValueError as e:
        raise MalformedRuleError(f"unsupported FREQ: {parts['FREQ']!r}") from e

    return RecurrenceRule(
        frequency=freq,
        interval=_parse_int("INTERVAL", parts["INTERVAL"]) if "INTERVAL" in parts else 1,
        count=_parse_int("COUNT", parts["COUNT"]) if "COUNT" in parts else None,
        until=_parse_until(parts["UNTIL"]) if "UNTIL" in parts else None,
        by_weekday=_parse_byday(parts["BYDAY"]) if "BYDAY" in parts else (),
        by_month_day=tuple(
            _parse_int("BYMONTHDAY", x.strip()) for x in parts["BYMONTHDAY"].split(",")
        ) if "BYMONTHDAY" in parts else (),
    )


def parse_rule(text: Optional[str]) -> Optional[RecurrenceRule]:
    """
    Lenient parse: returns None (and logs) for empty, malformed or
    unsupported rule text.
    """
    if text is None or not str(text).strip():
        return None
    try:
        return load_rule(str(text))
    except MalformedRuleError as e:
        log.warning("ignoring malformed recurrence rule %r: %s", text, e)
        return None
