# src/ccal/recurrence/summary.py
from __future__ import annotations

from typing import Dict, Literal, Optional, Tuple

from ccal.recurrence.rules import Frequency, RecurrenceRule, parse_rule

SummaryLang = Literal["en", "zh"]

_EN_UNIT: Dict[Frequency, Tuple[str, str]] = {
    Frequency.DAILY: ("day", "days"),
    Frequency.WEEKLY: ("week", "weeks"),
    Frequency.MONTHLY: ("month", "months"),
    Frequency.YEARLY: ("year", "years"),
}
_ZH_UNIT: Dict[Frequency, str] = {
    Frequency.DAILY: "天",
    Frequency.WEEKLY: "周",
    Frequency.MONTHLY: "个月",
    Frequency.YEARLY: "年",
}
_EN_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_ZH_WEEKDAYS = ("一", "二", "三", "四", "五", "六", "日")


def _en(rule: RecurrenceRule) -> str:
    one, many = _EN_UNIT[rule.frequency]
    s = f"every {one}" if rule.interval == 1 else f"every {rule.interval} {many}"
    if rule.by_weekday:
        s += " on " + ", ".join(_EN_WEEKDAYS[i] for i in rule.by_weekday)
    if rule.by_month_day:
        s += " on day " + ", ".join(str(d) for d in rule.by_month_day)
    if rule.count is not None:
        s += " for 1 occurrence" if rule.count == 1 else f" for {rule.count} occurrences"
    elif rule.until is not None:
        s += f" until {rule.until.isoformat()}"
    return s


def _zh(rule: RecurrenceRule) -> str:
    unit = _ZH_UNIT[rule.frequency]
    if rule.interval == 1:
        s = "每天" if rule.frequency is Frequency.DAILY else f"每{unit}"
    else:
        s = f"每 {rule.interval} {unit}"
    if rule.by_weekday:
        s += "的周" + "、".join(_ZH_WEEKDAYS[i] for i in rule.by_weekday)
    if rule.by_month_day:
        s += "的" + "、".join(f"{d}日" for d in rule.by_month_day)
    if rule.count is not None:
        s += f"，共 {rule.count} 次"
    elif rule.until is not None:
        s += f"，直到 {rule.until.isoformat()}"
    return s


def human_readable_summary(rule: RecurrenceRule | str, lang: SummaryLang = "en") -> Optional[str]:
    """
    "every 2 weeks for 10 occurrences", "every day until 2026-01-01";
    with lang="zh": "每 2 周，共 10 次".

    Rule text that does not parse gives None.
    """
    r: Optional[RecurrenceRule] = parse_rule(rule) if isinstance(rule, str) else rule
    if r is None:
        return None
    if lang == "en":
        return _en(r)
    if lang == "zh":
        return _zh(r)
    raise ValueError(f"unsupported summary language: {lang!r}")
