# src/ccal/core/errors.py
from __future__ import annotations


class CalendarError(Exception):
    """Base error."""


class MalformedRuleError(CalendarError, ValueError):
    """Recurrence rule text (or rule fields) cannot be turned into a rule."""


class InvalidLunarDateError(CalendarError, ValueError):
    """Lunar year/month/day/leap combination that names no real day."""


class DateOutOfRangeError(InvalidLunarDateError):
    """Date lies outside the lunar table (lunar years 1900..2100)."""


class ReminderTooCloseError(CalendarError, ValueError):
    """Reminder would fire in the past or too close to now."""
