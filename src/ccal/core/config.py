# src/ccal/core/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal, Optional

ProviderName = Literal["lunar", "skyfield"]

CCAL_TERM_PROVIDER_ENV = "CCAL_TERM_PROVIDER"
CCAL_EPHEMERIS_ENV = "CCAL_EPHEMERIS"
CCAL_EPHEMERIS_PATH_ENV = "CCAL_EPHEMERIS_PATH"
CCAL_MAX_OCCURRENCES_ENV = "CCAL_MAX_OCCURRENCES"
CCAL_TIMEZONE_ENV = "CCAL_TIMEZONE"

# China Standard Time: fixed UTC+8 (Asia/Shanghai carries the 1986-91 summer time)
DEFAULT_TIMEZONE = "Etc/GMT-8"
DEFAULT_MAX_OCCURRENCES = 365


def env_truthy(name: str) -> bool:
    v = os.environ.get(name, "")
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_str(name: str) -> Optional[str]:
    v = os.environ.get(name, "").strip()
    return v or None


def _env_int(name: str, default: int) -> int:
    v = os.environ.get(name, "").strip()
    try:
        return int(v) if v else default
    except ValueError:
        return default


@dataclass(frozen=True)
class SolarTermConfig:
    """
    Solar terms (24). The scan fields only drive the ephemeris search.
    All time units are explicit to avoid minute/second confusion.
    """
    scan_step_hours: int = 24
    tol_seconds: float = 1.0
    max_iter: int = 80
    # terms are dated on this wall clock
    timezone: str = DEFAULT_TIMEZONE


@dataclass(frozen=True)
class RecurrenceConfig:
    # safety bound on any single expansion, not a business rule
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES
    # reminders must fire at least this far in the future
    min_reminder_lead_seconds: int = 120


@dataclass(frozen=True)
class CalendarConfig:
    provider: ProviderName = "lunar"
    ephemeris: Optional[str] = None
    ephemeris_path: Optional[str] = None
    solarterm: SolarTermConfig = field(default_factory=SolarTermConfig)
    recurrence: RecurrenceConfig = field(default_factory=RecurrenceConfig)

    @classmethod
    def from_env(cls) -> "CalendarConfig":
        provider = (_env_str(CCAL_TERM_PROVIDER_ENV) or "lunar").lower()
        if provider not in ("lunar", "skyfield"):
            raise ValueError(f"{CCAL_TERM_PROVIDER_ENV} must be 'lunar' or 'skyfield' (got {provider!r})")

        max_occ = _env_int(CCAL_MAX_OCCURRENCES_ENV, DEFAULT_MAX_OCCURRENCES)
        if max_occ < 1:
            max_occ = DEFAULT_MAX_OCCURRENCES

        return cls(
            provider=provider,  # type: ignore[arg-type]
            ephemeris=_env_str(CCAL_EPHEMERIS_ENV),
            ephemeris_path=_env_str(CCAL_EPHEMERIS_PATH_ENV),
            solarterm=SolarTermConfig(timezone=_env_str(CCAL_TIMEZONE_ENV) or DEFAULT_TIMEZONE),
            recurrence=RecurrenceConfig(max_occurrences=max_occ),
        )
