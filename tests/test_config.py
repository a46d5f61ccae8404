from __future__ import annotations

import pytest

from ccal.core.config import CalendarConfig, env_truthy
from ccal.core.solarterms import term_source_for, term_source_for_config


def test_defaults(monkeypatch):
    for k in ("CCAL_TERM_PROVIDER", "CCAL_EPHEMERIS", "CCAL_EPHEMERIS_PATH", "CCAL_MAX_OCCURRENCES", "CCAL_TIMEZONE"):
        monkeypatch.delenv(k, raising=False)
    cfg = CalendarConfig.from_env()
    assert cfg.provider == "lunar"
    assert cfg.recurrence.max_occurrences == 365
    # fixed UTC+8
    assert cfg.solarterm.timezone == "Etc/GMT-8"
    assert term_source_for_config(cfg).name == "lunar"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CCAL_MAX_OCCURRENCES", "50")
    monkeypatch.setenv("CCAL_TIMEZONE", "Asia/Hong_Kong")
    cfg = CalendarConfig.from_env()
    assert cfg.recurrence.max_occurrences == 50
    assert cfg.solarterm.timezone == "Asia/Hong_Kong"


def test_bad_values(monkeypatch):
    monkeypatch.setenv("CCAL_MAX_OCCURRENCES", "lots")
    assert CalendarConfig.from_env().recurrence.max_occurrences == 365
    monkeypatch.setenv("CCAL_TERM_PROVIDER", "vsop")
    with pytest.raises(ValueError):
        CalendarConfig.from_env()
    with pytest.raises(ValueError):
        term_source_for("vsop")


def test_env_truthy(monkeypatch):
    monkeypatch.setenv("CCAL_DEBUG_LUNISOLAR", "yes")
    assert env_truthy("CCAL_DEBUG_LUNISOLAR")
    monkeypatch.setenv("CCAL_DEBUG_LUNISOLAR", "0")
    assert not env_truthy("CCAL_DEBUG_LUNISOLAR")
