from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, timedelta
from typing import Iterable, Optional, Tuple

from ccal.core.config import CalendarConfig, SolarTermConfig, DEFAULT_TIMEZONE
from ccal.features.date_info import LunarCalendarService


def add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--date", help="YYYY-MM-DD")
    parser.add_argument("--start", help="YYYY-MM-DD")
    parser.add_argument("--end", help="YYYY-MM-DD")
    parser.add_argument("--tz", default="", help=f"wall clock solar terms are dated on (default {DEFAULT_TIMEZONE})")
    parser.add_argument("--provider", choices=("lunar", "skyfield"), default="")
    parser.add_argument("--ephemeris", default="")
    parser.add_argument("--ephemeris-path", default="")
    parser.add_argument("--json", action="store_true")
    parser.add_argument("--verbose", action="store_true")


def parse_date(s: str) -> date:
    return date.fromisoformat(s)


def iter_dates(start: date, end: date) -> Iterable[date]:
    cur = start
    while cur <= end:
        yield cur
        cur = cur + timedelta(days=1)


def resolve_date_range(args: argparse.Namespace) -> Tuple[Optional[date], Optional[date]]:
    if args.start and args.end:
        return parse_date(args.start), parse_date(args.end)
    if args.date:
        d = parse_date(args.date)
        return d, d
    return None, None


def config_from_args(args: argparse.Namespace) -> CalendarConfig:
    """CLI flags override CalendarConfig.from_env()."""
    base = CalendarConfig.from_env()
    return CalendarConfig(
        provider=args.provider or base.provider,
        ephemeris=args.ephemeris.strip() or base.ephemeris,
        ephemeris_path=args.ephemeris_path.strip() or base.ephemeris_path,
        solarterm=SolarTermConfig(timezone=args.tz or base.solarterm.timezone),
        recurrence=base.recurrence,
    )


def service_from_args(args: argparse.Namespace) -> LunarCalendarService:
    cfg = config_from_args(args)
    try:
        return LunarCalendarService(cfg)
    except FileNotFoundError as e:
        skip(str(e))
        raise


def setup_logging(args: argparse.Namespace) -> None:
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def dump_json(obj: object) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


def skip(msg: str) -> None:
    print(f"SKIP: {msg}")
    sys.exit(0)
