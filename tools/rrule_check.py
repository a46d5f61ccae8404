"""
Recurrence rule check script: canonical text, summary, expansion.
"""

from __future__ import annotations

import argparse
from datetime import datetime

from ccal.core.config import CalendarConfig
from ccal.core.errors import MalformedRuleError
from ccal.recurrence.expand import expand
from ccal.recurrence.rules import generate_rule, load_rule
from ccal.recurrence.summary import human_readable_summary
from tools.common import dump_json


def main() -> None:
    parser = argparse.ArgumentParser(description="RRULE expansion check")
    parser.add_argument("rule", help="RRULE text, e.g. FREQ=WEEKLY;BYDAY=MO,WE,FR;COUNT=10")
    parser.add_argument("--anchor", required=True, help="ISO datetime, e.g. 2026-01-05T09:00:00+08:00")
    parser.add_argument("--max", type=int, default=0, help="cap (default CCAL_MAX_OCCURRENCES or 365)")
    parser.add_argument("--lang", choices=("en", "zh"), default="en")
    parser.add_argument("--json", action="store_true")
    args = parser.parse_args()

    try:
        rule = load_rule(args.rule)
    except MalformedRuleError as e:
        parser.error(str(e))

    cap = args.max or CalendarConfig.from_env().recurrence.max_occurrences
    occ = expand(datetime.fromisoformat(args.anchor), rule, cap)

    if args.json:
        dump_json(
            {
                "rule": generate_rule(rule),
                "summary": human_readable_summary(rule, args.lang),
                "occurrences": [t.isoformat() for t in occ],
            }
        )
        return

    print(f"# {generate_rule(rule)}  ({human_readable_summary(rule, args.lang)})")
    for t in occ:
        print(t.isoformat())


if __name__ == "__main__":
    main()
