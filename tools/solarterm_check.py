"""
Solar term (二十四节气) check script.
"""

from __future__ import annotations

import argparse

from ccal.features.solar_terms import solar_terms_for_year
from tools.common import add_common_args, dump_json, resolve_date_range, service_from_args, setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Solar term check")
    add_common_args(parser)
    parser.add_argument("--year", type=int, help="list all 24 terms of a Gregorian year")
    args = parser.parse_args()
    setup_logging(args)

    start, end = resolve_date_range(args)
    if args.year:
        start, end = None, None
        years = [args.year]
    elif start is not None and end is not None:
        years = list(range(start.year, end.year + 1))
    else:
        parser.error("--year, --date or --start/--end required")

    svc = service_from_args(args)

    rows = []
    for y in years:
        for t in solar_terms_for_year(y, source=svc.source, config=svc.config.solarterm):
            if start is not None and end is not None and not (start <= t.date <= end):
                continue
            rows.append(
                {
                    "name": t.name,
                    "kind": t.kind,
                    "degree": t.longitude,
                    "date": t.date.isoformat(),
                    "at_utc": t.instant_utc.isoformat(),
                }
            )

    if args.json:
        dump_json({"provider": svc.source.name, "terms": rows})
        return

    for r in rows:
        print(f"{r['date']}  {r['name']}  {r['kind']:<3}  deg={r['degree']:03d}  at={r['at_utc']}")


if __name__ == "__main__":
    main()
