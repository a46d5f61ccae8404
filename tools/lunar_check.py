"""
Lunar conversion check script.

Prints lunar date, 干支, zodiac, solar term and festivals per Gregorian day,
or converts one lunar date back with --lunar Y-M-D [--leap].
"""

from __future__ import annotations

import argparse

from tools.common import add_common_args, dump_json, iter_dates, resolve_date_range, service_from_args, setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Lunar calendar check")
    add_common_args(parser)
    parser.add_argument("--lunar", help="lunar Y-M-D to convert to Gregorian")
    parser.add_argument("--leap", action="store_true", help="--lunar names a leap month")
    parser.add_argument("--clamp", action="store_true", help="clamp an overlong lunar day")
    args = parser.parse_args()
    setup_logging(args)

    svc = service_from_args(args)

    if args.lunar:
        y, m, d = (int(x) for x in args.lunar.split("-"))
        g = svc.lunar_to_solar(y, m, d, args.leap, clamp=args.clamp)
        if args.json:
            dump_json({"lunar": {"year": y, "month": m, "day": d, "is_leap": args.leap}, "date": g.isoformat()})
        else:
            print(f"{y}-{'闰' if args.leap else ''}{m}-{d}  ->  {g.isoformat()}")
        return

    start, end = resolve_date_range(args)
    if start is None or end is None:
        parser.error("--date, --start/--end or --lunar required")

    rows = []
    for day in iter_dates(start, end):
        info = svc.get_full_date_info(day)
        rows.append(
            {
                "date": day.isoformat(),
                "lunar": svc.format_lunar_date(info.lunar, "full") if info.lunar else None,
                "month_ganzhi": info.lunar.month_ganzhi if info.lunar else None,
                "day_ganzhi": info.lunar.day_ganzhi if info.lunar else None,
                "zodiac": info.lunar.zodiac if info.lunar else None,
                "solar_term": info.solar_term.name if info.solar_term else None,
                "festivals": [f.name for f in info.festivals],
                "display": svc.display_text(info),
            }
        )

    if args.json:
        dump_json({"days": rows})
        return

    for r in rows:
        extra = " ".join(x for x in [r["solar_term"] or "", "／".join(r["festivals"])] if x)
        print(f"{r['date']}  {r['lunar'] or '-'}  {r['month_ganzhi'] or ''}月 {r['day_ganzhi'] or ''}日  {extra}")


if __name__ == "__main__":
    main()
