# src/ccal/core/providers/lunar_provider.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Tuple

from lunar_python import Solar

log = logging.getLogger(__name__)

# lunar_python reports every instant on China Standard Time
CST = timezone(timedelta(hours=8))

# jieqi table key -> solar longitude (deg)
# the pinyin keys are the terms of the neighbouring years carried by the table
JIEQI_DEG: Dict[str, int] = {
    "春分": 0, "清明": 15, "谷雨": 30, "立夏": 45, "小满": 60, "芒种": 75,
    "夏至": 90, "小暑": 105, "大暑": 120, "立秋": 135, "处暑": 150, "白露": 165,
    "秋分": 180, "寒露": 195, "霜降": 210, "立冬": 225, "小雪": 240, "大雪": 255,
    "冬至": 270, "小寒": 285, "大寒": 300, "立春": 315, "雨水": 330, "惊蛰": 345,
    "DA_XUE": 255,
    "DONG_ZHI": 270,
    "XIAO_HAN": 285,
    "DA_HAN": 300,
    "LI_CHUN": 315,
    "YU_SHUI": 330,
    "JING_ZHE": 345,
}


def solar_to_utc(s) -> datetime:
    """lunar_python Solar (CST wall clock) -> aware UTC datetime."""
    base = datetime(s.getYear(), s.getMonth(), 1, tzinfo=CST)
    t = base + timedelta(
        days=s.getDay() - 1,
        hours=s.getHour(),
        minutes=s.getMinute(),
        seconds=s.getSecond(),
    )
    return t.astimezone(timezone.utc)


@dataclass(frozen=True)
class LunarPythonTermSource:
    """
    Solar-term instants from lunar_python's jieqi tables (寿星 algorithm).

    No ephemeris file needed. The table of lunar year Y runs from 大雪 of
    Y-1 to 惊蛰 of Y+1, so it holds every term dated in Gregorian year Y.
    """

    name: str = "lunar"

    def term_instants(self, year: int, config: object = None) -> List[Tuple[int, datetime]]:
        # 7/1 always lies inside lunar year `year`
        table = Solar.fromYmd(int(year), 7, 1).getLunar().getJieQiTable()

        out: List[Tuple[int, datetime]] = []
        for key, s in table.items():
            deg = JIEQI_DEG.get(key)
            if deg is None:
                log.warning("unknown jieqi table key %r (year=%d)", key, year)
                continue
            out.append((deg, solar_to_utc(s)))

        out.sort(key=lambda x: x[1])
        return out
