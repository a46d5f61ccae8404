# src/ccal/features/config.py
"""
Feature-level constants and label helpers.

- 二十四节气: 0..345 deg (15-deg step) => name / kind (jie|qi) / n (0..23)
- 农历 labels: month names (正月..腊月, 闰 prefix), day names (初一..三十), year digits
- 干支 / 生肖 tables
- festival tables (traditional lunar, solar-term, modern Gregorian)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

# ============================================================
# 二十四节气 (24 solar terms)
#   n = (deg_norm / 15) % 24
#   kind:
#     n even -> "qi"  (中气, multiples of 30 deg)
#     n odd  -> "jie" (节, month boundaries for 干支 months)
# ============================================================

SOLAR_TERMS: List[Tuple[int, str]] = [
    (0,   "春分"),
    (15,  "清明"),
    (30,  "谷雨"),
    (45,  "立夏"),
    (60,  "小满"),
    (75,  "芒种"),
    (90,  "夏至"),
    (105, "小暑"),
    (120, "大暑"),
    (135, "立秋"),
    (150, "处暑"),
    (165, "白露"),
    (180, "秋分"),
    (195, "寒露"),
    (210, "霜降"),
    (225, "立冬"),
    (240, "小雪"),
    (255, "大雪"),
    (270, "冬至"),
    (285, "小寒"),
    (300, "大寒"),
    (315, "立春"),
    (330, "雨水"),
    (345, "惊蛰"),
]

SOLAR_TERM_NAME_BY_DEG: Dict[int, str] = {deg: name for deg, name in SOLAR_TERMS}

# jie in 干支-month order: 立春 opens 寅 month
JIE_DEGS_FROM_LICHUN: Tuple[int, ...] = (315, 345, 15, 45, 75, 105, 135, 165, 195, 225, 255, 285)
LICHUN_DEG = 315

TERM_KIND_JIE = "jie"
TERM_KIND_QI = "qi"


def normalize_term_deg(deg: float) -> int:
    """
    Normalize arbitrary degree value into one of 0, 15, ..., 345.
    """
    d = float(deg) % 360.0
    k = int(round(d / 15.0)) % 24
    return k * 15


def term_kind_from_deg(deg: float) -> str:
    n = normalize_term_deg(deg) // 15
    return TERM_KIND_QI if n % 2 == 0 else TERM_KIND_JIE


def term_name_from_deg(deg: float) -> str:
    deg_norm = normalize_term_deg(deg)
    try:
        return SOLAR_TERM_NAME_BY_DEG[deg_norm]
    except KeyError as e:
        raise KeyError(f"Unknown solar term degree after normalization: deg={deg} -> {deg_norm}") from e


@dataclass(frozen=True)
class TermInfo:
    n: int
    deg: int
    kind: str
    name: str


def term_info_from_deg(deg: float) -> TermInfo:
    deg_norm = normalize_term_deg(deg)
    return TermInfo(
        n=deg_norm // 15,
        deg=deg_norm,
        kind=term_kind_from_deg(deg_norm),
        name=SOLAR_TERM_NAME_BY_DEG[deg_norm],
    )


# ============================================================
# 农历 labels
# ============================================================

LUNAR_MONTH_NAMES: Tuple[str, ...] = (
    "正月", "二月", "三月", "四月", "五月", "六月",
    "七月", "八月", "九月", "十月", "冬月", "腊月",
)

_DAY_DIGITS: Tuple[str, ...] = ("一", "二", "三", "四", "五", "六", "七", "八", "九", "十")
_YEAR_DIGITS: Tuple[str, ...] = ("〇", "一", "二", "三", "四", "五", "六", "七", "八", "九")


def lunar_month_name(month: int, is_leap: bool = False) -> str:
    m = int(month)
    if not (1 <= m <= 12):
        raise ValueError(f"invalid lunar month: {month}")
    base = LUNAR_MONTH_NAMES[m - 1]
    return f"闰{base}" if is_leap else base


def lunar_day_name(day: int) -> str:
    """初一..初十, 十一..二十, 廿一..廿九, 三十"""
    d = int(day)
    if not (1 <= d <= 30):
        raise ValueError(f"invalid lunar day: {day}")
    if d <= 10:
        return "初" + _DAY_DIGITS[d - 1]
    if d < 20:
        return "十" + _DAY_DIGITS[d - 11]
    if d == 20:
        return "二十"
    if d < 30:
        return "廿" + _DAY_DIGITS[d - 21]
    return "三十"


def lunar_year_digits(year: int) -> str:
    """2026 -> 二〇二六"""
    return "".join(_YEAR_DIGITS[int(c)] for c in str(int(year)))


# ============================================================
# 干支 / 生肖
# ============================================================

HEAVENLY_STEMS: Tuple[str, ...] = ("甲", "乙", "丙", "丁", "戊", "己", "庚", "辛", "壬", "癸")
EARTHLY_BRANCHES: Tuple[str, ...] = ("子", "丑", "寅", "卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥")
ZODIAC_ANIMALS: Tuple[str, ...] = ("鼠", "牛", "虎", "兔", "龙", "蛇", "马", "羊", "猴", "鸡", "狗", "猪")


def ganzhi_from_index(i: int) -> str:
    """0 -> 甲子 ... 59 -> 癸亥"""
    k = int(i) % 60
    return HEAVENLY_STEMS[k % 10] + EARTHLY_BRANCHES[k % 12]


def ganzhi_from_stem_branch(stem: int, branch: int) -> str:
    return HEAVENLY_STEMS[int(stem) % 10] + EARTHLY_BRANCHES[int(branch) % 12]


# ============================================================
# festivals
#   order of tagging on one day: traditional, solar_term, modern
#   traditional festivals never fall in a leap month
# ============================================================

FESTIVAL_TRADITIONAL = "traditional"
FESTIVAL_SOLAR_TERM = "solar_term"
FESTIVAL_MODERN = "modern"

TRADITIONAL_FESTIVALS: List[Tuple[Tuple[int, int], str]] = [
    ((1, 1),   "春节"),
    ((1, 15),  "元宵节"),
    ((2, 2),   "龙抬头"),
    ((5, 5),   "端午节"),
    ((7, 7),   "七夕节"),
    ((7, 15),  "中元节"),
    ((8, 15),  "中秋节"),
    ((9, 9),   "重阳节"),
    ((12, 8),  "腊八节"),
]

# last day of lunar month 12, whether it is the 29th or the 30th
NEW_YEARS_EVE = "除夕"

SOLAR_TERM_FESTIVALS: Tuple[str, ...] = ("清明", "冬至")

MODERN_FESTIVALS: List[Tuple[Tuple[int, int], str]] = [
    ((1, 1),   "元旦"),
    ((5, 1),   "劳动节"),
    ((10, 1),  "国庆节"),
]
