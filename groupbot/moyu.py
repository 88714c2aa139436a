"""Daily "slacking off" reminder: countdowns to the weekend and public holidays."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

HOLIDAY_NAMES = ("元旦", "春节", "清明节", "劳动节", "端午节", "中秋节", "国庆节")

GREETING = (
    "上午好，摸鱼人！\n工作再累，一定不要忘记摸鱼哦！有事没事起身去茶水间，去厕所，"
    "去廊道走走别老在工位上坐着，钱是老板的,但命是自己的。\n"
)
CLOSING = "上班是帮老板赚钱，摸鱼是赚老板的钱！最后，祝愿天下所有摸鱼人，都能愉快的渡过每一天…"

_RAW_HOLIDAY = re.compile(r"(-?\d+)_(-?\d+)_(-?\d+)_(-?\d+)")


@dataclass(frozen=True)
class Holiday:
    """A holiday starting at local midnight of ``date`` and lasting ``duration``."""

    name: str
    date: datetime
    duration: timedelta

    def describe(self, now: datetime) -> str:
        """How far away the holiday is, whether it is on, or that it is over."""
        until = self.date - now
        if until >= timedelta(0):
            days = until.total_seconds() / 3600 / 24
            return f"距离{self.name}还有: {days:.2f}天！"
        if until + self.duration >= timedelta(0):
            return f"好好享受 {self.name} 假期吧!"
        return f"今年 {self.name} 假期已过"


def parse_holiday(name: str, raw: str) -> Holiday:
    """Build a holiday from ``days_year_month_day`` as stored in the registry."""
    match = _RAW_HOLIDAY.fullmatch(raw.strip())
    if match is None:
        raise ValueError(f"invalid holiday record: {raw!r}")
    days, year, month, day = (int(g) for g in match.groups())
    return Holiday(name, datetime(year, month, day), timedelta(days=days))


def weekend_message(today: datetime) -> str:
    """Countdown to Saturday, or a weekend greeting."""
    weekday = today.isoweekday() % 7
    if weekday in (0, 6):
        return "好好享受周末吧！"
    return f"距离周末还有:{5 - weekday}天！"


def daily_message(today: datetime, holidays: Iterable[Holiday]) -> str:
    """The full reminder text for ``today``."""
    parts = [today.strftime("%Y-%m-%d"), GREETING, weekend_message(today)]
    for holiday in holidays:
        parts.append("\n")
        parts.append(holiday.describe(today))
    parts.append("\n")
    parts.append(CLOSING)
    return "".join(parts)