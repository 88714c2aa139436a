"""Build timers from the pieces of a reminder command."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Sequence

from groupbot.timerspec import Timer

_CHAR_VALUES = {ch: i for i, ch in enumerate("零一二三四五六七八九十")}
_EVERY = "每"
_ASCII_NUMBER = re.compile(r"[0-9]+")


def chinese_char_to_int(c: str) -> int:
    """Map a single Chinese numeral to 0..10; 日 and 天 mean 7, anything else 0."""
    if c in ("日", "天"):
        return 7
    return _CHAR_VALUES.get(c, 0)


def chinese_num_to_int(s: str) -> int:
    """Convert a one- or two-character number.

    Arabic digits are read directly (0 if they do not parse), 每 alone is -1
    and 每 followed by a numeral is its negation.
    """
    if not s:
        raise ValueError("empty number")
    first = s[0]
    if unicodedata.category(first) == "Nd":
        return int(s) if _ASCII_NUMBER.fullmatch(s) else 0
    if first == _EVERY:
        return -chinese_char_to_int(s[1]) if len(s) == 2 else -1
    if len(s) == 1:
        return chinese_char_to_int(first)
    tens = chinese_char_to_int(first)
    if tens != 10:
        tens *= 10
    ones = chinese_char_to_int(s[1])
    if ones == 10:
        ones = 0
    return tens + ones


def _drop_middle_ten(text: str) -> str:
    return text[0] + text[2] if len(text) == 3 else text


def _check_day(day: int, message: str) -> int:
    if (day != -1 and day <= 0) or day > 31:
        raise ValueError(message)
    return day


def filled_timer(
    date_strs: Sequence[str],
    bot_id: int,
    group_id: int,
    match_date_only: bool,
) -> Timer:
    """Build a timer from the captured month, day/week, hour, minute, url and alert.

    Raises ValueError with a descriptive message when a part is out of range.
    With ``match_date_only`` the url and alert are ignored and the timer stays
    disabled, which is what cancelling needs.
    """
    month_str, day_week, hour_str, minute_str = date_strs[1:5]
    timer = Timer()

    month = chinese_num_to_int(month_str)
    if (month != -1 and month <= 0) or month > 12:
        raise ValueError("月份非法！")
    timer._set("month", month)

    if len(day_week) == 4:
        timer._set("day", _check_day(chinese_num_to_int(day_week[0] + day_week[2]), "日期非法1！"))
    elif day_week.endswith("日"):
        timer._set("day", _check_day(chinese_num_to_int(day_week[:-1]), "日期非法2！"))
    elif day_week.startswith(_EVERY):
        timer._set("week", -1)
    else:
        week = chinese_num_to_int(day_week[1:])
        if week == 7:
            week = 0
        if not 0 <= week <= 6:
            raise ValueError("星期非法！")
        timer._set("week", week)

    hour = chinese_num_to_int(_drop_middle_ten(hour_str))
    if hour < -1 or hour > 23:
        raise ValueError("小时非法！")
    timer._set("hour", hour)

    minute = chinese_num_to_int(_drop_middle_ten(minute_str))
    if minute < -1 or minute > 59:
        raise ValueError("分钟非法！")
    timer._set("minute", minute)

    if not match_date_only:
        url_str = date_strs[5]
        if url_str:
            timer.url = url_str[1:]
            if not timer.url.startswith("http"):
                raise ValueError("url非法！")
        timer.alert = date_strs[6]
        timer._set_en(True)

    timer.self_id = bot_id
    timer.group_id = group_id
    return timer


def filled_cron_timer(cron: str, alert: str, url: str, bot_id: int, group_id: int) -> Timer:
    """Build a timer driven by a cron expression."""
    return Timer(alert=alert, cron=cron, url=url, self_id=bot_id, group_id=group_id)