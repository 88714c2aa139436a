"""Reminder timers whose schedule is packed into a single integer."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

_ENABLE_BIT = 0x800000
_MASK24 = 0xFFFFFF

# field name -> (shift, width mask); an all-ones field means "every".
_FIELDS = {
    "month": (19, 0xF),
    "day": (14, 0x1F),
    "week": (11, 0x7),
    "hour": (6, 0x1F),
    "minute": (0, 0x3F),
}


@dataclass
class Timer:
    """A group reminder.

    ``emdwhm`` packs, from the high bit down: enabled (1 bit), month (4),
    day (5), weekday (3, Sunday is 0), hour (5) and minute (6).  A field
    whose bits are all set reads as -1, meaning "every".
    """

    id: int = 0
    emdwhm: int = 0
    self_id: int = 0
    group_id: int = 0
    alert: str = ""
    cron: str = ""
    url: str = ""

    def _field(self, name: str) -> int:
        shift, width = _FIELDS[name]
        value = (self.emdwhm >> shift) & width
        return -1 if value == width else value

    def _set(self, name: str, value: int) -> None:
        shift, width = _FIELDS[name]
        mask = width << shift
        self.emdwhm = ((value << shift) & mask) | (self.emdwhm & (_MASK24 & ~mask))

    def _set_en(self, enabled: bool) -> None:
        if enabled:
            self.emdwhm |= _ENABLE_BIT
        else:
            self.emdwhm &= 0x7FFFFF

    def en(self) -> bool:
        """Whether the timer is enabled."""
        return self.emdwhm & _ENABLE_BIT != 0

    def month(self) -> int:
        return self._field("month")

    def day(self) -> int:
        return self._field("day")

    def week(self) -> int:
        return self._field("week")

    def hour(self) -> int:
        return self._field("hour")

    def minute(self) -> int:
        return self._field("minute")

    def timer_info(self) -> str:
        """Normalised description used to derive the timer id."""
        if self.cron:
            return f"[{self.group_id}]{self.cron}"
        return (
            f"[{self.group_id}]{self.month()}月{self.day()}日"
            f"{self.week()}周{self.hour()}:{self.minute()}"
        )

    def timer_id(self) -> int:
        """First four bytes of the MD5 of ``timer_info``, little endian."""
        digest = hashlib.md5(self.timer_info().encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "little")