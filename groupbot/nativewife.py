"""Per-group galleries of "wife" pictures, with a daily pick for each member."""

from __future__ import annotations

import hashlib
import os
import string
from dataclasses import dataclass
from datetime import date
from os import PathLike
from pathlib import Path
from random import Random

NO_WIFE = "一个wife也没有哦~"
NO_NAME = "没有找到wife的名字！"

_DIGITS = string.digits + string.ascii_lowercase


def _base36(value: int) -> str:
    if value < 0:
        return "-" + _base36(-value)
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rest = divmod(value, 36)
        digits.append(_DIGITS[rest])
    return "".join(reversed(digits))


def daily_wife_index(name: str, today: date, count: int) -> int:
    """A stable index in ``range(count)`` for ``name`` on ``today``."""
    if count <= 0:
        raise ValueError("count must be positive")
    key = f"{name}{today.year}{today.month}{today.day}"
    digest = hashlib.md5(key.encode("utf-8")).digest()
    seed = int.from_bytes(digest[:8], "little", signed=True)
    return Random(seed).randrange(count)


def clean_wife_name(text: str, command: str) -> str:
    """The name following ``command`` in ``text``, without spaces or slashes."""
    compact = text.replace(" ", "")
    position = compact.rfind(command)
    if position < 0:
        raise ValueError(f"command {command!r} not found")
    name = compact[position + len(command) :]
    return name.replace("/", "").replace("\\", "")


def everyone_can_add(data: int) -> bool:
    """Whether plugin data lets every member add pictures."""
    return data & 1 == 1


@dataclass(frozen=True)
class WifePick:
    """A picked picture; ``shared`` when the group has only one."""

    name: str
    path: Path
    shared: bool


class WifeGallery:
    """Pictures stored as files in one folder per group below ``base``."""

    def __init__(self, base: str | PathLike[str]) -> None:
        self.base = Path(base)

    def folder(self, group_id: int) -> Path:
        return self.base / _base36(group_id)

    def pick(self, group_id: int, nickname: str, today: date) -> WifePick:
        """Today's picture for ``nickname``; LookupError if the group has none."""
        folder = self.folder(group_id)
        try:
            names = sorted(entry.name for entry in os.scandir(folder))
        except OSError:
            raise LookupError(NO_WIFE) from None
        if not names:
            raise LookupError(NO_WIFE)
        if len(names) == 1:
            return WifePick(names[0], folder / names[0], True)
        chosen = names[daily_wife_index(nickname, today, len(names))]
        return WifePick(chosen, folder / chosen, False)

    def add(self, group_id: int, name: str, data: bytes) -> Path:
        """Store ``data`` as the picture called ``name``."""
        if not name:
            raise ValueError(NO_NAME)
        if "/" in name or "\\" in name:
            raise ValueError(f"invalid name: {name!r}")
        folder = self.folder(group_id)
        folder.mkdir(parents=True, exist_ok=True)
        target = folder / name
        target.write_bytes(data)
        return target

    def remove(self, group_id: int, name: str) -> None:
        """Delete the picture called ``name``; FileNotFoundError if missing."""
        if not name:
            raise ValueError(NO_NAME)
        (self.folder(group_id) / name).unlink()