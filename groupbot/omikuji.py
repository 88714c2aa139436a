"""Senso-ji fortune slips: slip images and their interpretations."""

from __future__ import annotations

import sqlite3
from os import PathLike

SLIP_COUNT = 100
IMAGE_BED = "https://gitcode.net/u011570312/senso-ji-omikuji/-/raw/main/{}_{}.jpg"


def _check(number: int) -> None:
    if not 1 <= number <= SLIP_COUNT:
        raise ValueError(f"slip number {number} out of range 1..{SLIP_COUNT}")


def omikuji_image_urls(number: int) -> tuple[str, str]:
    """Front and back image URLs of slip ``number`` (1..100)."""
    _check(number)
    return IMAGE_BED.format(number, 0), IMAGE_BED.format(number, 1)


class KujiStore:
    """SQLite table of slip interpretations keyed by slip number."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        with self._db:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS kuji (id INTEGER PRIMARY KEY, text TEXT NOT NULL)"
            )

    def __enter__(self) -> KujiStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get(self, number: int) -> str:
        """The interpretation of slip ``number``; LookupError if absent."""
        row = self._db.execute("SELECT text FROM kuji WHERE id = ?", (number,)).fetchone()
        if row is None:
            raise LookupError(f"no interpretation for slip {number}")
        return row[0]

    def count(self) -> int:
        return self._db.execute("SELECT COUNT(*) FROM kuji").fetchone()[0]

    def close(self) -> None:
        self._db.close()