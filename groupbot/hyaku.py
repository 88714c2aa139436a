"""The Ogura Hyakunin Isshu: one hundred poems read from a CSV file."""

from __future__ import annotations

import csv
from dataclasses import astuple, dataclass
from os import PathLike

POEM_COUNT = 100

_LABELS = (
    ("●", "番号"),
    ("◉", "歌人"),
    ("○", "上の句"),
    ("○", "下の句"),
    ("◎", "上の句ひらがな"),
    ("◎", "下の句ひらがな"),
)


@dataclass(frozen=True)
class Poem:
    """One poem: its number, poet, both verses and their kana readings."""

    number: str
    poet: str
    upper: str
    lower: str
    upper_kana: str
    lower_kana: str

    def __str__(self) -> str:
        return "".join(
            f"{mark}{label}：{value}\n"
            for (mark, label), value in zip(_LABELS, astuple(self))
        )


def load_poems(path: str | PathLike[str]) -> list[Poem]:
    """Read the poems after the title row; the file must hold exactly 1..100 in order."""
    with open(path, newline="", encoding="utf-8") as handle:
        records = list(csv.reader(handle))[1:]
    if len(records) != POEM_COUNT:
        raise ValueError("invalid csvfile")
    poems = []
    for position, record in enumerate(records):
        if len(record) != len(_LABELS):
            raise ValueError("invalid csvfile")
        if int(record[0]) - 1 != position:
            raise ValueError("invalid csvfile")
        poems.append(Poem(*record))
    return poems


def poem_images(number: int) -> tuple[str, str]:
    """Paths, relative to the image host, of a poem's card picture and calligraphy."""
    if not 1 <= number <= POEM_COUNT:
        raise ValueError("超出范围")
    return f"img/{number:03d}.jpg", f"img/{number:03d}.png"