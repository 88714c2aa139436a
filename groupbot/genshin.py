"""Ten-pull character and weapon gacha drawn from a zipped asset pack."""

from __future__ import annotations

import io
import re
import threading
import zipfile
from dataclasses import dataclass, field
from os import PathLike
from random import Random
from typing import IO

from PIL import Image

CANVAS_SIZE = (1920, 1080)
BACKGROUND_COLOR = (50, 50, 50, 255)

# Every entry in the pack sits below a top-level folder of this many characters.
_PREFIX_LEN = 8
_CARD_LEFT = 230
_CARD_STEP = 146
_SHARE_POS = (1270, 945)

_NAME = re.compile(r"_(.*)\.png")
_STAR_FILES = {"ThreeStar.png": 3, "FourStar.png": 4, "FiveStar.png": 5}


def is_five_star_mode(store: int) -> bool:
    """Whether the stored plugin data selects the five-star-only pool."""
    return store & 1 == 1


def set_mode(store: int, five_stars: bool) -> int:
    """Plugin data with the pool switched; the other bits are kept."""
    return store | 1 if five_stars else store & ~1


def reply_text(names: list[str], kind: int, prefix: str) -> str:
    """Announcement of five-star results.

    ``kind`` 1 announces characters, anything else weapons; a weapon heading
    starts on a new line when ``prefix`` already holds text.  Each name is
    the part of the file name between the first underscore and ``.png``.
    """
    if kind == 1:
        parts = ["★五星角色★\n"]
    elif kind == 2 and prefix:
        parts = ["\n★五星武器★\n"]
    else:
        parts = ["★五星武器★\n"]
    for name in names:
        match = _NAME.search(name)
        if match is None:
            raise ValueError(f"no item name in {name!r}")
        parts.append(match.group(1) + " * ")
    return "".join(parts)


@dataclass(frozen=True)
class Card:
    """Asset names making up one drawn card, from bottom layer to top."""

    background: str
    portrait: str
    star: str
    element: str


@dataclass
class DrawResult:
    """The cards of one pull, the five-star announcement and whether to show it."""

    cards: list[Card] = field(default_factory=list)
    text: str = ""
    highlight: bool = False


class GachaArchive:
    """An asset pack opened once and drawn from many times.

    ``total`` counts the normal-pool pulls made so far; every ninth one
    (starting with the first) is guaranteed a five-star item.
    """

    def __init__(self, path: str | PathLike[str] | IO[bytes]) -> None:
        self._zip = zipfile.ZipFile(path)
        self._lock = threading.Lock()
        self._tree: dict[str, list[str]] = {}
        self._infos: dict[str, zipfile.ZipInfo] = {}
        self._stars: dict[int, str] = {}
        self.total = 0
        for info in self._zip.infolist():
            if info.is_dir():
                continue
            name = info.filename[_PREFIX_LEN:]
            self._infos[name] = info
            slash = name.rfind("/")
            if slash < 0:
                self._tree[name] = [name]
                continue
            folder = name[:slash]
            if not folder:
                continue
            self._tree.setdefault(folder, []).append(name)
            if folder == "gacha" and name[slash + 1 :] in _STAR_FILES:
                self._stars[_STAR_FILES[name[slash + 1 :]]] = name

    def __enter__(self) -> GachaArchive:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _pool(self, key: str) -> list[str]:
        pool = self._tree.get(key)
        if not pool:
            raise ValueError(f"asset pack has no {key!r}")
        return pool

    def _pick(self, key: str, rng: Random) -> str:
        pool = self._pool(key)
        return pool[rng.randrange(len(pool))]

    def _star(self, rank: int) -> str:
        try:
            return self._stars[rank]
        except KeyError:
            raise ValueError(f"asset pack has no {rank}-star icon") from None

    def _element(self, portrait: str) -> str:
        start = portrait.rfind("/") + 1
        return self._pool(portrait[start : portrait.find("_")] + ".png")[0]

    def draw(self, count: int = 10, store: int = 0, rng: Random | None = None) -> DrawResult:
        """Draw ``count`` items from the pool that ``store`` selects."""
        rng = rng or Random()
        five_bg = self._pool("five_bg.jpg")[0]
        four_bg = self._pool("four_bg.jpg")[0]
        three_bg = self._pool("three_bg.jpg")[0]

        five_chars: list[str] = []
        five_arms: list[str] = []
        four_chars: list[str] = []
        four_arms: list[str] = []
        three_arms: list[str] = []

        def five_star() -> None:
            if rng.randrange(2) == 0:
                five_chars.append(self._pick("five", rng))
            else:
                five_arms.append(self._pick("five2", rng))

        def four_star() -> None:
            if rng.randrange(2) == 0:
                four_chars.append(self._pick("four", rng))
            else:
                four_arms.append(self._pick("four2", rng))

        with self._lock:
            guaranteed = self.total % 9 == 0
        remaining = count
        if guaranteed:
            five_star()
            remaining -= 1

        if is_five_star_mode(store):
            for _ in range(remaining):
                five_star()
        else:
            # Three stars 80%, four stars 17%, five stars 3%.
            for _ in range(remaining):
                roll = rng.randrange(1000)
                if roll <= 800:
                    three_arms.append(self._pick("Three", rng))
                elif roll <= 885:
                    four_chars.append(self._pick("four", rng))
                elif roll <= 970:
                    four_arms.append(self._pick("four2", rng))
                elif roll <= 985:
                    five_chars.append(self._pick("five", rng))
                else:
                    five_arms.append(self._pick("five2", rng))
            if not four_chars and not four_arms and three_arms:
                three_arms.pop()
                four_star()
            with self._lock:
                self.total += 1

        result = DrawResult()
        groups = (
            (five_chars, 5, five_bg),
            (four_chars, 4, four_bg),
            (five_arms, 5, five_bg),
            (four_arms, 4, four_bg),
            (three_arms, 3, three_bg),
        )
        for items, rank, background in groups:
            if not items:
                continue
            star = self._star(rank)
            result.cards.extend(
                Card(background, item, star, self._element(item)) for item in items
            )
        if five_chars:
            result.text += reply_text(five_chars, 1, result.text)
            result.highlight = True
        if five_arms:
            result.text += reply_text(five_arms, 2, result.text)
            result.highlight = True
        return result

    def _paste(self, canvas: Image.Image, name: str, position: tuple[int, int]) -> None:
        with self._lock:
            data = self._zip.read(self._infos[name])
        with Image.open(io.BytesIO(data)) as image:
            layer = image.convert("RGBA")
        canvas.paste(layer, position, layer)

    def render(self, result: DrawResult) -> Image.Image:
        """Compose the result screen for ``result``."""
        canvas = Image.new("RGBA", CANVAS_SIZE, BACKGROUND_COLOR)
        self._paste(canvas, self._pool("bg0.jpg")[0], (0, 0))
        for i, card in enumerate(result.cards):
            position = (_CARD_LEFT + _CARD_STEP * i, 0)
            for name in (card.background, card.portrait, card.star, card.element):
                self._paste(canvas, name, position)
        self._paste(canvas, self._pool("Reply.png")[0], _SHARE_POS)
        return canvas

    def close(self) -> None:
        self._zip.close()