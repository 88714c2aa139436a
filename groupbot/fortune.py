"""Daily fortune slips drawn on themed background images."""

from __future__ import annotations

import hashlib
import io
import zipfile
from dataclasses import dataclass
from os import PathLike
from typing import BinaryIO

from PIL import Image, ImageDraw, ImageFont

THEMES = (
    "车万", "DC4", "爱因斯坦", "星空列车", "樱云之恋", "富婆妹", "李清歌", "公主连结", "原神",
    "明日方舟", "碧蓝航线", "碧蓝幻想", "战双", "阴阳师", "赛马娘", "东方归言录", "奇异恩典",
    "夏日口袋",
)
DEFAULT_THEME = THEMES[0]

TITLE_SIZE = 45
BODY_SIZE = 23
COLUMN_LENGTH = 9
_PADDING = 10
_TITLE_CENTER_X = 140
_TITLE_BASELINE = 112
_BODY_X = 115
_BODY_Y = 320


def theme_index(name: str) -> int:
    """Index of a background theme; ValueError for unknown names."""
    try:
        return THEMES.index(name)
    except ValueError:
        raise ValueError("没有这个底图哦～") from None


def theme_for(data: int) -> str:
    """Theme stored in the low byte of plugin data, defaulting to the first."""
    index = data & 0xFF
    return THEMES[index] if index < len(THEMES) else DEFAULT_THEME


def offset(total: int, now: int, distance: float) -> float:
    """Offset of slot ``now`` (1-based) in a run of ``total`` centred slots."""
    if total % 2 == 0:
        return (now - total // 2 - 1) * distance
    return (now - total // 2 - 1.5) * distance


def rows(total: int, div: int) -> int:
    """Number of groups of ``div`` needed to hold ``total`` items."""
    count, rest = divmod(total, div)
    return count + 1 if rest else count


@dataclass(frozen=True)
class Glyph:
    """One character of the slip text and its baseline position."""

    char: str
    x: float
    y: float


def text_layout(text: str, char_width: float, char_height: float) -> list[Glyph]:
    """Place ``text`` in vertical columns read right to left.

    ``char_width`` and ``char_height`` are the spacing between characters.
    Columns hold nine characters; text of two columns is split evenly, the
    second column aligned to the bottom.
    """
    length = len(text)
    columns = rows(length, COLUMN_LENGTH)
    glyphs = []
    if columns == 2:
        div = rows(length, 2)
        for i, char in enumerate(text):
            column = rows(i + 1, div)
            in_column = min(length - (column - 1) * div, div)
            slot = i % div + 1
            if column == 2:
                slot += COLUMN_LENGTH - in_column
            x = -offset(columns, column, char_width) + _BODY_X
            y = offset(COLUMN_LENGTH, slot, char_height) + _BODY_Y
            glyphs.append(Glyph(char, x, y))
        return glyphs
    for i, char in enumerate(text):
        column = rows(i + 1, COLUMN_LENGTH)
        in_column = min(length - (column - 1) * COLUMN_LENGTH, COLUMN_LENGTH)
        slot = i % COLUMN_LENGTH + 1
        x = -offset(columns, column, char_width) + _BODY_X
        y = offset(in_column, slot, char_height) + _BODY_Y
        glyphs.append(Glyph(char, x, y))
    return glyphs


def cache_key(zip_path: str, index: int, title: str, text: str) -> str:
    """Hex MD5 naming the rendered slip for this background and text."""
    key = f"{zip_path}{index}{title}{text}"
    return hashlib.md5(key.encode("utf-8")).hexdigest()


def pick_background(zip_path: str | PathLike[str], index: int) -> Image.Image:
    """Decode the ``index``-th entry of a theme archive."""
    with zipfile.ZipFile(zip_path) as archive:
        entries = archive.infolist()
        if not 0 <= index < len(entries):
            raise IndexError(f"background {index} out of range 0..{len(entries) - 1}")
        data = archive.read(entries[index])
    with Image.open(io.BytesIO(data)) as image:
        image.load()
        return image.copy()


def draw_fortune(
    background: Image.Image,
    title: str,
    text: str,
    font_path: str | PathLike[str],
    out: BinaryIO,
) -> int:
    """Draw the slip onto ``background``, write it to ``out`` as JPEG, return bytes written.

    The canvas takes the background's height as width and its width as height.
    """
    width, height = background.size
    canvas = Image.new("RGBA", (height, width), (0, 0, 0, 0))
    layer = background.convert("RGBA")
    canvas.paste(layer, (0, 0), layer)
    pen = ImageDraw.Draw(canvas)

    title_font = ImageFont.truetype(str(font_path), TITLE_SIZE)
    title_width = pen.textlength(title, font=title_font)
    pen.text(
        (_TITLE_CENTER_X - title_width / 2, _TITLE_BASELINE),
        title,
        fill=(255, 255, 255, 255),
        font=title_font,
        anchor="ls",
    )

    body_font = ImageFont.truetype(str(font_path), BODY_SIZE)
    char_width = pen.textlength("测", font=body_font) + _PADDING
    char_height = BODY_SIZE * 72 / 96 + _PADDING
    for glyph in text_layout(text, char_width, char_height):
        pen.text((glyph.x, glyph.y), glyph.char, fill=(0, 0, 0, 255), font=body_font, anchor="ls")

    buffer = io.BytesIO()
    canvas.convert("RGB").save(buffer, "JPEG")
    data = buffer.getvalue()
    out.write(data)
    return len(data)