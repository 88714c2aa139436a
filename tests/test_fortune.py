import io
import zipfile

import pytest
from PIL import Image

from groupbot.fortune import (
    THEMES,
    cache_key,
    draw_fortune,
    offset,
    pick_background,
    rows,
    text_layout,
    theme_for,
    theme_index,
)


def test_theme_index_known_names():
    assert theme_index("车万") == 0
    assert theme_index("夏日口袋") == len(THEMES) - 1
    assert THEMES[theme_index("原神")] == "原神"


def test_theme_index_unknown():
    with pytest.raises(ValueError):
        theme_index("不存在")


def test_theme_for_uses_low_byte_and_default():
    assert theme_for(0x100 | theme_index("星空列车")) == "星空列车"
    assert theme_for(len(THEMES)) == "车万"
    assert theme_for(0xFF) == "车万"


@pytest.mark.parametrize("total", range(1, 40))
@pytest.mark.parametrize("div", [1, 2, 5, 9])
def test_rows_is_ceiling(total, div):
    n = rows(total, div)
    assert n * div >= total
    assert (n - 1) * div < total


@pytest.mark.parametrize("total", range(1, 12))
def test_offset_steps_and_spans_evenly(total):
    for now in range(1, total):
        assert offset(total, now + 1, 3.0) - offset(total, now, 3.0) == pytest.approx(3.0)
    assert offset(total, 1, 3.0) + offset(total, total, 3.0) == pytest.approx(-3.0)


def test_layout_empty():
    assert text_layout("", 20.0, 30.0) == []


def test_layout_single_column():
    text = "一二三四五六七八九"
    glyphs = text_layout(text, 20.0, 30.0)
    assert "".join(g.char for g in glyphs) == text
    assert len({g.x for g in glyphs}) == 1
    for a, b in zip(glyphs, glyphs[1:]):
        assert b.y - a.y == pytest.approx(30.0)


def test_layout_two_columns_bottom_aligned():
    nine = text_layout("一" * 9, 20.0, 30.0)
    twelve = text_layout("二" * 12, 20.0, 30.0)
    assert len(twelve) == 12
    first_column = {g.x for g in twelve[:6]}
    second_column = {g.x for g in twelve[6:]}
    assert len(first_column) == 1 and len(second_column) == 1
    assert first_column.pop() > second_column.pop()
    assert twelve[0].y == pytest.approx(nine[0].y)
    assert twelve[-1].y == pytest.approx(nine[-1].y)


def test_layout_three_columns_right_to_left():
    glyphs = text_layout("三" * 27, 20.0, 30.0)
    xs = [glyphs[0].x, glyphs[9].x, glyphs[18].x]
    assert xs[0] > xs[1] > xs[2]


def test_cache_key():
    assert cache_key("", 0, "", "") == "cfcd208495d565ef66e7dff9f98764da"
    key = cache_key("data/Fortune/车万.zip", 3, "大吉", "签文")
    assert key == cache_key("data/Fortune/车万.zip", 3, "大吉", "签文")
    assert key != cache_key("data/Fortune/车万.zip", 4, "大吉", "签文")
    assert len(key) == 32 and all(c in "0123456789abcdef" for c in key)


def _png(color):
    buf = io.BytesIO()
    Image.new("RGB", (6, 4), color).save(buf, "PNG")
    return buf.getvalue()


def test_pick_background(tmp_path):
    path = tmp_path / "theme.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("a.png", _png((10, 20, 30)))
        zf.writestr("b.png", _png((40, 50, 60)))
    image = pick_background(path, 1)
    assert image.size == (6, 4)
    assert image.convert("RGB").getpixel((0, 0)) == (40, 50, 60)
    with pytest.raises(IndexError):
        pick_background(path, 2)


def test_draw_fortune_missing_font(tmp_path):
    out = io.BytesIO()
    background = Image.new("RGB", (40, 30), (255, 255, 255))
    with pytest.raises(OSError):
        draw_fortune(background, "大吉", "今日宜摸鱼", tmp_path / "missing.ttf", out)
    assert out.getvalue() == b""