import pytest

from groupbot.timerparse import (
    chinese_char_to_int,
    chinese_num_to_int,
    filled_cron_timer,
    filled_timer,
)
from groupbot.timerspec import Timer


def strs(month, day_week, hour, minute, url="", alert="test"):
    return ["", month, day_week, hour, minute, url, alert]


@pytest.mark.parametrize("n", [0, 5, 23, 59])
def test_arabic_digits_round_trip(n):
    assert chinese_num_to_int(str(n)) == n


def test_every_prefix():
    assert chinese_num_to_int("每") == -1
    assert chinese_num_to_int("每二") == -2


def test_two_character_numbers():
    assert chinese_num_to_int("十二") == 12
    assert chinese_num_to_int("十") == 10


def test_sunday_characters_and_unknown():
    assert chinese_char_to_int("日") == 7
    assert chinese_char_to_int("天") == 7
    assert chinese_char_to_int("x") == 0


def test_empty_number_raises():
    with pytest.raises(ValueError):
        chinese_num_to_int("")


def test_source_example_timer():
    t = filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 0, False)
    assert t.en()
    assert t.month() == 12
    assert t.hour() == 12
    assert t.minute() == 0
    assert t.week() == 1
    assert t.alert == "test"


def test_chinese_and_arabic_forms_agree():
    a = filled_timer(strs("十二", "二十五日", "二十三", "五十九"), 1, 2, False)
    b = filled_timer(strs("12", "25日", "23", "59"), 1, 2, False)
    assert a.emdwhm == b.emdwhm
    assert a.timer_id() == b.timer_id()


def test_hour_with_middle_ten():
    assert filled_timer(strs("1", "1日", "二十三", "0"), 0, 0, False).hour() == 23


def test_invalid_month_raises():
    with pytest.raises(ValueError, match="月份非法"):
        filled_timer(strs("13", "1日", "1", "1"), 0, 0, False)
    with pytest.raises(ValueError, match="月份非法"):
        filled_timer(strs("每二", "1日", "1", "1"), 0, 0, False)


def test_invalid_hour_and_minute_raise():
    with pytest.raises(ValueError, match="小时非法"):
        filled_timer(strs("1", "1日", "24", "1"), 0, 0, False)
    with pytest.raises(ValueError, match="分钟非法"):
        filled_timer(strs("1", "1日", "1", "60"), 0, 0, False)


def test_sunday_is_week_zero():
    t = filled_timer(strs("每", "周日", "8", "0"), 0, 0, False)
    assert t.week() == 0
    assert t.month() == -1


def test_every_week():
    t = filled_timer(strs("每", "每周", "8", "0"), 0, 0, False)
    assert t.week() == -1
    assert t.day() == 0


def test_url_is_taken_after_marker():
    t = filled_timer(strs("1", "1日", "1", "1", url="用http://example.com/a.png"), 0, 0, False)
    assert t.url == "http://example.com/a.png"


def test_illegal_url_raises():
    with pytest.raises(ValueError, match="url"):
        filled_timer(strs("1", "1日", "1", "1", url="用ftp://example.com"), 0, 0, False)


def test_match_date_only_keeps_timer_disabled():
    t = filled_timer(strs("1", "1日", "1", "1", url="用bad", alert="x"), 5, 6, True)
    assert not t.en()
    assert t.alert == ""
    assert (t.self_id, t.group_id) == (5, 6)


def test_cron_timer_fields_and_id():
    t = filled_cron_timer("0 8 * * *", "wake", "http://example.com", 1, 5)
    assert (t.cron, t.alert, t.url, t.self_id, t.group_id) == (
        "0 8 * * *",
        "wake",
        "http://example.com",
        1,
        5,
    )
    assert t.timer_id() == Timer(cron="0 8 * * *", group_id=5).timer_id()