import pytest

from groupbot.nsfw import Scores, auto_judge, judge


def test_neutral_picture_is_ordinary():
    assert judge(Scores(neutral=0.9)) == "普通哦"


def test_neutral_picture_has_no_auto_verdict():
    assert auto_judge(Scores(neutral=0.9, porn=0.9)) is None


def test_judge_drawing_with_flags():
    result = judge(Scores(drawings=0.5, hentai=0.5, porn=0.4, sexy=0.35))
    assert result.startswith("二次元")
    assert result.split() == ["二次元", "hentai", "porn", "hso"]


def test_judge_low_neutral_counts_as_drawing():
    assert judge(Scores(neutral=0.1)).split() == ["二次元"]


def test_judge_exact_threshold_is_real_photo():
    assert judge(Scores(neutral=0.3, sexy=0.5)).split() == ["三次元", "hso"]


def test_auto_judge_needs_a_flag():
    assert auto_judge(Scores(drawings=0.9)) is None


def test_auto_judge_real_photo():
    assert auto_judge(Scores(porn=0.8)).split() == ["三次元", "porn"]


@pytest.mark.parametrize(
    "scores",
    [Scores(drawings=0.9, hentai=0.9), Scores(sexy=0.5, porn=0.5), Scores(hentai=0.31)],
)
def test_auto_judge_agrees_with_judge_flags(scores):
    auto = auto_judge(scores)
    manual = judge(scores)
    assert auto.split()[1:] == manual.split()[1:]