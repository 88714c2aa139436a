import pytest

from groupbot.clock import Clock, alert_message
from groupbot.timerparse import filled_cron_timer, filled_timer
from groupbot.timerspec import Timer


@pytest.fixture
def sent():
    return []


@pytest.fixture
def clock(tmp_path, sent):
    c = Clock(tmp_path / "test.db", lambda sid, gid, msg: sent.append((sid, gid, msg)))
    yield c
    c.close()


def test_alert_message_without_url():
    msg = alert_message(Timer(alert="test"))
    assert msg == [
        {"type": "at", "data": {"qq": "all"}},
        {"type": "text", "data": {"text": "test"}},
    ]


def test_alert_message_with_url():
    msg = alert_message(Timer(alert="hi", url="http://img.example.com/a.png"))
    assert len(msg) == 3
    assert msg[2] == {"type": "image", "data": {"file": "http://img.example.com/a.png", "cache": "0"}}


def test_timer_added_to_db_is_listed_after_reload(tmp_path, sent):
    path = tmp_path / "test.db"
    first = Clock(path, lambda *a: sent.append(a))
    first.add_timer_to_db(filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 0, False))
    assert first.list_timers(0) == []
    first.close()
    second = Clock(path, lambda *a: sent.append(a))
    try:
        assert second.list_timers(0) == ["12月1周12:0\n"]
        assert second.get_timer(0).alert == "test"
    finally:
        second.close()


def test_register_assigns_id_and_lists(clock):
    timer = filled_timer(["", "每", "每周", "8", "30", "", "hi"], 0, 1, False)
    assert clock.register_timer(timer, True)
    assert timer.id == timer.timer_id()
    assert clock.get_timer(timer.id) is timer
    assert clock.list_timers(1) == ["每月每周8:30\n"]
    assert clock.list_timers(2) == []


def test_cron_timer_register_and_list(clock):
    timer = filled_cron_timer("0 8 * * *", "morning", "", 0, 5)
    assert clock.register_timer(timer, True)
    assert clock.list_timers(5) == ["0 8 * * *\n"]


def test_invalid_cron_is_rejected(clock):
    timer = filled_cron_timer("bogus", "x", "", 0, 1)
    assert not clock.register_timer(timer, True)
    assert timer.alert != "x"
    assert clock.get_timer(timer.id) is None


def test_cancel_removes_timer_and_row(tmp_path, sent):
    path = tmp_path / "test.db"
    c = Clock(path, lambda *a: sent.append(a))
    timer = filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 3, False)
    assert c.register_timer(timer, True)
    key = timer.id
    assert c.cancel_timer(key)
    assert not timer.en()
    assert c.get_timer(key) is None
    assert not c.cancel_timer(key)
    c.close()
    reopened = Clock(path, lambda *a: sent.append(a))
    try:
        assert reopened.get_timer(key) is None
        assert reopened.list_timers(3) == []
    finally:
        reopened.close()


def test_reregistering_disables_previous(clock):
    parts = ["", "12", "-1", "12", "0", "", "first"]
    first = filled_timer(parts, 0, 7, False)
    second = filled_timer(parts[:6] + ["second"], 0, 7, False)
    assert clock.register_timer(first, True)
    assert clock.register_timer(second, True)
    assert not first.en()
    assert clock.get_timer(second.id) is second
    assert len(clock.list_timers(7)) == 1


def test_disabled_timer_not_started(clock):
    timer = filled_timer(["", "12", "-1", "12", "0"], 0, 9, True)
    assert not clock.register_timer(timer, True)
    assert clock.get_timer(timer.id) is timer


def test_cancel_cron_timer(clock):
    timer = filled_cron_timer("*/5 * * * *", "ping", "", 0, 4)
    clock.register_timer(timer, True)
    assert clock.cancel_timer(timer.id)
    assert clock.list_timers(4) == []