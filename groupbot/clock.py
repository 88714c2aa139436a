"""Persistent reminder clock that fires timers to a group."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Callable
from datetime import datetime
from os import PathLike
from typing import Any

from groupbot.cron import CronSchedule
from groupbot.timerspec import Timer
from groupbot.wakeup import is_due, next_wake_time

logger = logging.getLogger(__name__)

Message = list[dict[str, Any]]
Sender = Callable[[int, int, Message], None]

# Longest single wait, so that clock changes are noticed.
_MAX_WAIT = 60.0

_COLUMNS = "id, emdwhm, sid, gid, alert, cron, url"


def alert_message(timer: Timer) -> Message:
    """Message segments for a reminder: @all, the alert, and the image if any."""
    segments: Message = [
        {"type": "at", "data": {"qq": "all"}},
        {"type": "text", "data": {"text": timer.alert}},
    ]
    if timer.url:
        segments.append({"type": "image", "data": {"file": timer.url, "cache": "0"}})
    return segments


def _sleep_until(target: datetime, stop: threading.Event) -> bool:
    """Wait until ``target``; False if ``stop`` was set first."""
    while True:
        remaining = (target - datetime.now()).total_seconds()
        if remaining <= 0:
            return not stop.is_set()
        if stop.wait(min(remaining, _MAX_WAIT)):
            return False


class Clock:
    """Keeps timers in a SQLite table and runs each one in a background thread.

    ``send(self_id, group_id, message)`` is called whenever a timer fires.
    """

    def __init__(self, db_path: str | PathLike[str], send: Sender) -> None:
        self._send = send
        self._lock = threading.RLock()
        self._db = sqlite3.connect(str(db_path), check_same_thread=False)
        self._db.execute(
            "CREATE TABLE IF NOT EXISTS timer ("
            "id INTEGER PRIMARY KEY, emdwhm INTEGER NOT NULL, sid INTEGER NOT NULL, "
            "gid INTEGER NOT NULL, alert TEXT NOT NULL, cron TEXT NOT NULL, url TEXT NOT NULL)"
        )
        self._db.commit()
        self._timers: dict[int, Timer] = {}
        self._stops: dict[int, threading.Event] = {}
        for row in self._db.execute(f"SELECT {_COLUMNS} FROM timer").fetchall():
            self.register_timer(Timer(*row), save=False)

    def __enter__(self) -> Clock:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _fire(self, timer: Timer) -> None:
        try:
            self._send(timer.self_id, timer.group_id, alert_message(timer))
        except Exception:
            logger.exception("sending reminder %08x failed", timer.id)

    def _run_cron(self, timer: Timer, schedule: CronSchedule, stop: threading.Event) -> None:
        while True:
            if not _sleep_until(schedule.next_after(datetime.now()), stop):
                return
            self._fire(timer)

    def _run_packed(self, timer: Timer, stop: threading.Event) -> None:
        while timer.en():
            target = next_wake_time(timer, datetime.now())
            logger.debug("timer %08x sleeps until %s", timer.id, target)
            if not _sleep_until(target, stop):
                return
            if is_due(timer, datetime.now()):
                self._fire(timer)

    def _start(self, key: int, target: Callable[..., None], *args: Any) -> None:
        stop = threading.Event()
        with self._lock:
            previous = self._stops.pop(key, None)
            if previous is not None:
                previous.set()
            self._stops[key] = stop
        threading.Thread(target=target, args=(*args, stop), daemon=True).start()

    def _stop(self, key: int) -> None:
        with self._lock:
            stop = self._stops.pop(key, None)
        if stop is not None:
            stop.set()

    def register_timer(self, timer: Timer, save: bool = True) -> bool:
        """Schedule ``timer``; with ``save`` its id is derived and it is stored.

        A timer already registered under the same id is disabled.  Returns
        False when the cron expression is invalid (its message then replaces
        the alert) or when a packed timer is not enabled.
        """
        if save:
            timer.id = timer.timer_id()
        key = timer.id
        existing = self.get_timer(key)
        if existing is not None and existing is not timer:
            existing._set_en(False)
            self._stop(key)
        logger.info("registering timer %08x", key)
        if timer.cron:
            try:
                schedule = CronSchedule(timer.cron)
            except ValueError as exc:
                timer.alert = str(exc)
                return False
            if save:
                self.add_timer_to_db(timer)
            self.add_timer_to_map(timer)
            self._start(key, self._run_cron, timer, schedule)
            return True
        if save:
            self.add_timer_to_db(timer)
        self.add_timer_to_map(timer)
        if not timer.en():
            return False
        self._start(key, self._run_packed, timer)
        return True

    def cancel_timer(self, key: int) -> bool:
        """Stop and forget the timer with ``key``; False if there is none."""
        timer = self.get_timer(key)
        if timer is None:
            return False
        if not timer.cron:
            timer._set_en(False)
        self._stop(key)
        with self._lock:
            self._timers.pop(key, None)
            self._db.execute("DELETE FROM timer WHERE id = ?", (key,))
            self._db.commit()
        return True

    def list_timers(self, group_id: int) -> list[str]:
        """Readable schedules of the group's timers, one line each."""
        with self._lock:
            timers = [t for t in self._timers.values() if t.group_id == group_id]
        lines = []
        for timer in timers:
            info = timer.timer_info()
            text = info[info.index("]") + 1 :] + "\n"
            text = text.replace("-1", "每")
            text = text.replace("月0日0周", "月周天")
            text = text.replace("月0日", "月")
            text = text.replace("日0周", "日")
            lines.append(text)
        return lines

    def get_timer(self, key: int) -> Timer | None:
        with self._lock:
            return self._timers.get(key)

    def add_timer_to_db(self, timer: Timer) -> None:
        """Store ``timer``, replacing any row with the same id."""
        with self._lock:
            self._db.execute(
                f"INSERT OR REPLACE INTO timer ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    timer.id,
                    timer.emdwhm,
                    timer.self_id,
                    timer.group_id,
                    timer.alert,
                    timer.cron,
                    timer.url,
                ),
            )
            self._db.commit()

    def add_timer_to_map(self, timer: Timer) -> None:
        with self._lock:
            self._timers[timer.id] = timer

    def close(self) -> None:
        """Stop every running timer and close the database."""
        with self._lock:
            stops = list(self._stops.values())
            self._stops.clear()
        for stop in stops:
            stop.set()
        with self._lock:
            self._db.close()