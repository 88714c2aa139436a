"""Group administration helpers: bans, greetings, join checks and gist approval."""

from __future__ import annotations

import hashlib
import re
import sqlite3
import time
from collections.abc import Callable, Mapping, Sequence
from os import PathLike
from random import Random
from typing import Any

import requests

# The longest ban the chat service accepts is one month, in minutes.
MAX_BAN_MINUTES = 43199
_MONTH_MINUTES = 43200

GIST_RAW = "https://gist.githubusercontent.com/{user}/{hash}/raw/{name}"
AVATAR_URL = "http://q4.qlogo.cn/g?b=qq&nk={uid}&s=640"

# Seconds a gist timestamp stays valid.
GIST_WINDOW = 600

_ANSWER_MARKER = "答案："
_ENABLE_WORDS = frozenset({"开启", "打开", "启用"})
_DISABLE_WORDS = frozenset({"关闭", "关掉", "禁用"})
_INTEGER = re.compile(r"[+-]?[0-9]+")

_BAN_UNITS = {"分钟": 1, "小时": 60, "天": 60 * 24}
_SELF_BAN_UNITS = {
    **{u: 1 for u in ("分钟", "min", "mins", "m")},
    **{u: 60 for u in ("小时", "hour", "hours", "h")},
    **{u: 60 * 24 for u in ("天", "day", "days", "d")},
}

Fetcher = Callable[[str], "bytes | str"]


def _ban_minutes(amount: int | str, unit: str, units: Mapping[str, int]) -> int:
    minutes = int(amount) * units.get(unit, 1)
    return MAX_BAN_MINUTES if minutes >= _MONTH_MINUTES else minutes


def parse_ban_minutes(amount: int | str, unit: str) -> int:
    """Minutes to ban a member for; unknown units count as minutes."""
    return _ban_minutes(amount, unit, _BAN_UNITS)


def self_ban_minutes(amount: int | str, unit: str) -> int:
    """Minutes for a self-requested ban; English unit names are also understood."""
    return _ban_minutes(amount, unit, _SELF_BAN_UNITS)


def render_welcome(
    template: str, user_id: int, nickname: str, group_id: int, group_name: str
) -> str:
    """Expand the ``{at}``, ``{nickname}``, ``{avatar}``, ``{uid}``, ``{gid}``
    and ``{groupname}`` placeholders into CQ-code text."""
    uid = str(user_id)
    replacements = (
        ("{at}", f"[CQ:at,qq={uid}]"),
        ("{nickname}", nickname),
        ("{avatar}", f"[CQ:image,file={AVATAR_URL.format(uid=uid)}]"),
        ("{uid}", uid),
        ("{gid}", str(group_id)),
        ("{groupname}", group_name),
    )
    text = template
    for placeholder, value in replacements:
        text = text.replace(placeholder, value)
    return text


def unescape_brackets(text: str) -> str:
    """Turn escaped square brackets back into CQ-code brackets."""
    return text.replace("&#91;", "[").replace("&#93;", "]")


def _switch(data: int, option: str, on: Callable[[int], int], off: Callable[[int], int]) -> int:
    if option in _ENABLE_WORDS:
        return on(data)
    if option in _DISABLE_WORDS:
        return off(data)
    raise ValueError(f"unknown option: {option!r}")


def set_join_verification(data: int, option: str) -> int:
    """Plugin data with the join-quiz flag switched on or off by ``option``."""
    return _switch(data, option, lambda d: d | 1, lambda d: d & 0x7FFFFFFF_FFFFFFFE)


def set_gist_approval(data: int, option: str) -> int:
    """Plugin data with the gist auto-approval flag switched by ``option``."""
    return _switch(data, option, lambda d: d | 0x10, lambda d: d & 0x7FFFFFFF_FFFFFFFD)


def parse_gist_answer(comment: str) -> tuple[str, str]:
    """Split a join request answer of the form ``user/gisthash``.

    Raises ValueError("格式错误!") when there is no user before a slash.
    """
    raw = comment.encode("utf-8")
    marker = _ANSWER_MARKER.encode("utf-8")
    start = max(raw.find(marker) + len(marker), 0)
    answer = raw[start:].decode("utf-8", errors="replace")
    divider = answer.find("/")
    if divider <= 0:
        raise ValueError("格式错误!")
    return answer[:divider], answer[divider + 1 :]


def gist_url(github_user: str, gist_hash: str, group_id: int) -> str:
    """Raw URL of the gist file named by the MD5 of the group number."""
    name = hashlib.md5(str(group_id).encode("utf-8")).hexdigest()
    return GIST_RAW.format(user=github_user, hash=gist_hash, name=name)


def verify_gist_timestamp(content: str, now: float) -> bool:
    """Whether the unix timestamp in ``content`` lies within the valid window.

    Raises ValueError when ``content`` is not an integer.
    """
    if not _INTEGER.fullmatch(content):
        raise ValueError(f"时间戳格式错误: {content}")
    return abs(int(int(now) - int(content))) < GIST_WINDOW


def _http_fetch(url: str) -> bytes:
    response = requests.get(url, timeout=30)
    response.raise_for_status()
    return response.content


def check_new_user(
    store: ManagerStore,
    qq: int,
    group_id: int,
    github_user: str,
    gist_hash: str,
    fetch: Fetcher = _http_fetch,
    now: float | None = None,
) -> tuple[bool, str]:
    """Check a gist-backed join request; on success the member is recorded.

    Returns whether to approve and, when not, the reason.
    """
    if store.has_member(github_user):
        return False, "该github用户已入群"
    try:
        data = fetch(gist_url(github_user, gist_hash, group_id))
    except Exception as exc:  # any transport failure is reported to the applicant
        return False, f"无法连接到gist: {exc}"
    content = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    try:
        fresh = verify_gist_timestamp(content, time.time() if now is None else now)
    except ValueError as exc:
        return False, str(exc)
    if not fresh:
        return False, "时间戳超时"
    store.add_member(qq, github_user)
    return True, ""


def pick_lucky(members: Sequence[Mapping[str, Any]], rng: Random) -> Mapping[str, Any]:
    """Pick one of the ten members who spoke most recently."""
    if not members:
        raise ValueError("no members to pick from")
    ordered = sorted(members, key=lambda m: int(m.get("last_sent_time", 0)))
    recent = ordered[-10:]
    return recent[rng.randrange(len(recent))]


class ManagerStore:
    """SQLite storage for greetings, farewells and gist-verified members."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        with self._db:
            for table in ("welcome", "farewell"):
                self._db.execute(
                    f"CREATE TABLE IF NOT EXISTS {table} "
                    "(gid INTEGER PRIMARY KEY, msg TEXT NOT NULL)"
                )
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS member (qq INTEGER PRIMARY KEY, ghun TEXT NOT NULL)"
            )

    def __enter__(self) -> ManagerStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _put(self, table: str, group_id: int, msg: str) -> None:
        with self._db:
            self._db.execute(
                f"INSERT OR REPLACE INTO {table} (gid, msg) VALUES (?, ?)", (group_id, msg)
            )

    def _get(self, table: str, group_id: int) -> str | None:
        row = self._db.execute(f"SELECT msg FROM {table} WHERE gid = ?", (group_id,)).fetchone()
        return None if row is None else row[0]

    def set_welcome(self, group_id: int, msg: str) -> None:
        self._put("welcome", group_id, msg)

    def welcome(self, group_id: int) -> str | None:
        """The group's welcome template, or None if none is set."""
        return self._get("welcome", group_id)

    def set_farewell(self, group_id: int, msg: str) -> None:
        self._put("farewell", group_id, msg)

    def farewell(self, group_id: int) -> str | None:
        """The group's farewell template, or None if none is set."""
        return self._get("farewell", group_id)

    def has_member(self, github_user: str) -> bool:
        row = self._db.execute(
            "SELECT 1 FROM member WHERE ghun = ? LIMIT 1", (github_user,)
        ).fetchone()
        return row is not None

    def add_member(self, qq: int, github_user: str) -> None:
        with self._db:
            self._db.execute(
                "INSERT OR REPLACE INTO member (qq, ghun) VALUES (?, ?)", (qq, github_user)
            )

    def close(self) -> None:
        self._db.close()