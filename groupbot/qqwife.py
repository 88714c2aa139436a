"""One partner per member per day: random couples drawn from active members."""

from __future__ import annotations

import enum
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from random import Random
from typing import Any

# Only this many of the most recently active members are candidates.
CANDIDATES = 30


class Outcome(enum.Enum):
    WIFE = "wife"
    HUSBAND = "husband"
    SINGLE = "single"


@dataclass(frozen=True)
class Marriage:
    """Result of a request: the user's role and partner, or SINGLE with no partner."""

    outcome: Outcome
    partner: int | None = None


class WifeRegistry:
    """Couples per group, cleared when the day of the month changes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._groups: dict[int, dict[int, int]] = {}
        self._last_date: date | None = None

    def marry(
        self,
        group_id: int,
        user_id: int,
        members: Sequence[Mapping[str, Any]],
        today: date,
        rng: Random | None = None,
    ) -> Marriage:
        """Find or draw today's partner of ``user_id``.

        ``members`` are the group's members with ``user_id`` and
        ``last_sent_time`` keys.
        """
        rng = rng or Random()
        with self._lock:
            if self._last_date is None or today.day != self._last_date.day:
                self._groups = {}
            group = self._groups.get(group_id, {})
            if user_id in group:
                return Marriage(Outcome.WIFE, group[user_id])
            for husband, wife in group.items():
                if wife == user_id:
                    return Marriage(Outcome.HUSBAND, husband)

            ordered = sorted(members, key=lambda m: int(m.get("last_sent_time", 0)))
            recent = [int(m["user_id"]) for m in ordered[-CANDIDATES:]]
            if self._groups:
                recent = [uid for uid in recent if uid not in group]
            if not recent:
                return Marriage(Outcome.SINGLE)
            wife = recent[rng.randrange(len(recent))]
            if wife == user_id:
                return Marriage(Outcome.SINGLE)
            self._groups.setdefault(group_id, {})[user_id] = wife
            self._last_date = today
            return Marriage(Outcome.WIFE, wife)

    def couples(self, group_id: int) -> list[tuple[int, int]]:
        """The group's (husband, wife) pairs in the order they were made."""
        with self._lock:
            return list(self._groups.get(group_id, {}).items())