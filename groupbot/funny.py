"""Jokes picked at random from a database, addressed to a name."""

from __future__ import annotations

import sqlite3
from os import PathLike

NAME_PLACEHOLDER = "%name"


def render_joke(text: str, name: str) -> str:
    """Put ``name`` wherever the joke says ``%name``."""
    return text.replace(NAME_PLACEHOLDER, name)


class JokeStore:
    """SQLite table of jokes."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        with self._db:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS jokes (id INTEGER PRIMARY KEY, text TEXT NOT NULL)"
            )

    def __enter__(self) -> JokeStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def pick(self) -> str:
        """A random joke; LookupError when there are none."""
        row = self._db.execute("SELECT text FROM jokes ORDER BY RANDOM() LIMIT 1").fetchone()
        if row is None:
            raise LookupError("no jokes stored")
        return row[0]

    def count(self) -> int:
        return self._db.execute("SELECT COUNT(*) FROM jokes").fetchone()[0]

    def close(self) -> None:
        self._db.close()