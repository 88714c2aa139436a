"""A local picture library: one class per folder, indexed by difference hash."""

from __future__ import annotations

import os
import sqlite3
import threading
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from PIL import Image

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif", ".webp")
SUMMARY_HEADER = "所有本地setu分类"


def is_image_name(name: str) -> bool:
    """Whether a file name has a supported picture extension."""
    return name.lower().endswith(IMAGE_SUFFIXES)


def difference_hash(image: Image.Image) -> int:
    """64-bit difference hash of ``image`` as a signed integer.

    The image is shrunk to 9x8 grey pixels; each bit says whether a pixel is
    darker than its right neighbour, the first comparison being the top bit.
    """
    small = image.convert("RGB").resize((9, 8), Image.BILINEAR)
    pixels = small.load()
    value = 0
    index = 0
    for y in range(8):
        grey = [
            0.299 * r + 0.587 * g + 0.114 * b
            for r, g, b in (pixels[x, y] for x in range(9))
        ]
        for left, right in zip(grey, grey[1:]):
            if left < right:
                value |= 1 << (63 - index)
            index += 1
    return value - (1 << 64) if value >= 1 << 63 else value


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class SetuEntry:
    """One indexed picture; ``path`` is relative to the library root."""

    imgid: int
    name: str
    path: str


class SetuLibrary:
    """Pictures below ``root`` indexed into one SQLite table per folder."""

    def __init__(self, db_path: str | PathLike[str], root: str | PathLike[str]) -> None:
        self.db_path = Path(db_path)
        self.root = Path(root)
        self._lock = threading.RLock()
        self._db = sqlite3.connect(str(self.db_path), check_same_thread=False)

    def __enter__(self) -> SetuLibrary:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def classes(self) -> list[str]:
        """Names of the indexed classes."""
        with self._lock:
            rows = self._db.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
            ).fetchall()
        return [row[0] for row in rows]

    def _create(self, name: str) -> None:
        with self._db:
            self._db.execute(
                f"CREATE TABLE IF NOT EXISTS {_quote(name)} "
                "(imgid INTEGER PRIMARY KEY, name TEXT NOT NULL, path TEXT NOT NULL)"
            )

    def _scan(self, relative: str, name: str) -> None:
        folder = self.root / relative
        entries = sorted(os.scandir(folder), key=lambda e: e.name)
        with self._lock:
            self._create(name)
            with self._db:
                self._db.execute(f"DELETE FROM {_quote(name)}")
        for entry in entries:
            if entry.is_dir() or not is_image_name(entry.name):
                continue
            relpath = f"{relative}/{entry.name}"
            with Image.open(entry.path) as image:
                imgid = difference_hash(image)
            with self._lock, self._db:
                self._db.execute(
                    f"INSERT OR REPLACE INTO {_quote(name)} (imgid, name, path) VALUES (?, ?, ?)",
                    (imgid, entry.name, relpath),
                )

    def scan_all(self) -> None:
        """Rebuild the whole index from every folder below the root."""
        with self._lock:
            self._db.close()
            self.db_path.unlink(missing_ok=True)
            self._db = sqlite3.connect(str(self.db_path), check_same_thread=False)
        for dirpath, dirnames, _ in os.walk(self.root):
            dirnames.sort()
            for dirname in dirnames:
                relative = Path(dirpath, dirname).relative_to(self.root).as_posix()
                self._scan(relative, dirname)

    def scan_class(self, name: str) -> None:
        """Re-index the folder ``name`` directly below the root."""
        self._scan(name, name)

    def pick(self, name: str) -> SetuEntry:
        """A random picture of class ``name``; LookupError if none."""
        if name not in self.classes():
            raise LookupError(f"no such class: {name!r}")
        with self._lock:
            row = self._db.execute(
                f"SELECT imgid, name, path FROM {_quote(name)} ORDER BY RANDOM() LIMIT 1"
            ).fetchone()
        if row is None:
            raise LookupError(f"class {name!r} is empty")
        return SetuEntry(*row)

    def summary(self) -> str:
        """Numbered list of classes with their picture counts."""
        lines = [SUMMARY_HEADER]
        for i, name in enumerate(self.classes()):
            with self._lock:
                count = self._db.execute(f"SELECT COUNT(*) FROM {_quote(name)}").fetchone()[0]
            lines.append(f"{i:02d}. {name}({count})")
        return "\n".join(lines)

    def close(self) -> None:
        with self._lock:
            self._db.close()