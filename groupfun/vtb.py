"""A local catalogue of vtuber voice quotes: vtubers, quote categories and quotes."""

from __future__ import annotations

import json
import os
import random
import re
import sqlite3
import threading
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote_plus

__all__ = [
    "FirstCategory",
    "SecondCategory",
    "ThirdCategory",
    "VtbDB",
    "escape_record_url",
    "unescape_unicode",
]

_SCHEMA = """
CREATE TABLE IF NOT EXISTS first_category (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    first_category_index INTEGER NOT NULL,
    first_category_name TEXT NOT NULL DEFAULT '',
    first_category_uid TEXT NOT NULL DEFAULT '',
    first_category_description TEXT NOT NULL DEFAULT '',
    first_category_icon_path TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS second_category (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    second_category_index INTEGER NOT NULL,
    first_category_uid TEXT NOT NULL DEFAULT '',
    second_category_name TEXT NOT NULL DEFAULT '',
    second_category_author TEXT NOT NULL DEFAULT '',
    second_category_description TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS third_category (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    third_category_index INTEGER NOT NULL,
    second_category_index INTEGER NOT NULL,
    first_category_uid TEXT NOT NULL DEFAULT '',
    third_category_name TEXT NOT NULL DEFAULT '',
    third_category_path TEXT NOT NULL DEFAULT '',
    third_category_author TEXT NOT NULL DEFAULT '',
    third_category_description TEXT NOT NULL DEFAULT ''
);
"""

_FIRST_COLUMNS = (
    "first_category_index, first_category_name, first_category_uid,"
    " first_category_description, first_category_icon_path"
)
_THIRD_COLUMNS = (
    "third_category_index, second_category_index, first_category_uid,"
    " third_category_name, third_category_path, third_category_author,"
    " third_category_description"
)

_TAIL = re.compile(r".*/(.*)")
_UNICODE_ESCAPE = re.compile(r"\\u(.{0,4})", re.DOTALL)
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")


@dataclass(frozen=True)
class FirstCategory:
    """A vtuber."""

    index: int
    name: str
    uid: str
    description: str = ""
    icon_path: str = ""


@dataclass(frozen=True)
class SecondCategory:
    """A category of quotes of one vtuber."""

    index: int
    first_uid: str
    name: str
    author: str = ""
    description: str = ""


@dataclass(frozen=True)
class ThirdCategory:
    """A single voice quote."""

    index: int
    second_index: int
    first_uid: str
    name: str
    path: str = ""
    author: str = ""
    description: str = ""


def unescape_unicode(text: str) -> str:
    """Turn literal ``\\uXXXX`` sequences in ``text`` into the characters they name.

    Raises :class:`ValueError` on a malformed or surrogate escape.
    """

    def replace(match: re.Match[str]) -> str:
        digits = match.group(1)
        if not _HEX4.fullmatch(digits):
            raise ValueError(f"invalid unicode escape: \\u{digits}")
        code = int(digits, 16)
        if 0xD800 <= code <= 0xDFFF:
            raise ValueError(f"invalid unicode escape: \\u{digits}")
        return chr(code)

    return _UNICODE_ESCAPE.sub(replace, text)


def escape_record_url(url: str) -> str:
    """Percent-escape the file name at the end of a record URL."""
    match = _TAIL.search(url)
    if match is None:
        return url
    tail = match.group(1)
    url = url.replace(tail, quote_plus(tail, safe=""))
    return url.replace("+", "%20")


def _load(payload: Any) -> Any:
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    if isinstance(payload, str):
        text = unescape_unicode(payload)
        try:
            return json.loads(text)
        except ValueError:
            return None
    return payload


def _get(obj: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value, ensure_ascii=False)


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


class VtbDB:
    """SQLite-backed store of vtubers and their voice quotes."""

    def __init__(self, path: str | os.PathLike) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(os.fspath(path), check_same_thread=False)
        with self._conn:
            self._conn.executescript(_SCHEMA)

    def __enter__(self) -> "VtbDB":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _first_uid_by_index(self, first_index: int) -> str | None:
        row = self._conn.execute(
            "SELECT first_category_uid FROM first_category"
            " WHERE first_category_index = ? ORDER BY id LIMIT 1",
            (first_index,),
        ).fetchone()
        return None if row is None else row[0]

    def first_category_menu(self) -> str:
        """Return the numbered list of every vtuber."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT first_category_index, first_category_name FROM first_category ORDER BY id"
            ).fetchall()
        lines = "".join(f"{index}. {name}\n" for index, name in rows)
        return "请选择一个vtb并发送序号:\n" + lines

    def second_category_menu(self, first_index: int) -> str:
        """Return the numbered quote categories of a vtuber, or ``""`` when there are none."""
        with self._lock:
            uid = self._first_uid_by_index(first_index)
            if uid is None:
                return ""
            rows = self._conn.execute(
                "SELECT second_category_index, second_category_name FROM second_category"
                " WHERE first_category_uid = ? ORDER BY id",
                (uid,),
            ).fetchall()
        if not rows:
            return ""
        lines = "".join(f"{index}. {name}\n" for index, name in rows)
        return "请选择一个语录类别并发送序号:\n" + lines

    def third_category_menu(self, first_index: int, second_index: int) -> str:
        """Return the numbered quotes of one category, or ``""`` when there are none."""
        with self._lock:
            uid = self._first_uid_by_index(first_index)
            if uid is None:
                return ""
            rows = self._conn.execute(
                "SELECT third_category_index, third_category_name FROM third_category"
                " WHERE first_category_uid = ? AND second_category_index = ? ORDER BY id",
                (uid, second_index),
            ).fetchall()
        if not rows:
            return ""
        lines = "".join(f"{index}. {name}\n" for index, name in rows)
        return "请选择一个语录并发送序号:\n" + lines

    def third_category(
        self, first_index: int, second_index: int, third_index: int
    ) -> ThirdCategory | None:
        """Return the quote chosen by its three indices, or ``None``."""
        with self._lock:
            uid = self._first_uid_by_index(first_index)
            if uid is None:
                return None
            row = self._conn.execute(
                f"SELECT {_THIRD_COLUMNS} FROM third_category"
                " WHERE first_category_uid = ? AND second_category_index = ?"
                " AND third_category_index = ? ORDER BY id LIMIT 1",
                (uid, second_index, third_index),
            ).fetchone()
        return None if row is None else ThirdCategory(*row)

    def random_vtb(self, rng: random.Random | None = None) -> ThirdCategory | None:
        """Return a random quote, or ``None`` when the store is empty."""
        rng = rng if rng is not None else random.Random()
        with self._lock:
            (count,) = self._conn.execute("SELECT COUNT(*) FROM third_category").fetchone()
            if count == 0:
                return None
            row = self._conn.execute(
                f"SELECT {_THIRD_COLUMNS} FROM third_category ORDER BY id LIMIT 1 OFFSET ?",
                (rng.randrange(count),),
            ).fetchone()
        return ThirdCategory(*row)

    def first_category_by_uid(self, uid: str) -> FirstCategory | None:
        """Return the vtuber with ``uid``, or ``None``."""
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_FIRST_COLUMNS} FROM first_category"
                " WHERE first_category_uid = ? ORDER BY id LIMIT 1",
                (uid,),
            ).fetchone()
        return None if row is None else FirstCategory(*row)

    def store_vtb_list(self, payload: Any) -> list[str]:
        """Store the vtuber list answer and return the uids it held, in order."""
        items = _list(_load(payload))
        uids: list[str] = []
        with self._lock, self._conn:
            for index, item in enumerate(items):
                category = FirstCategory(
                    index=index,
                    name=_text(_get(item, "name")),
                    uid=_text(_get(item, "uid")),
                    description=_text(_get(item, "description")),
                    icon_path=_text(_get(item, "icon_path")),
                )
                exists = self._conn.execute(
                    "SELECT 1 FROM first_category WHERE first_category_uid = ? LIMIT 1",
                    (category.uid,),
                ).fetchone()
                if exists is None:
                    self._conn.execute(
                        f"INSERT INTO first_category ({_FIRST_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                        (
                            category.index,
                            category.name,
                            category.uid,
                            category.description,
                            category.icon_path,
                        ),
                    )
                else:
                    self._conn.execute(
                        "UPDATE first_category SET first_category_index = ?,"
                        " first_category_name = ?, first_category_description = ?,"
                        " first_category_icon_path = ? WHERE first_category_uid = ?",
                        (
                            category.index,
                            category.name,
                            category.description,
                            category.icon_path,
                            category.uid,
                        ),
                    )
                uids.append(category.uid)
        return uids

    def store_vtb(self, uid: str, payload: Any) -> None:
        """Store the quote categories and quotes of the vtuber ``uid``."""
        voices = _list(_get(_load(payload), "data", "voices"))
        with self._lock, self._conn:
            for second_index, second in enumerate(voices):
                self._store_second(uid, second_index, second)
                for third_index, third in enumerate(_list(_get(second, "voiceList"))):
                    self._store_third(uid, second_index, third_index, third)

    def _store_second(self, uid: str, second_index: int, item: Any) -> None:
        name = _text(_get(item, "categoryName"))
        author = _text(_get(item, "author"))
        description = _text(_get(item, "categoryDescription", "zh-CN"))
        key = (uid, second_index)
        exists = self._conn.execute(
            "SELECT 1 FROM second_category WHERE first_category_uid = ?"
            " AND second_category_index = ? LIMIT 1",
            key,
        ).fetchone()
        if exists is None:
            self._conn.execute(
                "INSERT INTO second_category (second_category_index, first_category_uid,"
                " second_category_name, second_category_author, second_category_description)"
                " VALUES (?, ?, ?, ?, ?)",
                (second_index, uid, name, author, description),
            )
        else:
            self._conn.execute(
                "UPDATE second_category SET second_category_name = ?,"
                " second_category_author = ?, second_category_description = ?"
                " WHERE first_category_uid = ? AND second_category_index = ?",
                (name, author, description, *key),
            )

    def _store_third(self, uid: str, second_index: int, third_index: int, item: Any) -> None:
        name = _text(_get(item, "name"))
        description = _text(_get(item, "description", "zh-CN"))
        path = _text(_get(item, "path"))
        author = _text(_get(item, "author"))
        key = (uid, second_index, third_index)
        exists = self._conn.execute(
            "SELECT 1 FROM third_category WHERE first_category_uid = ?"
            " AND second_category_index = ? AND third_category_index = ? LIMIT 1",
            key,
        ).fetchone()
        if exists is None:
            self._conn.execute(
                f"INSERT INTO third_category ({_THIRD_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (third_index, second_index, uid, name, path, author, description),
            )
        else:
            self._conn.execute(
                "UPDATE third_category SET third_category_name = ?,"
                " third_category_description = ?, third_category_path = ?,"
                " third_category_author = ? WHERE first_category_uid = ?"
                " AND second_category_index = ? AND third_category_index = ?",
                (name, description, path, author, *key),
            )

    def close(self) -> None:
        """Close the database."""
        self._conn.close()