"""Daily sign-in and the cookie score that comes with it."""

from __future__ import annotations

import os
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime

__all__ = [
    "LEVELS",
    "SCORE_MAX",
    "SIGN_IN_MAX",
    "AlreadySignedInError",
    "ScoreDB",
    "SignInRecord",
    "SignInResult",
    "get_level",
    "hour_word",
    "next_level_score",
]

SCORE_MAX = 120
SIGN_IN_MAX = 1
SIGN_IN_REWARD = 1
LEVELS = (0, 1, 2, 5, 10, 20, 35, 55, 75, 100, 120)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS score (
    uid INTEGER PRIMARY KEY,
    score INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS sign_in (
    uid INTEGER PRIMARY KEY,
    count INTEGER NOT NULL DEFAULT 0,
    updated_at TEXT
);
"""


class AlreadySignedInError(Exception):
    """Raised when a user signs in a second time on the same day."""


@dataclass(frozen=True)
class SignInRecord:
    """How many times a user has signed in, and when the count last changed."""

    uid: int
    count: int
    updated_at: datetime | None


@dataclass(frozen=True)
class SignInResult:
    """What a successful sign-in gave."""

    uid: int
    added: int
    score: int
    level: int
    next_level_score: int
    capped: bool


def _parse(stamp: str | None) -> datetime | None:
    return datetime.fromisoformat(stamp) if stamp else None


class ScoreDB:
    """SQLite-backed scores and sign-in counts."""

    def __init__(self, path: str | os.PathLike) -> None:
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(os.fspath(path), check_same_thread=False)
        with self._conn:
            self._conn.executescript(_SCHEMA)

    def __enter__(self) -> "ScoreDB":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_score(self, uid: int) -> int:
        """Return the user's score, creating a zero entry when there is none."""
        with self._lock, self._conn:
            row = self._conn.execute("SELECT score FROM score WHERE uid = ?", (uid,)).fetchone()
            if row is None:
                self._conn.execute("INSERT INTO score (uid, score) VALUES (?, 0)", (uid,))
                return 0
        return row[0]

    def set_score(self, uid: int, score: int) -> None:
        """Set the user's score."""
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO score (uid, score) VALUES (?, ?)"
                " ON CONFLICT(uid) DO UPDATE SET score = excluded.score",
                (uid, score),
            )

    def get_sign_in(self, uid: int) -> SignInRecord:
        """Return the user's sign-in record, creating an empty one when there is none."""
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT count, updated_at FROM sign_in WHERE uid = ?", (uid,)
            ).fetchone()
            if row is None:
                self._conn.execute("INSERT INTO sign_in (uid, count) VALUES (?, 0)", (uid,))
                return SignInRecord(uid, 0, None)
        return SignInRecord(uid, row[0], _parse(row[1]))

    def set_sign_in_count(self, uid: int, count: int, now: datetime) -> None:
        """Set the user's sign-in count, stamping it with ``now``."""
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO sign_in (uid, count, updated_at) VALUES (?, ?, ?)"
                " ON CONFLICT(uid) DO UPDATE SET count = excluded.count,"
                " updated_at = excluded.updated_at",
                (uid, count, now.isoformat()),
            )

    def top_scores(self, n: int) -> list[tuple[int, int]]:
        """Return up to ``n`` ``(uid, score)`` pairs, highest score first."""
        with self._lock:
            return [
                (uid, score)
                for uid, score in self._conn.execute(
                    "SELECT uid, score FROM score ORDER BY score DESC LIMIT ?", (n,)
                )
            ]

    def sign_in(self, uid: int, now: datetime) -> SignInResult:
        """Sign the user in for the day of ``now`` and award the daily cookie.

        Raises :class:`AlreadySignedInError` on a second sign-in the same day.
        """
        with self._lock:
            record = self.get_sign_in(uid)
            same_day = record.updated_at is not None and record.updated_at.date() == now.date()
            if record.count >= SIGN_IN_MAX and same_day:
                raise AlreadySignedInError("今天你已经签到过了！")
            if not same_day:
                self.set_sign_in_count(uid, 0, now)
            self.set_sign_in_count(uid, record.count + 1, now)

            score = self.get_score(uid) + SIGN_IN_REWARD
            capped = score > SCORE_MAX
            if capped:
                score = SCORE_MAX
            self.set_score(uid, score)
            level = get_level(score)
            return SignInResult(
                uid=uid,
                added=SIGN_IN_REWARD,
                score=score,
                level=level,
                next_level_score=next_level_score(level),
                capped=capped,
            )

    def close(self) -> None:
        """Close the database."""
        self._conn.close()


def get_level(count: int) -> int:
    """Return the level reached with ``count`` cookies, or -1 above the last level."""
    for level, threshold in enumerate(LEVELS):
        if count == threshold:
            return level
        if count < threshold:
            return level - 1
    return -1


def next_level_score(level: int) -> int:
    """Return the score needed for the level after ``level``."""
    if level < len(LEVELS) - 1:
        return LEVELS[level + 1]
    return SCORE_MAX


def hour_word(moment: datetime) -> str:
    """Return the greeting for the hour of ``moment``."""
    hour = moment.hour
    if 6 <= hour < 12:
        return "早上好"
    if 12 <= hour < 14:
        return "中午好"
    if 14 <= hour < 19:
        return "下午好"
    if 19 <= hour < 24:
        return "晚上好"
    if 0 <= hour < 6:
        return "凌晨好"
    return ""