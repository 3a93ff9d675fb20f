"""Good-night and good-morning bookkeeping for chat groups."""

from __future__ import annotations

import os
import sqlite3
import threading
from datetime import datetime, timedelta

__all__ = [
    "SleepRegistry",
    "good_morning_text",
    "good_night_text",
    "is_evening",
    "is_morning",
    "split_duration",
]

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS sleep_manage (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    group_id INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    sleep_time TEXT NOT NULL
);
"""


def _stamp(moment: datetime) -> str:
    return moment.strftime(_TIME_FORMAT)


class SleepRegistry:
    """SQLite-backed record of the last time each group member said good night or good morning."""

    def __init__(self, path: str | os.PathLike) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(os.fspath(path), check_same_thread=False)
        with self._conn:
            self._conn.executescript(_SCHEMA)

    def __enter__(self) -> "SleepRegistry":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _record(self, gid: int, uid: int, now: datetime, since: datetime) -> tuple[int, timedelta]:
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT sleep_time FROM sleep_manage WHERE group_id = ? AND user_id = ?"
                " ORDER BY id LIMIT 1",
                (gid, uid),
            ).fetchone()
            elapsed = timedelta(0)
            if row is None:
                self._conn.execute(
                    "INSERT INTO sleep_manage (group_id, user_id, sleep_time) VALUES (?, ?, ?)",
                    (gid, uid, _stamp(now)),
                )
            else:
                elapsed = now - datetime.strptime(row[0], _TIME_FORMAT)
                self._conn.execute(
                    "UPDATE sleep_manage SET sleep_time = ? WHERE group_id = ? AND user_id = ?",
                    (_stamp(now), gid, uid),
                )
            (position,) = self._conn.execute(
                "SELECT COUNT(*) FROM sleep_manage WHERE group_id = ?"
                " AND sleep_time <= ? AND sleep_time >= ?",
                (gid, _stamp(now), _stamp(since)),
            ).fetchone()
        return position, elapsed

    def sleep(self, gid: int, uid: int, now: datetime) -> tuple[int, timedelta]:
        """Record a good night; return the rank tonight and the time spent awake."""
        shift = timedelta(minutes=now.minute, seconds=now.second)
        if now.hour >= 21:
            since = now - timedelta(hours=now.hour - 21) - shift
        elif now.hour <= 3:
            since = now - timedelta(hours=3 + now.hour) - shift
        else:
            since = datetime.min
        return self._record(gid, uid, now, since)

    def get_up(self, gid: int, uid: int, now: datetime) -> tuple[int, timedelta]:
        """Record a good morning; return the rank today and the time spent asleep."""
        since = now - timedelta(hours=now.hour - 6, minutes=now.minute, seconds=now.second)
        return self._record(gid, uid, now, since)

    def close(self) -> None:
        """Close the database."""
        self._conn.close()


def _truncdiv(value: int, unit: int) -> int:
    quotient = abs(value) // unit
    return quotient if value >= 0 else -quotient


def split_duration(delta: timedelta) -> tuple[int, int, int]:
    """Split a duration into whole hours, minutes and seconds."""
    total = delta // timedelta(microseconds=1)
    second_us = 1_000_000
    minute_us = 60 * second_us
    hour_us = 60 * minute_us
    hours = _truncdiv(total, hour_us)
    minutes = _truncdiv(total - hours * hour_us, minute_us)
    seconds = _truncdiv(total - hours * hour_us - minutes * minute_us, second_us)
    return hours, minutes, seconds


def is_morning(hour: int) -> bool:
    """Good mornings count from 6 to 12 o'clock."""
    return 6 <= hour <= 12


def is_evening(hour: int) -> bool:
    """Good nights count from 21 o'clock to 3 o'clock."""
    return hour >= 21 or hour <= 3


def _unknown(hours: int, minutes: int, seconds: int) -> bool:
    return (hours == 0 and minutes == 0 and seconds == 0) or hours >= 24


def good_morning_text(position: int, delta: timedelta) -> str:
    """Return the reply to a good morning."""
    hours, minutes, seconds = split_duration(delta)
    if _unknown(hours, minutes, seconds):
        return f"早安成功！你是今天第{position}个起床的"
    return f"早安成功！你的睡眠时长为{hours}时{minutes}分{seconds}秒,你是今天第{position}个起床的"


def good_night_text(position: int, delta: timedelta) -> str:
    """Return the reply to a good night."""
    hours, minutes, seconds = split_duration(delta)
    if _unknown(hours, minutes, seconds):
        return f"晚安成功！你是今天第{position}个睡觉的"
    return f"晚安成功！你的清醒时长为{hours}时{minutes}分{seconds}秒,你是今天第{position}个睡觉的"