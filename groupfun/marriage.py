"""A one-couple-per-person-per-day marriage register for chat groups."""

from __future__ import annotations

import os
import sqlite3
import threading
from dataclasses import dataclass
from datetime import date, datetime
from enum import IntEnum
from typing import Callable

__all__ = [
    "ALL_GROUPS",
    "DATE_FORMAT",
    "Couple",
    "MarriageRegistry",
    "Status",
    "slice_name",
]

DATE_FORMAT = "%Y/%m/%d"
ALL_GROUPS = "ALL"
_NAME_WIDTH = 350

_SCHEMA = """
CREATE TABLE IF NOT EXISTS couples (
    gid INTEGER NOT NULL,
    user INTEGER NOT NULL,
    target INTEGER NOT NULL,
    username TEXT NOT NULL,
    targetname TEXT NOT NULL,
    updatetime TEXT NOT NULL,
    PRIMARY KEY (gid, user)
);
CREATE TABLE IF NOT EXISTS updateinfo (
    gid INTEGER PRIMARY KEY,
    updatetime TEXT NOT NULL
);
"""


class Status(IntEnum):
    """Where a user stands in the register."""

    WIFE = 0
    HUSBAND = 1
    SINGLE = 3


@dataclass(frozen=True)
class Couple:
    """One entry of the register: ``user`` took ``target`` on ``updatetime``.

    A ``target`` of 0 marks a user who chose to stay single for the day.
    """

    user: int
    target: int
    username: str
    targetname: str
    updatetime: str


def _day(today: date) -> str:
    return today.strftime(DATE_FORMAT)


class MarriageRegistry:
    """SQLite-backed register of who married whom in each group."""

    def __init__(self, path: str | os.PathLike) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(os.fspath(path), check_same_thread=False)
        with self._conn:
            self._conn.executescript(_SCHEMA)

    def __enter__(self) -> "MarriageRegistry":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def check_update(self, gid: int, today: date) -> date:
        """Return the day the group's register was last refreshed.

        A group seen for the first time is recorded as refreshed ``today``.
        """
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT updatetime FROM updateinfo WHERE gid = ?", (gid,)
            ).fetchone()
            if row is None:
                self._conn.execute(
                    "INSERT INTO updateinfo (gid, updatetime) VALUES (?, ?)",
                    (gid, _day(today)),
                )
                return today
        return datetime.strptime(row[0], DATE_FORMAT).date()

    def _touch(self, gid: int, today: date) -> None:
        self._conn.execute(
            "REPLACE INTO updateinfo (gid, updatetime) VALUES (?, ?)",
            (gid, _day(today)),
        )

    def reset(self, gid: int | str, today: date) -> None:
        """Clear the register of one group, or of every group for ``"ALL"``."""
        with self._lock, self._conn:
            if gid == ALL_GROUPS:
                gids = {
                    row[0]
                    for table in ("couples", "updateinfo")
                    for row in self._conn.execute(f"SELECT DISTINCT gid FROM {table}")
                }
                self._conn.execute("DELETE FROM couples")
                for group in gids:
                    self._touch(group, today)
                return
            group = int(gid)
            self._conn.execute("DELETE FROM couples WHERE gid = ?", (group,))
            self._touch(group, today)

    def divorce_wife(self, gid: int, wife: int) -> None:
        """Remove the couple whose wife is ``wife``."""
        with self._lock, self._conn:
            self._conn.execute(
                "DELETE FROM couples WHERE gid = ? AND target = ?", (gid, wife)
            )

    def divorce_husband(self, gid: int, husband: int) -> None:
        """Remove the couple whose husband is ``husband``."""
        with self._lock, self._conn:
            self._conn.execute(
                "DELETE FROM couples WHERE gid = ? AND user = ?", (gid, husband)
            )

    def remarry(
        self,
        gid: int,
        uid: int,
        target: int,
        username: str,
        targetname: str,
        today: date,
    ) -> None:
        """Re-register an existing couple of ``uid`` (or of ``target``) as ``uid`` and ``target``.

        Raises :class:`LookupError` when neither is registered as a husband.
        """
        with self._lock, self._conn:
            found = None
            for who in (uid, target):
                found = self._conn.execute(
                    "SELECT user FROM couples WHERE gid = ? AND user = ?", (gid, who)
                ).fetchone()
                if found is not None:
                    break
            if found is None:
                raise LookupError("record not found")
            self._conn.execute(
                "REPLACE INTO couples (gid, user, target, username, targetname, updatetime)"
                " VALUES (?, ?, ?, ?, ?, ?)",
                (gid, uid, target, username, targetname, _day(today)),
            )

    def roster(self, gid: int) -> list[Couple]:
        """Return the group's couples, leaving out those who stayed single."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT user, target, username, targetname, updatetime FROM couples"
                " WHERE gid = ? AND target != 0 ORDER BY user",
                (gid,),
            ).fetchall()
        return [Couple(*row) for row in rows]

    def lookup(self, gid: int, uid: int) -> tuple[Couple | None, Status]:
        """Return the couple ``uid`` belongs to and the role ``uid`` has in it."""
        with self._lock:
            for column, status in (("user", Status.HUSBAND), ("target", Status.WIFE)):
                row = self._conn.execute(
                    "SELECT user, target, username, targetname, updatetime FROM couples"
                    f" WHERE gid = ? AND {column} = ? LIMIT 1",
                    (gid, uid),
                ).fetchone()
                if row is not None:
                    return Couple(*row), status
        return None, Status.SINGLE

    def register(
        self,
        gid: int,
        uid: int,
        target: int,
        username: str,
        targetname: str,
        today: date,
    ) -> Couple:
        """Register ``uid`` as having married ``target`` and return the entry."""
        couple = Couple(uid, target, username, targetname, _day(today))
        with self._lock, self._conn:
            self._conn.execute(
                "REPLACE INTO couples (gid, user, target, username, targetname, updatetime)"
                " VALUES (?, ?, ?, ?, ?, ?)",
                (gid, couple.user, couple.target, couple.username, couple.targetname, couple.updatetime),
            )
        return couple

    def close(self) -> None:
        """Close the database."""
        self._conn.close()


def slice_name(name: str, measure: Callable[[str], float]) -> str:
    """Shorten ``name`` with an ellipsis when its drawn width passes 350.

    ``measure`` returns the drawn width of a string.
    """
    width = 0
    last = 0
    for i, ch in enumerate(name):
        width += int(measure(ch))
        if width > _NAME_WIDTH:
            break
        last = i
    if width > _NAME_WIDTH:
        return name[: max(last - 1, 0)] + "......"
    return name