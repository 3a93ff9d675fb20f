"""Rules that decide who may marry, steal or divorce in a group today."""

from __future__ import annotations

import threading
from datetime import date, datetime, timedelta
from typing import Iterable

from groupfun.marriage import MarriageRegistry, Status

__all__ = [
    "CANDIDATE_POOL",
    "SKILL_COOLDOWN",
    "SkillCooldown",
    "check_fiancee",
    "check_mistress",
    "check_single",
    "ensure_today",
    "pick_candidates",
]

SKILL_COOLDOWN = timedelta(hours=12)
CANDIDATE_POOL = 30


class SkillCooldown:
    """One use of a marriage skill per member per cooldown period."""

    def __init__(self, period: timedelta = SKILL_COOLDOWN) -> None:
        self._period = period
        self._last: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def try_use(self, gid: int, uid: int, now: datetime) -> bool:
        """Use the skill if it is ready; return whether it was."""
        key = f"{gid}{uid}"
        with self._lock:
            last = self._last.get(key)
            if last is not None and now - last < self._period:
                return False
            self._last[key] = now
            return True


def ensure_today(registry: MarriageRegistry, gid: int, today: date) -> bool:
    """Clear the group's register if it was last refreshed on another day.

    Returns whether the register was cleared.
    """
    if registry.check_update(gid, today) != today:
        registry.reset(gid, today)
        return True
    return False


def _target(couple) -> int:
    return couple.target if couple is not None else 0


def check_single(
    registry: MarriageRegistry, gid: int, uid: int, fiancee: int, today: date
) -> str | None:
    """Check that ``uid`` may propose to ``fiancee``.

    Returns ``None`` when allowed, otherwise the refusal to send.
    """
    if ensure_today(registry, gid, today):
        return None
    own, own_status = registry.lookup(gid, uid)
    other, other_status = registry.lookup(gid, fiancee)
    if own_status is Status.SINGLE and other_status is Status.SINGLE:
        return None
    if _target(own) == fiancee:
        return "笨蛋~你们明明已经在一起了啊w"
    if own_status is not Status.SINGLE and _target(own) == 0:
        return "今天的你是单身贵族噢"
    if own_status is Status.HUSBAND:
        return "笨蛋~你家里还有个吃白饭的w"
    if own_status is Status.WIFE:
        return "该是0就是0，当0有什么不好"
    if other_status is not Status.SINGLE and _target(other) == 0:
        return "今天的ta是单身贵族噢"
    if other_status is Status.HUSBAND:
        return "他有别的女人了，你该放下了"
    if other_status is Status.WIFE:
        return "这是一个纯爱的世界，拒绝NTR"
    return None


def check_mistress(
    registry: MarriageRegistry, gid: int, uid: int, fiancee: int, today: date
) -> str | None:
    """Check that ``uid`` may try to steal ``fiancee`` from a couple.

    Returns ``None`` when allowed, otherwise the refusal to send.
    """
    if ensure_today(registry, gid, today):
        return "ta现在还是单身哦，快向ta表白吧！"
    own, own_status = registry.lookup(gid, uid)
    if _target(own) == fiancee:
        return "笨蛋~你们明明已经在一起了啊w"
    if own_status is not Status.SINGLE and _target(own) == 0:
        return "今天的你是单身贵族哦"
    if fiancee == uid:
        return None
    if own_status is Status.HUSBAND:
        return "打灭，不给纳小妾！"
    if own_status is Status.WIFE:
        return "该是0就是0，当0有什么不好"
    other, other_status = registry.lookup(gid, fiancee)
    if other_status is Status.SINGLE:
        return "ta现在还是单身哦，快向ta表白吧！"
    if _target(other) == 0:
        return "今天的ta是单身贵族哦"
    return None


def check_fiancee(
    registry: MarriageRegistry, gid: int, uid: int, today: date
) -> str | None:
    """Check that ``uid`` is married today and so may ask for a divorce.

    Returns ``None`` when allowed, otherwise the refusal to send.
    """
    if ensure_today(registry, gid, today):
        return "今天你还没有结婚哦"
    _, status = registry.lookup(gid, uid)
    if status is Status.SINGLE:
        return "今天你还没有结婚哦"
    return None


def pick_candidates(
    registry: MarriageRegistry, gid: int, members: Iterable[tuple[int, int]]
) -> list[int]:
    """Return the single members among the 30 who spoke most recently.

    ``members`` holds ``(user_id, last_sent_time)`` pairs.
    """
    recent = sorted(members, key=lambda member: member[1])[-CANDIDATE_POOL:]
    return [
        uid
        for uid, _ in recent
        if registry.lookup(gid, uid)[1] is Status.SINGLE
    ]