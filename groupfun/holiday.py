"""Holiday countdowns and the daily "slacker" reminder text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

__all__ = [
    "HOLIDAY_NAMES",
    "Holiday",
    "moyu_message",
    "weekend",
]

HOLIDAY_NAMES = ("元旦", "春节", "清明节", "劳动节", "端午节", "中秋节", "国庆节")

_RECORD = re.compile(r"^\s*(-?\d+)_(-?\d+)_(-?\d+)_(-?\d+)")

_GREETING = (
    "上午好，摸鱼人！\n工作再累，一定不要忘记摸鱼哦！有事没事起身去茶水间，去厕所，"
    "去廊道走走别老在工位上坐着，钱是老板的,但命是自己的。\n"
)
_CLOSING = "上班是帮老板赚钱，摸鱼是赚老板的钱！最后，祝愿天下所有摸鱼人，都能愉快的渡过每一天…"


@dataclass(frozen=True)
class Holiday:
    """A named holiday starting at local midnight of ``date`` and lasting ``duration``."""

    name: str
    date: datetime
    duration: timedelta

    @classmethod
    def from_record(cls, name: str, record: str) -> "Holiday":
        """Build a holiday from a ``days_year_month_day`` record."""
        match = _RECORD.match(record)
        if match is None:
            raise ValueError(f"无法解析节日记录: {record!r}")
        days, year, month, day = (int(part) for part in match.groups())
        return cls(name=name, date=datetime(year, month, day), duration=timedelta(days=days))

    def to_record(self) -> str:
        """Return the ``days_year_month_day`` record for this holiday."""
        return f"{self.duration.days}_{self.date.year}_{self.date.month}_{self.date.day}"

    def status(self, now: datetime) -> str:
        """Describe how far ``now`` is from this holiday."""
        remaining = self.date - now
        if remaining >= timedelta(0):
            days = remaining.total_seconds() / 86400.0
            return f"距离{self.name}还有: {days:.2f}天！"
        if remaining + self.duration >= timedelta(0):
            return f"好好享受 {self.name} 假期吧!"
        return f"今年 {self.name} 假期已过"

    def __str__(self) -> str:
        return self.status(datetime.now())


def weekend(now: datetime) -> str:
    """Return the weekend countdown for ``now``."""
    weekday = now.isoweekday() % 7  # Sunday = 0 ... Saturday = 6
    if weekday in (0, 6):
        return "好好享受周末吧！"
    return f"距离周末还有:{5 - weekday}天！"


def moyu_message(holidays: Iterable[Holiday], now: datetime) -> str:
    """Compose the full daily reminder for ``now`` and the given holidays."""
    parts = [now.strftime("%Y-%m-%d"), _GREETING, weekend(now)]
    for holiday in holidays:
        parts.append("\n")
        parts.append(holiday.status(now))
    parts.append("\n")
    parts.append(_CLOSING)
    return "".join(parts)