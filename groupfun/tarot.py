"""Tarot card draws, card meanings and spreads."""

from __future__ import annotations

import json
import random
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

__all__ = [
    "IMAGE_BASE",
    "MAX_DRAW",
    "ArcanaKind",
    "Card",
    "Deck",
    "DrawnCard",
    "Formation",
    "Spread",
    "SpreadEntry",
    "TarotError",
    "parse_draw_command",
]

IMAGE_BASE = "https://gitcode.net/shudorcl/zbp-tarot/-/raw/master/"
MAX_DRAW = 20
MAJOR_COUNT = 22

_REASONS = ("您抽到的是~\n『", "锵锵锵，塔罗牌的预言是~\n『", "诶，让我看看您抽到了~\n『")
_POSITIONS = ("正位", "逆位")
_REVERSE_DIRS = ("", "Reverse")

_DRAW_COMMAND = re.compile(r"^抽(\d{1,2}张)?((塔罗牌|大阿(尔)?卡纳)|小阿(尔)?卡纳)$")


class TarotError(ValueError):
    """Raised for a draw or spread that cannot be made."""


class ArcanaKind(Enum):
    """Which part of the deck to draw from: ``(first card, number of cards)``."""

    MAJOR = (0, 22)
    MINOR = (22, 55)
    MIXED = (0, 77)

    @property
    def start(self) -> int:
        return self.value[0]

    @property
    def length(self) -> int:
        return self.value[1]


@dataclass(frozen=True)
class Card:
    """A tarot card and its meanings."""

    name: str
    description: str = ""
    reverse_description: str = ""
    img_url: str = ""


@dataclass(frozen=True)
class Formation:
    """A spread layout."""

    cards_num: int
    is_cut: bool = False
    represent: list[list[str]] = field(default_factory=list)


@dataclass(frozen=True)
class DrawnCard:
    """A card as drawn, upright or reversed."""

    card: Card
    reversed: bool
    reason: str = ""

    @property
    def position(self) -> str:
        return _POSITIONS[self.reversed]

    @property
    def image_url(self) -> str:
        return f"{IMAGE_BASE}/{_REVERSE_DIRS[self.reversed]}/{self.card.img_url}"

    @property
    def meaning(self) -> str:
        return self.card.reverse_description if self.reversed else self.card.description

    @property
    def text(self) -> str:
        return f"{self.reason}{self.position}』的『{self.card.name}』\n"


@dataclass(frozen=True)
class SpreadEntry:
    """One place of a spread and the card laid there."""

    represent: str
    drawn: DrawnCard


@dataclass(frozen=True)
class Spread:
    """A laid-out spread."""

    formation: str
    entries: list[SpreadEntry]

    def render(self, user: str) -> str:
        """Return the reading of the spread for ``user``."""
        parts = [f"{user}---{self.formation}\n"]
        for entry in self.entries:
            drawn = entry.drawn
            parts.append(
                f"{entry.represent}:『{drawn.position}』的『{drawn.card.name}』\n"
                f"其释义为: \n{drawn.meaning}\n"
            )
        return "".join(parts)


def _load(data: Any) -> Any:
    if isinstance(data, (bytes, str)):
        return json.loads(data)
    return data


def _card(raw: dict[str, Any]) -> Card:
    info = raw.get("info") or {}
    return Card(
        name=raw.get("name", ""),
        description=info.get("description", ""),
        reverse_description=info.get("reverseDescription", ""),
        img_url=info.get("imgUrl", ""),
    )


def _formation(raw: dict[str, Any]) -> Formation:
    return Formation(
        cards_num=int(raw.get("cards_num", 0)),
        is_cut=bool(raw.get("is_cut", False)),
        represent=[list(row) for row in raw.get("represent", [])],
    )


class Deck:
    """The full tarot deck with its spreads."""

    def __init__(self, cards: dict[str, Card], formations: dict[str, Formation]) -> None:
        self.cards = cards
        self.formations = formations
        self.by_name = {card.name: card for card in cards.values()}
        self.major_arcana = [
            cards[str(i)].name if str(i) in cards else "" for i in range(MAJOR_COUNT)
        ]

    @classmethod
    def from_json(cls, cards_json: Any, formations_json: Any) -> "Deck":
        """Build a deck from the card and spread JSON documents."""
        cards = {key: _card(raw) for key, raw in _load(cards_json).items()}
        formations = {key: _formation(raw) for key, raw in _load(formations_json).items()}
        return cls(cards, formations)

    def _pick(self, index: int) -> Card:
        return self.cards.get(str(index), Card(name=""))

    def draw(
        self, count: int, kind: ArcanaKind, rng: random.Random | None = None
    ) -> list[DrawnCard]:
        """Draw ``count`` different cards of ``kind``."""
        if count <= 0:
            raise TarotError("张数必须为正")
        if count > MAX_DRAW:
            raise TarotError("抽取张数过多")
        rng = rng if rng is not None else random.Random()
        drawn = []
        for offset in rng.sample(range(kind.length), count):
            reversed_ = rng.randrange(2) == 1
            reason = rng.choice(_REASONS)
            drawn.append(DrawnCard(self._pick(offset + kind.start), reversed_, reason))
        return drawn

    def interpret(self, name: str) -> Card | None:
        """Return the card called ``name``, or ``None``."""
        return self.by_name.get(name)

    def card_list(self) -> str:
        """Return the list of card names shown when a card is not found."""
        major = self.major_arcana
        return (
            "塔罗牌列表\n大阿尔卡纳:\n"
            + " ".join(major[:7])
            + "\n"
            + " ".join(major[7:14])
            + "\n"
            + " ".join(major[14:22])
            + "\n小阿尔卡纳:\n[圣杯|星币|宝剑|权杖] [0-10|侍从|骑士|王后|国王]"
        )

    def spread(
        self, formation_name: str, kind: ArcanaKind, rng: random.Random | None = None
    ) -> Spread:
        """Lay out the spread ``formation_name`` with cards of ``kind``."""
        formation = self.formations.get(formation_name)
        if formation is None:
            raise TarotError(
                f"没有找到{formation_name}噢~\n现有牌阵列表: \n" + "\n".join(self.formations)
            )
        rng = rng if rng is not None else random.Random()
        places = formation.represent[0] if formation.represent else []
        entries = []
        for i, offset in enumerate(rng.sample(range(kind.length), formation.cards_num)):
            reversed_ = rng.randrange(2) == 1
            drawn = DrawnCard(self._pick(offset + kind.start), reversed_)
            entries.append(SpreadEntry(places[i], drawn))
        return Spread(formation_name, entries)


def parse_draw_command(text: str) -> tuple[int, ArcanaKind] | None:
    """Read a draw command such as ``抽3张小阿卡纳``; ``None`` when it is not one."""
    match = _DRAW_COMMAND.match(text)
    if match is None:
        return None
    count = int(match.group(1)[:-1]) if match.group(1) else 1
    kind = ArcanaKind.MINOR if "小" in match.group(2) else ArcanaKind.MAJOR
    return count, kind