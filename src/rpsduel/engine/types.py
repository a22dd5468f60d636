from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

CardKind = Literal["Rock", "Paper", "Scissors", "SuperRock", "SuperPaper", "SuperScissors"]
BaseShape = Literal["Rock", "Paper", "Scissors"]

Outcome = Literal["tie", "a_wins", "b_wins"]
Reason = Literal["plain", "super_bonus"]

MatchMode = Literal["bot", "pvp"]
Phase = Literal[
    "awaiting_opponent",
    "awaiting_start",
    "round_in_progress",
    "round_revealing",
    "terminal",
]

ALL_KINDS: tuple[CardKind, ...] = (
    "Rock",
    "Paper",
    "Scissors",
    "SuperRock",
    "SuperPaper",
    "SuperScissors",
)

_BASE: dict[CardKind, BaseShape] = {
    "Rock": "Rock",
    "Paper": "Paper",
    "Scissors": "Scissors",
    "SuperRock": "Rock",
    "SuperPaper": "Paper",
    "SuperScissors": "Scissors",
}


def base_shape(kind: CardKind) -> BaseShape:
    return _BASE[kind]


def is_super(kind: CardKind) -> bool:
    return kind.startswith("Super")


def is_card_kind(value: object) -> bool:
    return isinstance(value, str) and value in _BASE


# settings key -> kind, in deck build order
COMPOSITION_KEYS: tuple[tuple[str, CardKind], ...] = (
    ("regularRock", "Rock"),
    ("regularPaper", "Paper"),
    ("regularScissors", "Scissors"),
    ("superRock", "SuperRock"),
    ("superPaper", "SuperPaper"),
    ("superScissors", "SuperScissors"),
)


@dataclass(frozen=True)
class DeckComposition:
    """How many copies of each kind go into a deck."""

    regular_rock: int = 0
    regular_paper: int = 0
    regular_scissors: int = 0
    super_rock: int = 0
    super_paper: int = 0
    super_scissors: int = 0

    def count(self, kind: CardKind) -> int:
        return {
            "Rock": self.regular_rock,
            "Paper": self.regular_paper,
            "Scissors": self.regular_scissors,
            "SuperRock": self.super_rock,
            "SuperPaper": self.super_paper,
            "SuperScissors": self.super_scissors,
        }[kind]

    def total(self) -> int:
        return sum(self.count(k) for k in ALL_KINDS)

    def counts(self) -> dict[CardKind, int]:
        return {k: self.count(k) for k in ALL_KINDS}

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "DeckComposition":
        # Missing keys count as zero; negatives are clamped.
        values: dict[str, int] = {}
        for key, _kind in COMPOSITION_KEYS:
            raw = d.get(key, 0)
            values[key] = max(0, raw) if isinstance(raw, int) and not isinstance(raw, bool) else 0
        return DeckComposition(
            regular_rock=values["regularRock"],
            regular_paper=values["regularPaper"],
            regular_scissors=values["regularScissors"],
            super_rock=values["superRock"],
            super_paper=values["superPaper"],
            super_scissors=values["superScissors"],
        )

    def to_dict(self) -> dict[str, int]:
        return {key: self.count(kind) for key, kind in COMPOSITION_KEYS}


STANDARD_COMPOSITION = DeckComposition(
    regular_rock=4,
    regular_paper=4,
    regular_scissors=4,
    super_rock=2,
    super_paper=2,
    super_scissors=2,
)


@dataclass(frozen=True)
class Resolution:
    """Result of one round, from the point of view of card `a`."""

    a: CardKind
    b: CardKind
    outcome: Outcome
    reason: Reason

    @property
    def delta(self) -> tuple[int, int]:
        if self.outcome == "a_wins":
            return (1, 0)
        if self.outcome == "b_wins":
            return (0, 1)
        return (0, 0)

    def swapped(self) -> "Resolution":
        flipped: Outcome = self.outcome
        if self.outcome == "a_wins":
            flipped = "b_wins"
        elif self.outcome == "b_wins":
            flipped = "a_wins"
        return Resolution(a=self.b, b=self.a, outcome=flipped, reason=self.reason)

    def text(self) -> str:
        if self.outcome == "tie":
            return "Tie!"
        head = "You Win!" if self.outcome == "a_wins" else "Opponent Wins!"
        if self.reason == "super_bonus":
            return f"{head} (Super card bonus)"
        return head
