from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .types import CardKind

# A hidden slot (the PvP opponent's cards are never known locally).
Slot = CardKind | None


@dataclass(frozen=True)
class CommittedMove:
    """A move that has been accepted but not yet folded into a round."""

    hand_index: int
    kind: CardKind


@dataclass
class SideState:
    hand: list[Slot]
    deck: list[Slot]
    hand_size: int
    played: list[CardKind] = field(default_factory=list)
    score: int = 0
    committed: CommittedMove | None = None

    @property
    def remaining(self) -> int:
        return len(self.hand) + len(self.deck)


def deal(deck: Sequence[Slot], hand_size: int) -> SideState:
    """Split a shuffled deck into the opening hand and the rest."""
    n = min(max(0, hand_size), len(deck))
    cards = list(deck)
    return SideState(hand=cards[:n], deck=cards[n:], hand_size=hand_size)


def hidden_side(total: int, hand_size: int) -> SideState:
    return deal([None] * total, hand_size)


def consume_and_draw(side: SideState, move: CommittedMove) -> Slot:
    """Remove the card in slot `move.hand_index`, then refill by one if possible.

    Removal is by slot, never by value, so duplicates in hand are safe.
    Returns the drawn card, or None when nothing was drawn (a hidden draw
    also returns None; check `remaining` instead).
    """
    side.hand.pop(move.hand_index)
    side.played.append(move.kind)
    if len(side.hand) < side.hand_size and side.deck:
        card = side.deck.pop(0)
        side.hand.append(card)
        return card
    return None


def is_exhausted(side: SideState) -> bool:
    return not side.hand and not side.deck
