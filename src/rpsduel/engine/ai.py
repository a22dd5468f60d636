from __future__ import annotations

import random
from typing import TYPE_CHECKING

from .types import CardKind

if TYPE_CHECKING:
    from .match import MatchState


def pick_card(state: "MatchState", player: int, rng: random.Random | None = None) -> tuple[int, CardKind]:
    """Pick a slot uniformly at random from `player`'s hand.

    Uses the engine RNG (`state.rng`) by default so bot matches stay
    reproducible for a given seed.
    """
    r = rng or state.rng
    hand = state.players[player].hand
    if not hand:
        raise ValueError("Bot has no cards to play.")
    index = r.randrange(len(hand))
    kind = hand[index]
    if kind is None:
        raise ValueError("Bot hand is hidden.")
    return index, kind
