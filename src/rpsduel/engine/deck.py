from __future__ import annotations

import random
from typing import Sequence, TypeVar

from .errors import InvalidComposition
from .types import ALL_KINDS, CardKind, DeckComposition

T = TypeVar("T")


def validate_composition(composition: DeckComposition) -> None:
    if composition.total() <= 0:
        raise InvalidComposition("Deck cannot be empty.")


def build_deck(composition: DeckComposition) -> list[CardKind]:
    validate_composition(composition)
    deck: list[CardKind] = []
    for kind in ALL_KINDS:
        deck.extend([kind] * composition.count(kind))
    return deck


def shuffle(rng: random.Random, items: Sequence[T]) -> list[T]:
    """Fisher-Yates over a copy of `items`; the input is left untouched."""
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randrange(i + 1)
        out[i], out[j] = out[j], out[i]
    return out
