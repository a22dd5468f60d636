from __future__ import annotations

from .types import BaseShape, CardKind, Resolution, base_shape, is_super

BEATS: dict[BaseShape, BaseShape] = {"Rock": "Scissors", "Scissors": "Paper", "Paper": "Rock"}


def resolve(a: CardKind, b: CardKind) -> Resolution:
    """Decide a round between `a` (acting player) and `b`.

    Identical kinds tie. Same base shape with different kinds means exactly
    one of them is the super variant, and it wins. Otherwise the plain
    Rock/Paper/Scissors cycle decides on base shapes only.
    """
    if a == b:
        return Resolution(a=a, b=b, outcome="tie", reason="plain")

    sa = base_shape(a)
    sb = base_shape(b)
    if sa == sb:
        winner = "a_wins" if is_super(a) else "b_wins"
        return Resolution(a=a, b=b, outcome=winner, reason="super_bonus")

    if BEATS[sa] == sb:
        return Resolution(a=a, b=b, outcome="a_wins", reason="plain")
    return Resolution(a=a, b=b, outcome="b_wins", reason="plain")
