from __future__ import annotations

import itertools
import random
from collections import Counter

import pytest

from rpsduel.engine.deck import build_deck, shuffle
from rpsduel.engine.errors import InvalidComposition
from rpsduel.engine.hand import CommittedMove, SideState, consume_and_draw, deal, is_exhausted
from rpsduel.engine.rules import resolve
from rpsduel.engine.types import ALL_KINDS, STANDARD_COMPOSITION, DeckComposition


def test_examples_resolve_as_documented() -> None:
    r = resolve("Rock", "Scissors")
    assert (r.outcome, r.reason) == ("a_wins", "plain")

    assert resolve("Rock", "Rock").outcome == "tie"
    assert resolve("SuperRock", "SuperRock").outcome == "tie"

    r = resolve("SuperRock", "Rock")
    assert (r.outcome, r.reason) == ("a_wins", "super_bonus")

    # Super status does not matter once the base shapes differ.
    r = resolve("SuperRock", "Paper")
    assert (r.outcome, r.reason) == ("b_wins", "plain")


def test_resolution_is_symmetric_under_role_swap() -> None:
    for a, b in itertools.product(ALL_KINDS, repeat=2):
        ab = resolve(a, b)
        ba = resolve(b, a)
        assert ab.reason == ba.reason
        assert ba == ab.swapped()
        if ab.outcome == "tie":
            assert ba.outcome == "tie"
        else:
            assert {ab.outcome, ba.outcome} == {"a_wins", "b_wins"}


def test_outcome_text_and_delta() -> None:
    assert resolve("SuperPaper", "Paper").text() == "You Win! (Super card bonus)"
    assert resolve("Paper", "SuperPaper").text() == "Opponent Wins! (Super card bonus)"
    assert resolve("Scissors", "Paper").text() == "You Win!"
    assert resolve("Scissors", "SuperRock").text() == "Opponent Wins!"
    assert resolve("Paper", "Paper").text() == "Tie!"

    assert resolve("Scissors", "Paper").delta == (1, 0)
    assert resolve("Scissors", "Rock").delta == (0, 1)
    assert resolve("Rock", "Rock").delta == (0, 0)


def test_build_deck_matches_composition() -> None:
    comp = DeckComposition(regular_rock=3, regular_scissors=1, super_paper=2)
    deck = build_deck(comp)
    assert len(deck) == comp.total() == 6
    counts = Counter(deck)
    for kind in ALL_KINDS:
        assert counts[kind] == comp.count(kind)


def test_build_deck_rejects_empty_composition() -> None:
    with pytest.raises(InvalidComposition):
        build_deck(DeckComposition())


def test_composition_from_settings_clamps_negatives() -> None:
    comp = DeckComposition.from_dict({"regularRock": -3, "superScissors": 2})
    assert comp.regular_rock == 0
    assert comp.super_scissors == 2
    assert comp.to_dict()["superScissors"] == 2


def test_shuffle_keeps_the_multiset_and_input() -> None:
    deck = build_deck(STANDARD_COMPOSITION)
    original = list(deck)
    out = shuffle(random.Random(99), deck)
    assert deck == original
    assert Counter(out) == Counter(deck)


def test_shuffle_is_uniform_over_permutations() -> None:
    rng = random.Random(0)
    seen = Counter(tuple(shuffle(rng, [0, 1, 2])) for _ in range(6000))
    assert len(seen) == 6
    for count in seen.values():
        assert 850 < count < 1150


def test_deal_caps_hand_at_deck_size() -> None:
    side = deal(["Rock", "Paper"], hand_size=5)
    assert side.hand == ["Rock", "Paper"]
    assert side.deck == []


def test_consume_removes_exact_slot_and_draws_from_front() -> None:
    side = SideState(hand=["Rock", "Paper", "Rock"], deck=["Scissors", "SuperRock"], hand_size=3)
    drawn = consume_and_draw(side, CommittedMove(hand_index=2, kind="Rock"))
    assert drawn == "Scissors"
    assert side.hand == ["Rock", "Paper", "Scissors"]
    assert side.deck == ["SuperRock"]
    assert side.played == ["Rock"]


def test_consume_without_deck_shrinks_hand() -> None:
    side = SideState(hand=["Rock"], deck=[], hand_size=1)
    assert consume_and_draw(side, CommittedMove(hand_index=0, kind="Rock")) is None
    assert is_exhausted(side)
