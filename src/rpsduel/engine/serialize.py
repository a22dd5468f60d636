from __future__ import annotations

from typing import Iterable

from .actions import (
    Action,
    AdvanceAction,
    OpponentJoinedAction,
    OpponentLeftAction,
    OpponentPlayAction,
    PlayCardAction,
    RestartAction,
    RoomFullAction,
)
from .hand import Slot
from .match import OPPONENT, SELF, MatchState, RoundRecord
from .types import ALL_KINDS, CardKind


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, PlayCardAction):
        return {"type": "play", "hand_index": a.hand_index, "card": a.kind}
    if isinstance(a, OpponentPlayAction):
        return {"type": "opponent_play", "hand_index": a.hand_index, "card": a.kind}
    if isinstance(a, AdvanceAction):
        return {"type": "advance"}
    if isinstance(a, RestartAction):
        return {"type": "restart"}
    if isinstance(a, OpponentJoinedAction):
        return {"type": "opponent_joined", "count": a.count}
    if isinstance(a, RoomFullAction):
        return {"type": "room_full", "message": a.message}
    if isinstance(a, OpponentLeftAction):
        return {"type": "opponent_left"}
    # should be unreachable
    return {"type": "unknown"}


def card_counts(cards: Iterable[Slot]) -> dict[str, int]:
    counts: dict[CardKind, int] = {k: 0 for k in ALL_KINDS}
    for c in cards:
        if c is not None:
            counts[c] += 1
    return {k: v for k, v in counts.items() if v > 0}


def _round_to_dict(r: RoundRecord | None) -> dict[str, object] | None:
    if r is None:
        return None
    return {
        "number": r.number,
        "self_card": r.self_card,
        "opponent_card": r.opponent_card,
        "outcome": r.resolution.outcome,
        "reason": r.resolution.reason,
        "text": r.text,
        "delta": list(r.delta),
    }


def _opponent_hand_view(state: MatchState) -> list[Slot]:
    hand = state.players[OPPONENT].hand
    if state.config.mode == "bot" and state.config.open_hand:
        return list(hand)
    return [None] * len(hand)


def snapshot(state: MatchState) -> dict[str, object]:
    """What the presentation layer may see after any transition."""
    me = state.players[SELF]
    opp = state.players[OPPONENT]
    return {
        "mode": state.config.mode,
        "phase": state.phase,
        "room_id": state.room_id,
        "frozen": state.frozen,
        "notice": state.notice,
        "self": {
            "hand": list(me.hand),
            "hand_size": len(me.hand),
            "deck_count": len(me.deck),
            "score": me.score,
            "committed": me.committed.kind if me.committed else None,
            "hand_counts": card_counts(me.hand),
            "played_counts": card_counts(me.played),
        },
        "opponent": {
            "hand": _opponent_hand_view(state),
            "hand_size": len(opp.hand),
            "deck_count": len(opp.deck),
            "score": opp.score,
            "committed": opp.committed is not None,
            "played_counts": card_counts(opp.played),
        },
        "last_round": _round_to_dict(state.last_round),
        "result_text": state.last_round.text if state.phase == "round_revealing" and state.last_round else "",
        "winner": state.winner,
        "draw": state.draw,
    }


def state_dump(state: MatchState) -> dict[str, object]:
    """Full canonical dump, both hands included, for replay comparison."""
    return {
        "seed": state.seed,
        "phase": state.phase,
        "winner": state.winner,
        "draw": state.draw,
        "players": [
            {"hand": list(p.hand), "deck": list(p.deck), "played": list(p.played), "score": p.score}
            for p in state.players
        ],
        "action_log": [action_to_dict(a) for a in state.action_log],
    }
