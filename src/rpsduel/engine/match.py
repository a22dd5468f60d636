from __future__ import annotations

import random
from dataclasses import dataclass, field
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
from .ai import pick_card
from .deck import build_deck, shuffle, validate_composition
from .errors import IllegalMove
from .hand import CommittedMove, SideState, consume_and_draw, deal, hidden_side, is_exhausted
from .rules import resolve
from .types import (
    STANDARD_COMPOSITION,
    CardKind,
    DeckComposition,
    MatchMode,
    Phase,
    Resolution,
)

Event = dict[str, object]

SELF = 0
OPPONENT = 1

DISCONNECT_NOTICE = "Opponent disconnected. Please restart or join another room."


@dataclass(frozen=True)
class MatchConfig:
    composition: DeckComposition = STANDARD_COMPOSITION
    hand_size: int = 6
    open_hand: bool = False
    mode: MatchMode = "bot"
    opponent_composition: DeckComposition | None = None
    opponent_hand_size: int | None = None
    reveal_seconds: float = 1.5  # presentation only, the engine never sleeps

    def side_setup(self, player: int) -> tuple[DeckComposition, int]:
        if player == SELF:
            return self.composition, self.hand_size
        comp = self.opponent_composition or self.composition
        size = self.opponent_hand_size if self.opponent_hand_size is not None else self.hand_size
        return comp, size


# Both PvP clients must agree on the opponent's hand and deck sizes without
# negotiating, so PvP always uses the standard deck.
PVP_HAND_SIZE = 8
PVP_CONFIG = MatchConfig(composition=STANDARD_COMPOSITION, hand_size=PVP_HAND_SIZE, mode="pvp")


@dataclass(frozen=True)
class RoundRecord:
    number: int
    self_card: CardKind
    opponent_card: CardKind
    resolution: Resolution

    @property
    def text(self) -> str:
        return self.resolution.text()

    @property
    def delta(self) -> tuple[int, int]:
        return self.resolution.delta


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None


@dataclass
class MatchState:
    config: MatchConfig
    seed: int
    rng: random.Random
    players: list[SideState]
    phase: Phase
    last_round: RoundRecord | None = None
    winner: int | None = None
    draw: bool = False
    room_id: str | None = None
    frozen: bool = False
    notice: str = ""
    rounds_played: int = 0
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    def opponent(self, player: int) -> int:
        return 1 - player

    @property
    def is_over(self) -> bool:
        return self.phase == "terminal"

    @property
    def is_pvp(self) -> bool:
        return self.config.mode == "pvp"


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise IllegalMove(msg)


def _initial_phase(config: MatchConfig) -> Phase:
    return "awaiting_opponent" if config.mode == "pvp" else "awaiting_start"


def _build_sides(config: MatchConfig, rng: random.Random) -> list[SideState]:
    sides: list[SideState] = []
    for player in (SELF, OPPONENT):
        comp, size = config.side_setup(player)
        if player == OPPONENT and config.mode == "pvp":
            # Only the sizes of the remote player's hand and deck are known.
            sides.append(hidden_side(comp.total(), size))
            continue
        sides.append(deal(shuffle(rng, build_deck(comp)), size))
    return sides


def _validate_config(config: MatchConfig) -> None:
    for player in (SELF, OPPONENT):
        comp, size = config.side_setup(player)
        validate_composition(comp)
        if size < 1:
            raise ValueError("Hand size must be at least 1.")


def _play_card(state: MatchState, action: PlayCardAction) -> None:
    _require(not state.frozen, "Opponent disconnected.")
    _require(state.phase != "awaiting_opponent", "Waiting for an opponent.")
    _require(state.phase != "round_revealing", "Round is being revealed.")
    me = state.players[SELF]
    _require(me.committed is None, "Move already submitted.")
    _require(0 <= action.hand_index < len(me.hand), "Invalid hand index.")
    _require(me.hand[action.hand_index] == action.kind, "Card not in hand.")

    me.committed = CommittedMove(hand_index=action.hand_index, kind=action.kind)
    state.phase = "round_in_progress"
    state.event_log.append(
        {"type": "CARD_COMMITTED", "player": SELF, "hand_index": action.hand_index, "card": action.kind}
    )

    if state.config.mode == "bot":
        index, kind = pick_card(state, OPPONENT)
        state.players[OPPONENT].committed = CommittedMove(hand_index=index, kind=kind)
        state.event_log.append(
            {"type": "CARD_COMMITTED", "player": OPPONENT, "hand_index": index, "card": kind}
        )

    _maybe_resolve(state)


def _opponent_play(state: MatchState, action: OpponentPlayAction) -> None:
    _require(state.config.mode == "pvp", "Not a PvP match.")
    _require(not state.frozen, "Opponent disconnected.")
    _require(state.phase != "awaiting_opponent", "Waiting for an opponent.")
    opp = state.players[OPPONENT]
    _require(opp.committed is None, "Opponent move already pending.")
    _require(0 <= action.hand_index < len(opp.hand), "Invalid opponent hand index.")

    # May arrive while our last round is still on display; the opponent's
    # hand accounting is already up to date at that point.
    opp.committed = CommittedMove(hand_index=action.hand_index, kind=action.kind)
    state.event_log.append(
        {"type": "OPPONENT_COMMITTED", "player": OPPONENT, "hand_index": action.hand_index, "card": action.kind}
    )
    _maybe_resolve(state)


def _maybe_resolve(state: MatchState) -> None:
    me = state.players[SELF]
    opp = state.players[OPPONENT]
    if me.committed is None or opp.committed is None:
        return
    if state.phase == "round_revealing":
        return
    _resolve_round(state, me.committed, opp.committed)


def _resolve_round(state: MatchState, mine: CommittedMove, theirs: CommittedMove) -> None:
    result = resolve(mine.kind, theirs.kind)
    state.rounds_played += 1

    for player, move in ((SELF, mine), (OPPONENT, theirs)):
        side = state.players[player]
        drawn = consume_and_draw(side, move)
        side.committed = None
        if drawn is not None:
            state.event_log.append({"type": "CARD_DRAWN", "player": player, "card": drawn})

    d0, d1 = result.delta
    state.players[SELF].score += d0
    state.players[OPPONENT].score += d1
    state.last_round = RoundRecord(
        number=state.rounds_played,
        self_card=mine.kind,
        opponent_card=theirs.kind,
        resolution=result,
    )
    state.phase = "round_revealing"
    state.event_log.append(
        {
            "type": "ROUND_RESOLVED",
            "round": state.rounds_played,
            "cards": [mine.kind, theirs.kind],
            "outcome": result.outcome,
            "reason": result.reason,
            "delta": [d0, d1],
        }
    )


def _check_terminal(state: MatchState) -> bool:
    if not any(is_exhausted(p) for p in state.players):
        return False
    s0 = state.players[SELF].score
    s1 = state.players[OPPONENT].score
    if s0 > s1:
        state.winner = SELF
    elif s1 > s0:
        state.winner = OPPONENT
    else:
        state.draw = True
    state.phase = "terminal"
    state.event_log.append(
        {"type": "GAME_ENDED", "winner": state.winner, "draw": state.draw, "scores": [s0, s1]}
    )
    return True


def _advance(state: MatchState, action: AdvanceAction) -> None:
    _require(state.phase == "round_revealing", "No round to advance.")
    if _check_terminal(state):
        return
    state.phase = "round_in_progress"


def _restart(state: MatchState, action: RestartAction) -> None:
    state.players = _build_sides(state.config, state.rng)
    state.phase = _initial_phase(state.config)
    state.last_round = None
    state.winner = None
    state.draw = False
    state.frozen = False
    state.notice = ""
    state.rounds_played = 0
    if state.is_pvp:
        state.room_id = None
    state.event_log.append({"type": "MATCH_RESTARTED", "phase": state.phase})


def _opponent_joined(state: MatchState, action: OpponentJoinedAction) -> None:
    _require(state.config.mode == "pvp", "Not a PvP match.")
    state.event_log.append({"type": "OPPONENT_JOINED", "count": action.count})
    if action.count >= 2 and state.phase == "awaiting_opponent":
        state.phase = "awaiting_start"
        state.notice = ""


def _room_full(state: MatchState, action: RoomFullAction) -> None:
    _require(state.config.mode == "pvp", "Not a PvP match.")
    state.notice = action.message
    state.room_id = None
    state.event_log.append({"type": "ROOM_FULL", "message": action.message})


def _opponent_left(state: MatchState, action: OpponentLeftAction) -> None:
    _require(state.config.mode == "pvp", "Not a PvP match.")
    state.frozen = True
    state.notice = DISCONNECT_NOTICE
    state.event_log.append({"type": "OPPONENT_DISCONNECTED"})


def _dispatch(state: MatchState, action: Action) -> None:
    if isinstance(action, RestartAction):
        _restart(state, action)
    elif isinstance(action, OpponentJoinedAction):
        _opponent_joined(state, action)
    elif isinstance(action, RoomFullAction):
        _room_full(state, action)
    elif isinstance(action, OpponentLeftAction):
        _opponent_left(state, action)
    elif state.phase == "terminal":
        raise IllegalMove("Match already ended.")
    elif isinstance(action, PlayCardAction):
        _play_card(state, action)
    elif isinstance(action, OpponentPlayAction):
        _opponent_play(state, action)
    elif isinstance(action, AdvanceAction):
        _advance(state, action)
    else:
        raise IllegalMove("Unknown action.")


def step(state: MatchState, action: Action) -> StepResult:
    """Apply a single action to the match state.

    Rejected actions leave `state` untouched apart from the action log and
    report why in `StepResult.error`. Deterministic for a given
    (config, seed, action sequence).
    """
    # Log first so replay has a full record of attempted actions
    state.action_log.append(action)
    mark = len(state.event_log)
    try:
        _dispatch(state, action)
    except IllegalMove as e:
        return StepResult(ok=False, events=[], error=str(e))
    return StepResult(ok=True, events=state.event_log[mark:])


def new_match(config: MatchConfig, seed: int, room_id: str | None = None) -> MatchState:
    """Build both sides and return a match waiting for its first play.

    Raises InvalidComposition before any state exists when a side's deck
    would be empty.
    """
    _validate_config(config)
    rng = random.Random(seed)
    state = MatchState(
        config=config,
        seed=seed,
        rng=rng,
        players=_build_sides(config, rng),
        phase=_initial_phase(config),
        room_id=room_id,
    )
    state.event_log.append(
        {
            "type": "MATCH_STARTED",
            "mode": config.mode,
            "hand_sizes": [len(p.hand) for p in state.players],
            "deck_sizes": [len(p.deck) for p in state.players],
        }
    )
    return state


def replay(config: MatchConfig, seed: int, actions: Iterable[Action]) -> MatchState:
    state = new_match(config, seed)
    for a in actions:
        step(state, a)
    return state


def legal_plays(state: MatchState) -> list[PlayCardAction]:
    """Plays the local player could submit right now."""
    if state.phase not in ("awaiting_start", "round_in_progress") or state.frozen:
        return []
    me = state.players[SELF]
    if me.committed is not None:
        return []
    return [PlayCardAction(hand_index=i, kind=k) for i, k in enumerate(me.hand) if k is not None]
