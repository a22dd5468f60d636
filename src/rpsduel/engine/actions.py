from __future__ import annotations

from dataclasses import dataclass

from .types import CardKind


@dataclass(frozen=True)
class PlayCardAction:
    hand_index: int
    kind: CardKind


@dataclass(frozen=True)
class OpponentPlayAction:
    """A move relayed from the remote player (PvP)."""

    hand_index: int
    kind: CardKind


@dataclass(frozen=True)
class AdvanceAction:
    """End of the reveal display interval."""


@dataclass(frozen=True)
class RestartAction:
    pass


@dataclass(frozen=True)
class OpponentJoinedAction:
    count: int


@dataclass(frozen=True)
class RoomFullAction:
    message: str


@dataclass(frozen=True)
class OpponentLeftAction:
    pass


Action = (
    PlayCardAction
    | OpponentPlayAction
    | AdvanceAction
    | RestartAction
    | OpponentJoinedAction
    | RoomFullAction
    | OpponentLeftAction
)
