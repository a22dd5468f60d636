"""Deterministic, headless rules engine for rpsduel.

IMPORTANT: This package must never import networking or relay code.
"""

from .actions import (
    AdvanceAction,
    OpponentJoinedAction,
    OpponentLeftAction,
    OpponentPlayAction,
    PlayCardAction,
    RestartAction,
    RoomFullAction,
)
from .errors import IllegalMove, InvalidComposition
from .match import MatchConfig, MatchState, StepResult, new_match, step
from .rules import resolve
from .types import CardKind, DeckComposition, Phase

__all__ = [
    "AdvanceAction",
    "CardKind",
    "DeckComposition",
    "IllegalMove",
    "InvalidComposition",
    "MatchConfig",
    "MatchState",
    "OpponentJoinedAction",
    "OpponentLeftAction",
    "OpponentPlayAction",
    "Phase",
    "PlayCardAction",
    "RestartAction",
    "RoomFullAction",
    "StepResult",
    "new_match",
    "resolve",
    "step",
]
