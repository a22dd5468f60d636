from __future__ import annotations

import logging
from typing import Callable

from rpsduel.engine.actions import (
    Action,
    AdvanceAction,
    OpponentJoinedAction,
    OpponentLeftAction,
    OpponentPlayAction,
    PlayCardAction,
    RestartAction,
    RoomFullAction,
)
from rpsduel.engine.match import PVP_CONFIG, MatchConfig, MatchState, StepResult, new_match, step
from rpsduel.engine.serialize import snapshot
from rpsduel.engine.types import CardKind, is_card_kind

from . import protocol
from .protocol import Message

log = logging.getLogger(__name__)

Send = Callable[[Message], None]


class PvpSession:
    """One player's side of a PvP match, independent of the transport.

    Local plays go to the engine first and are only sent to the relay once
    accepted. Relay notifications are turned into engine actions. Each
    client resolves a round on its own as soon as both moves are known;
    a committed move is final and never renegotiated with the peer.
    """

    def __init__(self, send: Send, seed: int, config: MatchConfig = PVP_CONFIG) -> None:
        if config.mode != "pvp":
            raise ValueError("PvpSession needs a pvp MatchConfig.")
        self._send = send
        self.state: MatchState = new_match(config, seed)

    def join(self, room_id: str) -> bool:
        room_id = room_id.strip()
        if not room_id:
            self.state.notice = "Please enter a room ID."
            return False
        # Hands are only in sync with a new opponent before the first deal is used.
        if self.state.phase != "awaiting_opponent":
            self.state.notice = "Restart to join another room."
            return False
        self.state.notice = ""
        self.state.room_id = room_id
        self._send(protocol.join_room(room_id))
        return True

    def play(self, hand_index: int, kind: CardKind) -> StepResult:
        result = step(self.state, PlayCardAction(hand_index=hand_index, kind=kind))
        if result.ok and self.state.room_id is not None:
            self._send(protocol.play_card(self.state.room_id, kind, hand_index))
        return result

    def advance(self) -> StepResult:
        return step(self.state, AdvanceAction())

    def restart(self) -> StepResult:
        if self.state.room_id is not None:
            self._send(protocol.leave_room())
        return step(self.state, RestartAction())

    def handle(self, message: Message) -> StepResult:
        action = self._to_action(message)
        if action is None:
            log.warning("Ignoring relay message %r", message.get("type"))
            return StepResult(ok=False, events=[], error="Unknown relay message.")
        result = step(self.state, action)
        if not result.ok:
            log.info("Relay message %r rejected: %s", message.get("type"), result.error)
        return result

    def _to_action(self, message: Message) -> Action | None:
        kind = message.get("type")
        if kind == protocol.PLAYER_JOINED:
            count = message.get("count")
            return OpponentJoinedAction(count=count if isinstance(count, int) else 0)
        if kind == protocol.ROOM_FULL:
            return RoomFullAction(message=str(message.get("message", protocol.ROOM_FULL_MESSAGE)))
        if kind == protocol.OPPONENT_PLAY:
            card = message.get("card")
            index = message.get("index")
            if not is_card_kind(card) or not isinstance(index, int):
                return None
            return OpponentPlayAction(hand_index=index, kind=card)  # type: ignore[arg-type]
        if kind == protocol.OPPONENT_DISCONNECTED:
            return OpponentLeftAction()
        return None

    def snapshot(self) -> dict[str, object]:
        return snapshot(self.state)
