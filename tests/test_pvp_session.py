from __future__ import annotations

from rpsduel.engine.match import DISCONNECT_NOTICE
from rpsduel.relay import protocol
from rpsduel.relay.protocol import Message
from rpsduel.relay.registry import RoomRegistry
from rpsduel.relay.session import PvpSession


class Hub:
    """In-memory stand-in for the network: sessions talk straight to a registry."""

    def __init__(self) -> None:
        self.inbox: dict[str, list[Message]] = {}
        self.registry = RoomRegistry(self._deliver)

    def _deliver(self, participant: str, message: Message) -> None:
        self.inbox.setdefault(participant, []).append(message)

    def session(self, participant: str, seed: int) -> PvpSession:
        def send(msg: Message) -> None:
            kind = msg["type"]
            if kind == protocol.JOIN_ROOM:
                self.registry.join(str(msg["roomId"]), participant)
            elif kind == protocol.PLAY_CARD:
                index = msg["index"]
                assert isinstance(index, int)
                self.registry.relay_move(str(msg["roomId"]), participant, str(msg["card"]), index)
            elif kind == protocol.LEAVE_ROOM:
                self.registry.leave(participant)

        return PvpSession(send, seed=seed)

    def flush(self, participant: str, session: PvpSession) -> None:
        pending = self.inbox.pop(participant, [])
        for msg in pending:
            session.handle(msg)


def _pair(room: str = "room-1") -> tuple[Hub, PvpSession, PvpSession]:
    hub = Hub()
    a = hub.session("a", seed=1)
    b = hub.session("b", seed=2)
    assert a.join(room)
    assert b.join(room)
    hub.flush("a", a)
    hub.flush("b", b)
    return hub, a, b


def _first(session: PvpSession) -> tuple[int, str]:
    kind = session.state.players[0].hand[0]
    assert kind is not None
    return 0, kind


def test_match_starts_once_both_players_joined() -> None:
    hub = Hub()
    a = hub.session("a", seed=1)
    assert a.state.phase == "awaiting_opponent"
    a.join("lonely")
    res = a.play(*_first(a))  # type: ignore[arg-type]
    assert not res.ok
    assert res.error == "Waiting for an opponent."

    _, a, b = _pair()
    assert a.state.phase == "awaiting_start"
    assert b.state.phase == "awaiting_start"
    assert len(a.state.players[0].hand) == 8
    assert len(a.state.players[1].hand) == 8


def test_empty_room_id_is_rejected() -> None:
    hub = Hub()
    a = hub.session("a", seed=1)
    assert not a.join("   ")
    assert a.state.notice == "Please enter a room ID."
    assert hub.registry.room_count() == 0


def test_a_round_resolves_the_same_way_on_both_sides() -> None:
    hub, a, b = _pair()
    assert a.play(*_first(a)).ok  # type: ignore[arg-type]
    assert a.state.phase == "round_in_progress"
    assert a.state.players[0].committed is not None
    assert len(a.state.players[0].hand) == 8

    hub.flush("b", b)
    assert b.state.players[1].committed is not None
    assert b.play(*_first(b)).ok  # type: ignore[arg-type]
    assert b.state.phase == "round_revealing"

    hub.flush("a", a)
    assert a.state.phase == "round_revealing"
    ra, rb = a.state.last_round, b.state.last_round
    assert ra is not None and rb is not None
    assert ra.self_card == rb.opponent_card
    assert ra.opponent_card == rb.self_card
    assert ra.resolution == rb.resolution.swapped()
    assert a.state.players[0].score == b.state.players[1].score
    assert a.state.players[1].score == b.state.players[0].score
    for s in (a, b):
        assert len(s.state.players[0].hand) == 8
        assert len(s.state.players[0].deck) == 9
        assert len(s.state.players[1].hand) == 8
        assert len(s.state.players[1].deck) == 9


def test_duplicate_play_is_not_relayed() -> None:
    hub, a, b = _pair()
    assert a.play(*_first(a)).ok  # type: ignore[arg-type]
    second = a.state.players[0].hand[1]
    assert second is not None
    res = a.play(1, second)
    assert not res.ok
    assert res.error == "Move already submitted."
    plays = [m for m in hub.inbox.get("b", []) if m["type"] == protocol.OPPONENT_PLAY]
    assert len(plays) == 1


def test_opponent_move_is_held_during_the_reveal() -> None:
    hub, a, b = _pair()
    a.play(*_first(a))  # type: ignore[arg-type]
    hub.flush("b", b)
    b.play(*_first(b))  # type: ignore[arg-type]
    hub.flush("a", a)
    assert a.state.phase == "round_revealing"

    # b moves on and plays round two while a is still showing round one
    b.advance()
    assert b.play(*_first(b)).ok  # type: ignore[arg-type]
    hub.flush("a", a)
    assert a.state.phase == "round_revealing"
    assert a.state.players[1].committed is not None

    assert a.advance().ok
    assert a.state.phase == "round_in_progress"
    assert a.play(*_first(a)).ok  # type: ignore[arg-type]
    assert a.state.rounds_played == 2


def test_full_pvp_match_ends_with_mirrored_results() -> None:
    hub, a, b = _pair()
    while not a.state.is_over:
        assert a.play(*_first(a)).ok  # type: ignore[arg-type]
        hub.flush("b", b)
        assert b.play(*_first(b)).ok  # type: ignore[arg-type]
        hub.flush("a", a)
        a.advance()
        b.advance()

    assert b.state.is_over
    assert a.state.rounds_played == b.state.rounds_played == 18
    if a.state.draw:
        assert b.state.draw
    else:
        assert a.state.winner is not None and b.state.winner is not None
        assert a.state.winner == 1 - b.state.winner


def test_disconnect_freezes_the_remaining_player() -> None:
    hub, a, b = _pair()
    b.restart()
    assert b.state.phase == "awaiting_opponent"
    assert b.state.room_id is None

    hub.flush("a", a)
    assert a.state.frozen
    assert a.state.notice == DISCONNECT_NOTICE
    assert not a.play(*_first(a)).ok  # type: ignore[arg-type]


def test_third_player_sees_room_full() -> None:
    hub, a, b = _pair("busy")
    c = hub.session("c", seed=3)
    c.join("busy")
    hub.flush("c", c)
    assert c.state.notice == protocol.ROOM_FULL_MESSAGE
    assert c.state.room_id is None
    assert c.state.phase == "awaiting_opponent"
    assert hub.registry.members("busy") == ["a", "b"]


def test_joining_another_room_mid_match_is_refused() -> None:
    hub, a, b = _pair("r1")
    for _ in range(3):
        a.play(*_first(a))  # type: ignore[arg-type]
        hub.flush("b", b)
        b.play(*_first(b))  # type: ignore[arg-type]
        hub.flush("a", a)
        a.advance()
        b.advance()

    c = hub.session("c", seed=3)
    c.join("r2")
    assert not a.join("r2")
    assert a.state.notice == "Restart to join another room."
    assert a.state.room_id == "r1"
    assert hub.registry.members("r1") == ["a", "b"]
    assert hub.registry.members("r2") == ["c"]

    # after a restart the new room deals both sides from scratch
    a.restart()
    assert a.join("r2")
    hub.flush("a", a)
    hub.flush("c", c)
    assert a.state.phase == "awaiting_start"
    mirror = a.state.players[1]
    real = c.state.players[0]
    assert (len(mirror.hand), len(mirror.deck)) == (len(real.hand), len(real.deck))
