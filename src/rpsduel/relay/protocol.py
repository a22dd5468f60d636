"""Wire messages exchanged with the relay: one JSON object per line."""

from __future__ import annotations

import json
from functools import lru_cache

from jsonschema import Draft202012Validator

from rpsduel.paths import get_paths

Message = dict[str, object]

# client -> server
JOIN_ROOM = "join-room"
PLAY_CARD = "play-card"
LEAVE_ROOM = "leave-room"

# server -> client
PLAYER_JOINED = "player-joined"
ROOM_FULL = "room-full"
OPPONENT_PLAY = "opponent-play"
OPPONENT_DISCONNECTED = "opponent-disconnected"

ROOM_FULL_MESSAGE = "Room is full. Please try another room ID."


class ProtocolError(ValueError):
    """Raised when a line is not a valid relay message."""


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    path = get_paths().schema_dir / "wire.schema.json"
    schema = json.loads(path.read_text(encoding="utf-8"))
    return Draft202012Validator(schema)


def validate(msg: object) -> Message:
    errors = list(_validator().iter_errors(msg))
    if errors or not isinstance(msg, dict):
        detail = errors[0].message if errors else "not an object"
        raise ProtocolError(f"Invalid relay message: {detail}")
    return msg


def encode(msg: Message) -> bytes:
    validate(msg)
    return (json.dumps(msg, separators=(",", ":")) + "\n").encode("utf-8")


def decode(line: bytes) -> Message:
    try:
        raw = json.loads(line.decode("utf-8").strip())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProtocolError(f"Malformed line: {e}") from e
    return validate(raw)


def join_room(room_id: str) -> Message:
    return {"type": JOIN_ROOM, "roomId": room_id}


def play_card(room_id: str, card: str, index: int) -> Message:
    return {"type": PLAY_CARD, "roomId": room_id, "card": card, "index": index}


def leave_room() -> Message:
    return {"type": LEAVE_ROOM}


def player_joined(count: int) -> Message:
    return {"type": PLAYER_JOINED, "count": count}


def room_full(message: str = ROOM_FULL_MESSAGE) -> Message:
    return {"type": ROOM_FULL, "message": message}


def opponent_play(card: str, index: int) -> Message:
    return {"type": OPPONENT_PLAY, "card": card, "index": index}


def opponent_disconnected() -> Message:
    return {"type": OPPONENT_DISCONNECTED}
