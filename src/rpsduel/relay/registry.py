from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable

from . import protocol
from .protocol import Message

log = logging.getLogger(__name__)

MAX_MEMBERS = 2

Deliver = Callable[[str, Message], None]


@dataclass
class Room:
    room_id: str
    members: list[str] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)
    closed: bool = False


class RoomRegistry:
    """Room membership and move forwarding. Knows nothing about the game.

    Every mutation of a room happens under that room's own lock, so two
    joins racing for the last seat cannot both get in, while different rooms
    never wait on each other. The room table lock only covers looking a room
    up, creating it, and dropping it once empty.

    `deliver(participant_id, message)` must not block; it is called while
    the room lock is held so notifications keep their per-room order.
    """

    def __init__(self, deliver: Deliver) -> None:
        self._deliver = deliver
        self._rooms: dict[str, Room] = {}
        self._table_lock = threading.Lock()
        self._where: dict[str, str] = {}  # participant -> room id
        self._where_lock = threading.Lock()

    def _get_or_create(self, room_id: str) -> Room:
        with self._table_lock:
            room = self._rooms.get(room_id)
            if room is None:
                room = Room(room_id=room_id)
                self._rooms[room_id] = room
            return room

    def _get(self, room_id: str) -> Room | None:
        with self._table_lock:
            return self._rooms.get(room_id)

    def _drop_if_empty(self, room: Room) -> None:
        # caller holds room.lock
        if room.members:
            return
        room.closed = True
        with self._table_lock:
            if self._rooms.get(room.room_id) is room:
                del self._rooms[room.room_id]
        log.debug("Room %r closed", room.room_id)

    def join(self, room_id: str, participant: str) -> bool:
        """Seat `participant` in `room_id`. Returns False if the room is full.

        A rejected join leaves the participant where it was. The previous
        room is only left once the new seat is taken.
        """
        if self.room_of(participant) == room_id:
            return True

        while True:
            room = self._get_or_create(room_id)
            with room.lock:
                if room.closed:
                    # emptied and dropped between lookup and lock; retry on a fresh room
                    continue
                if len(room.members) >= MAX_MEMBERS:
                    log.info("Room %r full, rejected %s", room_id, participant)
                    self._deliver(participant, protocol.room_full())
                    return False
                room.members.append(participant)
                with self._where_lock:
                    previous = self._where.get(participant)
                    self._where[participant] = room_id
                count = len(room.members)
                log.info("%s joined room %r (%d/%d)", participant, room_id, count, MAX_MEMBERS)
                if count == MAX_MEMBERS:
                    for member in room.members:
                        self._deliver(member, protocol.player_joined(count))
            break

        # Outside the new room's lock, so two rooms' locks are never held together.
        if previous is not None and previous != room_id:
            self._remove(previous, participant)
        return True

    def relay_move(self, room_id: str, participant: str, card: str, index: int) -> bool:
        """Forward a move to the other member. Dropped unless the room is full."""
        room = self._get(room_id)
        if room is None:
            log.debug("Move from %s for unknown room %r dropped", participant, room_id)
            return False
        with room.lock:
            if room.closed or participant not in room.members or len(room.members) < MAX_MEMBERS:
                log.debug("Move from %s in room %r dropped (no opponent)", participant, room_id)
                return False
            for member in room.members:
                if member != participant:
                    self._deliver(member, protocol.opponent_play(card, index))
            return True

    def leave(self, participant: str) -> str | None:
        """Remove `participant` from its room and tell whoever is left."""
        with self._where_lock:
            room_id = self._where.pop(participant, None)
        if room_id is None:
            return None
        self._remove(room_id, participant)
        return room_id

    def _remove(self, room_id: str, participant: str) -> None:
        room = self._get(room_id)
        if room is None:
            return
        with room.lock:
            if participant in room.members:
                room.members.remove(participant)
                log.info("%s left room %r", participant, room_id)
                for member in room.members:
                    self._deliver(member, protocol.opponent_disconnected())
            self._drop_if_empty(room)

    disconnect = leave

    def members(self, room_id: str) -> list[str]:
        room = self._get(room_id)
        if room is None:
            return []
        with room.lock:
            return list(room.members)

    def room_of(self, participant: str) -> str | None:
        with self._where_lock:
            return self._where.get(participant)

    def room_count(self) -> int:
        with self._table_lock:
            return len(self._rooms)
