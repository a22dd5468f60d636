from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from . import protocol
from .protocol import Message

log = logging.getLogger(__name__)


class RelayClient:
    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer

    @classmethod
    async def connect(cls, host: str, port: int) -> "RelayClient":
        reader, writer = await asyncio.open_connection(host, port)
        log.info("Connected to relay %s:%d", host, port)
        return cls(reader, writer)

    async def send(self, message: Message) -> None:
        self._writer.write(protocol.encode(message))
        await self._writer.drain()

    async def join_room(self, room_id: str) -> None:
        await self.send(protocol.join_room(room_id))

    async def play_card(self, room_id: str, card: str, index: int) -> None:
        await self.send(protocol.play_card(room_id, card, index))

    async def leave_room(self) -> None:
        await self.send(protocol.leave_room())

    async def recv(self) -> Message | None:
        """Next notification, or None once the relay hangs up."""
        line = await self._reader.readline()
        if not line:
            return None
        return protocol.decode(line)

    async def events(self) -> AsyncIterator[Message]:
        while True:
            msg = await self.recv()
            if msg is None:
                return
            yield msg

    async def close(self) -> None:
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except ConnectionError:
            pass
