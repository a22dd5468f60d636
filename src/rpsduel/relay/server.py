from __future__ import annotations

import asyncio
import logging
import uuid
from typing import cast

from . import protocol
from .protocol import Message, ProtocolError
from .registry import RoomRegistry

log = logging.getLogger(__name__)


class Outboxes:
    """Per-connection outgoing queues; the registry's delivery target."""

    def __init__(self) -> None:
        self._queues: dict[str, asyncio.Queue[Message | None]] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    def open(self, participant: str) -> asyncio.Queue[Message | None]:
        self._loop = asyncio.get_running_loop()
        queue: asyncio.Queue[Message | None] = asyncio.Queue()
        self._queues[participant] = queue
        return queue

    def close(self, participant: str) -> None:
        queue = self._queues.pop(participant, None)
        if queue is not None:
            queue.put_nowait(None)

    def __call__(self, participant: str, message: Message) -> None:
        queue = self._queues.get(participant)
        if queue is None or self._loop is None:
            log.debug("No outbox for %s, dropped %s", participant, message.get("type"))
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            queue.put_nowait(message)
        else:
            self._loop.call_soon_threadsafe(queue.put_nowait, message)


class RelayServer:
    """Asyncio line-based relay; one task per connected client."""

    def __init__(self, registry: RoomRegistry, outboxes: Outboxes, host: str = "127.0.0.1", port: int = 8765) -> None:
        self.registry = registry
        self.outboxes = outboxes
        self.host = host
        self.port = port
        self._server: asyncio.base_events.Server | None = None

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle_client, self.host, self.port)
        sock = self._server.sockets[0]
        self.port = sock.getsockname()[1]
        log.info("Relay listening on %s:%d", self.host, self.port)

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        assert self._server is not None
        async with self._server:
            await self._server.serve_forever()

    async def close(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
            log.info("Relay stopped")

    async def _pump(self, queue: asyncio.Queue[Message | None], writer: asyncio.StreamWriter) -> None:
        while True:
            message = await queue.get()
            if message is None:
                return
            try:
                writer.write(protocol.encode(message))
                await writer.drain()
            except ConnectionError:
                return

    def _handle_message(self, participant: str, msg: Message) -> None:
        kind = msg["type"]
        if kind == protocol.JOIN_ROOM:
            self.registry.join(str(msg["roomId"]), participant)
        elif kind == protocol.PLAY_CARD:
            # schema guarantees a non-negative int
            index = cast(int, msg["index"])
            self.registry.relay_move(str(msg["roomId"]), participant, str(msg["card"]), index)
        elif kind == protocol.LEAVE_ROOM:
            self.registry.leave(participant)
        else:
            log.warning("Unexpected %r from %s", kind, participant)

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        participant = str(uuid.uuid4())
        peer = writer.get_extra_info("peername")
        queue = self.outboxes.open(participant)
        pump = asyncio.create_task(self._pump(queue, writer))
        log.info("Client connected: %s -> %s", peer, participant)
        try:
            while not reader.at_eof():
                try:
                    data = await reader.readline()
                except ConnectionResetError:
                    break
                if not data:
                    break
                try:
                    msg = protocol.decode(data)
                except ProtocolError as e:
                    log.warning("Bad message from %s: %s", participant, e)
                    continue
                self._handle_message(participant, msg)
        finally:
            self.registry.disconnect(participant)
            self.outboxes.close(participant)
            await pump
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass
            log.info("Client disconnected: %s", participant)


async def serve(host: str, port: int) -> None:
    outboxes = Outboxes()
    registry = RoomRegistry(outboxes)
    server = RelayServer(registry, outboxes, host=host, port=port)
    await server.start()
    await server.serve_forever()
