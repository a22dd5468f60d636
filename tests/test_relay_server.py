from __future__ import annotations

import asyncio

from rpsduel.relay import protocol
from rpsduel.relay.client import RelayClient
from rpsduel.relay.registry import RoomRegistry
from rpsduel.relay.server import Outboxes, RelayServer


async def _recv(client: RelayClient) -> protocol.Message | None:
    return await asyncio.wait_for(client.recv(), timeout=5)


async def _scenario() -> None:
    outboxes = Outboxes()
    registry = RoomRegistry(outboxes)
    server = RelayServer(registry, outboxes, host="127.0.0.1", port=0)
    await server.start()
    try:
        c1 = await RelayClient.connect("127.0.0.1", server.port)
        c2 = await RelayClient.connect("127.0.0.1", server.port)

        await c1.join_room("table")
        await c2.join_room("table")
        assert await _recv(c1) == protocol.player_joined(2)
        assert await _recv(c2) == protocol.player_joined(2)

        await c1.play_card("table", "SuperRock", 3)
        assert await _recv(c2) == protocol.opponent_play("SuperRock", 3)

        await c1.close()
        assert await _recv(c2) == protocol.opponent_disconnected()
        await c2.close()
    finally:
        await server.close()


async def _crowded() -> None:
    outboxes = Outboxes()
    registry = RoomRegistry(outboxes)
    server = RelayServer(registry, outboxes, host="127.0.0.1", port=0)
    await server.start()
    try:
        clients = [await RelayClient.connect("127.0.0.1", server.port) for _ in range(3)]
        for c in clients[:2]:
            await c.join_room("busy")
        assert await _recv(clients[0]) == protocol.player_joined(2)

        # garbage is logged and skipped, the connection stays usable
        clients[2]._writer.write(b"garbage\n")
        await clients[2].join_room("busy")
        assert await _recv(clients[2]) == protocol.room_full()
        assert len(registry.members("busy")) == 2

        for c in clients:
            await c.close()
    finally:
        await server.close()


def test_relay_round_trip_over_tcp() -> None:
    asyncio.run(_scenario())


def test_relay_rejects_a_third_client() -> None:
    asyncio.run(_crowded())
