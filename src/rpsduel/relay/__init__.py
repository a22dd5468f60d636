"""Room relay for PvP matches: membership and move forwarding, no game rules."""

from .protocol import ProtocolError
from .registry import RoomRegistry
from .server import Outboxes, RelayServer
from .session import PvpSession

__all__ = ["Outboxes", "ProtocolError", "PvpSession", "RelayServer", "RoomRegistry"]
