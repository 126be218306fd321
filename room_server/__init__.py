"""Room server package: wraps the poker engine with WebSocket networking."""

from .config import ServerConfig
from .server import RoomServer

__all__ = ["RoomServer", "ServerConfig"]
