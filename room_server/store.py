from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from holdem.game import Room

LOGGER = logging.getLogger("poker_server.store")


@dataclass
class PendingStep:
    # Deferred continuation (street advance or bot turn) tied to a room generation.
    kind: str
    generation: int
    task: Optional[asyncio.Task] = None

    def is_live(self, generation: int) -> bool:
        return self.generation == generation and self.task is not None and not self.task.done()


@dataclass
class RoomSession:
    room: Room
    members: Dict[str, Any] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    pending: Optional[PendingStep] = None

    def cancel_pending(self) -> None:
        if self.pending and self.pending.task and not self.pending.task.done():
            self.pending.task.cancel()
        self.pending = None


class RoomStore:
    """Rooms keyed by id: created on first join, discarded once empty."""

    def __init__(self, room_factory: Callable[[str], Room]) -> None:
        self._room_factory = room_factory
        self._sessions: Dict[str, RoomSession] = {}

    def get_or_create(self, room_id: str) -> RoomSession:
        session = self._sessions.get(room_id)
        if session is None:
            session = RoomSession(room=self._room_factory(room_id))
            self._sessions[room_id] = session
            LOGGER.info("Room %s created (%s open)", room_id, len(self))
        return session

    def get(self, room_id: Optional[str]) -> Optional[RoomSession]:
        if room_id is None:
            return None
        return self._sessions.get(room_id)

    def is_current(self, session: RoomSession) -> bool:
        return self._sessions.get(session.room.id) is session

    def discard(self, room_id: str) -> None:
        session = self._sessions.pop(room_id, None)
        if session is not None:
            session.cancel_pending()
            LOGGER.info("Room %s discarded (%s open)", room_id, len(self))

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
