from __future__ import annotations

import asyncio
import logging
import random
import uuid
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Awaitable, Callable, Dict, List, Optional

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.http11 import Request, Response

from holdem.bots import play_bot_turn
from holdem.game import Event, Room
from holdem.models import Player, Stage, clean_name
from holdem.views import build_state_for_player

from . import messages
from .config import ServerConfig
from .messages import (
    HOST_ONLY,
    AddBot,
    Command,
    Join,
    NewGame,
    PlayerAction,
    SetInitialStack,
    SetMaxPlayers,
    SetName,
    SetProfile,
    SetSpeed,
    StartHand,
    decode_command,
)
from .store import PendingStep, RoomSession, RoomStore

LOGGER = logging.getLogger("poker_server")

# RoomServer glues the poker engine to WebSocket clients. Every network and
# timing concern lives here; holdem.Room stays pure.

HOST_ONLY_NOTICES = {
    StartHand: "Only the host can start a hand.",
    NewGame: "Only the host can reset the game.",
    SetSpeed: "Only the host can set speed.",
    SetMaxPlayers: "Only the host can change seats.",
    SetInitialStack: "Only the host can set buy-in.",
    AddBot: "Only the host can add bots.",
}

Handler = Callable[[RoomSession, "ClientSession", Player, Any], Awaitable[bool]]


@dataclass
class ClientSession:
    player_id: str
    websocket: Any
    room_id: Optional[str] = None


class RoomServer:
    def __init__(self, config: Optional[ServerConfig] = None, bot_rng: Optional[random.Random] = None) -> None:
        self.config = config or ServerConfig()
        self.rooms = RoomStore(lambda room_id: Room(room_id, self.config.table_for_new_room()))
        self.clients: Dict[str, ClientSession] = {}
        self.bot_rng = bot_rng
        self._handlers: Dict[type, Handler] = {
            StartHand: self._handle_start_hand,
            NewGame: self._handle_new_game,
            PlayerAction: self._handle_player_action,
            SetSpeed: self._handle_set_speed,
            SetMaxPlayers: self._handle_set_max_players,
            SetInitialStack: self._handle_set_initial_stack,
            SetName: self._handle_set_name,
            SetProfile: self._handle_set_profile,
            AddBot: self._handle_add_bot,
        }

    async def start(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        host = host or self.config.host
        port = port or self.config.port
        # serve() keeps accepting clients until the process stops.
        async with websockets.serve(self._handle_connection, host, port, process_request=self._process_request):
            LOGGER.info("Poker server listening on %s:%s", host, port)
            await asyncio.Future()

    def _process_request(self, connection: ServerConnection, request: Request) -> Optional[Response]:
        if request.headers.get("Upgrade", "").lower() == "websocket":
            return None
        return connection.respond(HTTPStatus.OK, "Poker server running.\n")

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        client = self.register(websocket)
        await self._send(websocket, messages.welcome(client.player_id))
        try:
            async for raw in websocket:
                await self.handle_message(client, raw)
        except websockets.ConnectionClosed:
            pass
        finally:
            await self.disconnect(client)

    def register(self, websocket: Any) -> ClientSession:
        client = ClientSession(player_id=str(uuid.uuid4()), websocket=websocket)
        self.clients[client.player_id] = client
        LOGGER.info("Client %s connected", client.player_id)
        return client

    async def handle_message(self, client: ClientSession, raw: Any) -> None:
        command = decode_command(raw)
        if command is None:
            LOGGER.debug("Dropped malformed message from %s", client.player_id)
            return
        await self.dispatch(client, command)

    async def dispatch(self, client: ClientSession, command: Command) -> None:
        if isinstance(command, Join):
            await self._handle_join(client, command)
            return

        session = self.rooms.get(client.room_id)
        if session is None:
            return
        async with session.lock:
            if not self.rooms.is_current(session):
                return
            player = session.room.find_player(client.player_id)
            if player is None:
                return
            if isinstance(command, HOST_ONLY) and session.room.host_id != player.id:
                await self._send_info(client, HOST_ONLY_NOTICES[type(command)])
                return
            changed = await self._handlers[type(command)](session, client, player, command)
            if changed:
                self._schedule_followup(session)
                await self._sync_room(session)

    async def disconnect(self, client: ClientSession) -> None:
        self.clients.pop(client.player_id, None)
        session = self.rooms.get(client.room_id)
        client.room_id = None
        if session is None:
            return
        async with session.lock:
            if not self.rooms.is_current(session):
                return
            session.members.pop(client.player_id, None)
            room = session.room
            player, events = room.remove_player(client.player_id)
            if not session.members:
                self.rooms.discard(room.id)
                return
            if player is not None:
                LOGGER.info("Player %s (%s) left room %s", player.name, player.id, room.id)
                await self._broadcast_info(session, f"{player.name} left the table.")
            await self._announce(session, events)
            self._schedule_followup(session)
            await self._sync_room(session)

    # Command handlers ------------------------------------------------

    async def _handle_join(self, client: ClientSession, command: Join) -> None:
        if client.room_id is not None:
            await self._send_info(client, "You are already seated.")
            return

        while True:
            session = self.rooms.get_or_create(command.room_id)
            async with session.lock:
                # The room may have been discarded while we waited.
                if not self.rooms.is_current(session):
                    continue
                room = session.room
                try:
                    player = room.add_player(client.player_id, command.name)
                except RuntimeError:
                    await self._send_info(client, "Table is full.")
                    if not session.members:
                        self.rooms.discard(room.id)
                    return
                if room.host_id is None and command.host_key and command.host_key == self.config.host_password:
                    room.host_id = player.id
                client.room_id = room.id
                session.members[client.player_id] = client
                LOGGER.info(
                    "Player %s (%s) joined room %s at seat %s%s",
                    player.name,
                    player.id,
                    room.id,
                    player.seat_index,
                    " as host" if room.host_id == player.id else "",
                )
                await self._broadcast_info(session, f"{player.name} joined the table.")
                await self._sync_room(session)
                return

    async def _handle_start_hand(self, session: RoomSession, client: ClientSession, player: Player, command: StartHand) -> bool:
        room = session.room
        if room.hand_active:
            return False
        if not room.can_start_hand():
            await self._broadcast_info(session, "Need 2 players to start.")
            room.stage = Stage.IDLE
            return True
        session.cancel_pending()
        events = room.start_hand()
        LOGGER.info("Room %s hand #%s started (dealer index %s)", room.id, room.hand_counter, room.dealer_index)
        await self._announce(session, events)
        return True

    async def _handle_new_game(self, session: RoomSession, client: ClientSession, player: Player, command: NewGame) -> bool:
        session.cancel_pending()
        session.room.new_game(command.carry_over)
        LOGGER.info("Room %s reset (carry over=%s)", session.room.id, command.carry_over)
        return True

    async def _handle_player_action(self, session: RoomSession, client: ClientSession, player: Player, command: PlayerAction) -> bool:
        room = session.room
        actor = room.current_player()
        if not room.hand_active or actor is None or actor.id != player.id:
            await self._send_info(client, "It is not your turn.")
            return False
        if self.config.require_profile and player.needs_profile:
            await self._send_info(client, "Set up your profile before playing.")
            return False
        try:
            events = room.apply_action(player.id, command.action, command.raise_to)
        except ValueError as exc:
            LOGGER.warning(
                "Rejected action room=%s player=%s action=%s raise_to=%s reason=%s",
                room.id,
                player.id,
                command.action,
                command.raise_to,
                exc,
            )
            await self._send_info(client, str(exc))
            return False
        LOGGER.debug("Applied action room=%s player=%s action=%s raise_to=%s", room.id, player.id, command.action, command.raise_to)
        await self._announce(session, events)
        return True

    async def _handle_set_speed(self, session: RoomSession, client: ClientSession, player: Player, command: SetSpeed) -> bool:
        if command.speed_ms is None:
            return False
        session.room.set_speed(command.speed_ms)
        return True

    async def _handle_set_max_players(self, session: RoomSession, client: ClientSession, player: Player, command: SetMaxPlayers) -> bool:
        if command.max_players is None:
            return False
        session.room.set_max_players(command.max_players)
        return True

    async def _handle_set_initial_stack(self, session: RoomSession, client: ClientSession, player: Player, command: SetInitialStack) -> bool:
        if command.initial_stack is None:
            return False
        session.room.set_initial_stack(command.initial_stack)
        return True

    async def _handle_set_name(self, session: RoomSession, client: ClientSession, player: Player, command: SetName) -> bool:
        name = clean_name(command.name)
        if not name:
            return False
        player.name = name
        await self._broadcast_info(session, f"{player.name} updated their name.")
        return True

    async def _handle_set_profile(self, session: RoomSession, client: ClientSession, player: Player, command: SetProfile) -> bool:
        name = clean_name(command.name)
        avatar = command.avatar.strip()
        if name:
            player.name = name
        if avatar:
            player.avatar = avatar
        player.needs_profile = False
        return True

    async def _handle_add_bot(self, session: RoomSession, client: ClientSession, player: Player, command: AddBot) -> bool:
        try:
            bot = session.room.add_bot(command.name)
        except RuntimeError:
            await self._send_info(client, "Table is full.")
            return False
        await self._broadcast_info(session, f"{bot.name} joined the table.")
        return True

    # Deferred steps --------------------------------------------------

    def _schedule_followup(self, session: RoomSession) -> None:
        room = session.room
        if not room.hand_active:
            return
        if room.needs_advance():
            kind = "advance"
        else:
            actor = room.current_player()
            if actor is None or not actor.is_bot:
                return
            kind = "bot"
        if session.pending and session.pending.is_live(room.generation):
            return
        session.cancel_pending()
        step = PendingStep(kind=kind, generation=room.generation)
        step.task = asyncio.create_task(self._run_pending(session, step))
        session.pending = step

    async def _run_pending(self, session: RoomSession, step: PendingStep) -> None:
        await asyncio.sleep(session.room.config.speed_ms / 1000)
        async with session.lock:
            if session.pending is step:
                session.pending = None
            room = session.room
            if not self.rooms.is_current(session) or room.generation != step.generation or not room.hand_active:
                return
            events: List[Event] = []
            if step.kind == "advance" and room.needs_advance():
                events = room.advance_stage()
            elif step.kind == "bot":
                events = play_bot_turn(room, self.bot_rng)
            await self._announce(session, events)
            self._schedule_followup(session)
            await self._sync_room(session)

    # Outbound --------------------------------------------------------

    async def _announce(self, session: RoomSession, events: List[Event]) -> None:
        for event in events:
            LOGGER.debug("Room %s event %s", session.room.id, event)
        if not any(event.get("ev") == "POT_AWARD" for event in events):
            return
        room = session.room
        for result in room.last_results:
            pot = "the pot" if result.pot_index == 0 else "a side pot"
            text = f"{result.name} wins {result.amount} from {pot}"
            if result.hand_name:
                text += f" with {result.hand_name}"
            await self._broadcast_info(session, text + ".")
        LOGGER.info(
            "Room %s hand #%s finished; stacks=%s",
            room.id,
            room.hand_counter,
            {player.name: player.stack for player in room.players},
        )

    async def _sync_room(self, session: RoomSession) -> None:
        room = session.room
        # One payload per recipient, built fresh each time.
        outgoing = [
            (client.websocket, messages.state(build_state_for_player(room, client.player_id)))
            for client in session.members.values()
        ]
        if not outgoing:
            return
        await asyncio.gather(*(self._send(socket, message) for socket, message in outgoing), return_exceptions=True)

    async def _broadcast_info(self, session: RoomSession, text: str) -> None:
        message = messages.info(text)
        targets = [client.websocket for client in session.members.values()]
        await asyncio.gather(*(self._send(socket, message) for socket in targets), return_exceptions=True)

    async def _send_info(self, client: ClientSession, text: str) -> None:
        await self._send(client.websocket, messages.info(text))

    async def _send(self, websocket: Any, message: str) -> None:
        try:
            await websocket.send(message)
        except websockets.ConnectionClosed:
            pass
