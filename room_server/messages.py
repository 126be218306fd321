"""Wire protocol: ``{type, payload}`` JSON envelopes.

Inbound frames are decoded once, at the socket boundary, into one frozen
dataclass per message kind. Anything that does not decode is ``None`` and the
server drops it without replying.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union


class MessageType(str, Enum):
    JOIN = "JOIN"
    START_HAND = "START_HAND"
    NEW_GAME = "NEW_GAME"
    PLAYER_ACTION = "PLAYER_ACTION"
    SET_SPEED = "SET_SPEED"
    SET_MAX_PLAYERS = "SET_MAX_PLAYERS"
    SET_INITIAL_STACK = "SET_INITIAL_STACK"
    SET_NAME = "SET_NAME"
    SET_PROFILE = "SET_PROFILE"
    ADD_BOT = "ADD_BOT"
    WELCOME = "WELCOME"
    STATE = "STATE"
    INFO = "INFO"


@dataclass(frozen=True)
class Join:
    name: str
    room_id: str
    host_key: Optional[str] = None


@dataclass(frozen=True)
class StartHand:
    pass


@dataclass(frozen=True)
class NewGame:
    carry_over: bool


@dataclass(frozen=True)
class PlayerAction:
    action: str
    raise_to: Optional[int] = None


@dataclass(frozen=True)
class SetSpeed:
    speed_ms: Optional[float]


@dataclass(frozen=True)
class SetMaxPlayers:
    max_players: Optional[float]


@dataclass(frozen=True)
class SetInitialStack:
    initial_stack: Optional[float]


@dataclass(frozen=True)
class SetName:
    name: str


@dataclass(frozen=True)
class SetProfile:
    name: str
    avatar: str


@dataclass(frozen=True)
class AddBot:
    name: Optional[str] = None


Command = Union[
    Join,
    StartHand,
    NewGame,
    PlayerAction,
    SetSpeed,
    SetMaxPlayers,
    SetInitialStack,
    SetName,
    SetProfile,
    AddBot,
]

HOST_ONLY = (StartHand, NewGame, SetSpeed, SetMaxPlayers, SetInitialStack, AddBot)


def to_number(value: Any) -> Optional[float]:
    """Numbers and numeric strings; everything else (bools included) is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _raise_to(value: Any) -> Optional[int]:
    number = to_number(value)
    return int(number) if number is not None else None


_DECODERS: Dict[str, Callable[[Mapping[str, Any]], Command]] = {
    MessageType.JOIN.value: lambda p: Join(
        name=_text(p.get("name")),
        room_id=_text(p.get("roomId")).strip() or "lobby",
        host_key=p.get("hostKey") if isinstance(p.get("hostKey"), str) else None,
    ),
    MessageType.START_HAND.value: lambda p: StartHand(),
    MessageType.NEW_GAME.value: lambda p: NewGame(carry_over=bool(p.get("carryOver"))),
    MessageType.PLAYER_ACTION.value: lambda p: PlayerAction(
        action=_text(p.get("action")).strip().lower(),
        raise_to=_raise_to(p.get("raiseTo")),
    ),
    MessageType.SET_SPEED.value: lambda p: SetSpeed(to_number(p.get("speedMs"))),
    MessageType.SET_MAX_PLAYERS.value: lambda p: SetMaxPlayers(to_number(p.get("maxPlayers"))),
    MessageType.SET_INITIAL_STACK.value: lambda p: SetInitialStack(to_number(p.get("initialStack"))),
    MessageType.SET_NAME.value: lambda p: SetName(_text(p.get("name"))),
    MessageType.SET_PROFILE.value: lambda p: SetProfile(_text(p.get("name")), _text(p.get("avatar"))),
    MessageType.ADD_BOT.value: lambda p: AddBot(_text(p.get("name")).strip() or None),
}


def decode_command(raw: Union[str, bytes]) -> Optional[Command]:
    try:
        message = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(message, dict):
        return None
    msg_type = message.get("type")
    decoder = _DECODERS.get(msg_type) if isinstance(msg_type, str) else None
    if decoder is None:
        return None
    payload = message.get("payload")
    return decoder(payload if isinstance(payload, dict) else {})


def encode(msg_type: MessageType, payload: Dict[str, object]) -> str:
    return json.dumps({"type": msg_type.value, "payload": payload})


def welcome(player_id: str) -> str:
    return encode(MessageType.WELCOME, {"id": player_id})


def info(text: str) -> str:
    return encode(MessageType.INFO, {"text": text})


def state(snapshot: Dict[str, object]) -> str:
    return encode(MessageType.STATE, snapshot)
