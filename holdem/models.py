from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .cards import Card
from .evaluator import HandEvaluation

MAX_SEATS = 10
SPEED_RANGE_MS = (300, 2000)
SEAT_RANGE = (2, MAX_SEATS)
STACK_RANGE = (100, 10_000)
NAME_LIMIT = 16

AVATARS = (
    "linear-gradient(135deg, #f4c35a, #ec6b67)",
    "linear-gradient(135deg, #63d6ff, #4b79ff)",
    "linear-gradient(135deg, #a7ff83, #3aa158)",
    "linear-gradient(135deg, #ff96f3, #9f4bf0)",
    "linear-gradient(135deg, #ffd27d, #ff8d4f)",
    "linear-gradient(135deg, #b4c8ff, #5353ff)",
)


class Stage(str, Enum):
    IDLE = "idle"
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"


class ActionType(str, Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"


def _clamp(value: float, bounds: tuple) -> int:
    low, high = bounds
    return int(min(max(value, low), high))


def clamp_speed(speed_ms: float) -> int:
    return _clamp(speed_ms, SPEED_RANGE_MS)


def clamp_max_players(max_players: float) -> int:
    return _clamp(max_players, SEAT_RANGE)


def clamp_initial_stack(initial_stack: float) -> int:
    return _clamp(math.floor(initial_stack), STACK_RANGE)


def clean_name(name: object) -> str:
    return str(name or "").strip()[:NAME_LIMIT]


@dataclass
class TableConfig:
    small_blind: int = 5
    big_blind: int = 10
    max_players: int = MAX_SEATS
    initial_stack: int = 1_000
    speed_ms: int = 700
    carry_over_balances: bool = True


@dataclass
class Player:
    id: str
    name: str
    stack: int
    seat_index: int
    avatar: str = AVATARS[0]
    bet: int = 0
    total_bet: int = 0
    hand: List[Card] = field(default_factory=list)
    folded: bool = False
    all_in: bool = False
    status: str = ""
    needs_profile: bool = True
    is_bot: bool = False
    in_hand: bool = False
    acted: bool = False
    best_hand: Optional[HandEvaluation] = None

    def reset_for_hand(self) -> None:
        self.bet = 0
        self.total_bet = 0
        self.hand.clear()
        self.folded = False
        self.all_in = False
        self.status = ""
        self.in_hand = False
        self.acted = False
        self.best_hand = None

    def reset_for_round(self) -> None:
        self.bet = 0
        self.acted = False
        if not (self.folded or self.all_in):
            self.status = ""

    @property
    def is_contender(self) -> bool:
        return self.in_hand and not self.folded

    @property
    def can_act(self) -> bool:
        return self.is_contender and not self.all_in


@dataclass(frozen=True)
class Contribution:
    """What a player put into the pot this hand; enough for side-pot math."""

    player_id: str
    total_bet: int
    folded: bool
    seat_index: int


@dataclass
class SeatActionWindow:
    legal: List[ActionType]
    call_amount: int
    min_raise_to: Optional[int]
    max_raise_to: Optional[int]


@dataclass
class HandResult:
    player_id: str
    name: str
    amount: int
    pot_index: int
    hand_name: Optional[str] = None
