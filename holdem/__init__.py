"""Poker engine primitives shared by the room server and its tests."""

from .cards import Card, RANK_LABELS, SUITS, create_deck, deal_card, parse_cards
from .evaluator import HAND_NAMES, HandEvaluation, best_hand, compare_hands
from .game import Room
from .models import ActionType, Player, SeatActionWindow, Stage, TableConfig
from .pots import PotAward, SidePot, calculate_side_pots, distribute_pots
from .views import build_state_for_player

__all__ = [
    "Card",
    "RANK_LABELS",
    "SUITS",
    "create_deck",
    "deal_card",
    "parse_cards",
    "HAND_NAMES",
    "HandEvaluation",
    "best_hand",
    "compare_hands",
    "Room",
    "ActionType",
    "Player",
    "SeatActionWindow",
    "Stage",
    "TableConfig",
    "PotAward",
    "SidePot",
    "calculate_side_pots",
    "distribute_pots",
    "build_state_for_player",
]
