from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

SUITS = ("spades", "hearts", "clubs", "diamonds")
RANK_LABELS: Dict[int, str] = {
    2: "2",
    3: "3",
    4: "4",
    5: "5",
    6: "6",
    7: "7",
    8: "8",
    9: "9",
    10: "10",
    11: "J",
    12: "Q",
    13: "K",
    14: "A",
}

_SUIT_BY_INITIAL = {suit[0]: suit for suit in SUITS}
_RANK_BY_LABEL = {label: rank for rank, label in RANK_LABELS.items()}
_RANK_BY_LABEL["T"] = 10


@dataclass(frozen=True)
class Card:
    suit: str
    rank: int

    def __post_init__(self) -> None:
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")
        if self.rank not in RANK_LABELS:
            raise ValueError(f"Invalid rank: {self.rank}")

    @property
    def label(self) -> str:
        return RANK_LABELS[self.rank]

    @property
    def short(self) -> str:
        return f"{self.label}{self.suit[0]}"

    def to_dict(self) -> Dict[str, object]:
        return {"suit": self.suit, "rank": self.rank, "label": self.label}


def create_deck(seed: Optional[int] = None) -> List[Card]:
    rng = random.Random(seed)
    deck = [Card(suit, rank) for suit in SUITS for rank in RANK_LABELS]
    rng.shuffle(deck)
    return deck


def deal_card(deck: List[Card]) -> Card:
    # Cards leave from the tail of the deck.
    if not deck:
        raise ValueError("Not enough cards left in deck")
    return deck.pop()


def deal(deck: List[Card], count: int) -> List[Card]:
    if len(deck) < count:
        raise ValueError("Not enough cards left in deck")
    return [deal_card(deck) for _ in range(count)]


def cards_to_dicts(cards: Sequence[Card]) -> List[Dict[str, object]]:
    return [card.to_dict() for card in cards]


def parse_label(label: str) -> Card:
    """Parse the compact form used by tests and logs: ``Ah``, ``10d``, ``Tc``."""
    if len(label) not in (2, 3):
        raise ValueError(f"Invalid card label: {label}")
    rank_part, suit_part = label[:-1].upper(), label[-1].lower()
    if rank_part not in _RANK_BY_LABEL:
        raise ValueError(f"Invalid rank: {rank_part}")
    if suit_part not in _SUIT_BY_INITIAL:
        raise ValueError(f"Invalid suit: {suit_part}")
    return Card(_SUIT_BY_INITIAL[suit_part], _RANK_BY_LABEL[rank_part])


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
