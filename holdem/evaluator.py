from __future__ import annotations

import functools
import itertools
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import Card

HAND_NAMES = (
    "High Card",
    "One Pair",
    "Two Pair",
    "Three of a Kind",
    "Straight",
    "Flush",
    "Full House",
    "Four of a Kind",
    "Straight Flush",
)

WHEEL = (14, 5, 4, 3, 2)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class HandEvaluation:
    """Category index (0 = high card .. 8 = straight flush) plus tie-break ranks."""

    rank: int
    kickers: Tuple[int, ...]

    @property
    def name(self) -> str:
        return HAND_NAMES[self.rank]

    def to_dict(self) -> Dict[str, object]:
        return {"rank": self.rank, "name": self.name, "kickers": list(self.kickers)}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandEvaluation):
            return NotImplemented
        return compare_hands(self, other) == 0

    def __lt__(self, other: "HandEvaluation") -> bool:
        return compare_hands(self, other) < 0

    def __hash__(self) -> int:
        return hash((self.rank, self.kickers))


def compare_hands(a: HandEvaluation, b: HandEvaluation) -> int:
    if a.rank != b.rank:
        return a.rank - b.rank
    for idx in range(max(len(a.kickers), len(b.kickers))):
        left = a.kickers[idx] if idx < len(a.kickers) else 0
        right = b.kickers[idx] if idx < len(b.kickers) else 0
        if left != right:
            return left - right
    return 0


def best_hand(cards: Sequence[Card]) -> HandEvaluation:
    """Best evaluation over every 5-card subset (21 of them for 7 cards)."""
    if len(cards) < 5:
        raise ValueError("At least five cards are required")
    best: Optional[HandEvaluation] = None
    for combo in itertools.combinations(cards, 5):
        evaluated = evaluate_five(combo)
        if best is None or compare_hands(evaluated, best) > 0:
            best = evaluated
    assert best is not None
    return best


def evaluate_five(cards: Sequence[Card]) -> HandEvaluation:
    if len(cards) != 5:
        raise ValueError("Exactly five cards are required")
    ranks = sorted((card.rank for card in cards), reverse=True)
    counts = Counter(ranks)
    groups: List[Tuple[int, int]] = sorted(
        ((count, rank) for rank, count in counts.items()), reverse=True
    )

    is_flush = len({card.suit for card in cards}) == 1
    straight_high = _straight_high(ranks)
    singles = [rank for count, rank in groups if count == 1]

    if is_flush and straight_high:
        return HandEvaluation(8, (straight_high,))
    if groups[0][0] == 4:
        return HandEvaluation(7, (groups[0][1], groups[1][1]))
    if groups[0][0] == 3 and groups[1][0] == 2:
        return HandEvaluation(6, (groups[0][1], groups[1][1]))
    if is_flush:
        return HandEvaluation(5, tuple(ranks))
    if straight_high:
        return HandEvaluation(4, (straight_high,))
    if groups[0][0] == 3:
        return HandEvaluation(3, (groups[0][1], *singles))
    if groups[0][0] == 2 and groups[1][0] == 2:
        # groups are already ordered (count desc, rank desc): high pair first
        return HandEvaluation(2, (groups[0][1], groups[1][1], singles[0]))
    if groups[0][0] == 2:
        return HandEvaluation(1, (groups[0][1], *singles))
    return HandEvaluation(0, tuple(ranks))


def _straight_high(ranks_desc: Sequence[int]) -> Optional[int]:
    unique = sorted(set(ranks_desc), reverse=True)
    if len(unique) != 5:
        return None
    if unique[0] - unique[4] == 4:
        return unique[0]
    if tuple(unique) == WHEEL:
        return 5
    return None
