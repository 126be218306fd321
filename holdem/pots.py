from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Sequence, Tuple

from .evaluator import HandEvaluation, compare_hands
from .models import Contribution

# Side pots are derived from cumulative per-hand contributions and never
# stored; the room recomputes them whenever a view or a showdown needs them.


@dataclass(frozen=True)
class SidePot:
    amount: int
    eligible_player_ids: Tuple[str, ...]
    contribution_level: int


@dataclass(frozen=True)
class PotAward:
    player_id: str
    amount: int
    pot_index: int


def calculate_side_pots(contributions: Sequence[Contribution]) -> List[SidePot]:
    contributors = [c for c in contributions if c.total_bet > 0]
    if not contributors:
        return []

    levels = sorted({c.total_bet for c in contributors})
    pots: List[SidePot] = []
    prev_level = 0
    dead = 0
    for level in levels:
        reached = [c for c in contributors if c.total_bet >= level]
        amount = (level - prev_level) * len(reached)
        prev_level = level
        eligible = tuple(c.player_id for c in reached if not c.folded)
        if not eligible:
            # Only folded (or departed) players reached this level; the slice
            # joins the pot below it so no chip leaves the table.
            if pots:
                last = pots[-1]
                pots[-1] = SidePot(last.amount + amount, last.eligible_player_ids, last.contribution_level)
            else:
                dead += amount
            continue
        pots.append(SidePot(amount + dead, eligible, level))
        dead = 0

    if dead:
        pots.append(SidePot(dead, (), prev_level))

    expected = sum(c.total_bet for c in contributors)
    if sum(pot.amount for pot in pots) != expected:
        raise RuntimeError("Side pots do not add up to the chips committed")
    return pots


def distribute_pots(
    pots: Sequence[SidePot],
    evaluations: Mapping[str, HandEvaluation],
    seat_of: Mapping[str, int],
) -> List[PotAward]:
    """Split every pot between its best eligible hands.

    Remainder chips go one at a time to the winners in ascending seat order.
    Pots are independent: a player can win a side pot and lose the main pot.
    """
    awards: List[PotAward] = []
    for pot_index, pot in enumerate(pots):
        contenders = [pid for pid in pot.eligible_player_ids if pid in evaluations]
        if not contenders:
            continue
        best = evaluations[contenders[0]]
        for pid in contenders[1:]:
            if compare_hands(evaluations[pid], best) > 0:
                best = evaluations[pid]
        winners = sorted(
            (pid for pid in contenders if compare_hands(evaluations[pid], best) == 0),
            key=lambda pid: seat_of[pid],
        )
        share, remainder = divmod(pot.amount, len(winners))
        for idx, pid in enumerate(winners):
            awards.append(PotAward(pid, share + (1 if idx < remainder else 0), pot_index))
    return awards

