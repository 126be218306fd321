from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from holdem.cards import Card, RANK_LABELS, SUITS, parse_cards
from holdem.game import Room
from holdem.models import ActionType, TableConfig


def create_room(
    players: int = 3,
    *,
    stack: int = 1_000,
    sb: int = 5,
    bb: int = 10,
    speed_ms: int = 700,
) -> Room:
    """Room with ``players`` seated humans named p0, p1, ... in seat order."""
    room = Room("test", TableConfig(small_blind=sb, big_blind=bb, initial_stack=stack, speed_ms=speed_ms))
    for idx in range(players):
        room.add_player(f"p{idx}", f"Player{idx}")
    return room


def stacked_deck(labels: Sequence[str]) -> List[Card]:
    """Deck that deals ``labels`` first, in order, then the remaining cards."""
    wanted = parse_cards(labels)
    rest = [Card(suit, rank) for suit in SUITS for rank in RANK_LABELS if Card(suit, rank) not in wanted]
    # Cards leave from the tail.
    return rest + list(reversed(wanted))


def deal_order(hands: Sequence[Tuple[str, str]], board: Sequence[str]) -> List[str]:
    """Hole cards given per player in dealing rotation (left of the dealer first)."""
    return [hand[0] for hand in hands] + [hand[1] for hand in hands] + list(board)


def rig_deck(monkeypatch, labels: Sequence[str]) -> None:
    monkeypatch.setattr("holdem.game.create_deck", lambda seed=None: stacked_deck(labels))


def perform_actions(room: Room, actions: Iterable[Tuple[str, ActionType, Optional[int]]]) -> None:
    """Apply a scripted sequence of actions (player id, action, raise_to)."""
    for player_id, action, raise_to in actions:
        room.apply_action(player_id, action, raise_to)


def auto_complete_hand(room: Room) -> None:
    """Run the current hand out with check/call until it is settled."""
    while room.hand_active:
        if room.needs_advance():
            room.advance_stage()
            continue
        actor = room.current_player()
        assert actor is not None
        window = room.legal_actions(actor.id)
        if ActionType.CHECK in window.legal:
            room.apply_action(actor.id, ActionType.CHECK)
        else:
            room.apply_action(actor.id, ActionType.CALL)


def run_out(room: Room) -> None:
    """Deal the remaining streets when nobody is left to act."""
    while room.hand_active:
        assert room.needs_advance()
        room.advance_stage()


def chips_on_table(room: Room) -> int:
    return sum(player.stack for player in room.players) + room.pot
