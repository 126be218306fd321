from __future__ import annotations

import random
from typing import Optional, Tuple

from .game import Room
from .models import ActionType, Player

_RNG = random.Random()


def house_decision(
    room: Room,
    player: Player,
    rng: Optional[random.Random] = None,
) -> Tuple[ActionType, Optional[int]]:
    """Cheap table-filler strategy: mostly passive, folds to big pressure."""
    rng = rng or _RNG
    window = room.legal_actions(player.id)
    aggression = rng.random()
    can_raise = ActionType.RAISE in window.legal and player.stack > room.min_raise * 2
    raise_to = room.current_bet + room.min_raise * 2

    if window.call_amount == 0:
        if aggression > 0.82 and can_raise:
            return ActionType.RAISE, raise_to
        return ActionType.CHECK, None

    # Facing a bet that would cost most of the stack.
    if window.call_amount > player.stack * 0.6 and aggression > 0.4:
        return ActionType.FOLD, None
    if aggression > 0.9 and can_raise:
        return ActionType.RAISE, raise_to
    return ActionType.CALL, None


def play_bot_turn(room: Room, rng: Optional[random.Random] = None):
    """Let the current actor act if it is a house bot; returns engine events."""
    actor = room.current_player()
    if actor is None or not actor.is_bot:
        return []
    action, amount = house_decision(room, actor, rng)
    return room.apply_action(actor.id, action, amount)
