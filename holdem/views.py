from __future__ import annotations

from typing import Dict, List, Optional

from .cards import cards_to_dicts
from .game import Room
from .models import Player

# Views are rebuilt for every recipient on every push. Nothing is cached per
# connection, so a redaction decision can never leak into another payload.


def can_see_hand(room: Room, viewer_id: Optional[str], player: Player) -> bool:
    return player.id == viewer_id or room.reveal_hands or not room.hand_active


def player_view(room: Room, viewer_id: Optional[str], player: Player) -> Dict[str, object]:
    visible = can_see_hand(room, viewer_id, player)
    return {
        "id": player.id,
        "name": player.name,
        "avatar": player.avatar,
        "stack": player.stack,
        "bet": player.bet,
        "totalBet": player.total_bet,
        "hand": cards_to_dicts(player.hand) if visible else [],
        "cardCount": len(player.hand),
        "folded": player.folded,
        "allIn": player.all_in,
        "status": player.status,
        "seatIndex": player.seat_index,
        "needsProfile": player.needs_profile,
        "isBot": player.is_bot,
        "inHand": player.in_hand,
        "bestHand": player.best_hand.to_dict() if visible and player.best_hand else None,
    }


def build_state_for_player(room: Room, viewer_id: Optional[str]) -> Dict[str, object]:
    side_pots: List[Dict[str, object]] = []
    if room.hand_active:
        side_pots = [
            {"amount": pot.amount, "eligibleCount": len(pot.eligible_player_ids)}
            for pot in room.side_pots()
        ]

    state: Dict[str, object] = {
        "id": room.id,
        "players": [player_view(room, viewer_id, player) for player in room.players],
        "community": cards_to_dicts(room.community),
        "pot": room.pot,
        "sidePots": side_pots,
        "speedMs": room.config.speed_ms,
        "maxPlayers": room.config.max_players,
        "initialStack": room.config.initial_stack,
        "carryOverBalances": room.config.carry_over_balances,
        "smallBlind": room.config.small_blind,
        "bigBlind": room.config.big_blind,
        "dealerIndex": room.dealer_index,
        "currentPlayerIndex": room.current_player_index,
        "currentBet": room.current_bet,
        "minRaise": room.min_raise,
        "stage": room.stage.value,
        "handActive": room.hand_active,
        "revealHands": room.reveal_hands,
        "hostId": room.host_id,
        "results": [
            {
                "playerId": result.player_id,
                "name": result.name,
                "amount": result.amount,
                "potIndex": result.pot_index,
                "handName": result.hand_name,
            }
            for result in room.last_results
        ],
        "you": None,
    }

    actor = room.current_player()
    if actor is not None and actor.id == viewer_id:
        window = room.legal_actions(actor.id)
        state["you"] = {
            "legal": [action.value for action in window.legal],
            "callAmount": window.call_amount,
            "minRaiseTo": window.min_raise_to,
            "maxRaiseTo": window.max_raise_to,
        }
    return state
