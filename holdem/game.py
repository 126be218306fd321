from __future__ import annotations

import uuid
from typing import Callable, Dict, List, Optional, Set, Tuple

from .cards import Card, create_deck, deal
from .evaluator import HandEvaluation, best_hand
from .models import (
    AVATARS,
    ActionType,
    Contribution,
    HandResult,
    Player,
    SeatActionWindow,
    Stage,
    TableConfig,
    clamp_initial_stack,
    clamp_max_players,
    clamp_speed,
    clean_name,
)
from .pots import SidePot, calculate_side_pots, distribute_pots

# Room keeps one table's state in memory. No networking or timers live here:
# only poker rules, chip accounting and betting order. Callers poll
# needs_advance() and decide when to call advance_stage().

Event = Dict[str, object]

STREET_CARDS = {
    Stage.PREFLOP: (Stage.FLOP, 3),
    Stage.FLOP: (Stage.TURN, 1),
    Stage.TURN: (Stage.RIVER, 1),
}


class Room:
    """No-Limit Texas Hold'em table for one room id."""

    def __init__(self, room_id: str, config: Optional[TableConfig] = None) -> None:
        self.id = room_id
        self.config = config or TableConfig()
        self.players: List[Player] = []
        self.deck: List[Card] = []
        self.community: List[Card] = []
        self.pot = 0
        self.dealer_index = -1
        self.current_player_index: Optional[int] = None
        self.current_bet = 0
        self.min_raise = self.config.big_blind
        self.stage = Stage.IDLE
        self.hand_active = False
        self.reveal_hands = False
        self.host_id: Optional[str] = None
        self.generation = 0
        self.hand_counter = 0
        self.departed: List[Contribution] = []
        self.last_results: List[HandResult] = []
        self.acted_since_full_raise: Set[str] = set()

    # Seat management -------------------------------------------------

    def add_player(self, player_id: str, name: object, *, is_bot: bool = False) -> Player:
        if self.find_player(player_id):
            raise ValueError("Already seated")
        seat = self.available_seat()
        if seat is None:
            raise RuntimeError("Table is full")

        player = Player(
            id=player_id,
            name=clean_name(name) or "Player",
            stack=self.config.initial_stack,
            seat_index=seat,
            avatar=AVATARS[seat % len(AVATARS)],
            needs_profile=not is_bot,
            is_bot=is_bot,
        )
        position = sum(1 for other in self.players if other.seat_index < seat)
        self.players.insert(position, player)
        if self.current_player_index is not None and self.current_player_index >= position:
            self.current_player_index += 1
        if self.dealer_index >= position:
            self.dealer_index += 1
        return player

    def add_bot(self, name: object = None) -> Player:
        bots = sum(1 for player in self.players if player.is_bot)
        return self.add_player(f"bot-{uuid.uuid4().hex[:8]}", name or f"Bot {bots + 1}", is_bot=True)

    def available_seat(self) -> Optional[int]:
        if len(self.players) >= self.config.max_players:
            return None
        taken = {player.seat_index for player in self.players}
        for idx in range(self.config.max_players):
            if idx not in taken:
                return idx
        return None

    def remove_player(self, player_id: str) -> Tuple[Optional[Player], List[Event]]:
        """Drop a player; mid-hand this forfeits whatever they committed."""
        idx = self.index_of(player_id)
        if idx is None:
            return None, []
        player = self.players[idx]
        was_active = self.hand_active
        was_current = self.current_player_index == idx

        if self.hand_active and player.total_bet > 0:
            self.departed.append(Contribution(player.id, player.total_bet, True, player.seat_index))
        del self.players[idx]

        if self.dealer_index >= idx:
            self.dealer_index -= 1
        if self.current_player_index is not None and self.current_player_index > idx:
            self.current_player_index -= 1
        if self.host_id == player_id:
            self.host_id = None

        events: List[Event] = []
        if self.hand_active:
            if was_current:
                self.current_player_index = None
                events = self._settle_turn(idx - 1)
            else:
                events = self._check_for_hand_end()
        if was_active and len(self.players) < 2:
            self.hand_active = False
            self.stage = Stage.IDLE
            self.current_player_index = None
        return player, events

    def find_player(self, player_id: Optional[str]) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def index_of(self, player_id: str) -> Optional[int]:
        for idx, player in enumerate(self.players):
            if player.id == player_id:
                return idx
        return None

    # Host configuration ----------------------------------------------

    def set_speed(self, speed_ms: float) -> int:
        self.config.speed_ms = clamp_speed(speed_ms)
        return self.config.speed_ms

    def set_max_players(self, max_players: float) -> int:
        self.config.max_players = clamp_max_players(max_players)
        return self.config.max_players

    def set_initial_stack(self, initial_stack: float) -> int:
        self.config.initial_stack = clamp_initial_stack(initial_stack)
        return self.config.initial_stack

    # Hand lifecycle --------------------------------------------------

    def can_start_hand(self) -> bool:
        return sum(1 for player in self.players if player.stack > 0) >= 2

    def reset_hand_state(self, seed: Optional[int] = None) -> None:
        self.deck = create_deck(seed)
        self.community = []
        self.pot = 0
        self.departed = []
        self.last_results = []
        self.acted_since_full_raise.clear()
        self.current_bet = 0
        self.min_raise = self.config.big_blind
        self.current_player_index = None
        self.stage = Stage.PREFLOP
        self.hand_active = True
        self.reveal_hands = False
        for player in self.players:
            player.reset_for_hand()

    def start_hand(self, seed: Optional[int] = None) -> List[Event]:
        if self.hand_active:
            raise RuntimeError("Hand already in progress")
        if not self.can_start_hand():
            raise RuntimeError("Not enough active players to start a hand")

        self.reset_hand_state(seed)
        self.generation += 1
        self.hand_counter += 1
        for player in self.players:
            player.in_hand = player.stack > 0

        dealer = self._next_index(self.dealer_index, lambda p: p.in_hand)
        assert dealer is not None
        self.dealer_index = dealer
        self._deal_hole_cards()
        big_blind_index, events = self._post_blinds()
        events.extend(self._settle_turn(big_blind_index))
        return events

    def new_game(self, carry_over: bool) -> None:
        """Host reset: optionally restore every stack and go back to idle."""
        self.config.carry_over_balances = bool(carry_over)
        for player in self.players:
            if self.hand_active:
                player.stack += player.total_bet
            if not self.config.carry_over_balances:
                player.stack = self.config.initial_stack
            player.reset_for_hand()
        self.deck = []
        self.community = []
        self.pot = 0
        self.departed = []
        self.last_results = []
        self.acted_since_full_raise.clear()
        self.current_bet = 0
        self.min_raise = self.config.big_blind
        self.current_player_index = None
        self.stage = Stage.IDLE
        self.hand_active = False
        self.reveal_hands = False
        self.generation += 1

    def _deal_hole_cards(self) -> None:
        # Two passes around the table, starting left of the dealer.
        order = self._rotation_after(self.dealer_index, lambda p: p.in_hand)
        for _ in range(2):
            for idx in order:
                self.players[idx].hand.extend(deal(self.deck, 1))

    def _post_blinds(self) -> Tuple[int, List[Event]]:
        in_hand = [idx for idx, player in enumerate(self.players) if player.in_hand]
        if len(in_hand) == 2:
            small_blind = self.dealer_index
        else:
            small_blind = self._next_index(self.dealer_index, lambda p: p.in_hand)
        big_blind = self._next_index(small_blind, lambda p: p.in_hand)
        assert small_blind is not None and big_blind is not None

        sb_player = self.players[small_blind]
        bb_player = self.players[big_blind]
        self._commit(sb_player, self.config.small_blind)
        sb_player.status = "Small Blind"
        self._commit(bb_player, self.config.big_blind)
        bb_player.status = "Big Blind"

        self.current_bet = self.config.big_blind
        self.min_raise = self.config.big_blind
        return big_blind, [
            {
                "ev": "POST_BLINDS",
                "sb_seat": sb_player.seat_index,
                "bb_seat": bb_player.seat_index,
                "sb": self.config.small_blind,
                "bb": self.config.big_blind,
            }
        ]

    def _commit(self, player: Player, amount: int) -> int:
        amount = max(0, min(amount, player.stack))
        player.stack -= amount
        player.bet += amount
        player.total_bet += amount
        self.pot += amount
        if player.stack == 0 and player.in_hand:
            player.all_in = True
        return amount

    # Turn order ------------------------------------------------------

    def _next_index(self, from_index: int, predicate: Callable[[Player], bool]) -> Optional[int]:
        count = len(self.players)
        for step in range(1, count + 1):
            idx = (from_index + step) % count
            if predicate(self.players[idx]):
                return idx
        return None

    def _rotation_after(self, from_index: int, predicate: Callable[[Player], bool]) -> List[int]:
        count = len(self.players)
        order = []
        for step in range(1, count + 1):
            idx = (from_index + step) % count
            if predicate(self.players[idx]):
                order.append(idx)
        return order

    def next_active_player(self, from_index: int) -> Optional[int]:
        return self._next_index(from_index, lambda p: p.can_act)

    def current_player(self) -> Optional[Player]:
        if self.current_player_index is None:
            return None
        return self.players[self.current_player_index]

    def contenders(self) -> List[Player]:
        return [player for player in self.players if player.is_contender]

    def needs_advance(self) -> bool:
        """True while a hand is running but nobody is due to act."""
        return self.hand_active and self.current_player_index is None

    def is_betting_round_complete(self) -> bool:
        contenders = self.contenders()
        if len(contenders) <= 1:
            return True
        actors = [player for player in contenders if not player.all_in]
        if not actors:
            return True
        if len(actors) == 1 and actors[0].bet >= self.current_bet:
            # Everyone else is all-in; nobody is left to bet against.
            return True
        return all(player.acted and player.bet == self.current_bet for player in actors)

    # Action handling -------------------------------------------------

    def legal_actions(self, player_id: str) -> SeatActionWindow:
        player = self.find_player(player_id)
        if player is None or not player.can_act:
            raise RuntimeError("Seat not active")

        call_amount = max(0, self.current_bet - player.bet)
        legal = [ActionType.FOLD, ActionType.CHECK if call_amount == 0 else ActionType.CALL]
        min_raise_to = max_raise_to = None
        if player.stack > call_amount and player.id not in self.acted_since_full_raise:
            max_raise_to = player.bet + player.stack
            min_raise_to = min(self.current_bet + self.min_raise, max_raise_to)
            legal.append(ActionType.RAISE)
        return SeatActionWindow(legal, min(call_amount, player.stack), min_raise_to, max_raise_to)

    def apply_action(self, player_id: str, action: object, raise_to: Optional[int] = None) -> List[Event]:
        if not self.hand_active:
            raise ValueError("No hand in progress")
        player = self.current_player()
        if player is None or player.id != player_id:
            raise ValueError("Not your turn")
        try:
            action = ActionType(action)
        except ValueError:
            raise ValueError(f"Unsupported action {action}") from None

        idx = self.current_player_index
        assert idx is not None
        call_amount = max(0, self.current_bet - player.bet)
        events: List[Event] = []

        # Each branch records what happened so the server can announce it.
        if action is ActionType.FOLD:
            player.folded = True
            player.status = "Folded"
            events.append({"ev": "FOLD", "player_id": player.id})
        elif action is ActionType.CHECK:
            if call_amount:
                raise ValueError("Cannot check when facing a bet")
            player.status = "Check"
            self.acted_since_full_raise.add(player.id)
            events.append({"ev": "CHECK", "player_id": player.id})
        elif action is ActionType.CALL:
            events.append(self._call(player, call_amount))
        else:
            events.append(self._raise(player, call_amount, raise_to))

        player.acted = True
        if player.all_in:
            player.status = "All-in"
        events.extend(self._settle_turn(idx))
        return events

    def _call(self, player: Player, call_amount: int) -> Event:
        paid = self._commit(player, call_amount)
        player.status = "Call" if paid else "Check"
        self.acted_since_full_raise.add(player.id)
        return {"ev": "CALL" if paid else "CHECK", "player_id": player.id, "amount": paid}

    def _raise(self, player: Player, call_amount: int, raise_to: Optional[int]) -> Event:
        if player.id in self.acted_since_full_raise or player.stack <= call_amount:
            # Betting was not reopened by an under-raise, or there is nothing left to raise with.
            return self._call(player, call_amount)

        target = max(raise_to or 0, self.current_bet + self.min_raise, player.bet + call_amount)
        target = min(target, player.bet + player.stack)
        paid = self._commit(player, target - player.bet)
        increment = paid - call_amount
        if player.bet > self.current_bet:
            self.current_bet = player.bet
        if increment >= self.min_raise:
            self.acted_since_full_raise = {player.id}
        else:
            self.acted_since_full_raise.add(player.id)
        self.min_raise = max(self.min_raise, increment)
        player.status = "Raise"
        return {"ev": "RAISE", "player_id": player.id, "amount": paid, "raise_to": player.bet}

    def _settle_turn(self, from_index: int) -> List[Event]:
        events = self._check_for_hand_end()
        if not self.hand_active:
            return events
        if self.is_betting_round_complete():
            self.current_player_index = None
        else:
            self.current_player_index = self.next_active_player(from_index)
        return events

    def _check_for_hand_end(self) -> List[Event]:
        contenders = self.contenders()
        if len(contenders) > 1:
            return []

        events: List[Event] = []
        if contenders:
            winner = contenders[0]
            amount = self.pot
            winner.stack += amount
            winner.status = "Wins pot"
            self.last_results = [HandResult(winner.id, winner.name, amount, 0)]
            events.append({"ev": "POT_AWARD", "player_id": winner.id, "amount": amount, "pot_index": 0})
        self.pot = 0
        self._finish_hand()
        return events

    def _finish_hand(self) -> None:
        self.hand_active = False
        self.reveal_hands = True
        self.current_player_index = None
        self.generation += 1

    # Streets and showdown --------------------------------------------

    def advance_stage(self) -> List[Event]:
        if not self.hand_active:
            raise RuntimeError("Hand not active")
        if self.stage is Stage.RIVER:
            return self._showdown()

        next_stage, count = STREET_CARDS[self.stage]
        cards = deal(self.deck, count)
        self.community.extend(cards)
        self.stage = next_stage
        events: List[Event] = [{"ev": next_stage.value.upper(), "cards": [card.short for card in cards]}]

        for player in self.players:
            player.reset_for_round()
        self.current_bet = 0
        self.min_raise = self.config.big_blind
        self.acted_since_full_raise.clear()
        events.extend(self._settle_turn(self.dealer_index))
        return events

    def side_pots(self) -> List[SidePot]:
        return calculate_side_pots(self.contributions())

    def contributions(self) -> List[Contribution]:
        contributions = [
            Contribution(player.id, player.total_bet, player.folded, player.seat_index)
            for player in self.players
            if player.total_bet > 0
        ]
        return contributions + self.departed

    def _showdown(self) -> List[Event]:
        events: List[Event] = []
        evaluations: Dict[str, HandEvaluation] = {}
        for player in self.contenders():
            player.best_hand = best_hand(player.hand + self.community)
            player.status = player.best_hand.name
            evaluations[player.id] = player.best_hand
            events.append(
                {
                    "ev": "SHOWDOWN",
                    "player_id": player.id,
                    "hand": [card.short for card in player.hand],
                    "rank": player.best_hand.name,
                }
            )

        seat_of = {c.player_id: c.seat_index for c in self.contributions()}
        awards = distribute_pots(self.side_pots(), evaluations, seat_of)
        if sum(award.amount for award in awards) != self.pot:
            raise RuntimeError("Pot was not fully distributed")

        results: List[HandResult] = []
        for award in awards:
            winner = self.find_player(award.player_id)
            assert winner is not None and winner.best_hand is not None
            winner.stack += award.amount
            winner.status = "Wins main pot" if award.pot_index == 0 else "Wins side pot"
            results.append(HandResult(winner.id, winner.name, award.amount, award.pot_index, winner.best_hand.name))
            events.append(
                {"ev": "POT_AWARD", "player_id": winner.id, "amount": award.amount, "pot_index": award.pot_index}
            )

        self.last_results = results
        self.pot = 0
        self._finish_hand()
        return events
