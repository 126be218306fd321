import pytest

from holdem.game import Room
from holdem.models import ActionType, Stage

from .helpers import create_room


def test_dealer_rotates_between_hands():
    room = create_room(3)
    room.start_hand(seed=31)
    assert room.dealer_index == 0
    room.apply_action("p0", ActionType.FOLD)
    room.apply_action("p1", ActionType.FOLD)

    room.start_hand(seed=32)
    assert room.dealer_index == 1


def test_busted_players_sit_out():
    room = create_room(3)
    room.players[1].stack = 0
    room.start_hand(seed=33)

    busted = room.players[1]
    assert not busted.in_hand
    assert busted.hand == []
    assert busted.bet == 0
    # Heads-up between p0 and p2: the dealer posts the small blind.
    assert room.players[0].bet == 5
    assert room.players[2].bet == 10


def test_seats_fill_lowest_free_index_in_order():
    room = create_room(3)
    room.remove_player("p1")
    late = room.add_player("late", "Late")

    assert late.seat_index == 1
    assert [player.id for player in room.players] == ["p0", "late", "p2"]


def test_removing_seat_before_dealer_keeps_button():
    room = create_room(3)
    room.start_hand(seed=34)
    room.apply_action("p0", ActionType.FOLD)
    room.apply_action("p1", ActionType.FOLD)
    room.start_hand(seed=35)
    room.apply_action("p1", ActionType.FOLD)
    room.apply_action("p2", ActionType.FOLD)
    assert room.players[room.dealer_index].id == "p1"

    room.remove_player("p0")
    assert room.players[room.dealer_index].id == "p1"


def test_joining_mid_hand_keeps_turn_and_dealer_pointing_at_same_players():
    room = create_room(3)
    room.remove_player("p0")
    room.start_hand(seed=36)
    dealer = room.players[room.dealer_index].id
    actor = room.current_player().id

    newcomer = room.add_player("p0", "Player0")
    assert newcomer.seat_index == 0
    assert room.players[0] is newcomer
    assert room.players[room.dealer_index].id == dealer
    assert room.current_player().id == actor
    assert not newcomer.in_hand


def test_removing_current_player_passes_the_turn():
    room = create_room(4)
    room.start_hand(seed=37)
    assert room.current_player().id == "p3"

    player, _ = room.remove_player("p3")
    assert player.id == "p3"
    assert room.current_player().id == "p0"
    assert room.hand_active


def test_removal_leaving_one_contender_awards_pot():
    room = create_room(2)
    room.start_hand(seed=38)

    player, events = room.remove_player("p1")
    assert player.id == "p1"
    assert events == [{"ev": "POT_AWARD", "player_id": "p0", "amount": 15, "pot_index": 0}]
    assert room.players[0].stack == 1_010
    assert not room.hand_active
    assert room.stage is Stage.IDLE


def test_removing_host_vacates_host_role():
    room = create_room(2)
    room.host_id = "p0"
    room.remove_player("p0")
    assert room.host_id is None
    assert room.remove_player("ghost") == (None, [])


def test_new_game_with_carry_over_refunds_the_hand_in_progress():
    room = create_room(3)
    room.start_hand(seed=39)
    room.apply_action("p0", ActionType.RAISE, 100)
    generation = room.generation

    room.new_game(True)
    assert [player.stack for player in room.players] == [1_000, 1_000, 1_000]
    assert room.pot == 0
    assert room.stage is Stage.IDLE
    assert not room.hand_active
    assert room.generation == generation + 1
    assert all(player.hand == [] for player in room.players)


def test_new_game_without_carry_over_restores_initial_stack():
    room = create_room(2)
    room.set_initial_stack(500)
    room.players[0].stack = 1_700
    room.players[1].stack = 300

    room.new_game(False)
    assert [player.stack for player in room.players] == [500, 500]
    assert room.config.carry_over_balances is False


def test_generation_changes_on_start_and_finish():
    room = create_room(2)
    start = room.generation
    room.start_hand(seed=40)
    assert room.generation == start + 1
    room.apply_action("p0", ActionType.FOLD)
    assert room.generation == start + 2
    assert room.hand_counter == 1


def test_host_settings_are_clamped():
    room = Room("settings")
    assert room.set_speed(50) == 300
    assert room.set_speed(5_000) == 2_000
    assert room.set_max_players(1) == 2
    assert room.set_max_players(12) == 10
    assert room.set_initial_stack(99_999.7) == 10_000
    assert room.set_initial_stack(250.9) == 250
    assert room.set_initial_stack(3) == 100


def test_table_capacity_follows_max_players():
    room = create_room(2)
    room.set_max_players(2)
    with pytest.raises(RuntimeError, match="Table is full"):
        room.add_player("p2", "Overflow")
    with pytest.raises(ValueError, match="Already seated"):
        room.add_player("p0", "Again")


def test_bots_get_generated_names_and_ids():
    room = create_room(1)
    bot = room.add_bot()
    named = room.add_bot("Robo")
    assert bot.is_bot and bot.name == "Bot 1"
    assert bot.id.startswith("bot-")
    assert named.name == "Robo"
    assert not bot.needs_profile


def test_names_are_trimmed_and_limited():
    room = Room("names")
    player = room.add_player("x", "   A very long player name indeed   ")
    assert player.name == "A very long play"
    assert room.add_player("y", "   ").name == "Player"
