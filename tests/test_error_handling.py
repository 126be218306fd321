import pytest

from holdem.cards import deal
from holdem.models import ActionType

from .helpers import create_room


def test_actions_require_a_hand_in_progress():
    room = create_room(2)
    with pytest.raises(ValueError, match="No hand in progress"):
        room.apply_action("p0", ActionType.CHECK)


def test_out_of_turn_action_is_rejected_without_side_effects():
    room = create_room(3)
    room.start_hand(seed=51)
    pot = room.pot

    with pytest.raises(ValueError, match="Not your turn"):
        room.apply_action("p1", ActionType.CALL)
    assert room.pot == pot
    assert room.current_player().id == "p0"


def test_check_facing_a_bet_is_rejected():
    room = create_room(3)
    room.start_hand(seed=52)

    with pytest.raises(ValueError, match="Cannot check when facing a bet"):
        room.apply_action("p0", ActionType.CHECK)
    assert room.current_player().id == "p0"
    assert not room.players[0].acted


def test_unknown_action_is_rejected():
    room = create_room(2)
    room.start_hand(seed=53)
    with pytest.raises(ValueError, match="Unsupported action dance"):
        room.apply_action("p0", "dance")


def test_string_actions_are_accepted():
    room = create_room(2)
    room.start_hand(seed=54)
    events = room.apply_action("p0", "call")
    assert events[0]["ev"] == "CALL"


def test_start_hand_guards():
    room = create_room(1)
    with pytest.raises(RuntimeError, match="Not enough active players"):
        room.start_hand()

    room.add_player("p1", "Second")
    room.start_hand(seed=55)
    with pytest.raises(RuntimeError, match="Hand already in progress"):
        room.start_hand()


def test_advance_stage_requires_active_hand():
    room = create_room(2)
    with pytest.raises(RuntimeError, match="Hand not active"):
        room.advance_stage()


def test_legal_actions_for_folded_player_raise():
    room = create_room(3)
    room.start_hand(seed=56)
    room.apply_action("p0", ActionType.FOLD)
    with pytest.raises(RuntimeError, match="Seat not active"):
        room.legal_actions("p0")
    with pytest.raises(RuntimeError, match="Seat not active"):
        room.legal_actions("nobody")


def test_dealing_past_the_end_of_the_deck_fails():
    room = create_room(2)
    room.start_hand(seed=57)
    with pytest.raises(ValueError, match="Not enough cards"):
        deal(room.deck, len(room.deck) + 1)
