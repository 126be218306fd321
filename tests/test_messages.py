import json

import pytest

from room_server.messages import (
    AddBot,
    Join,
    NewGame,
    PlayerAction,
    SetInitialStack,
    SetProfile,
    SetSpeed,
    StartHand,
    decode_command,
    info,
    state,
    to_number,
    welcome,
)


def frame(msg_type, payload=None):
    return json.dumps({"type": msg_type, "payload": payload})


def test_join_defaults_room_and_drops_non_string_key():
    assert decode_command(frame("JOIN", {"name": "Ana"})) == Join(name="Ana", room_id="lobby")
    assert decode_command(frame("JOIN", {"name": "Ana", "roomId": " red ", "hostKey": 12})) == Join(
        name="Ana", room_id="red", host_key=None
    )
    assert decode_command(frame("JOIN", {"hostKey": "host123"})).host_key == "host123"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2]",
        json.dumps({"payload": {}}),
        json.dumps({"type": "DANCE", "payload": {}}),
        json.dumps({"type": ["JOIN"], "payload": {}}),
        b"\xff\xfe",
    ],
)
def test_malformed_frames_decode_to_none(raw):
    assert decode_command(raw) is None


def test_player_action_normalises_action_and_amount():
    assert decode_command(frame("PLAYER_ACTION", {"action": "RAISE", "raiseTo": "120"})) == PlayerAction("raise", 120)
    assert decode_command(frame("PLAYER_ACTION", {"action": "call", "raiseTo": "abc"})) == PlayerAction("call", None)
    assert decode_command(frame("PLAYER_ACTION", {})) == PlayerAction("", None)


def test_numeric_settings_accept_numbers_and_numeric_strings():
    assert decode_command(frame("SET_SPEED", {"speedMs": "450"})) == SetSpeed(450.0)
    assert decode_command(frame("SET_SPEED", {"speedMs": "fast"})) == SetSpeed(None)
    assert decode_command(frame("SET_INITIAL_STACK", {"initialStack": 2500.5})) == SetInitialStack(2500.5)


def test_to_number_rejects_bools_and_non_finite_values():
    assert to_number(True) is None
    assert to_number(None) is None
    assert to_number("nan") is None
    assert to_number("inf") is None
    assert to_number(" 12 ") == 12.0


def test_other_commands():
    assert decode_command(frame("START_HAND")) == StartHand()
    assert decode_command(frame("NEW_GAME", {"carryOver": True})) == NewGame(True)
    assert decode_command(frame("NEW_GAME")) == NewGame(False)
    assert decode_command(frame("SET_PROFILE", {"name": "Bo", "avatar": "x"})) == SetProfile("Bo", "x")
    assert decode_command(frame("ADD_BOT", {"name": "  "})) == AddBot(None)


def test_outbound_envelopes():
    assert json.loads(welcome("abc")) == {"type": "WELCOME", "payload": {"id": "abc"}}
    assert json.loads(info("hi")) == {"type": "INFO", "payload": {"text": "hi"}}
    assert json.loads(state({"pot": 0})) == {"type": "STATE", "payload": {"pot": 0}}
