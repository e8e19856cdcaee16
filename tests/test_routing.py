from datetime import datetime, timedelta, timezone

import pytest

from peril.routing import GameLog, PlayingState


@pytest.mark.parametrize("paused", [True, False])
def test_playing_state_round_trip(paused):
    state = PlayingState(is_paused=paused)
    assert PlayingState.from_dict(state.to_dict()) == state


def test_playing_state_wire_key():
    assert PlayingState(is_paused=True).to_dict() == {"IsPaused": True}


def test_playing_state_missing_key_defaults_to_running():
    assert PlayingState.from_dict({}).is_paused is False


def test_game_log_round_trip_utc():
    log = GameLog(
        current_time=datetime(2024, 1, 2, 3, 4, 5, 250000, tzinfo=timezone.utc),
        message="All warfare is based on deception.",
        username="alice",
    )
    assert GameLog.from_dict(log.to_dict()) == log


def test_game_log_round_trip_offset():
    zone = timezone(timedelta(hours=-5))
    log = GameLog(datetime(2023, 6, 7, 8, 9, 10, tzinfo=zone), "hi", "bob")
    restored = GameLog.from_dict(log.to_dict())
    assert restored == log
    assert restored.current_time.utcoffset() == timedelta(hours=-5)


def test_game_log_utc_uses_z_suffix():
    log = GameLog(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc), "m", "u")
    assert log.to_dict()["CurrentTime"].endswith("Z")


def test_game_log_parses_nanoseconds():
    log = GameLog.from_dict(
        {
            "CurrentTime": "2024-01-02T03:04:05.123456789Z",
            "Message": "hello",
            "Username": "carol",
        }
    )
    assert log.current_time == datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
    assert log.username == "carol"
    assert log.message == "hello"


def test_game_log_requires_time():
    with pytest.raises(KeyError):
        GameLog.from_dict({"Message": "m", "Username": "u"})