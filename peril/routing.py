"""Exchange names, routing keys and the messages that travel between them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

ARMY_MOVES_PREFIX = "army_moves"
WAR_RECOGNITIONS_PREFIX = "war"
PAUSE_KEY = "pause"
GAME_LOG_SLUG = "game_logs"

EXCHANGE_PERIL_DIRECT = "peril_direct"
EXCHANGE_PERIL_TOPIC = "peril_topic"

_FRACTION = re.compile(r"\.(\d+)")


def _parse_time(text: str) -> datetime:
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    # Nanoseconds are cut down to the microseconds datetime can hold.
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class PlayingState:
    """Whether the server has paused the game."""

    is_paused: bool

    def to_dict(self) -> dict[str, Any]:
        return {"IsPaused": self.is_paused}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlayingState:
        return cls(is_paused=bool(data.get("IsPaused", False)))


@dataclass(frozen=True)
class GameLog:
    """A line of game history sent by a player."""

    current_time: datetime
    message: str
    username: str

    def to_dict(self) -> dict[str, Any]:
        stamp = self.current_time.isoformat()
        if stamp.endswith("+00:00"):
            stamp = stamp[:-6] + "Z"
        return {"CurrentTime": stamp, "Message": self.message, "Username": self.username}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameLog:
        return cls(
            current_time=_parse_time(data["CurrentTime"]),
            message=data.get("Message", ""),
            username=data.get("Username", ""),
        )