"""Players, units and the messages that describe their actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class UnitRank(str, Enum):
    INFANTRY = "infantry"
    CAVALRY = "cavalry"
    ARTILLERY = "artillery"

    def __str__(self) -> str:
        return self.value


_LOCATIONS = frozenset({"americas", "europe", "africa", "asia", "australia", "antarctica"})


def all_ranks() -> frozenset[UnitRank]:
    return frozenset(UnitRank)


def all_locations() -> frozenset[str]:
    return _LOCATIONS


@dataclass(frozen=True)
class Unit:
    id: int
    rank: UnitRank
    location: str

    def to_dict(self) -> dict[str, Any]:
        return {"ID": self.id, "Rank": self.rank.value, "Location": self.location}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Unit:
        return cls(int(data["ID"]), UnitRank(data["Rank"]), data["Location"])


@dataclass
class Player:
    username: str
    units: dict[int, Unit] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        units = {str(key): unit.to_dict() for key, unit in self.units.items()}
        return {"Username": self.username, "Units": units}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Player:
        units = data.get("Units") or {}
        return cls(
            data.get("Username", ""),
            {int(key): Unit.from_dict(value) for key, value in units.items()},
        )


@dataclass
class ArmyMove:
    player: Player
    units: list[Unit]
    to_location: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "Player": self.player.to_dict(),
            "Units": [unit.to_dict() for unit in self.units],
            "ToLocation": self.to_location,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArmyMove:
        return cls(
            Player.from_dict(data.get("Player") or {}),
            [Unit.from_dict(item) for item in data.get("Units") or []],
            data.get("ToLocation", ""),
        )


@dataclass
class RecognitionOfWar:
    attacker: Player
    defender: Player

    def to_dict(self) -> dict[str, Any]:
        return {"Attacker": self.attacker.to_dict(), "Defender": self.defender.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecognitionOfWar:
        return cls(
            Player.from_dict(data.get("Attacker") or {}),
            Player.from_dict(data.get("Defender") or {}),
        )