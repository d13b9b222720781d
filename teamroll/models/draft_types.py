"""
Closed vocabularies of the Team Roll Draft and the pick asset variant.

Slots, phases, run statuses and asset types are stored as plain strings in
the database (guarded by CHECK constraints) and converted to these enums at
the edges, so the engine never handles a free-form string.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Union


class Slot(str, Enum):
    """The 8 roster slots every run fills exactly once."""
    QB = "QB"
    RB1 = "RB1"
    RB2 = "RB2"
    WR1 = "WR1"
    WR2 = "WR2"
    TE = "TE"
    DST = "DST"
    COACH = "COACH"

    @property
    def required_position(self) -> str | None:
        """
        Player position this slot accepts, with the ordinal suffix stripped
        (RB1 -> RB). None for DST and COACH, which take no player.
        """
        if self in (Slot.DST, Slot.COACH):
            return None
        return self.value.rstrip("0123456789")

    @property
    def takes_player(self) -> bool:
        return self.required_position is not None


# Canonical board order
ALL_SLOTS = tuple(Slot)
ROSTER_SIZE = len(ALL_SLOTS)

# Positions a roster can contribute to the draft
PLAYER_POSITIONS = frozenset(s.required_position for s in ALL_SLOTS if s.takes_player)


class Phase(str, Enum):
    """Per-run state machine phase."""
    NEED_ROLL = "need_roll"
    NEED_SLOT = "need_slot"
    NEED_ASSET = "need_asset"
    COMPLETE = "complete"


class RunStatus(str, Enum):
    ACTIVE = "active"
    COMPLETE = "complete"


class AssetType(str, Enum):
    PLAYER = "player"
    COACH = "coach"
    DEFENSE = "defense"


# Older clients send "dst" for the team defense
ASSET_TYPE_ALIASES = {"dst": AssetType.DEFENSE}


@dataclass(frozen=True)
class PlayerAsset:
    player_id: int

    asset_type = AssetType.PLAYER


@dataclass(frozen=True)
class CoachAsset:
    coach_id: str

    asset_type = AssetType.COACH


@dataclass(frozen=True)
class DefenseAsset:
    """The rolled team's defense; the team itself is the asset."""

    asset_type = AssetType.DEFENSE


Asset = Union[PlayerAsset, CoachAsset, DefenseAsset]
