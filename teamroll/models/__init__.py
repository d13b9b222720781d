"""
Models for the Team Roll Draft.

Usage:
    from teamroll.models import DraftRun, DraftPick, Team
    from teamroll.models import Slot, Phase, AssetType
"""

from teamroll.models.models import (
    Base,
    Team,
    Player,
    Coach,
    DraftRun,
    DraftRunState,
    DraftPick,
)
from teamroll.models.draft_types import (
    ALL_SLOTS,
    ASSET_TYPE_ALIASES,
    ROSTER_SIZE,
    PLAYER_POSITIONS,
    Asset,
    AssetType,
    CoachAsset,
    DefenseAsset,
    Phase,
    PlayerAsset,
    RunStatus,
    Slot,
)

__all__ = [
    "Base",
    "Team",
    "Player",
    "Coach",
    "DraftRun",
    "DraftRunState",
    "DraftPick",
    "ALL_SLOTS",
    "ASSET_TYPE_ALIASES",
    "ROSTER_SIZE",
    "PLAYER_POSITIONS",
    "Asset",
    "AssetType",
    "CoachAsset",
    "DefenseAsset",
    "Phase",
    "PlayerAsset",
    "RunStatus",
    "Slot",
]
