"""
Asset eligibility rules for the pick step.

Everything here is side-effect free. The engine resolves the referenced
player or coach first and hands the loaded row (or None when the id matched
nothing) to ``validate_pick``.

Rules by pending slot:
- DST: the rolled team's defense, no reference id
- COACH: a coach of the rolled team
- QB, RB1, RB2, WR1, WR2, TE: a player on the rolled team's roster for the
  run's season whose position matches the slot (RB1/RB2 take RB, WR1/WR2 WR)
"""
from typing import Any, Optional, Union

from teamroll.models import (
    ASSET_TYPE_ALIASES,
    Asset,
    AssetType,
    Coach,
    CoachAsset,
    DefenseAsset,
    Player,
    PlayerAsset,
    Slot,
)
from teamroll.services.draft.errors import (
    AssetPositionMismatch,
    AssetTeamMismatch,
    InvalidAsset,
    InvalidSlot,
)


def parse_slot(value: Union[str, Slot]) -> Slot:
    """
    Convert a client-supplied slot name to a Slot.

    Raises:
        InvalidSlot: If the name is not one of the 8 roster slots
    """
    if isinstance(value, Slot):
        return value
    try:
        return Slot(str(value).strip().upper())
    except ValueError:
        raise InvalidSlot(f"Unknown slot '{value}'.") from None


def parse_asset_type(value: Union[str, AssetType]) -> AssetType:
    if isinstance(value, AssetType):
        return value
    key = str(value).strip().lower()
    if key in ASSET_TYPE_ALIASES:
        return ASSET_TYPE_ALIASES[key]
    try:
        return AssetType(key)
    except ValueError:
        raise InvalidAsset(f"Unknown asset type '{value}'.") from None


def build_asset(asset_type: Union[str, AssetType], asset_id: Any = None) -> Asset:
    """
    Build the asset variant from the wire form (type + optional id).

    Raises:
        InvalidAsset: Unknown type, a missing id for player/coach, an id for
            defense, or a non-numeric player id
    """
    kind = parse_asset_type(asset_type)
    if isinstance(asset_id, str):
        asset_id = asset_id.strip() or None

    if kind is AssetType.DEFENSE:
        if asset_id is not None:
            raise InvalidAsset("A defense pick takes no asset id.")
        return DefenseAsset()

    if asset_id is None:
        raise InvalidAsset(f"A {kind.value} pick needs an asset id.")

    if kind is AssetType.COACH:
        return CoachAsset(coach_id=str(asset_id))

    try:
        return PlayerAsset(player_id=int(asset_id))
    except (TypeError, ValueError):
        raise InvalidAsset(f"Invalid player id '{asset_id}'.") from None


def expected_asset_type(slot: Slot) -> AssetType:
    if slot is Slot.DST:
        return AssetType.DEFENSE
    if slot is Slot.COACH:
        return AssetType.COACH
    return AssetType.PLAYER


def validate_pick(
    slot: Slot,
    asset: Asset,
    *,
    team_id: str,
    season: int,
    player: Optional[Player] = None,
    coach: Optional[Coach] = None,
) -> None:
    """
    Check that an asset may fill a slot for the rolled team.

    Args:
        slot: The run's pending slot
        asset: The asset the caller wants to draft
        team_id: The run's rolled team
        season: The run's season
        player: The row ``asset`` references when it is a PlayerAsset
        coach: The row ``asset`` references when it is a CoachAsset

    Raises:
        InvalidAsset: Asset kind does not fit the slot
        AssetTeamMismatch: Player/coach not on the rolled team (or season)
        AssetPositionMismatch: Player position does not fit the slot
    """
    expected = expected_asset_type(slot)
    if asset.asset_type is not expected:
        raise InvalidAsset(f"Slot {slot.value} needs a {expected.value}, got a {asset.asset_type.value}.")

    if isinstance(asset, DefenseAsset):
        return

    if isinstance(asset, CoachAsset):
        if coach is None or coach.id != asset.coach_id or coach.team_id != team_id:
            raise AssetTeamMismatch("Coach does not belong to the rolled team.")
        return

    if (
        player is None
        or player.id != asset.player_id
        or player.team_id != team_id
        or player.season != season
    ):
        raise AssetTeamMismatch("Player is not on the rolled team's roster for this season.")

    required = slot.required_position
    if (player.position or "").upper() != required:
        raise AssetPositionMismatch(
            f"Slot {slot.value} expects a {required}, got a {player.position}."
        )
