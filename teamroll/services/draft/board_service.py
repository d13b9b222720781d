"""
Read-only view of a run for the frontend.

After every engine call the frontend re-renders the whole draft: progress,
the rolled team, the 8-slot board, the free slots and, while a slot is
pending, the assets that may fill it. None of this takes the state lock.
"""
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from teamroll.core.logging import get_logger
from teamroll.models import (
    ALL_SLOTS,
    ROSTER_SIZE,
    AssetType,
    DraftPick,
    DraftRun,
    Phase,
    Slot,
    Team,
)
from teamroll.repositories import (
    CoachRepository,
    PickRepository,
    PlayerRepository,
    RunRepository,
    TeamRepository,
)
from teamroll.services.draft.errors import NotFound

logger = get_logger(__name__)


def team_to_dict(team: Optional[Team]) -> Optional[dict]:
    if team is None:
        return None
    return {
        "id": team.id,
        "abbreviation": team.abbreviation,
        "name": team.name,
        "logo_url": team.logo_url,
    }


def asset_label(pick: DraftPick) -> str:
    """Display name of a pick's asset: player or coach name, or "<ABBR> DST"."""
    if pick.asset_type == AssetType.PLAYER.value and pick.player is not None:
        return pick.player.full_name
    if pick.asset_type == AssetType.COACH.value and pick.coach is not None:
        return pick.coach.full_name
    return f"{pick.team.abbreviation} DST"


def pick_to_dict(pick: DraftPick) -> dict:
    return {
        "id": pick.id,
        "slot": pick.slot,
        "asset_type": pick.asset_type,
        "asset_id": pick.player_id if pick.player_id is not None else pick.coach_id,
        "label": asset_label(pick),
        "position": pick.player.position if pick.player is not None else None,
        "team": team_to_dict(pick.team),
    }


class DraftBoardService:
    """
    Build the board payload for a run.

    Usage:
        board = DraftBoardService(db).get_board(run_id, user_id)
    """

    def __init__(self, db: Session):
        self.db = db
        self.runs = RunRepository(db)
        self.picks = PickRepository(db)
        self.teams = TeamRepository(db)
        self.players = PlayerRepository(db)
        self.coaches = CoachRepository(db)

    def get_board(self, run_id: str, user_id: str) -> dict:
        """
        Board for one of the user's runs.

        Raises:
            NotFound: No such run for this user
        """
        run = self.runs.find_owned(run_id, user_id)
        if run is None:
            raise NotFound(run_id=run_id)
        return self._build(run)

    def get_board_for_season(self, user_id: str, season: int) -> Optional[dict]:
        """Board of the user's run for a season, or None before the run is started."""
        run = self.runs.find_for_user_season(user_id, season)
        if run is None:
            return None
        return self._build(run)

    def eligible_assets(
        self,
        slot: Slot,
        team: Team,
        season: int,
    ) -> List[Dict]:
        """
        Assets that may fill ``slot`` for ``team``.

        DST offers the team defense, COACH the team's coach, and player slots
        the roster players of the slot's position for the season.
        """
        if slot is Slot.DST:
            return [{
                "asset_type": AssetType.DEFENSE.value,
                "asset_id": None,
                "label": f"{team.abbreviation} DST",
                "subtitle": team.name,
            }]

        if slot is Slot.COACH:
            return [
                {
                    "asset_type": AssetType.COACH.value,
                    "asset_id": coach.id,
                    "label": coach.full_name,
                    "subtitle": "Head Coach",
                }
                for coach in self.coaches.find_by_team(team.id)
            ]

        return [
            {
                "asset_type": AssetType.PLAYER.value,
                "asset_id": player.id,
                "label": player.full_name,
                "subtitle": player.position,
            }
            for player in self.players.find_for_team(team.id, season, slot.required_position)
        ]

    def _build(self, run: DraftRun) -> dict:
        state = run.state
        picks = self.picks.find_by_run(run.id)
        picks_by_slot = {pick.slot: pick for pick in picks}

        phase = Phase(state.phase)
        current_team = self.teams.find_by_id(state.current_team_id) if state.current_team_id else None
        pending_slot = Slot(state.pending_slot) if state.pending_slot else None

        assets: List[Dict] = []
        if phase is Phase.NEED_ASSET and pending_slot is not None and current_team is not None:
            assets = self.eligible_assets(pending_slot, current_team, run.season)
            if not assets:
                logger.info(
                    f"No eligible assets for {pending_slot.value}",
                    extra={"run_id": run.id, "team_id": current_team.id},
                )

        return {
            "run_id": run.id,
            "season": run.season,
            "status": run.status,
            "phase": phase.value,
            "progress": f"{len(picks)}/{ROSTER_SIZE}",
            "pick_count": len(picks),
            "current_team": team_to_dict(current_team),
            "pending_slot": pending_slot.value if pending_slot else None,
            "slots": [
                {
                    "slot": slot.value,
                    "pick": pick_to_dict(picks_by_slot[slot.value]) if slot.value in picks_by_slot else None,
                }
                for slot in ALL_SLOTS
            ],
            "free_slots": [slot.value for slot in ALL_SLOTS if slot.value not in picks_by_slot],
            "eligible_assets": assets,
        }
