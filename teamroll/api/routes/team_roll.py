"""
Team Roll Draft API routes.

Provides endpoints for:
- Starting a run for a season
- Rolling a team, choosing and clearing a slot, picking an asset
- Reading the draft board

The caller is identified by the X-User-Id header (see teamroll.core.auth).
Draft errors are rendered by the DraftError handler in teamroll.main.
"""
from typing import Callable, Optional, TypeVar, Union

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from teamroll.core.auth import get_current_user_id
from teamroll.core.config import settings
from teamroll.core.database import get_db
from teamroll.core.logging import get_logger
from teamroll.services.draft import DraftBoardService, DraftEngine
from teamroll.services.draft.errors import NotFound

logger = get_logger(__name__)

router = APIRouter(prefix="/team-roll", tags=["team-roll"])

T = TypeVar("T")


class StartRunRequest(BaseModel):
    """Request model for starting a run."""
    season: Optional[int] = Field(None, description="Season year; defaults to the current season")


class ChooseSlotRequest(BaseModel):
    """Request model for reserving a slot."""
    slot: str = Field(..., description="QB, RB1, RB2, WR1, WR2, TE, DST or COACH")


class PickAssetRequest(BaseModel):
    """Request model for drafting an asset into the pending slot."""
    asset_type: str = Field(..., description="player, coach or defense")
    asset_id: Optional[Union[int, str]] = Field(None, description="Player or coach id; omit for defense")


class StartRunResponse(BaseModel):
    run_id: str


class RolledTeamResponse(BaseModel):
    team_id: str
    abbreviation: str
    name: str
    logo_url: Optional[str] = None


def _log_retry(retry_state) -> None:
    logger.warning(
        f"Transient database error, retrying (attempt {retry_state.attempt_number})",
        extra={"error": str(retry_state.outcome.exception())},
    )


# The engine rolls back before re-raising, so a fresh attempt starts clean
@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    retry=retry_if_exception_type(OperationalError),
    before_sleep=_log_retry,
    reraise=True,
)
def _call_engine(operation: Callable[..., T], *args) -> T:
    return operation(*args)


@router.post("/runs", status_code=status.HTTP_201_CREATED, response_model=StartRunResponse)
def start_run(
    request: StartRunRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Start the caller's run for a season (one run per user and season)."""
    season = request.season if request.season is not None else settings.DEFAULT_SEASON
    run_id = _call_engine(DraftEngine(db, user_id).start_run, season)
    return {"run_id": run_id}


@router.post("/runs/{run_id}/roll", response_model=RolledTeamResponse)
def roll_team(
    run_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Roll a random team the run has not used yet."""
    team = _call_engine(DraftEngine(db, user_id).roll_team, run_id)
    return RolledTeamResponse(
        team_id=team.team_id,
        abbreviation=team.abbreviation,
        name=team.name,
        logo_url=team.logo_url,
    )


@router.post("/runs/{run_id}/slot", status_code=status.HTTP_204_NO_CONTENT)
def choose_slot(
    run_id: str,
    request: ChooseSlotRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Reserve a free slot for the rolled team."""
    _call_engine(DraftEngine(db, user_id).choose_slot, run_id, request.slot)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/runs/{run_id}/slot", status_code=status.HTTP_204_NO_CONTENT)
def clear_pending_slot(
    run_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Go back to slot selection, keeping the rolled team."""
    _call_engine(DraftEngine(db, user_id).clear_pending_slot, run_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/runs/{run_id}/picks", status_code=status.HTTP_204_NO_CONTENT)
def pick_asset(
    run_id: str,
    request: PickAssetRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Draft an asset of the rolled team into the pending slot."""
    _call_engine(DraftEngine(db, user_id).pick_asset, run_id, request.asset_type, request.asset_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Declared before /runs/{run_id} so "current" is not taken for a run id
@router.get("/runs/current")
def get_current_board(
    season: Optional[int] = Query(None, description="Season year; defaults to the current season"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Board of the caller's run for a season.

    Returns 404 (not_found) until the caller starts a run for the season.
    """
    season = season if season is not None else settings.DEFAULT_SEASON
    board = DraftBoardService(db).get_board_for_season(user_id, season)
    if board is None:
        raise NotFound(f"No run for season {season}.", season=season)
    return board


@router.get("/runs/{run_id}")
def get_board(
    run_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Full board of one of the caller's runs.

    Returns:
        {
            "run_id": ..., "season": ..., "status": ..., "phase": ...,
            "progress": "3/8", "current_team": {...} | null,
            "pending_slot": "QB" | null,
            "slots": [{"slot": "QB", "pick": {...} | null}, ...],
            "free_slots": [...],
            "eligible_assets": [...]
        }
    """
    return DraftBoardService(db).get_board(run_id, user_id)
