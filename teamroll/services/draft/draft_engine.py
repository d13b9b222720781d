"""
Team Roll Draft engine.

A run moves through a small state machine, one cycle per roster slot:

    need_roll --roll_team--> need_slot --choose_slot--> need_asset
        ^                        ^                          |
        |                        +---clear_pending_slot-----+
        +--------------------pick_asset---------------------+--> complete (8th pick)

Every public method is one transaction against the caller's run: it loads
the run (owner only), locks the run's state row, checks the phase, mutates,
and commits. Any failure rolls the whole transaction back, so a rejected call
leaves no trace.
"""
import random
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from teamroll.core import metrics
from teamroll.core.logging import get_logger
from teamroll.models import (
    ROSTER_SIZE,
    Asset,
    AssetType,
    CoachAsset,
    DraftPick,
    DraftRun,
    DraftRunState,
    Phase,
    PlayerAsset,
    RunStatus,
    Slot,
)
from teamroll.repositories import (
    CoachRepository,
    PickRepository,
    PlayerRepository,
    RunRepository,
    RunStateRepository,
    TeamRepository,
)
from teamroll.services.draft.asset_validator import build_asset, parse_slot, validate_pick
from teamroll.services.draft.errors import (
    DraftError,
    DuplicateRun,
    InvalidPhase,
    NotAuthenticated,
    NotFound,
    SlotAlreadyFilled,
    TeamAlreadyUsed,
)
from teamroll.services.draft.team_selector import choose_team

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass
class RolledTeam:
    """Team handed out by roll_team."""
    team_id: str
    abbreviation: str
    name: str
    logo_url: Optional[str]


@dataclass
class PickOutcome:
    """Result of a successful pick_asset call."""
    slot: Slot
    team_id: str
    pick_count: int
    run_complete: bool


def draft_operation(name: str):
    """
    Wrap an engine method in its transaction.

    Commits on success and rolls back on any exception. A stale state row
    (another request updated it first) surfaces as InvalidPhase. Every call
    is counted and timed in the draft metrics.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            started = time.perf_counter()
            outcome = "ok"
            try:
                result = func(self, *args, **kwargs)
                self.db.commit()
                return result
            except StaleDataError:
                self.db.rollback()
                outcome = InvalidPhase.code
                logger.warning(f"{name} lost a race on the run state", extra={"operation": name})
                raise InvalidPhase("The run was changed by another request. Reload and try again.") from None
            except DraftError as exc:
                self.db.rollback()
                outcome = exc.code
                logger.warning(
                    f"{name} rejected: {exc.message}",
                    extra={"operation": name, "error": exc.code, **exc.context},
                )
                raise
            except Exception:
                self.db.rollback()
                outcome = "error"
                raise
            finally:
                metrics.record_draft_operation(name, outcome, time.perf_counter() - started)
        return wrapper
    return decorator


class DraftEngine:
    """
    The five draft operations for one calling user.

    Usage:
        engine = DraftEngine(db, user_id)
        run_id = engine.start_run(2025)
        team = engine.roll_team(run_id)
        engine.choose_slot(run_id, "QB")
        engine.pick_asset(run_id, "player", 4512)
    """

    def __init__(self, db: Session, user_id: str, rng: Optional[random.Random] = None):
        """
        Args:
            db: Database session; the engine commits or rolls back on it
            user_id: Authenticated caller; runs of other users are invisible
            rng: Random source for team rolls (seedable in tests)
        """
        if not user_id:
            raise NotAuthenticated()

        self.db = db
        self.user_id = user_id
        self.rng = rng or random.SystemRandom()

        self.runs = RunRepository(db)
        self.states = RunStateRepository(db)
        self.picks = PickRepository(db)
        self.teams = TeamRepository(db)
        self.players = PlayerRepository(db)
        self.coaches = CoachRepository(db)

    # ========================================================================
    # Operations
    # ========================================================================

    @draft_operation("start_run")
    def start_run(self, season: int) -> str:
        """
        Open the caller's run for a season.

        Returns:
            The new run id

        Raises:
            DuplicateRun: The caller already has a run for this season
        """
        now = _utcnow()
        run_id = str(uuid.uuid4())

        self.runs.create(
            id=run_id,
            user_id=self.user_id,
            season=season,
            status=RunStatus.ACTIVE.value,
            created_at=now,
        )
        # The (user_id, season) unique constraint decides, not a lookup, so
        # two concurrent starts cannot both succeed
        try:
            self.db.flush()
        except IntegrityError:
            raise DuplicateRun(f"You already have a run for season {season}.", season=season) from None

        self.states.create(
            run_id=run_id,
            phase=Phase.NEED_ROLL.value,
            current_team_id=None,
            pending_slot=None,
            updated_at=now,
        )
        self.db.flush()

        metrics.record_run_started()
        logger.info(f"Started run for season {season}", extra={"run_id": run_id, "season": season})
        return run_id

    @draft_operation("roll_team")
    def roll_team(self, run_id: str) -> RolledTeam:
        """
        Hand the run a random team it has not used yet.

        Raises:
            InvalidPhase: Run is not waiting for a roll
            NoTeamsRemaining: Every team has been used
        """
        run, state = self._load_locked(run_id)
        self._require_phase(state, Phase.NEED_ROLL)

        team_id = choose_team(self.teams.all_ids(), self.picks.used_team_ids(run.id), self.rng)
        team = self.teams.find_by_id(team_id)

        self._move(state, Phase.NEED_SLOT, team_id=team_id, slot=None)
        self.db.flush()

        logger.info(f"Rolled {team.abbreviation}", extra={"run_id": run.id, "team_id": team_id})
        return RolledTeam(
            team_id=team.id,
            abbreviation=team.abbreviation,
            name=team.name,
            logo_url=team.logo_url,
        )

    @draft_operation("choose_slot")
    def choose_slot(self, run_id: str, slot: Union[str, Slot]) -> None:
        """
        Reserve a free roster slot for the rolled team.

        Raises:
            InvalidSlot: Not one of the 8 slot names
            InvalidPhase: Run is not waiting for a slot
            SlotAlreadyFilled: The slot already holds a pick
        """
        slot = parse_slot(slot)
        run, state = self._load_locked(run_id)
        self._require_phase(state, Phase.NEED_SLOT)

        if state.current_team_id is None:
            raise InvalidPhase("Roll a team first.")

        if self.picks.slot_taken(run.id, slot.value):
            raise SlotAlreadyFilled(f"Slot {slot.value} is already filled.", slot=slot.value)

        self._move(state, Phase.NEED_ASSET, team_id=state.current_team_id, slot=slot)
        self.db.flush()

        logger.info(f"Chose slot {slot.value}", extra={"run_id": run.id, "slot": slot.value})

    @draft_operation("clear_pending_slot")
    def clear_pending_slot(self, run_id: str) -> None:
        """
        Drop the slot choice but keep the rolled team.

        Raises:
            InvalidPhase: No rolled team to keep (need_roll or complete)
        """
        run, state = self._load_locked(run_id)

        if state.current_team_id is None:
            raise InvalidPhase("There is no rolled team to choose a slot for.")
        self._require_phase(state, Phase.NEED_SLOT, Phase.NEED_ASSET)

        self._move(state, Phase.NEED_SLOT, team_id=state.current_team_id, slot=None)
        self.db.flush()

        logger.info("Cleared pending slot", extra={"run_id": run.id})

    @draft_operation("pick_asset")
    def pick_asset(
        self,
        run_id: str,
        asset_type: Union[str, AssetType],
        asset_id: Any = None,
    ) -> PickOutcome:
        """
        Draft an asset of the rolled team into the pending slot.

        Args:
            run_id: Run id
            asset_type: "player", "coach" or "defense"
            asset_id: Player id or coach id; omitted for defense

        Raises:
            InvalidPhase: Run is not waiting for an asset
            SlotAlreadyFilled, TeamAlreadyUsed: The pick ledger already holds
                the slot or the team
            InvalidAsset, AssetTeamMismatch, AssetPositionMismatch: The asset
                is not eligible for the slot
        """
        run, state = self._load_locked(run_id)
        self._require_phase(state, Phase.NEED_ASSET)

        if state.pending_slot is None or state.current_team_id is None:
            raise InvalidPhase("Incomplete run state.")

        slot = Slot(state.pending_slot)
        team_id = state.current_team_id

        if self.picks.slot_taken(run.id, slot.value):
            raise SlotAlreadyFilled(f"Slot {slot.value} is already filled.", slot=slot.value)
        if self.picks.team_taken(run.id, team_id):
            raise TeamAlreadyUsed(team_id=team_id)

        asset = build_asset(asset_type, asset_id)
        self._validate(slot, asset, team_id=team_id, season=run.season)

        pick = DraftPick(
            id=str(uuid.uuid4()),
            run_id=run.id,
            slot=slot.value,
            team_id=team_id,
            created_at=_utcnow(),
        )
        pick.asset = asset
        self.db.add(pick)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise self._pick_conflict(exc) from None

        pick_count = self.picks.count_for_run(run.id)
        run_complete = pick_count >= ROSTER_SIZE

        if run_complete:
            run.status = RunStatus.COMPLETE.value
            run.completed_at = _utcnow()
            self._move(state, Phase.COMPLETE, team_id=None, slot=None)
        else:
            self._move(state, Phase.NEED_ROLL, team_id=None, slot=None)
        self.db.flush()

        logger.info(
            f"Picked {asset.asset_type.value} for {slot.value} ({pick_count}/{ROSTER_SIZE})",
            extra={"run_id": run.id, "slot": slot.value, "team_id": team_id},
        )
        if run_complete:
            metrics.record_run_completed()
            logger.info("Run complete", extra={"run_id": run.id})

        return PickOutcome(slot=slot, team_id=team_id, pick_count=pick_count, run_complete=run_complete)

    # ========================================================================
    # Helpers
    # ========================================================================

    def _load_locked(self, run_id: str) -> Tuple[DraftRun, DraftRunState]:
        """Load the caller's run and lock its state row for this transaction."""
        run = self.runs.find_owned(run_id, self.user_id)
        if run is None:
            raise NotFound(run_id=run_id)

        state = self.states.lock(run.id)
        if state is None:
            raise NotFound("Run state not found.", run_id=run_id)

        return run, state

    @staticmethod
    def _require_phase(state: DraftRunState, *allowed: Phase) -> None:
        phase = Phase(state.phase)
        if phase is Phase.COMPLETE:
            raise InvalidPhase("The run is complete.", phase=phase.value)
        if phase not in allowed:
            raise InvalidPhase(
                f"Not allowed while the run is in phase {phase.value}.",
                phase=phase.value,
            )

    @staticmethod
    def _move(
        state: DraftRunState,
        phase: Phase,
        team_id: Optional[str],
        slot: Optional[Slot],
    ) -> None:
        state.phase = phase.value
        state.current_team_id = team_id
        state.pending_slot = slot.value if slot is not None else None
        state.updated_at = _utcnow()

    def _validate(self, slot: Slot, asset: Asset, team_id: str, season: int) -> None:
        player = self.players.find_by_id(asset.player_id) if isinstance(asset, PlayerAsset) else None
        coach = self.coaches.find_by_id(asset.coach_id) if isinstance(asset, CoachAsset) else None
        validate_pick(slot, asset, team_id=team_id, season=season, player=player, coach=coach)

    @staticmethod
    def _pick_conflict(exc: IntegrityError) -> Exception:
        """Map a pick ledger unique violation to its error kind."""
        message = str(exc.orig)
        if "uq_draft_picks_run_slot" in message or "draft_picks.slot" in message:
            return SlotAlreadyFilled()
        if "uq_draft_picks_run_team" in message or "draft_picks.team_id" in message:
            return TeamAlreadyUsed()
        return exc
