"""
Database models for the Team Roll Draft.

Reference tables (teams, players, coaches) are loaded by the seeding script
and only read by the draft engine. Draft tables (draft_runs, draft_run_states,
draft_picks) are written exclusively by the engine.
"""
from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, declarative_base

from teamroll.models.draft_types import (
    ALL_SLOTS,
    AssetType,
    CoachAsset,
    DefenseAsset,
    Phase,
    PlayerAsset,
    RunStatus,
)

Base = declarative_base()

# SQLite only autoincrements INTEGER PRIMARY KEY
BigIntegerId = BigInteger().with_variant(Integer(), "sqlite")


def _in_list(column: str, values) -> str:
    quoted = ", ".join(f"'{v.value}'" for v in values)
    return f"{column} IN ({quoted})"


# =============================================================================
# Reference data
# =============================================================================

class Team(Base):
    """NFL franchise."""
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True)
    abbreviation = Column(String(5), unique=True, nullable=False, index=True)  # KC, SF, ...
    name = Column(String(100), nullable=False)
    logo_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Relationships
    players = relationship("Player", back_populates="team")
    coach = relationship("Coach", back_populates="team", uselist=False)


class Player(Base):
    """One player on one team's roster for one season (nflverse roster row)."""
    __tablename__ = "players"

    id = Column(BigIntegerId, primary_key=True, autoincrement=True)
    gsis_id = Column(String(20), nullable=False)  # NFL GSIS id, stable across seasons
    season = Column(Integer, nullable=False, index=True)
    team_id = Column(String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False, index=True)
    position = Column(String(10), nullable=False)  # QB, RB, WR, TE
    jersey_number = Column(Integer, nullable=True)
    status = Column(String(10), nullable=True)  # ACT, RES, ...
    headshot_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Relationships
    team = relationship("Team", back_populates="players")

    __table_args__ = (
        UniqueConstraint("season", "gsis_id", name="uq_players_season_gsis"),
        Index("ix_players_team_season_position", "team_id", "season", "position"),
    )


class Coach(Base):
    """Head coach; one per team."""
    __tablename__ = "coaches"

    id = Column(String(36), primary_key=True)
    team_id = Column(String(36), ForeignKey("teams.id", ondelete="CASCADE"), unique=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Relationships
    team = relationship("Team", back_populates="coach")


# =============================================================================
# Draft state
# =============================================================================

class DraftRun(Base):
    """One attempt by one user, for one season, to fill all roster slots."""
    __tablename__ = "draft_runs"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)  # id from the identity provider
    season = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=RunStatus.ACTIVE.value)
    created_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    state = relationship("DraftRunState", back_populates="run", uselist=False, cascade="all, delete-orphan")
    picks = relationship(
        "DraftPick",
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="DraftPick.created_at",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "season", name="uq_draft_runs_user_season"),
        CheckConstraint(_in_list("status", RunStatus), name="ck_draft_runs_status"),
    )


class DraftRunState(Base):
    """
    The run's state machine cursor. Exactly one row per run.

    ``version`` is bumped on every UPDATE; SQLAlchemy adds it to the WHERE
    clause, so a writer holding a stale copy fails with StaleDataError.
    """
    __tablename__ = "draft_run_states"

    run_id = Column(String(36), ForeignKey("draft_runs.id", ondelete="CASCADE"), primary_key=True)
    phase = Column(String(20), nullable=False, default=Phase.NEED_ROLL.value)
    current_team_id = Column(String(36), ForeignKey("teams.id"), nullable=True)
    pending_slot = Column(String(10), nullable=True)
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Relationships
    run = relationship("DraftRun", back_populates="state")
    current_team = relationship("Team")

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint(_in_list("phase", Phase), name="ck_draft_run_states_phase"),
        CheckConstraint(
            "pending_slot IS NULL OR " + _in_list("pending_slot", ALL_SLOTS),
            name="ck_draft_run_states_pending_slot",
        ),
        # need_roll and complete hold no team and no slot; need_slot holds a
        # team only; need_asset holds both
        CheckConstraint(
            "(phase IN ('need_roll', 'complete') AND current_team_id IS NULL AND pending_slot IS NULL)"
            " OR (phase = 'need_slot' AND current_team_id IS NOT NULL AND pending_slot IS NULL)"
            " OR (phase = 'need_asset' AND current_team_id IS NOT NULL AND pending_slot IS NOT NULL)",
            name="ck_draft_run_states_phase_fields",
        ),
    )


class DraftPick(Base):
    """One filled slot of a run."""
    __tablename__ = "draft_picks"

    id = Column(String(36), primary_key=True)
    run_id = Column(String(36), ForeignKey("draft_runs.id", ondelete="CASCADE"), nullable=False, index=True)
    slot = Column(String(10), nullable=False)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=False)
    asset_type = Column(String(20), nullable=False)
    player_id = Column(BigIntegerId, ForeignKey("players.id"), nullable=True)
    coach_id = Column(String(36), ForeignKey("coaches.id"), nullable=True)
    created_at = Column(DateTime, nullable=False)

    # Relationships
    run = relationship("DraftRun", back_populates="picks")
    team = relationship("Team")
    player = relationship("Player")
    coach = relationship("Coach")

    __table_args__ = (
        UniqueConstraint("run_id", "slot", name="uq_draft_picks_run_slot"),
        UniqueConstraint("run_id", "team_id", name="uq_draft_picks_run_team"),
        CheckConstraint(_in_list("slot", ALL_SLOTS), name="ck_draft_picks_slot"),
        CheckConstraint(
            "(asset_type = 'player' AND player_id IS NOT NULL AND coach_id IS NULL)"
            " OR (asset_type = 'coach' AND coach_id IS NOT NULL AND player_id IS NULL)"
            " OR (asset_type = 'defense' AND player_id IS NULL AND coach_id IS NULL)",
            name="ck_draft_picks_asset_reference",
        ),
    )

    @property
    def asset(self):
        """The pick's asset as a PlayerAsset, CoachAsset or DefenseAsset."""
        if self.asset_type == AssetType.PLAYER.value:
            return PlayerAsset(player_id=self.player_id)
        if self.asset_type == AssetType.COACH.value:
            return CoachAsset(coach_id=self.coach_id)
        return DefenseAsset()

    @asset.setter
    def asset(self, asset) -> None:
        self.asset_type = asset.asset_type.value
        self.player_id = asset.player_id if isinstance(asset, PlayerAsset) else None
        self.coach_id = asset.coach_id if isinstance(asset, CoachAsset) else None
