"""Shared pytest fixtures for team-roll-draft-api tests."""
import os
import random
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Generator, List, Tuple

# Settings are read at import time; point them at a throwaway database first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["API_KEY"] = ""
os.environ["LOG_JSON"] = "false"

import pytest
from sqlalchemy.orm import sessionmaker, Session

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

SEASON = 2025

TEAMS = [
    ("ARI", "Arizona Cardinals"), ("ATL", "Atlanta Falcons"), ("BAL", "Baltimore Ravens"),
    ("BUF", "Buffalo Bills"), ("CAR", "Carolina Panthers"), ("CHI", "Chicago Bears"),
    ("CIN", "Cincinnati Bengals"), ("CLE", "Cleveland Browns"), ("DAL", "Dallas Cowboys"),
    ("DEN", "Denver Broncos"), ("DET", "Detroit Lions"), ("GB", "Green Bay Packers"),
    ("HOU", "Houston Texans"), ("IND", "Indianapolis Colts"), ("JAX", "Jacksonville Jaguars"),
    ("KC", "Kansas City Chiefs"), ("LV", "Las Vegas Raiders"), ("LAC", "Los Angeles Chargers"),
    ("LAR", "Los Angeles Rams"), ("MIA", "Miami Dolphins"), ("MIN", "Minnesota Vikings"),
    ("NE", "New England Patriots"), ("NO", "New Orleans Saints"), ("NYG", "New York Giants"),
    ("NYJ", "New York Jets"), ("PHI", "Philadelphia Eagles"), ("PIT", "Pittsburgh Steelers"),
    ("SEA", "Seattle Seahawks"), ("SF", "San Francisco 49ers"), ("TB", "Tampa Bay Buccaneers"),
    ("TEN", "Tennessee Titans"), ("WAS", "Washington Commanders"),
]

# Roster per team: two of each fantasy position
ROSTER_POSITIONS = ["QB", "QB", "RB", "RB", "WR", "WR", "TE", "TE"]


@dataclass
class League:
    """Ids of the seeded reference data, kept as plain values so they survive commits."""
    team_ids: List[str] = field(default_factory=list)
    abbreviations: Dict[str, str] = field(default_factory=dict)  # team_id -> abbreviation
    coach_ids: Dict[str, str] = field(default_factory=dict)  # team_id -> coach_id
    players: Dict[Tuple[str, str], List[int]] = field(default_factory=dict)  # (team_id, position) -> ids

    def team_id(self, abbreviation: str) -> str:
        return f"team-{abbreviation}"

    def player_id(self, team_id: str, position: str, index: int = 0) -> int:
        return self.players[(team_id, position)][index]

    def asset_for(self, team_id: str, slot: str) -> Tuple[str, object]:
        """A valid (asset_type, asset_id) for the slot and rolled team."""
        if slot == "DST":
            return "defense", None
        if slot == "COACH":
            return "coach", self.coach_ids[team_id]
        return "player", self.player_id(team_id, slot.rstrip("12"))


def seed_league(session: Session, teams=TEAMS, season: int = SEASON) -> League:
    """Insert teams, one coach per team and a season roster."""
    from teamroll.models import Coach, Player, Team

    now = datetime.utcnow()
    league = League()

    for abbreviation, name in teams:
        team_id = f"team-{abbreviation}"
        session.add(Team(
            id=team_id,
            abbreviation=abbreviation,
            name=name,
            logo_url=f"https://a.espncdn.com/i/teamlogos/nfl/500/{abbreviation.lower()}.png",
            created_at=now,
            updated_at=now
        ))
        session.add(Coach(
            id=f"coach-{abbreviation}",
            team_id=team_id,
            full_name=f"{name} Head Coach",
            created_at=now,
            updated_at=now
        ))
        league.team_ids.append(team_id)
        league.abbreviations[team_id] = abbreviation
        league.coach_ids[team_id] = f"coach-{abbreviation}"
    session.flush()

    for team_id in league.team_ids:
        abbreviation = league.abbreviations[team_id]
        for index, position in enumerate(ROSTER_POSITIONS):
            # Names sort in reverse insertion order within a position
            player = Player(
                gsis_id=f"00-{abbreviation}-{index}",
                season=season,
                team_id=team_id,
                full_name=f"{'ZY'[index % 2]} {abbreviation} {position}",
                position=position,
                jersey_number=index + 1,
                status="ACT",
                created_at=now,
                updated_at=now
            )
            session.add(player)
            session.flush()
            league.players.setdefault((team_id, position), []).append(player.id)

    session.commit()
    return league


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create fresh test database session with isolated in-memory database."""
    from teamroll.core.database import build_engine
    from teamroll.models import Base

    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(bind=engine, autoflush=False)
    session = TestSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def league(db_session: Session) -> League:
    """32 teams with a coach each and a two-deep 2025 roster."""
    return seed_league(db_session)


@pytest.fixture
def league_factory():
    """Seed a league into any session (e.g. a file-backed database)."""
    return seed_league


@pytest.fixture
def make_engine(db_session: Session):
    """
    Build a DraftEngine on the test session with a seeded random source.

    Usage:
        engine = make_engine()              # user "user-1"
        other = make_engine("user-2")
    """
    from teamroll.services.draft import DraftEngine

    def _make(user_id: str = "user-1", seed: int = 7):
        return DraftEngine(db_session, user_id, rng=random.Random(seed))

    return _make


@pytest.fixture
def draft_cycle(league: League):
    """
    Run one roll -> choose slot -> pick cycle with a valid asset.

    Returns the PickOutcome of the pick.
    """
    def _cycle(engine, run_id: str, slot: str):
        team = engine.roll_team(run_id)
        engine.choose_slot(run_id, slot)
        asset_type, asset_id = league.asset_for(team.team_id, slot)
        return engine.pick_asset(run_id, asset_type, asset_id)

    return _cycle


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture(scope="function")
def test_client(db_session):
    """
    Create FastAPI TestClient bound to the test database session.

    Note: We don't use context manager (with TestClient) so the lifespan
    handler never touches the configured database.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/health")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from teamroll.main import app
    from teamroll.core.database import get_db

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
