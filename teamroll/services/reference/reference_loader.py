"""
Loader for the draft's reference data.

Teams and coaches come from small CSV files maintained by hand; season
rosters come from the nflverse weekly rosters, either a file on disk or
downloaded through nfl_data_py. Each load is an upsert keyed on a natural
key, so re-running a sync is safe:
- teams: abbreviation
- coaches: team
- players: (season, gsis_id)

Only QB, RB, WR and TE rows of a roster are kept since no other position can
fill a draft slot.

Usage:
    loader = ReferenceDataLoader(db)
    loader.load_teams(read_csv(Path("data/teams.csv")))
    loader.load_roster(download_weekly_roster(2025), season=2025)
    db.commit()
"""
import io
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd
from sqlalchemy.orm import Session
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from teamroll.core.logging import get_logger
from teamroll.models import PLAYER_POSITIONS
from teamroll.repositories import CoachRepository, PlayerRepository, TeamRepository

logger = get_logger(__name__)

try:
    import nfl_data_py as nfl
except ImportError:
    nfl = None
    logger.warning("nfl_data_py not installed; roster downloads disabled. Run: pip install nfl_data_py")

# nflverse still uses a few legacy abbreviations
TEAM_ABBREVIATION_ALIASES = {
    "LA": "LAR",
    "JAC": "JAX",
    "WSH": "WAS",
    "OAK": "LV",
    "SD": "LAC",
    "STL": "LAR",
}

# nfl_data_py weekly roster names -> roster file names
ROSTER_COLUMN_ALIASES = {
    "player_id": "gsis_id",
    "player_name": "full_name",
}


@dataclass
class LoadReport:
    """Counts from one load call."""
    created: int = 0
    updated: int = 0
    skipped: int = 0
    unknown_teams: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        text = f"created={self.created} updated={self.updated} skipped={self.skipped}"
        if self.unknown_teams:
            text += f" unknown_teams={','.join(sorted(set(self.unknown_teams)))}"
        return text


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _clean(value: Any) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    value = str(value).strip()
    return value or None


def _maybe_int(value: Any) -> Optional[int]:
    value = _clean(value)
    if value is None:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


def normalize_abbreviation(value: str) -> str:
    abbreviation = value.strip().upper()
    return TEAM_ABBREVIATION_ALIASES.get(abbreviation, abbreviation)


def _read_frame(source, header: str, **kwargs) -> pd.DataFrame:
    sep = "\t" if "\t" in header else ","
    return pd.read_csv(source, sep=sep, dtype=str, keep_default_na=False, **kwargs)


def parse_csv(text: str) -> pd.DataFrame:
    """Parse CSV (or TSV) text with a header row. Every column is read as str."""
    text = text.lstrip("\ufeff")
    return _read_frame(io.StringIO(text), text.split("\n", 1)[0])


def read_csv(path: Path) -> pd.DataFrame:
    """Read a CSV (or TSV) file from disk. Every column is read as str."""
    with open(path, encoding="utf-8-sig") as handle:
        header = handle.readline()
    return _read_frame(path, header, encoding="utf-8-sig")


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(OSError),
    reraise=True
)
def download_weekly_roster(season: int) -> pd.DataFrame:
    """
    Download the nflverse weekly roster for a season.

    Raises:
        RuntimeError: If nfl_data_py is not installed
        OSError: On network errors after retries
    """
    if nfl is None:
        raise RuntimeError("nfl_data_py is not installed; pip install 'team-roll-draft-api[nfl]'")

    logger.info(f"Downloading nflverse weekly roster for {season}")
    return nfl.import_weekly_rosters([season])


def standardize_roster(frame: pd.DataFrame) -> pd.DataFrame:
    """Rename nfl_data_py columns to roster file names and check the required ones."""
    rename = {
        source: target
        for source, target in ROSTER_COLUMN_ALIASES.items()
        if source in frame.columns and target not in frame.columns
    }
    frame = frame.rename(columns=rename)

    missing = [c for c in ("gsis_id", "full_name", "position", "team") if c not in frame.columns]
    if missing:
        raise ValueError(f"Roster is missing columns: {', '.join(missing)}")
    return frame


class ReferenceDataLoader:
    """Upsert teams, coaches and rosters. The caller commits."""

    def __init__(self, db: Session):
        self.db = db
        self.teams = TeamRepository(db)
        self.coaches = CoachRepository(db)
        self.players = PlayerRepository(db)

    def load_teams(self, frame: pd.DataFrame) -> LoadReport:
        """
        Upsert teams. Columns: abbreviation (or abbr), name, logo_url.
        """
        report = LoadReport()
        now = _utcnow()

        for _, row in frame.iterrows():
            abbreviation = _clean(row.get("abbreviation")) or _clean(row.get("abbr"))
            name = _clean(row.get("name"))
            if not abbreviation or not name:
                report.skipped += 1
                continue

            abbreviation = normalize_abbreviation(abbreviation)
            logo_url = _clean(row.get("logo_url"))
            team = self.teams.find_by_abbreviation(abbreviation)
            if team is None:
                self.teams.create(
                    id=str(uuid.uuid4()),
                    abbreviation=abbreviation,
                    name=name,
                    logo_url=logo_url,
                    created_at=now,
                    updated_at=now,
                )
                report.created += 1
            else:
                team.name = name
                team.logo_url = logo_url or team.logo_url
                team.updated_at = now
                report.updated += 1

        self.db.flush()
        logger.info(f"Loaded teams: {report}")
        return report

    def load_coaches(self, frame: pd.DataFrame) -> LoadReport:
        """
        Upsert head coaches. Columns: team (abbreviation), full_name.
        """
        report = LoadReport()
        now = _utcnow()

        for _, row in frame.iterrows():
            team_abbr = _clean(row.get("team"))
            full_name = _clean(row.get("full_name"))
            if not team_abbr or not full_name:
                report.skipped += 1
                continue

            team = self.teams.find_by_abbreviation(normalize_abbreviation(team_abbr))
            if team is None:
                report.skipped += 1
                report.unknown_teams.append(team_abbr)
                continue

            existing = self.coaches.find_by_team(team.id)
            if existing:
                coach = existing[0]
                coach.full_name = full_name
                coach.updated_at = now
                report.updated += 1
            else:
                self.coaches.create(
                    id=str(uuid.uuid4()),
                    team_id=team.id,
                    full_name=full_name,
                    created_at=now,
                    updated_at=now,
                )
                report.created += 1

        self.db.flush()
        logger.info(f"Loaded coaches: {report}")
        return report

    def load_roster(self, frame: pd.DataFrame, season: int) -> LoadReport:
        """
        Upsert a season roster in nflverse weekly format.

        Accepts both the roster file columns (gsis_id, full_name) and the
        nfl_data_py ones (player_id, player_name). Rows for other seasons,
        non-fantasy positions or unknown teams are skipped. There is one row
        per player per week; the latest week of a player wins.
        """
        report = LoadReport()
        now = _utcnow()
        team_ids = {team.abbreviation: team.id for team in self.teams.find_all()}

        frame = standardize_roster(frame).copy()
        total = len(frame)
        frame["gsis_id"] = frame["gsis_id"].map(_clean)
        frame["full_name"] = frame["full_name"].map(_clean)
        frame["position"] = frame["position"].map(lambda p: (_clean(p) or "").upper())

        keep = (
            frame["gsis_id"].notna()
            & frame["full_name"].notna()
            & frame["position"].isin(sorted(PLAYER_POSITIONS))
        )
        if "season" in frame.columns:
            seasons = pd.to_numeric(frame["season"], errors="coerce")
            keep &= seasons.isna() | (seasons == season)
        frame = frame[keep]

        if "week" in frame.columns:
            frame = frame.sort_values(
                "week",
                key=lambda weeks: pd.to_numeric(weeks, errors="coerce"),
                kind="stable",
                na_position="first",
            )
        frame = frame.drop_duplicates(subset="gsis_id", keep="last")
        report.skipped += total - int(keep.sum())

        for _, row in frame.iterrows():
            team_abbr = normalize_abbreviation(_clean(row.get("team")) or "")
            team_id = team_ids.get(team_abbr)
            if team_id is None:
                report.skipped += 1
                report.unknown_teams.append(team_abbr or "?")
                continue

            fields = {
                "team_id": team_id,
                "full_name": row["full_name"],
                "position": row["position"],
                "jersey_number": _maybe_int(row.get("jersey_number")),
                "status": _clean(row.get("status")),
                "headshot_url": _clean(row.get("headshot_url")),
            }

            player = self.players.find_by_gsis_id(row["gsis_id"], season)
            if player is None:
                self.players.create(gsis_id=row["gsis_id"], season=season, created_at=now, updated_at=now, **fields)
                report.created += 1
            else:
                for key, value in fields.items():
                    setattr(player, key, value)
                player.updated_at = now
                report.updated += 1

        self.db.flush()
        logger.info(f"Loaded {season} roster: {report}")
        return report
