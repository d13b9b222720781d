"""
Team and coach repositories (read-only for the draft engine).
"""
from typing import List, Optional

from teamroll.models import Coach, Team
from teamroll.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for NFL teams."""

    def __init__(self, db):
        super().__init__(Team, db)

    def find_by_abbreviation(self, abbreviation: str) -> Optional[Team]:
        return self.where_first(Team.abbreviation == abbreviation.upper())

    def all_ids(self) -> List[str]:
        """Every team id, in a stable order."""
        rows = self.db.query(Team.id).order_by(Team.abbreviation).all()
        return [team_id for (team_id,) in rows]


class CoachRepository(BaseRepository[Coach]):
    """Repository for head coaches."""

    def __init__(self, db):
        super().__init__(Coach, db)

    def find_by_team(self, team_id: str) -> List[Coach]:
        return self.query().filter(Coach.team_id == team_id).order_by(Coach.full_name).all()
