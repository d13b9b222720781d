"""
Player repository for season rosters.

Usage:
    repo = PlayerRepository(db)
    qbs = repo.find_for_team(team_id, season=2025, position="QB")
"""
from typing import List, Optional

from teamroll.models import Player
from teamroll.repositories.base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    """Repository for roster players."""

    def __init__(self, db):
        super().__init__(Player, db)

    def find_by_gsis_id(self, gsis_id: str, season: int) -> Optional[Player]:
        return self.where_first(Player.gsis_id == gsis_id, Player.season == season)

    def find_for_team(
        self,
        team_id: str,
        season: int,
        position: Optional[str] = None,
    ) -> List[Player]:
        """
        Players on a team's roster for a season, sorted by name.

        Args:
            team_id: Team id
            season: Roster season
            position: Optional position filter (QB, RB, WR, TE)
        """
        query = self.query().filter(Player.team_id == team_id, Player.season == season)
        if position:
            query = query.filter(Player.position == position.upper())
        return query.order_by(Player.full_name).all()
