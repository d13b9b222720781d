"""
Reference data repositories: teams, coaches and season rosters.
"""

from teamroll.repositories.reference.team_repository import TeamRepository, CoachRepository
from teamroll.repositories.reference.player_repository import PlayerRepository

__all__ = [
    "TeamRepository",
    "CoachRepository",
    "PlayerRepository",
]
