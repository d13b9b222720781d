"""
Pick ledger repository.

The pick ledger is the source of truth for what a run has drafted: which
slots are filled and which teams are used up.
"""
from typing import List, Set

from teamroll.models import DraftPick
from teamroll.repositories.base import BaseRepository


class PickRepository(BaseRepository[DraftPick]):
    """Repository for draft picks."""

    def __init__(self, db):
        super().__init__(DraftPick, db)

    def find_by_run(self, run_id: str) -> List[DraftPick]:
        """All picks of a run in the order they were made."""
        return (
            self.query()
            .filter(DraftPick.run_id == run_id)
            .order_by(DraftPick.created_at)
            .all()
        )

    def used_team_ids(self, run_id: str) -> Set[str]:
        rows = self.db.query(DraftPick.team_id).filter(DraftPick.run_id == run_id).all()
        return {team_id for (team_id,) in rows}

    def slot_taken(self, run_id: str, slot: str) -> bool:
        return self.exists_where(DraftPick.run_id == run_id, DraftPick.slot == slot)

    def team_taken(self, run_id: str, team_id: str) -> bool:
        return self.exists_where(DraftPick.run_id == run_id, DraftPick.team_id == team_id)

    def count_for_run(self, run_id: str) -> int:
        return self.count(DraftPick.run_id == run_id)
