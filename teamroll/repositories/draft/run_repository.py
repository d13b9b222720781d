"""
Run and run-state repositories.

Usage:
    runs = RunRepository(db)
    run = runs.find_owned(run_id, user_id)

    states = RunStateRepository(db)
    state = states.lock(run.id)   # SELECT ... FOR UPDATE
"""
from typing import Optional

from teamroll.models import DraftRun, DraftRunState
from teamroll.repositories.base import BaseRepository


class RunRepository(BaseRepository[DraftRun]):
    """Repository for draft runs."""

    def __init__(self, db):
        super().__init__(DraftRun, db)

    def find_owned(self, run_id: str, user_id: str) -> Optional[DraftRun]:
        """Find a run by id, but only if it belongs to the given user."""
        return self.where_first(DraftRun.id == run_id, DraftRun.user_id == user_id)

    def find_for_user_season(self, user_id: str, season: int) -> Optional[DraftRun]:
        return self.where_first(DraftRun.user_id == user_id, DraftRun.season == season)


class RunStateRepository(BaseRepository[DraftRunState]):
    """Repository for the per-run state machine row."""

    def __init__(self, db):
        super().__init__(DraftRunState, db)

    def lock(self, run_id: str) -> Optional[DraftRunState]:
        """
        Load the run state with an exclusive row lock held until the
        transaction ends.

        populate_existing() refreshes a copy already in the identity map, so
        the caller always decides on the row as it is under the lock.
        """
        return (
            self.query()
            .filter(DraftRunState.run_id == run_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
