"""
Repository layer for data access.

Repositories hold the query logic; services own the transaction.

Usage:
    from teamroll.repositories import RunRepository, PickRepository
    from teamroll.core.database import SessionLocal

    db = SessionLocal()
    run = RunRepository(db).find_owned(run_id, user_id)
    picks = PickRepository(db).find_by_run(run.id)
    db.close()
"""

from teamroll.repositories.base import BaseRepository

# Draft repositories
from teamroll.repositories.draft import RunRepository, RunStateRepository, PickRepository

# Reference data repositories
from teamroll.repositories.reference import TeamRepository, CoachRepository, PlayerRepository

__all__ = [
    "BaseRepository",
    "RunRepository",
    "RunStateRepository",
    "PickRepository",
    "TeamRepository",
    "CoachRepository",
    "PlayerRepository",
]
