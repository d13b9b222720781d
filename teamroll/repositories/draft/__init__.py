"""
Draft repositories: runs, run states and the pick ledger.
"""

from teamroll.repositories.draft.run_repository import RunRepository, RunStateRepository
from teamroll.repositories.draft.pick_repository import PickRepository

__all__ = [
    "RunRepository",
    "RunStateRepository",
    "PickRepository",
]
