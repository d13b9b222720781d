"""
Team Roll Draft services.

- draft_engine: the per-run state machine (start, roll, slot, pick)
- team_selector: uniform random choice of an unused team
- asset_validator: slot/asset eligibility rules
- board_service: read-only view of a run for the frontend
- errors: error kinds raised by all of the above
"""

from teamroll.services.draft.draft_engine import DraftEngine, PickOutcome, RolledTeam
from teamroll.services.draft.board_service import DraftBoardService

__all__ = [
    "DraftEngine",
    "DraftBoardService",
    "PickOutcome",
    "RolledTeam",
]
