"""
Error kinds raised by the Team Roll Draft engine.

Each error carries a stable ``code`` that clients switch on and the HTTP
status the API layer answers with. Raising any of them aborts the current
engine transaction; nothing is written.
"""
from typing import Optional


class DraftError(Exception):
    """Base class for every draft engine failure."""

    code = "draft_error"
    status_code = 400
    default_message = "Draft operation failed."

    def __init__(self, message: Optional[str] = None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


class NotAuthenticated(DraftError):
    code = "not_authenticated"
    status_code = 401
    default_message = "No authenticated user on the request."


class NotFound(DraftError):
    code = "not_found"
    status_code = 404
    default_message = "Run not found."


class DuplicateRun(DraftError):
    code = "duplicate_run"
    status_code = 409
    default_message = "A run already exists for this season."


class InvalidPhase(DraftError):
    code = "invalid_phase"
    status_code = 409
    default_message = "Operation not allowed in the current phase."


class InvalidSlot(DraftError):
    code = "invalid_slot"
    status_code = 422
    default_message = "Unknown roster slot."


class SlotAlreadyFilled(DraftError):
    code = "slot_already_filled"
    status_code = 409
    default_message = "This slot is already filled."


class TeamAlreadyUsed(DraftError):
    code = "team_already_used"
    status_code = 409
    default_message = "This team was already used in this run."


class NoTeamsRemaining(DraftError):
    code = "no_teams_remaining"
    status_code = 409
    default_message = "No teams left to roll."


class InvalidAsset(DraftError):
    """Asset type or reference does not fit the shape the pending slot needs."""

    code = "invalid_asset"
    status_code = 422
    default_message = "Asset does not fit the pending slot."


class AssetTeamMismatch(DraftError):
    code = "asset_team_mismatch"
    status_code = 422
    default_message = "Asset does not belong to the rolled team."


class AssetPositionMismatch(DraftError):
    code = "asset_position_mismatch"
    status_code = 422
    default_message = "Player position does not match the slot."
