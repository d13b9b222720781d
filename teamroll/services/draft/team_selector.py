"""
Random team selection for the roll step.

The eligible set is every team minus the teams the run has already used.
Selection is uniform over that set; prior picks only shrink it, they never
weight it.
"""
import random
from typing import Iterable, Optional, Sequence

from teamroll.services.draft.errors import NoTeamsRemaining


def eligible_team_ids(all_team_ids: Iterable[str], used_team_ids: Iterable[str]) -> list[str]:
    """Team ids not yet used by the run, keeping the input order."""
    used = set(used_team_ids)
    return [team_id for team_id in all_team_ids if team_id not in used]


def choose_team(
    all_team_ids: Sequence[str],
    used_team_ids: Iterable[str],
    rng: Optional[random.Random] = None,
) -> str:
    """
    Pick one unused team uniformly at random.

    Args:
        all_team_ids: Every team id in the league
        used_team_ids: Team ids already bound to a pick of the run
        rng: Random source; the module-level generator when omitted

    Raises:
        NoTeamsRemaining: When every team has been used
    """
    eligible = eligible_team_ids(all_team_ids, used_team_ids)
    if not eligible:
        raise NoTeamsRemaining()
    return (rng or random).choice(eligible)
