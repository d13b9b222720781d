"""
Reference data services: loading teams, coaches and season rosters.
"""

from teamroll.services.reference.reference_loader import (
    LoadReport,
    ReferenceDataLoader,
    download_weekly_roster,
    parse_csv,
    read_csv,
    standardize_roster,
)

__all__ = [
    "LoadReport",
    "ReferenceDataLoader",
    "download_weekly_roster",
    "parse_csv",
    "read_csv",
    "standardize_roster",
]
