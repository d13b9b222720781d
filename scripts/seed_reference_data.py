#!/usr/bin/env python3
"""
Seed the reference data the draft rolls over: teams, head coaches and a
season roster.

Teams and coaches are read from data/teams.csv and data/coaches.csv. The
roster is either a local nflverse weekly roster CSV or downloaded for the
season through nfl_data_py. Every load is an upsert, so the script can be re-run
after roster moves.

Usage:
    # Teams + coaches + download the 2025 roster
    python scripts/seed_reference_data.py --season 2025 --download-roster

    # Use a roster file already on disk
    python scripts/seed_reference_data.py --season 2025 --roster roster_2025.csv

    # Teams and coaches only
    python scripts/seed_reference_data.py --skip-roster
"""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from teamroll.core.config import settings
from teamroll.core.database import SessionLocal
from teamroll.services.reference import (
    ReferenceDataLoader,
    download_weekly_roster,
    read_csv,
)

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DATA_DIR = PROJECT_ROOT / "data"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Seed teams, coaches and a season roster")
    parser.add_argument(
        "--season",
        type=int,
        default=settings.DEFAULT_SEASON,
        help=f"Roster season (default: {settings.DEFAULT_SEASON})"
    )
    parser.add_argument(
        "--teams",
        type=Path,
        default=DATA_DIR / "teams.csv",
        help="Teams CSV (abbreviation,name,logo_url)"
    )
    parser.add_argument(
        "--coaches",
        type=Path,
        default=DATA_DIR / "coaches.csv",
        help="Head coaches CSV (team,full_name)"
    )
    roster = parser.add_mutually_exclusive_group()
    roster.add_argument(
        "--roster",
        type=Path,
        help="nflverse roster CSV on disk"
    )
    roster.add_argument(
        "--download-roster",
        action="store_true",
        help="Download the season roster through nfl_data_py"
    )
    roster.add_argument(
        "--skip-roster",
        action="store_true",
        help="Only load teams and coaches"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    db = SessionLocal()

    try:
        loader = ReferenceDataLoader(db)
        loader.load_teams(read_csv(args.teams))
        loader.load_coaches(read_csv(args.coaches))

        if args.roster:
            loader.load_roster(read_csv(args.roster), season=args.season)
        elif args.download_roster:
            loader.load_roster(download_weekly_roster(args.season), season=args.season)
        elif not args.skip_roster:
            logger.warning("No roster given; pass --roster, --download-roster or --skip-roster")

        db.commit()
        logger.info("Reference data seeded")
        return 0
    except Exception as e:
        db.rollback()
        logger.error(f"Seeding failed: {e}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
