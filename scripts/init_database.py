#!/usr/bin/env python3
"""
Initialize database tables from SQLAlchemy models.

Creates the reference tables (teams, players, coaches) and the draft tables
(draft_runs, draft_run_states, draft_picks). Existing tables are left alone.
"""
import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import logging

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Create all database tables from models."""
    from teamroll.core.database import engine, init_db
    from teamroll.models import Base

    logger.info(f"Creating database tables on {engine.url.render_as_string(hide_password=True)}")

    init_db(bind=engine)

    logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    main()
