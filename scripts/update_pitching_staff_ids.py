#!/usr/bin/env python3
"""
Link team pitching roster entries to their MLB team.

Run after the pitching_staff_id column migration and after mlb_teams has
been loaded.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database_config import get_database_path
from database.db_utils import DatabaseConnection
from database.migrations import update_pitching_staff_ids


def main():
    parser = argparse.ArgumentParser(description="Fill rosters.pitching_staff_id from mlb_teams")
    parser.add_argument('--db', type=Path, default=None,
                        help='Path to the SQLite database (default: from DATA_ENV)')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        with DatabaseConnection(args.db or get_database_path()) as conn:
            result = update_pitching_staff_ids(conn)
    except Exception as e:
        print(f"[ERROR] Error updating pitching staff IDs: {e}")
        return 1

    print(f"\nSummary: Updated {result.matched} team pitching entries with MLB team IDs")
    if result.unmatched:
        print(f"[WARN] {result.unmatched} team pitching entries could not be matched")
        print(f"       Unmatched team names: {result.unmatched_names}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
