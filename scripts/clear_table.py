#!/usr/bin/env python3
"""
Delete all rows from a table, or one season's rows.

Usage:
    python scripts/clear_table.py --table rosters
    python scripts/clear_table.py --table players --season 2024 --yes
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database_config import get_database_path
from database.db_utils import DatabaseConnection
from database.schema_tools import clear_table


def main():
    parser = argparse.ArgumentParser(description="Clear rows from a table")
    parser.add_argument('--db', type=Path, default=None,
                        help='Path to the SQLite database (default: from DATA_ENV)')
    parser.add_argument('--table', required=True, help='Table to clear')
    parser.add_argument('--season', type=int, default=None,
                        help='Only delete rows for this season')
    parser.add_argument('--yes', '-y', action='store_true', help='Skip the confirmation prompt')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    scope = f"season {args.season} rows" if args.season is not None else "ALL rows"
    if not args.yes:
        response = input(f"\nDelete {scope} from {args.table}? (yes/no): ")
        if response.lower() != 'yes':
            print("Cancelled")
            return 0

    try:
        with DatabaseConnection(args.db or get_database_path()) as conn:
            deleted = clear_table(conn, args.table, season=args.season)
    except Exception as e:
        print(f"[ERROR] Error clearing {args.table}: {e}")
        return 1

    print(f"[OK] Deleted {deleted} rows from {args.table}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
