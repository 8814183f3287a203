#!/usr/bin/env python3
"""
Apply a named column migration to the local SQLite database.

Adds the column and its index when the column is missing; does nothing when
it is already there.

Usage:
    python scripts/apply_column_migration.py
    python scripts/apply_column_migration.py --name pitching_staff_id --db data/db/fantrax.db
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database_config import get_database_path
from database.db_utils import DatabaseConnection
from database.migrations import COLUMN_MIGRATIONS, apply_column_migration


def main():
    parser = argparse.ArgumentParser(description="Add a column to an existing table if absent")
    parser.add_argument('--db', type=Path, default=None,
                        help='Path to the SQLite database (default: from DATA_ENV)')
    parser.add_argument('--name', default='pitching_staff_id', choices=sorted(COLUMN_MIGRATIONS),
                        help='Migration to apply (default: pitching_staff_id)')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    migration = COLUMN_MIGRATIONS[args.name]
    db_path = args.db or get_database_path()

    try:
        with DatabaseConnection(db_path) as conn:
            added = apply_column_migration(conn, migration)
    except Exception as e:
        print(f"[ERROR] Error during migration: {e}")
        return 1

    if added:
        print(f"[OK] Column {migration.column} added to {migration.table}")
    else:
        print(f"[OK] {migration.table} already has {migration.column} column")
    return 0


if __name__ == "__main__":
    sys.exit(main())
