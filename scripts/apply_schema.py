#!/usr/bin/env python3
"""
Apply a table schema to the database.

Either a registered table (created with its indexes and update trigger when
missing) or an arbitrary .sql file run as a single transaction.

Usage:
    python scripts/apply_schema.py --table players
    python scripts/apply_schema.py --file rosters-schema.sql
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database_config import get_database_path
from database.db_utils import DatabaseConnection
from database.schema_registry import TABLE_SCHEMAS, get_table_schema
from database.schema_tools import apply_schema_file, apply_table_schema


def main():
    parser = argparse.ArgumentParser(description="Apply a table schema")
    parser.add_argument('--db', type=Path, default=None,
                        help='Path to the SQLite database (default: from DATA_ENV)')
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--table', choices=sorted(TABLE_SCHEMAS),
                        help='Registered table to create')
    source.add_argument('--file', type=Path, help='.sql schema file to execute')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    db_path = args.db or get_database_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with DatabaseConnection(db_path, must_exist=False) as conn:
            if args.table:
                apply_table_schema(conn, get_table_schema(args.table))
            else:
                apply_schema_file(conn, args.file)
    except Exception as e:
        print(f"[ERROR] Error applying schema: {e}")
        return 1

    print("[OK] Schema applied successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
