#!/usr/bin/env python3
"""
Rebuild a table so its logical key is the enforced primary key.

Duplicate rows for the same key collapse to the row inserted first (lowest
rowid). The whole rebuild is one transaction: on any error the table is left
exactly as it was.

Usage:
    python scripts/rebuild_players_table.py
    python scripts/rebuild_players_table.py --dry-run
    python scripts/rebuild_players_table.py --table rosters --db data/db/fantrax.db
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database_config import get_database_path
from database.db_utils import DatabaseConnection, require_table
from database.schema_registry import TABLE_SCHEMAS, get_table_schema
from database.table_rebuilder import DUPLICATE_SAMPLE_SIZE, TableRebuilder


def main():
    parser = argparse.ArgumentParser(description="Rebuild a table with its logical key enforced")
    parser.add_argument('--db', type=Path, default=None,
                        help='Path to the SQLite database (default: from DATA_ENV)')
    parser.add_argument('--table', default='players', choices=sorted(TABLE_SCHEMAS),
                        help='Table to rebuild (default: players)')
    parser.add_argument('--dry-run', action='store_true',
                        help='Only report duplicate keys, change nothing')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    db_path = args.db or get_database_path()
    schema = get_table_schema(args.table)

    try:
        with DatabaseConnection(db_path) as conn:
            rebuilder = TableRebuilder(conn, schema)

            if args.dry_run:
                require_table(conn, schema.name)
                duplicates = rebuilder.find_duplicates()
                print(f"Found {len(duplicates)} duplicate "
                      f"{'+'.join(schema.logical_key)} combinations")
                for dup in duplicates[:DUPLICATE_SAMPLE_SIZE]:
                    print(f"  {dict(zip(schema.logical_key, dup.key))}: {dup.count} entries")
                return 0

            result = rebuilder.rebuild()

        print(f"\n[OK] {result.table} table rebuilt successfully with proper constraints")
        print(f"     Duplicate key groups: {result.duplicate_groups}")
        print(f"     Duplicate rows removed: {result.duplicate_rows}")
        print(f"     Rows copied: {result.rows_copied}")
        print(f"     Current {result.table} count: {result.final_count}")
        return 0

    except Exception as e:
        print(f"[ERROR] Error rebuilding {args.table} table: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
