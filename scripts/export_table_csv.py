#!/usr/bin/env python3
"""
Export a table to CSV, or import a CSV file into a table.

Usage:
    python scripts/export_table_csv.py --table players
    python scripts/export_table_csv.py --table players --output players_2024 --subdir exports
    python scripts/export_table_csv.py --table mlb_teams --import data/mlb_teams.csv
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database_config import get_data_dir, get_database_path
from database.db_utils import DatabaseConnection
from database.table_io import fetch_records, insert_records
from utils.csv_export import read_from_csv, save_to_csv


def main():
    parser = argparse.ArgumentParser(description="Move table rows to and from CSV files")
    parser.add_argument('--db', type=Path, default=None,
                        help='Path to the SQLite database (default: from DATA_ENV)')
    parser.add_argument('--table', required=True, help='Table to export or import into')
    parser.add_argument('--output', default=None,
                        help='Output file name (default: the table name)')
    parser.add_argument('--subdir', default='', help='Subdirectory under the data directory')
    parser.add_argument('--data-dir', type=Path, default=None,
                        help='Base data directory (default: FANTRAX_DATA_DIR or data/)')
    parser.add_argument('--import', dest='import_file', type=Path, default=None,
                        help='CSV file to import instead of exporting')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        with DatabaseConnection(args.db or get_database_path()) as conn:
            if args.import_file:
                records = read_from_csv(args.import_file)
                inserted = insert_records(conn, args.table, records)
                print(f"[OK] Imported {inserted} records into {args.table}")
                return 0

            records = fetch_records(conn, args.table)

        path = save_to_csv(records, args.output or args.table, args.subdir,
                           base_dir=args.data_dir or get_data_dir())
        if path is None:
            print(f"[WARN] {args.table} is empty, nothing written")
        else:
            print(f"[OK] Exported {len(records)} records to {path}")
        return 0

    except Exception as e:
        print(f"[ERROR] CSV transfer failed for {args.table}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
