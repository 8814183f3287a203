#!/usr/bin/env python3
"""
Print a read-only diagnostic report for the database.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from config.database_config import get_database_path
from database.db_utils import DatabaseConnection
from database.diagnostics import DatabaseDiagnostics, format_report


def main():
    parser = argparse.ArgumentParser(description="Diagnose the Fantrax database")
    parser.add_argument('--db', type=Path, default=None,
                        help='Path to the SQLite database (default: from DATA_ENV)')
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        with DatabaseConnection(args.db or get_database_path()) as conn:
            report = DatabaseDiagnostics(conn).run()
    except Exception as e:
        print(f"\n[ERROR] ERROR DURING DIAGNOSTIC: {e}")
        return 1

    print(format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
