"""
Move whole tables in and out as lists of dicts (for the CSV bridge).
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from database.db_utils import get_column_names, quote_identifier, require_table, transaction

logger = logging.getLogger(__name__)


def fetch_records(conn: sqlite3.Connection, table: str,
                  order_by: Optional[str] = 'rowid') -> List[Dict[str, Any]]:
    """Every row of the table as a dict keyed by column name."""
    require_table(conn, table)
    columns = get_column_names(conn, table)
    sql = f"SELECT {', '.join(quote_identifier(col) for col in columns)} FROM {quote_identifier(table)}"
    if order_by:
        sql += f" ORDER BY {order_by}"
    return [dict(zip(columns, row)) for row in conn.execute(sql).fetchall()]


def insert_records(conn: sqlite3.Connection, table: str,
                   records: List[Dict[str, Any]]) -> int:
    """
    Insert records into an existing table in one transaction.

    Keys that are not columns of the table are ignored with a warning.

    Returns:
        int: Number of rows inserted
    """
    require_table(conn, table)
    if not records:
        return 0

    live = get_column_names(conn, table)
    columns = [col for col in records[0] if col in live]
    ignored = [col for col in records[0] if col not in live]
    if ignored:
        logger.warning(f"Ignoring fields not present in {table}: {ignored}")
    if not columns:
        raise ValueError(f"No record fields match columns of {table}")

    placeholders = ', '.join('?' for _ in columns)
    sql = (f"INSERT INTO {quote_identifier(table)} "
           f"({', '.join(quote_identifier(col) for col in columns)}) VALUES ({placeholders})")

    with transaction(conn):
        conn.executemany(sql, [tuple(record.get(col) for col in columns) for record in records])

    logger.info(f"Inserted {len(records)} records into {table}")
    return len(records)
