"""
Apply table schemas and clear tables.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional, Union

from database.db_utils import (
    get_column_names,
    get_row_count,
    quote_identifier,
    require_table,
    transaction,
)
from database.schema_registry import TableSchema

logger = logging.getLogger(__name__)


def apply_schema_file(conn: sqlite3.Connection, schema_path: Union[str, Path]):
    """
    Execute a .sql schema file as one transaction.

    executescript() commits any open transaction before it runs, so the
    BEGIN/COMMIT pair goes into the script itself.
    """
    schema_path = Path(schema_path)
    logger.info(f"Applying schema file: {schema_path}")
    schema_sql = schema_path.read_text(encoding='utf-8')

    try:
        conn.executescript(f"BEGIN TRANSACTION;\n{schema_sql}\n;COMMIT;")
    except sqlite3.Error as e:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        logger.error(f"Error applying schema {schema_path.name}: {e}")
        raise
    logger.info(f"Schema {schema_path.name} applied successfully")


def apply_table_schema(conn: sqlite3.Connection, schema: TableSchema):
    """Create the table, its indexes and its update trigger if missing."""
    with transaction(conn):
        conn.execute(schema.create_table_sql(if_not_exists=True))
        for statement in schema.index_statements():
            conn.execute(statement)
        for statement in schema.trigger_statements():
            conn.execute(statement)
    logger.info(f"{schema.name} schema applied successfully")


def clear_table(conn: sqlite3.Connection, table: str, season: Optional[int] = None) -> int:
    """
    Delete every row in the table, or only one season's rows.

    Returns:
        int: Number of rows deleted
    """
    require_table(conn, table)
    where, params = None, ()
    if season is not None:
        if 'season' not in get_column_names(conn, table):
            raise ValueError(f"{table} has no season column to filter on")
        where, params = "season = ?", (season,)

    before = get_row_count(conn, table)
    logger.info(f"Current {table} record count: {before}")

    with transaction(conn):
        sql = f"DELETE FROM {quote_identifier(table)}"
        if where:
            sql += f" WHERE {where}"
        deleted = conn.execute(sql, params).rowcount

    after = get_row_count(conn, table)
    logger.info(f"Deleted {deleted} rows from {table}; {after} remain")
    return deleted
