"""
Database utility functions for transaction management and connection handling.
"""
import sqlite3
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Union

from database.errors import DatabaseNotFoundError, TableNotFoundError

# Configure logging
logger = logging.getLogger(__name__)


class IsolationLevel:
    """SQLite transaction modes accepted by BEGIN."""

    DEFERRED = "DEFERRED"      # Default - locks on first write
    IMMEDIATE = "IMMEDIATE"    # Lock immediately on transaction start
    EXCLUSIVE = "EXCLUSIVE"    # Exclusive lock for entire transaction


@contextmanager
def transaction(conn: sqlite3.Connection, mode: str = IsolationLevel.DEFERRED):
    """
    Context manager for explicit transaction management.

    Usage:
        with transaction(conn):
            conn.execute("INSERT INTO table VALUES (?)", data)
            conn.execute("UPDATE table SET col = ?", value)

    Automatically handles BEGIN, COMMIT, and ROLLBACK. SQLite DDL is
    transactional, so CREATE/DROP/ALTER statements are rolled back too.
    """
    conn.execute(f"BEGIN {mode} TRANSACTION")
    logger.debug("Transaction started")
    try:
        yield conn
        conn.execute("COMMIT")
        logger.debug("Transaction committed")
    except Exception as e:
        # SQLite may already have rolled back on its own (e.g. SQLITE_FULL)
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        logger.error(f"Transaction rolled back due to error: {e}")
        raise


class DatabaseConnection:
    """
    Scoped SQLite connection.

    The connection runs in autocommit mode so transactions are driven
    explicitly through transaction(). It is closed on every exit path.
    """

    def __init__(self, db_path: Union[str, Path], timeout: float = 5.0,
                 must_exist: bool = True):
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.must_exist = must_exist
        self.conn = None

    def __enter__(self) -> sqlite3.Connection:
        if self.must_exist and not self.db_path.exists():
            raise DatabaseNotFoundError(f"Database not found at {self.db_path}")

        logger.info(f"Opening database connection: {self.db_path}")
        self.conn = sqlite3.connect(str(self.db_path), timeout=self.timeout,
                                    isolation_level=None)
        self.conn.row_factory = sqlite3.Row
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.conn:
            if self.conn.in_transaction:
                self.conn.rollback()
            self.conn.close()
            self.conn = None
            logger.info("Database connection closed")


def quote_identifier(name: str) -> str:
    """Quote a table, column or index name for interpolation into SQL."""
    return '"' + name.replace('"', '""') + '"'


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,)
    ).fetchone()
    return row is not None


def require_table(conn: sqlite3.Connection, table: str):
    """Raise TableNotFoundError unless the table exists."""
    if not table_exists(conn, table):
        raise TableNotFoundError(f"Table '{table}' does not exist")


def get_table_info(conn: sqlite3.Connection, table: str) -> List[tuple]:
    """PRAGMA table_info rows as plain tuples (cid, name, type, notnull, dflt, pk)."""
    cursor = conn.execute(f"PRAGMA table_info({quote_identifier(table)})")
    return [tuple(row) for row in cursor.fetchall()]


def get_column_names(conn: sqlite3.Connection, table: str) -> List[str]:
    return [row[1] for row in get_table_info(conn, table)]


def get_primary_key_columns(conn: sqlite3.Connection, table: str) -> List[str]:
    """Primary key columns ordered by their position in the key."""
    pk_rows = [row for row in get_table_info(conn, table) if row[5] > 0]
    return [row[1] for row in sorted(pk_rows, key=lambda row: row[5])]


def get_row_count(conn: sqlite3.Connection, table: str,
                  where: Optional[str] = None, params: tuple = ()) -> int:
    sql = f"SELECT COUNT(*) FROM {quote_identifier(table)}"
    if where:
        sql += f" WHERE {where}"
    return conn.execute(sql, params).fetchone()[0]
