"""
Maintenance helpers for the Fantrax SQLite store.

Table rebuild/deduplication, column migrations, schema application and a
read-only diagnostic report.
"""

__version__ = "0.1.0"

from .db_utils import DatabaseConnection, transaction
from .errors import (
    MaintenanceError,
    DatabaseNotFoundError,
    TableNotFoundError,
    SchemaMismatchError
)
from .schema_registry import TABLE_SCHEMAS, TableSchema, get_table_schema
from .table_rebuilder import TableRebuilder, RebuildResult

__all__ = [
    "DatabaseConnection",
    "transaction",
    "MaintenanceError",
    "DatabaseNotFoundError",
    "TableNotFoundError",
    "SchemaMismatchError",
    "TABLE_SCHEMAS",
    "TableSchema",
    "get_table_schema",
    "TableRebuilder",
    "RebuildResult",
]
