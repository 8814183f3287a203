"""
Rebuild a table so that its logical key is enforced.

The rebuild runs as one transaction:

    1. find duplicate logical keys (reported, never fatal)
    2. create <table>_new from the table descriptor
    3. copy one row per logical key (lowest rowid wins)
    4. drop the original and rename <table>_new into place
    5. recreate indexes, the update trigger and dependent views
    6. commit

Any failure rolls the whole thing back and leaves the original table as it
was. SQLite DDL is transactional, so no other observer ever sees the table
missing between the drop and the rename.

Usage:
    from database.schema_registry import PLAYERS
    from database.table_rebuilder import TableRebuilder

    with DatabaseConnection(db_path) as conn:
        result = TableRebuilder(conn, PLAYERS).rebuild()
"""

import re
import logging
import sqlite3
from dataclasses import dataclass, field
from typing import List, Tuple

from database.db_utils import (
    IsolationLevel,
    get_column_names,
    get_row_count,
    quote_identifier,
    require_table,
    transaction,
)
from database.errors import SchemaMismatchError
from database.schema_registry import TableSchema

logger = logging.getLogger(__name__)

DUPLICATE_SAMPLE_SIZE = 5


@dataclass
class DuplicateGroup:
    """One logical key that appears more than once."""
    key: Tuple
    count: int


@dataclass
class RebuildResult:
    """Summary of a completed rebuild."""
    table: str
    duplicate_groups: int = 0
    duplicate_rows: int = 0
    duplicate_sample: List[DuplicateGroup] = field(default_factory=list)
    rows_before: int = 0
    rows_copied: int = 0
    final_count: int = 0


@dataclass
class DependentObject:
    """An index, trigger or view captured from sqlite_master."""
    type: str
    name: str
    sql: str
    tbl_name: str = ''


class TableRebuilder:
    """Deduplicate a table on its logical key and swap in an enforced copy."""

    def __init__(self, conn: sqlite3.Connection, schema: TableSchema,
                 staging_suffix: str = '_new'):
        self.conn = conn
        self.schema = schema
        self.table = schema.name
        self.staging_table = f"{schema.name}{staging_suffix}"
        self.current_step = None

    def find_duplicates(self) -> List[DuplicateGroup]:
        """All logical keys with more than one row, largest groups first."""
        key_cols = ', '.join(quote_identifier(col) for col in self.schema.logical_key)
        rows = self.conn.execute(f"""
            SELECT {key_cols}, COUNT(*) AS count
            FROM {quote_identifier(self.table)}
            GROUP BY {key_cols}
            HAVING COUNT(*) > 1
            ORDER BY count DESC, {key_cols}
        """).fetchall()
        groups = []
        for row in rows:
            values = tuple(row)
            groups.append(DuplicateGroup(key=values[:-1], count=values[-1]))
        return groups

    def rebuild(self) -> RebuildResult:
        """Run the full rebuild inside a single transaction."""
        require_table(self.conn, self.table)
        result = RebuildResult(table=self.table)

        logger.info(f"Starting {self.table} table rebuild...")
        try:
            with transaction(self.conn, IsolationLevel.IMMEDIATE):
                self.current_step = 'detect duplicates'
                result.rows_before = get_row_count(self.conn, self.table)
                self._report_duplicates(result)

                self.current_step = 'check columns'
                columns = self._copyable_columns()

                self.current_step = 'create staging table'
                self._create_staging_table()

                self.current_step = 'copy unique rows'
                result.rows_copied = self._copy_unique_rows(columns)
                logger.info(f"Copied {result.rows_copied} unique records to {self.staging_table}")

                self.current_step = 'capture dependent objects'
                dependents = self._capture_dependents()

                self.current_step = 'swap tables'
                self._swap_tables(dependents)

                self.current_step = 'recreate indexes and triggers'
                self._recreate_dependents(dependents)

                self.current_step = 'commit'
        except Exception as e:
            logger.error(f"Rebuild of {self.table} failed during '{self.current_step}': {e}")
            raise

        self.current_step = None
        result.final_count = get_row_count(self.conn, self.table)
        logger.info(f"{self.table} table rebuilt with primary key "
                    f"({', '.join(self.schema.primary_key)}); {result.final_count} rows")
        return result

    def _report_duplicates(self, result: RebuildResult):
        duplicates = self.find_duplicates()
        result.duplicate_groups = len(duplicates)
        result.duplicate_rows = sum(dup.count - 1 for dup in duplicates)
        result.duplicate_sample = duplicates[:DUPLICATE_SAMPLE_SIZE]

        key_label = '+'.join(self.schema.logical_key)
        if not duplicates:
            logger.info(f"No duplicate {key_label} combinations found.")
            return

        logger.warning(f"Found {len(duplicates)} duplicate {key_label} combinations:")
        for dup in result.duplicate_sample:
            logger.warning(f"  {dict(zip(self.schema.logical_key, dup.key))}: {dup.count} entries")
        if len(duplicates) > DUPLICATE_SAMPLE_SIZE:
            logger.warning(f"  ... and {len(duplicates) - DUPLICATE_SAMPLE_SIZE} more")

    def _copyable_columns(self) -> List[str]:
        """Descriptor columns present in the live table, in descriptor order."""
        live = get_column_names(self.conn, self.table)
        unknown = [col for col in live if col not in self.schema.column_names]
        if unknown:
            raise SchemaMismatchError(
                f"{self.table} has columns missing from its schema descriptor: {unknown}"
            )

        missing = [col for col in self.schema.column_names if col not in live]
        if missing:
            logger.warning(f"{self.table} lacks columns {missing}; they will take their defaults")
        return [col for col in self.schema.column_names if col in live]

    def _create_staging_table(self):
        logger.info(f"Creating temporary {self.staging_table} table...")
        self.conn.execute(f"DROP TABLE IF EXISTS {quote_identifier(self.staging_table)}")
        self.conn.execute(self.schema.create_table_sql(self.staging_table))

    def _copy_unique_rows(self, columns: List[str]) -> int:
        logger.info("Copying unique rows to new table...")
        column_list = ', '.join(quote_identifier(col) for col in columns)
        key_cols = ', '.join(quote_identifier(col) for col in self.schema.logical_key)
        source = quote_identifier(self.table)
        cursor = self.conn.execute(f"""
            INSERT INTO {quote_identifier(self.staging_table)} ({column_list})
            SELECT {column_list}
            FROM {source}
            WHERE rowid IN (
                SELECT MIN(rowid) FROM {source} GROUP BY {key_cols}
            )
            ORDER BY rowid
        """)
        return cursor.rowcount

    def _capture_dependents(self) -> List[DependentObject]:
        """
        Indexes and triggers on the table, plus views and triggers on other
        tables whose SQL mentions it.

        Auto-created indexes (NULL sql) belong to the table constraints and
        come back with the new table.
        """
        rows = self.conn.execute("""
            SELECT type, name, tbl_name, sql FROM sqlite_master
            WHERE type IN ('index', 'trigger', 'view') AND sql IS NOT NULL
            ORDER BY CASE type WHEN 'index' THEN 0 WHEN 'trigger' THEN 1 ELSE 2 END, name
        """).fetchall()

        pattern = re.compile(rf'\b{re.escape(self.table)}\b', re.IGNORECASE)
        dependents = []
        for obj_type, name, tbl_name, sql in rows:
            if tbl_name == self.table or (obj_type != 'index' and pattern.search(sql)):
                dependents.append(DependentObject(obj_type, name, sql, tbl_name))
        return dependents

    def _external_dependents(self, dependents: List[DependentObject]) -> List[DependentObject]:
        """Views and other tables' triggers; DROP TABLE does not remove these."""
        return [obj for obj in dependents
                if obj.type == 'view' or (obj.type == 'trigger' and obj.tbl_name != self.table)]

    def _swap_tables(self, dependents: List[DependentObject]):
        # RENAME validates every view and trigger in the schema, so anything
        # referring to the table must be gone first.
        for obj in self._external_dependents(dependents):
            self.conn.execute(f"DROP {obj.type.upper()} IF EXISTS {quote_identifier(obj.name)}")

        logger.info(f"Dropping old {self.table} table...")
        self.conn.execute(f"DROP TABLE {quote_identifier(self.table)}")

        logger.info(f"Renaming {self.staging_table} to {self.table}...")
        self.conn.execute(
            f"ALTER TABLE {quote_identifier(self.staging_table)} "
            f"RENAME TO {quote_identifier(self.table)}"
        )

    def _recreate_dependents(self, dependents: List[DependentObject]):
        logger.info("Recreating indexes...")
        for statement in self.schema.index_statements():
            self.conn.execute(statement)

        logger.info("Recreating update trigger...")
        for statement in self.schema.trigger_statements():
            self.conn.execute(statement)

        declared = {index.name for index in self.schema.indexes}
        declared.update(trigger.name for trigger in self.schema.triggers)
        for obj in dependents:
            if obj.name in declared:
                continue
            logger.info(f"Recreating {obj.type} {obj.name} from its previous definition")
            self.conn.execute(obj.sql)
