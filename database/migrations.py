"""
Column migrations and the data back-fill that goes with them.

A column migration adds one column (and optionally an index on it) when the
column is absent. Running it a second time is a no-op.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from database.db_utils import (
    get_column_names,
    quote_identifier,
    require_table,
    transaction,
)

logger = logging.getLogger(__name__)

TEAM_PITCHING_POSITIONS = ('TmP', 'Res')


@dataclass(frozen=True)
class ColumnMigration:
    """Add `column` to `table` with the given type/constraint definition."""
    table: str
    column: str
    definition: str
    index_name: Optional[str] = None
    index_columns: Optional[Tuple[str, ...]] = None

    def index_sql(self) -> Optional[str]:
        if not self.index_name:
            return None
        columns = ', '.join(self.index_columns or (self.column,))
        return f"CREATE INDEX IF NOT EXISTS {self.index_name} ON {self.table}({columns})"


PITCHING_STAFF_ID = ColumnMigration(
    table='rosters',
    column='pitching_staff_id',
    definition='INTEGER REFERENCES mlb_teams(id)',
    index_name='idx_rosters_pitching_staff',
)

COLUMN_MIGRATIONS: Dict[str, ColumnMigration] = {
    'pitching_staff_id': PITCHING_STAFF_ID,
}


def column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    return column in get_column_names(conn, table)


def apply_column_migration(conn: sqlite3.Connection, migration: ColumnMigration) -> bool:
    """
    Add the migration's column and index if the column is missing.

    Returns:
        bool: True if the column was added, False if it was already there
    """
    require_table(conn, migration.table)

    if column_exists(conn, migration.table, migration.column):
        logger.info(f"Column {migration.column} already exists in {migration.table} table")
        return False

    with transaction(conn):
        logger.info(f"Adding {migration.column} column to {migration.table} table...")
        conn.execute(
            f"ALTER TABLE {quote_identifier(migration.table)} "
            f"ADD COLUMN {migration.column} {migration.definition}"
        )

        index_sql = migration.index_sql()
        if index_sql:
            logger.info(f"Creating index {migration.index_name}...")
            conn.execute(index_sql)

    logger.info(f"Migration {migration.table}.{migration.column} completed successfully")
    return True


@dataclass
class PitchingStaffUpdate:
    """Outcome of matching team pitching roster entries to MLB teams."""
    candidates: int = 0
    matched: int = 0
    unmatched_names: List[str] = field(default_factory=list)

    @property
    def unmatched(self) -> int:
        return self.candidates - self.matched


def _match_team(entry_name: str, teams: List[Tuple[int, str, str]]) -> Optional[Tuple[int, str, str]]:
    """Exact short-name match first, then a substring match either way."""
    name = entry_name.lower()
    for team in teams:
        if team[2] and name == team[2].lower():
            return team
    for team in teams:
        short_name = (team[2] or '').lower()
        if short_name and (short_name in name or name in short_name):
            return team
    return None


def update_pitching_staff_ids(conn: sqlite3.Connection) -> PitchingStaffUpdate:
    """
    Fill rosters.pitching_staff_id for team pitching entries.

    Team pitching slots carry an MLB team's short name as the player name,
    e.g. "LA Dodgers". Only rows with a NULL pitching_staff_id are touched.
    """
    require_table(conn, 'mlb_teams')
    require_table(conn, 'rosters')
    result = PitchingStaffUpdate()

    teams = [tuple(row) for row in conn.execute(
        "SELECT id, name, short_name FROM mlb_teams ORDER BY id"
    ).fetchall()]
    logger.info(f"Found {len(teams)} MLB teams")
    if not teams:
        logger.warning("No MLB teams found in database; load mlb_teams first")
        return result

    placeholders = ', '.join('?' for _ in TEAM_PITCHING_POSITIONS)
    with transaction(conn):
        entries = conn.execute(f"""
            SELECT id, player_name FROM rosters
            WHERE position_code IN ({placeholders}) AND pitching_staff_id IS NULL
            ORDER BY id
        """, TEAM_PITCHING_POSITIONS).fetchall()
        result.candidates = len(entries)
        logger.info(f"Found {len(entries)} unmatched team pitching entries")

        unmatched = set()
        for entry_id, player_name in (tuple(row) for row in entries):
            team = _match_team(player_name, teams)
            if team is None:
                unmatched.add(player_name)
                continue
            conn.execute("UPDATE rosters SET pitching_staff_id = ? WHERE id = ?",
                         (team[0], entry_id))
            result.matched += 1
            logger.debug(f'Matched "{player_name}" to {team[1]} (ID: {team[0]})')

    result.unmatched_names = sorted(unmatched)
    if result.unmatched:
        logger.warning(f"{result.unmatched} team pitching entries could not be matched")
    return result
