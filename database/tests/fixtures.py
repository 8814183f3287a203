"""
Shared table builders for the database tests.
"""

import os
import sqlite3
import tempfile

from database.schema_registry import PLAYERS

# The live players table never got its composite key, which is how the
# duplicates got in.
LEGACY_PLAYERS_SQL = "CREATE TABLE players (\n    {}\n)".format(
    ',\n    '.join(col.sql() for col in PLAYERS.columns)
)

LEGACY_PLAYERS_TRIGGER = """
    CREATE TRIGGER update_players_timestamp
    AFTER UPDATE ON players
    BEGIN
        UPDATE players SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
    END
"""

BASE_ROSTERS_SQL = """
    CREATE TABLE rosters (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        season_id INTEGER NOT NULL,
        team_id INTEGER NOT NULL,
        period_number INTEGER NOT NULL,
        player_id INTEGER,
        position_code TEXT NOT NULL,
        roster_slot INTEGER NOT NULL,
        is_active BOOLEAN NOT NULL,
        player_name TEXT NOT NULL,
        player_name_normalized TEXT,
        mlb_team TEXT,
        bat_side TEXT,
        fantrax_player_id TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

MLB_TEAMS_SQL = """
    CREATE TABLE mlb_teams (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        abbreviation TEXT,
        short_name TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""


def make_temp_db():
    """Create an empty temporary database file and return its path."""
    temp_db = tempfile.NamedTemporaryFile(suffix='.db', delete=False)
    temp_db.close()
    return temp_db.name


def remove_temp_db(path):
    for suffix in ('', '-journal', '-wal', '-shm'):
        if os.path.exists(path + suffix):
            os.unlink(path + suffix)


def connect(path):
    """Autocommit connection, the same mode DatabaseConnection uses."""
    return sqlite3.connect(path, isolation_level=None)


def create_legacy_players(conn):
    conn.execute(LEGACY_PLAYERS_SQL)
    for statement in PLAYERS.index_statements():
        conn.execute(statement)
    conn.execute(LEGACY_PLAYERS_TRIGGER)


def insert_player(conn, player_id, season, full_name, team_name='Angels', **extra):
    row = {'id': player_id, 'season': season, 'full_name': full_name,
           'team_name': team_name}
    row.update(extra)
    columns = ', '.join(row)
    placeholders = ', '.join('?' for _ in row)
    conn.execute(f"INSERT INTO players ({columns}) VALUES ({placeholders})",
                 tuple(row.values()))


def insert_roster_entry(conn, player_name, position_code, roster_slot=1,
                        season_id=1, team_id=1, period_number=1):
    conn.execute("""
        INSERT INTO rosters (season_id, team_id, period_number, position_code,
                             roster_slot, is_active, player_name)
        VALUES (?, ?, ?, ?, ?, 1, ?)
    """, (season_id, team_id, period_number, position_code, roster_slot, player_name))


def index_definitions(conn, table):
    """{index name: indexed columns} for explicitly created indexes."""
    names = [row[0] for row in conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = ? AND sql IS NOT NULL",
        (table,)
    ).fetchall()]
    return {
        name: tuple(info[2] for info in conn.execute(f"PRAGMA index_info({name})").fetchall())
        for name in names
    }


def trigger_names(conn, table):
    return sorted(row[0] for row in conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'trigger' AND tbl_name = ?", (table,)
    ).fetchall())
