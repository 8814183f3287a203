"""
Read-only diagnostic report for the Fantrax store.

Lists every table with its row count and primary key, and for the players
table looks for duplicate (id, season) rows and shows the per-season
distribution. Nothing is written to the database.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from database.db_utils import (
    get_primary_key_columns,
    get_row_count,
    quote_identifier,
    table_exists,
)

logger = logging.getLogger(__name__)

PLAYERS_TABLE = 'players'
DUPLICATE_LIMIT = 10
EXAMPLES_PER_DUPLICATE = 3


@dataclass
class TableSummary:
    name: str
    row_count: int
    primary_key: List[str]


@dataclass
class DuplicatePlayer:
    player_id: Optional[int]
    season: int
    count: int
    examples: List[Dict] = field(default_factory=list)


@dataclass
class PlayersReport:
    create_sql: str
    duplicates: List[DuplicatePlayer] = field(default_factory=list)
    duplicate_groups: int = 0
    total_duplicate_rows: int = 0
    season_counts: List[tuple] = field(default_factory=list)


@dataclass
class DiagnosticReport:
    sqlite_version: str
    foreign_keys: int
    integrity: str
    tables: List[TableSummary] = field(default_factory=list)
    players: Optional[PlayersReport] = None


class DatabaseDiagnostics:
    """Collect the diagnostic report from an open connection."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _scalar(self, sql: str, params: tuple = ()):
        row = self.conn.execute(sql, params).fetchone()
        return row[0] if row else None

    def run(self) -> DiagnosticReport:
        report = DiagnosticReport(
            sqlite_version=self._scalar("SELECT sqlite_version()"),
            foreign_keys=self._scalar("PRAGMA foreign_keys"),
            integrity=self._scalar("PRAGMA integrity_check"),
        )

        tables = [row[0] for row in self.conn.execute("""
            SELECT name FROM sqlite_master
            WHERE type = 'table' AND name NOT LIKE 'sqlite_%'
            ORDER BY name
        """).fetchall()]
        logger.debug(f"Inspecting {len(tables)} tables")

        for name in tables:
            report.tables.append(TableSummary(
                name=name,
                row_count=get_row_count(self.conn, name),
                primary_key=get_primary_key_columns(self.conn, name),
            ))

        if table_exists(self.conn, PLAYERS_TABLE):
            report.players = self.inspect_players()
        return report

    def inspect_players(self) -> PlayersReport:
        """Duplicate and season checks specific to the players table."""
        players = PlayersReport(create_sql=self._scalar(
            "SELECT sql FROM sqlite_master WHERE type = 'table' AND name = ?",
            (PLAYERS_TABLE,)
        ))

        rows = self.conn.execute(f"""
            SELECT id, season, COUNT(*) AS count
            FROM {PLAYERS_TABLE}
            GROUP BY id, season
            HAVING COUNT(*) > 1
            ORDER BY count DESC, id, season
            LIMIT {DUPLICATE_LIMIT}
        """).fetchall()

        for player_id, season, count in (tuple(row) for row in rows):
            examples = self.conn.execute(f"""
                SELECT rowid, full_name, team_name
                FROM {PLAYERS_TABLE}
                WHERE id IS ? AND season = ?
                ORDER BY rowid
                LIMIT {EXAMPLES_PER_DUPLICATE}
            """, (player_id, season)).fetchall()
            players.duplicates.append(DuplicatePlayer(
                player_id=player_id,
                season=season,
                count=count,
                examples=[
                    {'rowid': ex[0], 'full_name': ex[1], 'team_name': ex[2]}
                    for ex in examples
                ],
            ))

        groups, surplus = self.conn.execute(f"""
            SELECT COUNT(*), COALESCE(SUM(dup_count) - COUNT(*), 0)
            FROM (
                SELECT COUNT(*) AS dup_count
                FROM {PLAYERS_TABLE}
                GROUP BY id, season
                HAVING COUNT(*) > 1
            )
        """).fetchone()
        players.duplicate_groups = groups
        players.total_duplicate_rows = surplus

        players.season_counts = [tuple(row) for row in self.conn.execute(f"""
            SELECT season, COUNT(*) FROM {PLAYERS_TABLE}
            GROUP BY season ORDER BY season
        """).fetchall()]
        return players


def format_report(report: DiagnosticReport) -> str:
    """Render the report as console text."""
    lines = [
        "===== DATABASE DIAGNOSTIC REPORT =====",
        f"SQLite Version: {report.sqlite_version}",
        f"Foreign Keys Enforcement: {'ON' if report.foreign_keys else 'OFF'}",
        "",
        "--- Database Integrity ---",
        f"Integrity Status: {report.integrity}",
        "",
        "--- Database Tables ---",
        f"Total Tables: {len(report.tables)}",
    ]

    for table in report.tables:
        lines.append("")
        lines.append(f"Table: {table.name} ({table.row_count} rows)")
        if table.primary_key:
            lines.append(f"  Primary Key: {', '.join(table.primary_key)}")
        else:
            lines.append("  No Primary Key defined")

        if table.name == PLAYERS_TABLE and report.players:
            lines.extend(_format_players(report.players))

    lines.append("")
    lines.append("===== DIAGNOSTIC COMPLETED =====")
    return '\n'.join(lines)


def _format_players(players: PlayersReport) -> List[str]:
    lines = ["", "  Table Definition:", f"  {players.create_sql}"]

    if players.duplicates:
        lines.append("")
        lines.append(f"  [WARN] Found {players.duplicate_groups} duplicate player+season "
                     f"combinations (showing top {DUPLICATE_LIMIT}):")
        for dup in players.duplicates:
            lines.append(f"    Player ID {dup.player_id}, Season {dup.season}: {dup.count} entries")
            lines.append("    Examples:")
            for ex in dup.examples:
                lines.append(f"      rowid: {ex['rowid']}, Name: {ex['full_name']}, "
                             f"Team: {ex['team_name']}")
        lines.append("")
        lines.append(f"  Total duplicate entries: {players.total_duplicate_rows}")
    else:
        lines.append("")
        lines.append("  [OK] No duplicate player+season combinations found")

    lines.append("")
    lines.append("  Players per season:")
    for season, count in players.season_counts:
        lines.append(f"    {season}: {count} players")
    return lines
