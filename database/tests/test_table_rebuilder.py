"""
Unit tests for the TableRebuilder class.
"""

import unittest
import sqlite3
from unittest.mock import patch
from pathlib import Path
import sys

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent.parent))

from database.db_utils import get_primary_key_columns, get_row_count, table_exists
from database.errors import SchemaMismatchError, TableNotFoundError
from database.schema_registry import PLAYERS, ROSTERS
from database.table_rebuilder import TableRebuilder
from database.tests.fixtures import (
    BASE_ROSTERS_SQL,
    connect,
    create_legacy_players,
    index_definitions,
    insert_player,
    insert_roster_entry,
    make_temp_db,
    remove_temp_db,
    trigger_names,
)


class TestTableRebuilder(unittest.TestCase):
    """Test cases for TableRebuilder on the players table."""

    def setUp(self):
        self.db_path = make_temp_db()
        self.conn = connect(self.db_path)
        create_legacy_players(self.conn)

    def tearDown(self):
        self.conn.close()
        remove_temp_db(self.db_path)

    def test_concrete_duplicate_scenario(self):
        """Three rows over two keys rebuild to two rows keyed on (id, season)."""
        insert_player(self.conn, 1, 2021, 'A')
        insert_player(self.conn, 1, 2021, 'A-dup')
        insert_player(self.conn, 2, 2021, 'B')

        result = TableRebuilder(self.conn, PLAYERS).rebuild()

        self.assertEqual(result.rows_before, 3)
        self.assertEqual(result.duplicate_groups, 1)
        self.assertEqual(result.duplicate_rows, 1)
        self.assertEqual(result.duplicate_sample[0].key, (1, 2021))
        self.assertEqual(result.duplicate_sample[0].count, 2)
        self.assertEqual(result.rows_copied, 2)
        self.assertEqual(result.final_count, 2)
        self.assertEqual(get_primary_key_columns(self.conn, 'players'), ['id', 'season'])

    def test_lowest_rowid_survives(self):
        insert_player(self.conn, 1, 2021, 'First In')
        insert_player(self.conn, 1, 2021, 'Second In')
        insert_player(self.conn, 1, 2021, 'Third In')

        TableRebuilder(self.conn, PLAYERS).rebuild()

        names = [row[0] for row in self.conn.execute("SELECT full_name FROM players")]
        self.assertEqual(names, ['First In'])

    def test_rebuild_leaves_one_row_per_key(self):
        keys = set()
        for player_id in range(1, 6):
            for season in (2023, 2024):
                copies = 1 + (player_id % 3)
                for n in range(copies):
                    insert_player(self.conn, player_id, season, f"Player {player_id} #{n}")
                keys.add((player_id, season))

        result = TableRebuilder(self.conn, PLAYERS).rebuild()

        self.assertEqual(result.final_count, len(keys))
        remaining = set(self.conn.execute("SELECT id, season FROM players").fetchall())
        self.assertEqual(remaining, keys)

        with self.assertRaises(sqlite3.IntegrityError):
            insert_player(self.conn, 1, 2023, 'Another duplicate')

    def test_rebuild_without_duplicates(self):
        insert_player(self.conn, 1, 2024, 'Mike Trout')
        insert_player(self.conn, 1, 2025, 'Mike Trout')

        result = TableRebuilder(self.conn, PLAYERS).rebuild()

        self.assertEqual(result.duplicate_groups, 0)
        self.assertEqual(result.duplicate_sample, [])
        self.assertEqual(result.final_count, 2)

    def test_duplicate_sample_is_bounded(self):
        for player_id in range(1, 9):
            insert_player(self.conn, player_id, 2024, 'x')
            insert_player(self.conn, player_id, 2024, 'y')

        result = TableRebuilder(self.conn, PLAYERS).rebuild()

        self.assertEqual(result.duplicate_groups, 8)
        self.assertEqual(len(result.duplicate_sample), 5)

    def test_column_values_are_preserved(self):
        insert_player(self.conn, 545361, 2024, 'Mike Trout', team_id=108,
                      position_code='CF', bat_side='R', pitch_hand='R', weight=235)

        TableRebuilder(self.conn, PLAYERS).rebuild()

        row = self.conn.execute("""
            SELECT full_name, team_id, team_name, position_code, bat_side, weight
            FROM players WHERE id = 545361 AND season = 2024
        """).fetchone()
        self.assertEqual(row, ('Mike Trout', 108, 'Angels', 'CF', 'R', 235))

    def test_failure_during_swap_rolls_back(self):
        """Error after the original is dropped leaves the original in place."""
        insert_player(self.conn, 1, 2021, 'A')
        insert_player(self.conn, 1, 2021, 'A-dup')
        insert_player(self.conn, 2, 2021, 'B')
        indexes_before = index_definitions(self.conn, 'players')

        def drop_then_fail(dependents):
            self.conn.execute("DROP TABLE players")
            raise sqlite3.OperationalError("simulated failure during swap")

        rebuilder = TableRebuilder(self.conn, PLAYERS)
        with patch.object(rebuilder, '_swap_tables', side_effect=drop_then_fail):
            with self.assertRaises(sqlite3.OperationalError):
                rebuilder.rebuild()

        self.assertFalse(self.conn.in_transaction)
        self.assertTrue(table_exists(self.conn, 'players'))
        self.assertFalse(table_exists(self.conn, 'players_new'))
        self.assertEqual(get_row_count(self.conn, 'players'), 3)
        self.assertEqual(get_primary_key_columns(self.conn, 'players'), [])
        self.assertEqual(index_definitions(self.conn, 'players'), indexes_before)
        self.assertEqual(trigger_names(self.conn, 'players'), ['update_players_timestamp'])

    def test_failure_after_swap_rolls_back(self):
        insert_player(self.conn, 1, 2021, 'A')
        insert_player(self.conn, 1, 2021, 'A-dup')

        rebuilder = TableRebuilder(self.conn, PLAYERS)
        with patch.object(rebuilder, '_recreate_dependents',
                          side_effect=sqlite3.OperationalError("simulated index failure")):
            with self.assertRaises(sqlite3.OperationalError):
                rebuilder.rebuild()

        self.assertEqual(get_row_count(self.conn, 'players'), 2)
        self.assertEqual(get_primary_key_columns(self.conn, 'players'), [])
        self.assertEqual(rebuilder.current_step, 'recreate indexes and triggers')

    def test_indexes_and_trigger_are_recreated(self):
        self.conn.execute("CREATE INDEX idx_players_last_name ON players(last_name)")
        insert_player(self.conn, 1, 2021, 'A')
        indexes_before = index_definitions(self.conn, 'players')

        TableRebuilder(self.conn, PLAYERS).rebuild()

        self.assertEqual(index_definitions(self.conn, 'players'), indexes_before)
        self.assertIn('idx_players_last_name', indexes_before)
        self.assertEqual(trigger_names(self.conn, 'players'), ['update_players_timestamp'])

    def test_trigger_updates_timestamp_after_rebuild(self):
        insert_player(self.conn, 1, 2021, 'A', updated_at='2000-01-01 00:00:00')
        insert_player(self.conn, 1, 2022, 'A', updated_at='2000-01-01 00:00:00')

        TableRebuilder(self.conn, PLAYERS).rebuild()
        self.conn.execute("UPDATE players SET team_name = 'Dodgers' WHERE id = 1 AND season = 2021")

        rows = dict(self.conn.execute("SELECT season, updated_at FROM players").fetchall())
        self.assertNotEqual(rows[2021], '2000-01-01 00:00:00')
        self.assertEqual(rows[2022], '2000-01-01 00:00:00')

    def test_dependent_view_survives(self):
        self.conn.execute("CREATE VIEW v_active_players AS SELECT id, full_name FROM players WHERE active = 1")
        insert_player(self.conn, 1, 2021, 'A', active=1)
        insert_player(self.conn, 1, 2021, 'A-dup', active=1)

        TableRebuilder(self.conn, PLAYERS).rebuild()

        rows = self.conn.execute("SELECT id, full_name FROM v_active_players").fetchall()
        self.assertEqual(rows, [(1, 'A')])

    def test_trigger_on_other_table_survives(self):
        self.conn.execute("CREATE TABLE watchlist (player_id INTEGER)")
        self.conn.execute("CREATE TABLE watchlist_log (player_id INTEGER, full_name TEXT)")
        self.conn.execute("""
            CREATE TRIGGER log_watchlist_insert AFTER INSERT ON watchlist
            BEGIN
                INSERT INTO watchlist_log
                SELECT id, full_name FROM players WHERE id = NEW.player_id;
            END
        """)
        insert_player(self.conn, 1, 2021, 'A')
        insert_player(self.conn, 1, 2021, 'A-dup')

        result = TableRebuilder(self.conn, PLAYERS).rebuild()

        self.assertEqual(result.final_count, 1)
        self.assertEqual(trigger_names(self.conn, 'watchlist'), ['log_watchlist_insert'])
        self.conn.execute("INSERT INTO watchlist (player_id) VALUES (1)")
        self.assertEqual(self.conn.execute("SELECT * FROM watchlist_log").fetchall(), [(1, 'A')])

    def test_leftover_staging_table_is_replaced(self):
        self.conn.execute("CREATE TABLE players_new (junk TEXT)")
        insert_player(self.conn, 1, 2021, 'A')

        result = TableRebuilder(self.conn, PLAYERS).rebuild()

        self.assertEqual(result.final_count, 1)
        self.assertFalse(table_exists(self.conn, 'players_new'))

    def test_unknown_column_aborts_without_changes(self):
        self.conn.execute("ALTER TABLE players ADD COLUMN nickname TEXT")
        insert_player(self.conn, 1, 2021, 'A', nickname='Millville Meteor')
        insert_player(self.conn, 1, 2021, 'A-dup')

        with self.assertRaises(SchemaMismatchError):
            TableRebuilder(self.conn, PLAYERS).rebuild()

        self.assertEqual(get_row_count(self.conn, 'players'), 2)
        self.assertFalse(table_exists(self.conn, 'players_new'))

    def test_missing_table(self):
        self.conn.execute("DROP TABLE players")
        with self.assertRaises(TableNotFoundError):
            TableRebuilder(self.conn, PLAYERS).rebuild()

    def test_find_duplicates_orders_largest_first(self):
        insert_player(self.conn, 1, 2021, 'A')
        insert_player(self.conn, 1, 2021, 'A')
        insert_player(self.conn, 2, 2021, 'B')
        insert_player(self.conn, 2, 2021, 'B')
        insert_player(self.conn, 2, 2021, 'B')

        duplicates = TableRebuilder(self.conn, PLAYERS).find_duplicates()

        self.assertEqual([(d.key, d.count) for d in duplicates], [((2, 2021), 3), ((1, 2021), 2)])
        self.assertEqual(get_row_count(self.conn, 'players'), 5)


class TestRosterRebuild(unittest.TestCase):
    """Rebuild on a table whose logical key differs from its primary key."""

    def setUp(self):
        self.db_path = make_temp_db()
        self.conn = connect(self.db_path)
        self.conn.execute(BASE_ROSTERS_SQL)

    def tearDown(self):
        self.conn.close()
        remove_temp_db(self.db_path)

    def test_rosters_deduplicate_on_slot(self):
        insert_roster_entry(self.conn, 'Mookie Betts', 'OF', roster_slot=1)
        insert_roster_entry(self.conn, 'Mookie Betts (dup)', 'OF', roster_slot=1)
        insert_roster_entry(self.conn, 'Freddie Freeman', '1B', roster_slot=1)

        result = TableRebuilder(self.conn, ROSTERS).rebuild()

        self.assertEqual(result.duplicate_groups, 1)
        self.assertEqual(result.final_count, 2)
        rows = self.conn.execute("SELECT id, player_name FROM rosters ORDER BY id").fetchall()
        self.assertEqual(rows, [(1, 'Mookie Betts'), (3, 'Freddie Freeman')])
        self.assertEqual(get_primary_key_columns(self.conn, 'rosters'), ['id'])
        self.assertIn('idx_rosters_pitching_staff', index_definitions(self.conn, 'rosters'))

        with self.assertRaises(sqlite3.IntegrityError):
            insert_roster_entry(self.conn, 'Another', 'OF', roster_slot=1)


if __name__ == '__main__':
    unittest.main()
