"""
Declarative table descriptors for the Fantrax store.

Each descriptor lists a table's columns, its primary key, the logical key
that must be unique, and the indexes and update trigger that depend on it.
The rebuilder, the schema applier and the column migrations all read from
here so that dependent objects are recreated from one place.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from database.db_utils import quote_identifier
from database.errors import TableNotFoundError


@dataclass(frozen=True)
class ColumnDef:
    """A single column definition."""
    name: str
    type: str
    not_null: bool = False
    default: Optional[str] = None
    constraints: str = ''

    def sql(self) -> str:
        parts = [self.name, self.type]
        if self.constraints:
            parts.append(self.constraints)
        if self.not_null:
            parts.append('NOT NULL')
        if self.default is not None:
            parts.append(f'DEFAULT {self.default}')
        return ' '.join(parts)

    @property
    def inline_primary_key(self) -> bool:
        return 'PRIMARY KEY' in self.constraints.upper()


@dataclass(frozen=True)
class IndexDef:
    """A secondary index on the table."""
    name: str
    columns: Tuple[str, ...]
    unique: bool = False

    def sql(self, table: str) -> str:
        unique = 'UNIQUE ' if self.unique else ''
        columns = ', '.join(self.columns)
        return f"CREATE {unique}INDEX IF NOT EXISTS {self.name} ON {table}({columns})"


@dataclass(frozen=True)
class TimestampTrigger:
    """AFTER UPDATE trigger that stamps the updated row."""
    name: str
    column: str = 'updated_at'

    def sql(self, table: str, key_columns: Tuple[str, ...]) -> str:
        match = ' AND '.join(f"{col} = NEW.{col}" for col in key_columns)
        return (
            f"CREATE TRIGGER IF NOT EXISTS {self.name}\n"
            f"AFTER UPDATE ON {table}\n"
            f"BEGIN\n"
            f"    UPDATE {table} SET {self.column} = CURRENT_TIMESTAMP\n"
            f"    WHERE {match};\n"
            f"END"
        )


@dataclass
class TableSchema:
    """Full description of a table and the objects that depend on it."""
    name: str
    columns: List[ColumnDef]
    primary_key: Tuple[str, ...]
    logical_key: Optional[Tuple[str, ...]] = None
    table_constraints: List[str] = field(default_factory=list)
    indexes: List[IndexDef] = field(default_factory=list)
    triggers: List[TimestampTrigger] = field(default_factory=list)

    def __post_init__(self):
        if self.logical_key is None:
            self.logical_key = self.primary_key
        names = set(self.column_names)
        missing = [col for col in self.primary_key + self.logical_key if col not in names]
        if missing:
            raise ValueError(f"{self.name}: key columns not in schema: {missing}")

    @property
    def column_names(self) -> List[str]:
        return [col.name for col in self.columns]

    def create_table_sql(self, table_name: Optional[str] = None,
                         if_not_exists: bool = False) -> str:
        """CREATE TABLE statement for this schema, optionally under another name."""
        table = quote_identifier(table_name or self.name)
        lines = [col.sql() for col in self.columns]
        if not any(col.inline_primary_key for col in self.columns):
            lines.append(f"PRIMARY KEY ({', '.join(self.primary_key)})")
        lines.extend(self.table_constraints)
        body = ',\n    '.join(lines)
        guard = 'IF NOT EXISTS ' if if_not_exists else ''
        return f"CREATE TABLE {guard}{table} (\n    {body}\n)"

    def index_statements(self) -> List[str]:
        return [index.sql(self.name) for index in self.indexes]

    def trigger_statements(self) -> List[str]:
        return [trigger.sql(self.name, self.primary_key) for trigger in self.triggers]


PLAYERS = TableSchema(
    name='players',
    columns=[
        ColumnDef('id', 'INTEGER'),
        ColumnDef('full_name', 'TEXT', not_null=True),
        ColumnDef('first_name', 'TEXT'),
        ColumnDef('last_name', 'TEXT'),
        ColumnDef('birth_date', 'DATE'),
        ColumnDef('birth_city', 'TEXT'),
        ColumnDef('birth_country', 'TEXT'),
        ColumnDef('birth_state_province', 'TEXT'),
        ColumnDef('height', 'TEXT'),
        ColumnDef('weight', 'INTEGER'),
        ColumnDef('active', 'BOOLEAN'),
        ColumnDef('team_id', 'INTEGER'),
        ColumnDef('team_name', 'TEXT'),
        ColumnDef('position_code', 'TEXT'),
        ColumnDef('position_name', 'TEXT'),
        ColumnDef('position_type', 'TEXT'),
        ColumnDef('mlb_debut_date', 'DATE'),
        ColumnDef('bat_side', 'TEXT'),      # L/R/S
        ColumnDef('pitch_hand', 'TEXT'),    # L/R
        ColumnDef('season', 'INTEGER', not_null=True),
        ColumnDef('created_at', 'TIMESTAMP', default='CURRENT_TIMESTAMP'),
        ColumnDef('updated_at', 'TIMESTAMP', default='CURRENT_TIMESTAMP'),
    ],
    primary_key=('id', 'season'),
    indexes=[
        IndexDef('idx_players_season', ('season',)),
        IndexDef('idx_players_team', ('team_id', 'season')),
        IndexDef('idx_players_name', ('full_name', 'season')),
        IndexDef('idx_players_active', ('active', 'season')),
    ],
    triggers=[TimestampTrigger('update_players_timestamp')],
)

MLB_TEAMS = TableSchema(
    name='mlb_teams',
    columns=[
        ColumnDef('id', 'INTEGER', constraints='PRIMARY KEY'),
        ColumnDef('name', 'TEXT', not_null=True),
        ColumnDef('abbreviation', 'TEXT'),
        ColumnDef('short_name', 'TEXT'),
        ColumnDef('created_at', 'TIMESTAMP', default='CURRENT_TIMESTAMP'),
        ColumnDef('updated_at', 'TIMESTAMP', default='CURRENT_TIMESTAMP'),
    ],
    primary_key=('id',),
    indexes=[
        IndexDef('idx_mlb_teams_name', ('name',)),
        IndexDef('idx_mlb_teams_abbr', ('abbreviation',)),
    ],
    triggers=[TimestampTrigger('update_mlb_teams_timestamp')],
)

# One row per roster slot per scoring period; the surrogate id stays the
# primary key and the slot columns are the logical key.
ROSTERS = TableSchema(
    name='rosters',
    columns=[
        ColumnDef('id', 'INTEGER', constraints='PRIMARY KEY AUTOINCREMENT'),
        ColumnDef('season_id', 'INTEGER', not_null=True),
        ColumnDef('team_id', 'INTEGER', not_null=True),
        ColumnDef('period_number', 'INTEGER', not_null=True),
        ColumnDef('player_id', 'INTEGER'),
        ColumnDef('position_code', 'TEXT', not_null=True),
        ColumnDef('roster_slot', 'INTEGER', not_null=True),
        ColumnDef('is_active', 'BOOLEAN', not_null=True),
        ColumnDef('player_name', 'TEXT', not_null=True),
        ColumnDef('player_name_normalized', 'TEXT'),
        ColumnDef('mlb_team', 'TEXT'),
        ColumnDef('bat_side', 'TEXT'),
        ColumnDef('fantrax_player_id', 'TEXT'),
        ColumnDef('pitching_staff_id', 'INTEGER', constraints='REFERENCES mlb_teams(id)'),
        ColumnDef('created_at', 'TIMESTAMP', default='CURRENT_TIMESTAMP'),
        ColumnDef('updated_at', 'TIMESTAMP', default='CURRENT_TIMESTAMP'),
    ],
    primary_key=('id',),
    logical_key=('season_id', 'team_id', 'period_number', 'position_code', 'roster_slot'),
    table_constraints=[
        'FOREIGN KEY (season_id) REFERENCES seasons(id)',
        'FOREIGN KEY (team_id) REFERENCES teams(id)',
        'UNIQUE (season_id, team_id, period_number, position_code, roster_slot)',
    ],
    indexes=[
        IndexDef('idx_rosters_lookup', ('season_id', 'team_id', 'period_number')),
        IndexDef('idx_rosters_player', ('player_id', 'season_id')),
        IndexDef('idx_rosters_name', ('player_name_normalized',)),
        IndexDef('idx_rosters_pitching_staff', ('pitching_staff_id',)),
    ],
    triggers=[TimestampTrigger('update_rosters_timestamp')],
)

TABLE_SCHEMAS: Dict[str, TableSchema] = {
    schema.name: schema for schema in (PLAYERS, MLB_TEAMS, ROSTERS)
}


def get_table_schema(name: str) -> TableSchema:
    """Look up a registered table descriptor by table name."""
    try:
        return TABLE_SCHEMAS[name]
    except KeyError:
        known = ', '.join(sorted(TABLE_SCHEMAS))
        raise TableNotFoundError(f"No schema registered for '{name}' (known: {known})")
