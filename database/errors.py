"""
Exceptions raised by the maintenance helpers.

sqlite3 errors raised inside a transaction are not wrapped; they propagate
unchanged after the rollback.
"""


class MaintenanceError(Exception):
    """Base class for maintenance script errors."""
    pass


class DatabaseNotFoundError(MaintenanceError):
    """The database file does not exist."""
    pass


class TableNotFoundError(MaintenanceError):
    """The target table does not exist in the database."""
    pass


class SchemaMismatchError(MaintenanceError):
    """The live table carries columns its descriptor does not know about."""
    pass
