"""
Central database configuration for the Fantrax maintenance scripts.

This module provides a single source of truth for the database path and the
CSV data directory, keeping the test and production stores apart.

Environment Control:
    - Set DATA_ENV=test for the test database
    - Set DATA_ENV=production for production (default)
    - Set FANTRAX_DB_PATH to point at an explicit database file
    - Set FANTRAX_DATA_DIR to change where CSV files are written
    - Values may also come from a .env file in the project root
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Database file names
PRODUCTION_DB = "fantrax.db"
TEST_DB = "fantrax_test.db"

# Default environment
DEFAULT_ENVIRONMENT = "production"
VALID_ENVIRONMENTS = ("test", "production")

# Base paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"
DATABASE_DIR = DATA_DIR / "db"

load_dotenv(BASE_DIR / ".env")


def get_environment(override=None):
    """
    Get the current environment setting.

    Args:
        override: Optional environment override ('test' or 'production')

    Returns:
        str: The environment ('test' or 'production')
    """
    if override:
        return override.lower()

    env = os.getenv('DATA_ENV', DEFAULT_ENVIRONMENT).lower()

    if env not in VALID_ENVIRONMENTS:
        print(f"Warning: Invalid DATA_ENV '{env}', using 'production'")
        return 'production'

    return env


def get_database_path(environment=None):
    """
    Get the database path for the environment.

    FANTRAX_DB_PATH wins over the environment-based default.

    Args:
        environment: Optional environment override ('test' or 'production')

    Returns:
        Path: Full path to the database file
    """
    explicit = os.getenv('FANTRAX_DB_PATH')
    if explicit:
        return Path(explicit)

    if get_environment(environment) == 'test':
        return DATABASE_DIR / TEST_DB
    return DATABASE_DIR / PRODUCTION_DB


def get_data_dir():
    """Directory that CSV exports are written under."""
    explicit = os.getenv('FANTRAX_DATA_DIR')
    if explicit:
        return Path(explicit)
    return DATA_DIR


def is_test_environment(environment=None):
    """Check if we're in the test environment."""
    return get_environment(environment) == 'test'


def is_production_environment(environment=None):
    """Check if we're in the production environment."""
    return get_environment(environment) == 'production'


if __name__ == "__main__" or os.getenv('DEBUG_CONFIG'):
    env = get_environment()
    print("Database Configuration:")
    print(f"  Current Environment: {env}")
    print(f"  Database Path: {get_database_path()}")
    print(f"  Data Directory: {get_data_dir()}")
    db_path = get_database_path()
    print(f"  Database exists: {db_path.exists()} ({db_path})")
