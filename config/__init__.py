"""
Central configuration module for the Fantrax maintenance scripts.
"""

from .database_config import (
    get_database_path,
    get_data_dir,
    get_environment,
    is_test_environment,
    is_production_environment
)

__all__ = [
    'get_database_path',
    'get_data_dir',
    'get_environment',
    'is_test_environment',
    'is_production_environment'
]
