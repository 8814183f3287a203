"""
Shared utilities for the Fantrax maintenance scripts.
"""

from .csv_export import save_to_csv, read_from_csv

__all__ = [
    'save_to_csv',
    'read_from_csv'
]
