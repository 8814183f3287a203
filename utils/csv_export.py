"""
CSV import/export helpers.

Records are lists of flat dicts. Files are UTF-8 with a header row. The
base directory is always passed in (or taken from config at call time);
nothing is created at import time.
"""

import re
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from config.database_config import get_data_dir

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r'^[-+]?\d+$')
_FLOAT_PATTERN = re.compile(r'^[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$')


def save_to_csv(records: Optional[Iterable[Dict[str, Any]]], filename: str,
                subdirectory: str = '',
                base_dir: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Save records to a CSV file.

    Args:
        records: Dicts sharing the same keys; the first record sets column order
        filename: File name, '.csv' is appended when missing
        subdirectory: Optional subdirectory within the base directory
        base_dir: Base directory, defaults to config.get_data_dir()

    Returns:
        Path to the saved file, or None when there was nothing to save
    """
    records = list(records or [])
    if not records:
        logger.info(f"No data to save for {filename}")
        return None

    dir_path = Path(base_dir) if base_dir is not None else get_data_dir()
    if subdirectory:
        dir_path = dir_path / subdirectory

    if not filename.endswith('.csv'):
        filename = f"{filename}.csv"
    file_path = dir_path / filename

    try:
        dir_path.mkdir(parents=True, exist_ok=True)
        # object dtype keeps ints as ints when a column also holds None
        df = pd.DataFrame(records, dtype=object)
        df.to_csv(file_path, index=False, encoding='utf-8', lineterminator='\n')
    except Exception as e:
        logger.error(f"Error saving CSV file {filename}: {e}")
        raise

    logger.info(f"Data saved to {file_path}")
    return file_path


def _convert_cell(value: str) -> Any:
    """Type one CSV cell: empty -> None, true/false -> bool, numbers -> int/float."""
    if value == '':
        return None
    lowered = value.lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    if _INT_PATTERN.match(value):
        return int(value)
    if _FLOAT_PATTERN.match(value):
        return float(value)
    return value


def read_from_csv(file_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read a CSV file with a header row into a list of dicts.

    Every cell is read as text and typed on its own, so a column mixing
    numbers and text keeps both. Strings such as 'NA' or 'null' stay
    strings; blank lines are skipped and only empty cells become None.
    """
    try:
        df = pd.read_csv(file_path, encoding='utf-8', dtype=str,
                         keep_default_na=False, skip_blank_lines=True)
    except Exception as e:
        logger.error(f"Error reading CSV file {file_path}: {e}")
        raise

    return [
        {column: _convert_cell(value) for column, value in record.items()}
        for record in df.to_dict(orient='records')
    ]
