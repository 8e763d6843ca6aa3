"""
CLI Utilities Module.

Common utility functions for CLI tools.
"""

import json
import logging
from pathlib import Path
from typing import Any, List

logger = logging.getLogger(__name__)


def validate_input_path(input_path: str) -> bool:
    """
    Validate that an input file exists.

    Args:
        input_path: Path to the items file.

    Returns:
        True if valid, False otherwise.
    """
    path = Path(input_path)

    if not path.is_file():
        logger.error(f"Input file not found: {input_path}")
        return False

    return True


def load_items_file(input_path: str) -> List[Any]:
    """
    Reads item records from a JSON file.

    The file holds either a list of records or an object with an
    ``items`` list.

    Args:
        input_path: Path to the JSON file.

    Returns:
        List of raw item records. Validation happens during lane packing.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or holds no item list.
    """
    with open(input_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        raise ValueError(f"{input_path} does not contain a list of items")

    logger.debug(f"Loaded {len(data)} records from {input_path}")
    return data


def write_items_file(output_path: str, items: List[Any]) -> None:
    """
    Writes item records to a JSON file, creating parent directories.

    Args:
        output_path: Destination path.
        items: JSON-serializable item records.
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(items, f, indent=2)
    logger.debug(f"Wrote {len(items)} records to {output_path}")
