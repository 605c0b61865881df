"""
Functions for exporting client lists to CSV and JSON.

Works with controller clients (``UnifiClient``) and merged dashboard
records (``MergedClient``) alike.
"""

import csv
import json
from typing import Any, Dict, List, Optional, TypeVar

from .models.client import UnifiClient
from .models.merged import MergedClient
from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", UnifiClient, MergedClient)

DEFAULT_CSV_FIELDS = [
    "mac",
    "name",
    "hostname",
    "ip",
    "is_wired",
    "is_guest",
    "blocked",
    "hidden",
    "last_seen",
    "lastBlockedAt",
    "tags",
]


class ClientEncoder(json.JSONEncoder):
    def default(self, obj):
        if hasattr(obj, "to_dict") and callable(getattr(obj, "to_dict")):
            return obj.to_dict()
        try:
            return super().default(obj)
        except TypeError:
            return str(obj)


def to_dict_list(items: List[T]) -> List[Dict[str, Any]]:
    """
    Convert a list of client objects to a list of dictionaries.

    Args:
        items: List of UnifiClient or MergedClient objects (plain dicts pass through)

    Returns:
        List of dictionaries in the JSON wire form
    """
    result = []

    for item in items:
        if hasattr(item, "to_dict") and callable(getattr(item, "to_dict")):
            result.append(item.to_dict())
        elif isinstance(item, dict):
            result.append(item)

    return result


def _flatten_row(d: Dict[str, Any]) -> Dict[str, Any]:
    """Render list values (such as tags) as comma-separated strings."""
    return {
        k: ", ".join(str(i) for i in v) if isinstance(v, list) else v
        for k, v in d.items()
    }


def export_csv(
    items: List[T],
    path: str,
    fields: Optional[List[str]] = None,
) -> None:
    """
    Export clients to a CSV file.

    Args:
        items: List of UnifiClient or MergedClient objects
        path: Path where the CSV file will be saved
        fields: Optional list of columns. Defaults to DEFAULT_CSV_FIELDS;
                columns missing from a record are left empty.
    """
    item_dicts = [_flatten_row(d) for d in to_dict_list(items)]
    final_fields = fields or DEFAULT_CSV_FIELDS

    with open(path, "w", newline="", encoding="utf-8") as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=final_fields, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(item_dicts)

    logger.info(f"Exported {len(item_dicts)} clients to {path}")


def export_json(items: List[T], path: str, indent: int = 2) -> None:
    """
    Export clients to a JSON file.

    Args:
        items: List of UnifiClient or MergedClient objects
        path: Path where the JSON file will be saved
        indent: Number of spaces for indentation in the JSON file (default: 2)
    """
    item_dicts = to_dict_list(items)

    with open(path, "w", encoding="utf-8") as jsonfile:
        json.dump(item_dicts, jsonfile, indent=indent, cls=ClientEncoder)

    logger.info(f"Exported {len(item_dicts)} clients to {path}")
