"""
Utility functions for the unifi_client_manager package.
"""

import math
import time
from typing import Any, Dict, Iterable, List, Optional

from .logging import get_logger

logger = get_logger(__name__)

RECENT_WINDOW_SECONDS = 30 * 24 * 60 * 60

# Epoch values at or above this are read as milliseconds. As seconds it would
# be the year 5138; as milliseconds it is March 1973.
MILLISECOND_THRESHOLD = 100_000_000_000


def normalize_mac(mac_address: str) -> str:
    """
    Normalize MAC address to lower-case colon-separated format.

    Args:
        mac_address: MAC address string in any format (with or without separators).

    Returns:
        str: MAC address with colons between each pair of characters.
    """
    mac_clean = (
        mac_address.strip().replace(":", "").replace(
            "-", "").replace(".", "").lower()
    )

    return ":".join(mac_clean[i: i + 2] for i in range(0, len(mac_clean), 2))


def to_epoch_seconds(value: Any) -> Optional[int]:
    """
    Convert a controller timestamp to whole seconds since the epoch.

    Controllers report ``last_seen`` in seconds or milliseconds depending on
    the endpoint and firmware; the unit is detected by magnitude.

    Args:
        value: Raw timestamp (int, float or numeric string).

    Returns:
        The timestamp in seconds, or None if the value is missing or not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-numeric timestamp {value!r}")
        return None

    if not math.isfinite(number):
        logger.debug(f"Ignoring non-finite timestamp {value!r}")
        return None
    if number >= MILLISECOND_THRESHOLD:
        number = number / 1000
    return int(number)


def recent_cutoff(now: Optional[float] = None) -> int:
    """Return the epoch second before which a client no longer counts as recent."""
    if now is None:
        now = time.time()
    return int(now - RECENT_WINDOW_SECONDS)


def is_recent_or_blocked(record: Dict[str, Any], cutoff: int) -> bool:
    """
    Check whether a raw client record survives the recency filter.

    Blocked clients are always kept regardless of age.
    """
    if record.get("blocked"):
        return True
    last_seen = to_epoch_seconds(record.get("last_seen"))
    return last_seen is not None and last_seen > cutoff


def dedupe_by_mac(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Collapse raw client records reported by several endpoints into one per MAC.

    A blocked occurrence replaces an earlier unblocked one, and the merged
    ``blocked`` flag is the logical OR of every occurrence for that MAC.
    Records without a MAC are dropped. MACs differing only in case or
    separators are the same client; the first-seen spelling is kept.

    Args:
        records: Raw client dictionaries, duplicates expected.

    Returns:
        One dictionary per MAC, in first-seen order.
    """
    by_mac: Dict[str, Dict[str, Any]] = {}
    for record in records:
        mac = record.get("mac")
        if not mac:
            logger.debug(f"Dropping client record without MAC: {record}")
            continue

        key = normalize_mac(str(mac))
        existing = by_mac.get(key)
        if existing is None or record.get("blocked"):
            by_mac[key] = {
                **record,
                "mac": existing["mac"] if existing else mac,
                "blocked": bool(record.get("blocked"))
                or bool(existing and existing.get("blocked")),
            }
    return list(by_mac.values())


def unique_tags(tags: Iterable[str]) -> List[str]:
    """Strip tags, drop empty ones and duplicates, keep first-seen order."""
    result: List[str] = []
    for tag in tags:
        cleaned = tag.strip()
        if cleaned and cleaned not in result:
            result.append(cleaned)
    return result
