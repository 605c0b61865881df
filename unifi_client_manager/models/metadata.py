from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class ClientMetadata:
    """
    Locally owned augmentation of a client, keyed by MAC address.

    The controller knows nothing about these fields; they survive the device
    disappearing from the network.
    """
    mac: str
    tags: List[str] = field(default_factory=list)
    hidden: bool = False
    blocked: bool = False
    last_blocked_at: Optional[datetime] = None
    name: Optional[str] = None

    def to_dict(self, include_mac: bool = False) -> Dict[str, Any]:
        """
        Convert to the JSON wire form used by the dashboard.

        Args:
            include_mac: Whether to include the ``mac`` key.

        Returns:
            Dictionary with ``lastBlockedAt`` rendered as an ISO-8601 string or None.
        """
        result: Dict[str, Any] = {}
        if include_mac:
            result["mac"] = self.mac
        result.update({
            "tags": list(self.tags),
            "hidden": self.hidden,
            "blocked": self.blocked,
            "lastBlockedAt": self.last_blocked_at.isoformat() if self.last_blocked_at else None,
            "name": self.name,
        })
        return result
