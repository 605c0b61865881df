import time
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from ..utils import to_epoch_seconds


@dataclass
class UnifiClient:
    """Represents a client (station) reported by the UniFi controller, in canonical shape.

    Attributes:
        _id: Controller identifier, falling back to the MAC address.
        mac: MAC address of the client.
        hostname: Hostname, falling back to the controller name or "Unknown".
        ip: IP address, falling back to the fixed IP assignment.
        is_wired: Indicates if the client is connected via wired connection.
        is_guest: Indicates if the client is a guest.
        blocked: Whether the controller reports the client as blocked.
        name: Alias set on the controller, falling back to the hostname.
        device_name: Device name, falling back to the OUI vendor or hostname.
        last_seen: Last time the client was seen, in seconds since the epoch.
        tags: Tags carried on the record; always a list.
    """
    _id: str
    mac: str
    hostname: str = "Unknown"
    ip: Optional[str] = None
    is_wired: bool = False
    is_guest: bool = False
    blocked: bool = False
    name: Optional[str] = None
    device_name: Optional[str] = None
    last_seen: int = 0
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any], now: Optional[float] = None) -> "UnifiClient":
        """
        Normalize a raw controller record.

        Args:
            data: Raw client dictionary from any listing endpoint.
            now: Epoch seconds used when the record has no last_seen value.

        Returns:
            UnifiClient with every fallback applied.
        """
        last_seen = to_epoch_seconds(data.get("last_seen"))
        if last_seen is None:
            last_seen = int(now if now is not None else time.time())

        return cls(
            _id=data.get("_id") or data.get("id") or data.get("mac"),
            mac=data.get("mac"),
            hostname=data.get("hostname") or data.get("name") or "Unknown",
            ip=data.get("ip") or data.get("fixed_ip"),
            is_wired=bool(data.get("is_wired", False)),
            is_guest=bool(data.get("is_guest", False)),
            blocked=bool(data.get("blocked")),
            name=data.get("name") or data.get("hostname"),
            device_name=data.get("device_name") or data.get("oui") or data.get("hostname"),
            last_seen=last_seen,
            tags=list(data.get("tags") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the UnifiClient to a dictionary.

        Returns:
            Dictionary representation of the client with all fields.
        """
        return asdict(self)
