from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .client import UnifiClient
from .metadata import ClientMetadata


@dataclass
class MergedClient:
    """
    Runtime union of a controller-reported client and its local metadata.

    ``blocked`` is true when either the controller reports the client blocked
    or the local store asserts it. ``tags`` and ``hidden`` are always defined.
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
    hidden: bool = False
    last_blocked_at: Optional[datetime] = None

    @classmethod
    def from_sources(
        cls, client: UnifiClient, metadata: Optional[ClientMetadata] = None
    ) -> "MergedClient":
        if metadata is None:
            return cls(
                _id=client._id,
                mac=client.mac,
                hostname=client.hostname,
                ip=client.ip,
                is_wired=client.is_wired,
                is_guest=client.is_guest,
                blocked=client.blocked,
                name=client.name,
                device_name=client.device_name,
                last_seen=client.last_seen,
                tags=[],
            )

        return cls(
            _id=client._id,
            mac=client.mac,
            hostname=client.hostname,
            ip=client.ip,
            is_wired=client.is_wired,
            is_guest=client.is_guest,
            blocked=client.blocked or metadata.blocked,
            name=metadata.name or client.name,
            device_name=client.device_name,
            last_seen=client.last_seen,
            tags=list(metadata.tags),
            hidden=metadata.hidden,
            last_blocked_at=metadata.last_blocked_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the MergedClient to the JSON wire form.

        Returns:
            Dictionary with ``last_blocked_at`` exposed as ``lastBlockedAt``.
        """
        result = {k: v for k, v in self.__dict__.items() if k != "last_blocked_at"}
        result["tags"] = list(self.tags)
        result["lastBlockedAt"] = (
            self.last_blocked_at.isoformat() if self.last_blocked_at else None
        )
        return result
