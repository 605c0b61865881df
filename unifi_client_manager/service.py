"""
Dashboard operations combining live controller state with local metadata.
"""

import time
from typing import Dict, Iterable, List, Optional

from .api_client import UnifiController
from .exceptions import UnifiConfigurationError, UnifiValidationError
from .logging import get_logger
from .models import ClientMetadata, MergedClient, UnifiClient
from .store import ClientStore
from .utils import normalize_mac, recent_cutoff

logger = get_logger(__name__)

VIEWS = ("all", "hidden", "blocked")
ACTIONS = ("block", "unblock")


def merge_clients(
    clients: Iterable[UnifiClient],
    metadata: Dict[str, ClientMetadata],
    previous: Optional[Iterable[MergedClient]] = None,
) -> List[MergedClient]:
    """
    Merge controller clients with stored metadata.

    Args:
        clients: Normalized clients from the controller.
        metadata: Stored metadata keyed by normalized MAC.
        previous: Optional earlier merged snapshot. A client blocked there
                  stays blocked, so a block issued between two polls is not
                  lost if the controller has not caught up yet.

    Returns:
        One MergedClient per controller client, in controller order.
    """
    previously_blocked = {
        normalize_mac(c.mac) for c in (previous or []) if c.blocked
    }

    merged = []
    for client in clients:
        key = normalize_mac(client.mac)
        entry = MergedClient.from_sources(client, metadata.get(key))
        if key in previously_blocked:
            entry.blocked = True
        merged.append(entry)
    return merged


def filter_clients(
    clients: Iterable[MergedClient],
    view: str = "all",
    tag: Optional[str] = None,
    query: Optional[str] = None,
    now: Optional[float] = None,
) -> List[MergedClient]:
    """
    Apply the dashboard's search box and view selection.

    The search matches name, hostname, IP and MAC case-insensitively. The
    ``blocked`` and ``hidden`` views show only those clients; a tag shows the
    clients carrying it; the default view hides hidden clients and anything
    neither blocked nor seen in the last 30 days.

    Raises:
        UnifiValidationError: If ``view`` is not one of ``all``, ``hidden``, ``blocked``.
    """
    if view not in VIEWS:
        raise UnifiValidationError(f"Invalid view: {view}")

    cutoff = recent_cutoff(now)
    needle = query.strip().lower() if query else ""

    result = []
    for client in clients:
        if needle:
            haystack = (client.name, client.hostname, client.ip, client.mac)
            if not any(needle in (value or "").lower() for value in haystack):
                continue

        if view == "blocked":
            keep = client.blocked
        elif view == "hidden":
            keep = client.hidden
        elif tag:
            keep = tag in client.tags
        else:
            keep = not client.hidden and (client.blocked or client.last_seen > cutoff)

        if keep:
            result.append(client)
    return result


def tag_counts(clients: Iterable[MergedClient]) -> Dict[str, int]:
    """Count clients per tag, in first-seen tag order."""
    counts: Dict[str, int] = {}
    for client in clients:
        for tag in client.tags:
            counts[tag] = counts.get(tag, 0) + 1
    return counts


class ClientService:
    """
    Operations behind the dashboard.

    Args:
        controller: Controller client, or None when the controller is not configured.
        store: Metadata store.
    """

    def __init__(self, controller: Optional[UnifiController], store: ClientStore):
        self.controller = controller
        self.store = store

    def require_controller(self) -> UnifiController:
        if self.controller is None:
            raise UnifiConfigurationError("UniFi API not configured")
        return self.controller

    def list_controller_clients(self) -> List[UnifiClient]:
        return self.require_controller().list_clients()

    def merged_clients(
        self, previous: Optional[Iterable[MergedClient]] = None
    ) -> List[MergedClient]:
        """
        Merge the live controller list with stored metadata.

        The dashboard, CLI and export call this without ``previous``: blocked
        intent recorded in the store already survives between polls. Callers
        that keep their own snapshot across polls (a long-running poller, for
        instance) pass it as ``previous`` so a block seen there is kept.
        """
        clients = self.list_controller_clients()
        return merge_clients(clients, self.store.get_all(), previous)

    def dashboard(
        self,
        view: str = "all",
        tag: Optional[str] = None,
        query: Optional[str] = None,
    ) -> Dict[str, object]:
        """
        Build the dashboard payload: filtered clients, tag counts and view counts.
        """
        now = time.time()
        merged = self.merged_clients()
        visible = filter_clients(merged, view=view, tag=tag, query=query, now=now)
        return {
            "clients": [c.to_dict() for c in visible],
            "tags": tag_counts(merged),
            "counts": {
                "all": len(filter_clients(merged, now=now)),
                "hidden": sum(1 for c in merged if c.hidden),
                "blocked": sum(1 for c in merged if c.blocked),
            },
        }

    def apply_action(self, mac: str, action: str):
        """
        Block or unblock a client on the controller only.

        Raises:
            UnifiValidationError: If the MAC is missing or the action is unknown.
            UnifiConfigurationError: If no controller is configured.
        """
        if not mac:
            raise UnifiValidationError("MAC address is required")
        if action not in ACTIONS:
            raise UnifiValidationError("Invalid action")

        controller = self.require_controller()
        if action == "block":
            controller.block_client(mac)
        else:
            controller.unblock_client(mac)

    def set_blocked(self, mac: str, blocked: bool) -> ClientMetadata:
        """Change the live block state, then record the intent locally."""
        self.apply_action(mac, "block" if blocked else "unblock")
        return self.store.save_blocked_state(mac, blocked)

    def set_hidden(self, mac: str, hidden: bool) -> ClientMetadata:
        return self.store.save_hidden_state(mac, hidden)

    def add_tag(self, mac: str, tag: str) -> ClientMetadata:
        if not isinstance(tag, str) or not tag.strip():
            raise UnifiValidationError("Tag must be a non-empty string")
        current = self.store.get(mac)
        tags = list(current.tags) if current else []
        return self.store.upsert(mac, {"tags": tags + [tag.strip()]})

    def remove_tag(self, mac: str, tag: str) -> ClientMetadata:
        if not isinstance(tag, str) or not tag.strip():
            raise UnifiValidationError("Tag must be a non-empty string")
        current = self.store.get(mac)
        tags = list(current.tags) if current else []
        return self.store.upsert(mac, {"tags": [t for t in tags if t != tag.strip()]})

    def set_blocked_by_tag(self, tag: str, blocked: bool) -> List[str]:
        """
        Block or unblock every merged client carrying ``tag``, one MAC at a time.

        Only clients the controller currently reports are targeted, in
        controller order. There is no rollback: if one MAC fails, earlier ones
        stay changed and the error propagates before later ones are attempted.

        Returns:
            The MACs that were changed.
        """
        if not isinstance(tag, str) or not tag.strip():
            raise UnifiValidationError("Tag must be a non-empty string")

        tag = tag.strip()
        targets = []
        for client in self.merged_clients():
            mac = normalize_mac(client.mac)
            if tag in client.tags and mac not in targets:
                targets.append(mac)
        logger.info(
            f"{'Blocking' if blocked else 'Unblocking'} {len(targets)} clients tagged '{tag}'")

        changed = []
        for mac in targets:
            self.set_blocked(mac, blocked)
            changed.append(mac)
        return changed
