"""
Controller endpoints used to list, block and unblock clients.

Controller firmware versions disagree on which paths exist and what shape
they answer with, so each operation is described as an ordered list of
candidates tried first-success-wins.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

VERIFY_PATH = "/proxy/network/integration/v1/sites"

SUCCESS_STATUS_CODES = (200, 204)


def extract_data_envelope(body: Any) -> Optional[List[Dict[str, Any]]]:
    """Return ``body["data"]`` when the body is a ``{"data": [...]}`` envelope."""
    if isinstance(body, dict) and isinstance(body.get("data"), list):
        return body["data"]
    return None


def extract_data_or_list(body: Any) -> Optional[List[Dict[str, Any]]]:
    """Accept either a ``{"data": [...]}`` envelope or a bare list."""
    records = extract_data_envelope(body)
    if records is not None:
        return records
    if isinstance(body, list):
        return body
    return None


@dataclass(frozen=True)
class ListStrategy:
    """
    A client listing endpoint and the parser for its response.

    Attributes:
        name: Short label used in log messages.
        path: Path template; ``{site}`` is substituted.
        extract: Maps a decoded body to a list of raw records, or None when
                 the body does not have a recognized shape.
    """
    name: str
    path: str
    extract: Callable[[Any], Optional[List[Dict[str, Any]]]]

    def url(self, base_url: str, site: str) -> str:
        return base_url + self.path.format(site=site)


@dataclass(frozen=True)
class ActionRequest:
    """
    One way of asking the controller to block or unblock a station.

    Attributes:
        method: HTTP method.
        path: Path template; ``{site}``, ``{mac}`` and ``{action}`` are substituted.
        with_command: Whether to send the legacy ``stamgr`` command body.
    """
    method: str
    path: str
    with_command: bool

    def url(self, base_url: str, site: str, mac: str, action: str) -> str:
        return base_url + self.path.format(site=site, mac=mac, action=action)

    def payload(self, mac: str, action: str) -> Optional[Dict[str, str]]:
        if not self.with_command:
            return None
        return {"cmd": f"{action}-sta", "mac": mac}


ALL_STATIONS = ListStrategy(
    name="all_sta",
    path="/proxy/network/api/s/{site}/stat/all_sta",
    extract=extract_data_envelope,
)

FALLBACK_STRATEGIES = [
    # currently connected
    ListStrategy("sta", "/proxy/network/api/s/{site}/stat/sta", extract_data_or_list),
    # all known clients
    ListStrategy("user", "/proxy/network/api/s/{site}/list/user", extract_data_or_list),
    ListStrategy("alluser", "/proxy/network/api/s/{site}/stat/alluser", extract_data_or_list),
]

ACTION_REQUESTS = [
    ActionRequest(
        "POST", "/proxy/network/integration/v1/sites/{site}/clients/{mac}/{action}", False),
    ActionRequest("POST", "/proxy/network/api/s/{site}/cmd/stamgr", True),
    ActionRequest("POST", "/api/s/{site}/cmd/stamgr", True),
]
