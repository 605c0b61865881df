from typing import Any, Dict

from flask import current_app, request

from ..exceptions import UnifiValidationError
from ..service import ClientService


def get_service() -> ClientService:
    return current_app.extensions["unifi_client_manager"]


def json_body() -> Dict[str, Any]:
    """Return the request's JSON object, rejecting anything else."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise UnifiValidationError("Request body must be a JSON object")
    return body


def require_mac(body: Dict[str, Any]) -> str:
    mac = body.get("mac")
    if not isinstance(mac, str) or not mac.strip():
        raise UnifiValidationError("MAC address is required")
    return mac.strip()
