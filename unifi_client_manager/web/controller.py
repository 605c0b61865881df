"""Live controller endpoints: list clients and block/unblock them."""

from flask import Blueprint, jsonify

from ..exceptions import UnifiRetrievalError, UnifiValidationError
from ..logging import get_logger
from ..service import ACTIONS
from .helpers import get_service, json_body, require_mac

logger = get_logger(__name__)

controller_bp = Blueprint("controller", __name__)


@controller_bp.route("/controller", methods=["GET"])
def list_controller_clients():
    logger.info("Attempting to fetch UniFi clients...")
    try:
        clients = get_service().list_controller_clients()
    except UnifiRetrievalError as e:
        logger.error(f"UniFi API Error: {e}")
        return jsonify({"error": f"Error fetching clients: {e}"}), 500
    return jsonify([client.to_dict() for client in clients])


@controller_bp.route("/controller", methods=["POST"])
def controller_action():
    """Block or unblock a client.

    Body: ``{"action": "block" | "unblock", "mac": "..."}``
    """
    service = get_service()
    service.require_controller()

    body = json_body()
    mac = require_mac(body)
    action = body.get("action")
    if action not in ACTIONS:
        raise UnifiValidationError("Invalid action")

    service.apply_action(mac, action)
    return jsonify({"message": f"Client {mac} {action}ed successfully"})
