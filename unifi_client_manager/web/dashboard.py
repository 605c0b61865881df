"""Merged view endpoints used by the dashboard page."""

from flask import Blueprint, jsonify, request

from ..exceptions import UnifiValidationError
from ..service import ACTIONS
from .helpers import get_service, json_body, require_mac

dashboard_bp = Blueprint("dashboard", __name__)


def _require_bool(body, key):
    value = body.get(key)
    if not isinstance(value, bool):
        raise UnifiValidationError(f"{key} must be a boolean")
    return value


@dashboard_bp.route("/dashboard", methods=["GET"])
def get_dashboard():
    """Merged and filtered client list.

    Query params:
        view: all (default), hidden or blocked
        tag: Only clients carrying this tag
        q: Search over name, hostname, IP and MAC
    """
    payload = get_service().dashboard(
        view=request.args.get("view", "all"),
        tag=request.args.get("tag") or None,
        query=request.args.get("q") or None,
    )
    return jsonify(payload)


@dashboard_bp.route("/dashboard/block", methods=["POST"])
def set_blocked():
    body = json_body()
    mac = require_mac(body)
    saved = get_service().set_blocked(mac, _require_bool(body, "blocked"))
    return jsonify(saved.to_dict(include_mac=True))


@dashboard_bp.route("/dashboard/hide", methods=["POST"])
def set_hidden():
    body = json_body()
    mac = require_mac(body)
    saved = get_service().set_hidden(mac, _require_bool(body, "hidden"))
    return jsonify(saved.to_dict(include_mac=True))


@dashboard_bp.route("/dashboard/tags", methods=["POST", "DELETE"])
def change_tag():
    body = json_body()
    mac = require_mac(body)
    service = get_service()
    if request.method == "POST":
        saved = service.add_tag(mac, body.get("tag"))
    else:
        saved = service.remove_tag(mac, body.get("tag"))
    return jsonify(saved.to_dict(include_mac=True))


@dashboard_bp.route("/dashboard/tag-action", methods=["POST"])
def tag_action():
    """Block or unblock every client carrying a tag, one at a time."""
    body = json_body()
    action = body.get("action")
    if action not in ACTIONS:
        raise UnifiValidationError("Invalid action")
    changed = get_service().set_blocked_by_tag(body.get("tag"), action == "block")
    return jsonify({"action": action, "tag": body.get("tag"), "clients": changed})
