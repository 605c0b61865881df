"""Metadata endpoints: the local tags/hidden/blocked store."""

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from ..logging import get_logger
from .helpers import get_service, json_body, require_mac

logger = get_logger(__name__)

clients_bp = Blueprint("clients", __name__)


@clients_bp.route("/clients", methods=["GET"])
def get_clients():
    """Return every stored metadata record keyed by MAC."""
    try:
        metadata = get_service().store.get_all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching client data: {e}")
        return jsonify({"error": "Failed to fetch client data"}), 500
    return jsonify({mac: meta.to_dict() for mac, meta in metadata.items()})


@clients_bp.route("/clients", methods=["POST"])
def save_client():
    """Upsert metadata for one MAC.

    Body: ``{"mac": "...", "data": {"tags": [...], "hidden": bool, ...}}``
    """
    body = json_body()
    mac = require_mac(body)
    try:
        saved = get_service().store.upsert(mac, body.get("data") or {})
    except SQLAlchemyError as e:
        logger.error(f"Error saving client data: {e}")
        return jsonify({"error": "Failed to save client data"}), 500
    return jsonify(saved.to_dict(include_mac=True))
