"""
Flask application serving the dashboard's JSON API.
"""

from typing import Optional

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError

from ..api_client import UnifiController
from ..config import Settings, load_settings
from ..db import create_db_engine, create_session_factory
from ..exceptions import (
    UnifiConfigurationError,
    UnifiManagerError,
    UnifiValidationError,
)
from ..logging import get_logger
from ..service import ClientService
from ..store import ClientStore
from .clients import clients_bp
from .controller import controller_bp
from .dashboard import dashboard_bp

logger = get_logger(__name__)

EXTENSION_KEY = "unifi_client_manager"


def build_service(settings: Settings) -> ClientService:
    """Wire the store and, when configured, the controller client from settings."""
    engine = create_db_engine(settings.database_url)
    store = ClientStore(create_session_factory(engine))

    controller = None
    if settings.controller_configured:
        controller = UnifiController(
            settings.controller_url,
            settings.api_key,
            site=settings.site,
            verify_ssl=settings.verify_ssl,
            session_timeout=settings.session_timeout,
            timeout=settings.request_timeout,
        )
    return ClientService(controller, store)


def create_app(
    settings: Optional[Settings] = None, service: Optional[ClientService] = None
) -> Flask:
    """
    Create the Flask application.

    Args:
        settings: Runtime settings. Loaded from the environment when omitted.
        service: Prebuilt service, mainly for tests. Built from settings when omitted.
    """
    app = Flask(__name__)

    if service is None:
        service = build_service(settings or load_settings())
    app.extensions[EXTENSION_KEY] = service

    app.register_blueprint(clients_bp)
    app.register_blueprint(controller_bp)
    app.register_blueprint(dashboard_bp)

    @app.errorhandler(UnifiValidationError)
    def handle_validation_error(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(UnifiConfigurationError)
    def handle_configuration_error(e):
        return jsonify({"error": str(e)}), 503

    @app.errorhandler(UnifiManagerError)
    def handle_manager_error(e):
        logger.error(f"UniFi API Error: {e}")
        return jsonify({"error": str(e)}), 500

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e):
        logger.error(f"Database error: {e}")
        return jsonify({"error": "Database error"}), 500

    return app
