"""
Environment-driven settings for the dashboard server and the CLI.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .exceptions import UnifiConfigurationError
from .logging import get_logger

logger = get_logger(__name__)

DEFAULT_SITE = "default"
DEFAULT_SESSION_TIMEOUT = 3600
DEFAULT_DATABASE_URL = "sqlite:///clients.db"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class Settings:
    """
    Runtime configuration.

    Attributes:
        controller_url: Base URL of the UniFi controller, without trailing slash.
        api_key: Pre-shared API key sent as the X-API-KEY header.
        site: Controller site identifier.
        verify_ssl: Whether to verify the controller's TLS certificate.
        session_timeout: Seconds before the API key is re-verified.
        request_timeout: Optional per-request timeout in seconds.
        database_url: SQLAlchemy URL of the metadata store.
        log_level: Log level name.
        host: Interface the web server binds to.
        port: Port the web server listens on.
    """
    controller_url: Optional[str] = None
    api_key: Optional[str] = None
    site: str = DEFAULT_SITE
    verify_ssl: bool = False
    session_timeout: float = DEFAULT_SESSION_TIMEOUT
    request_timeout: Optional[float] = None
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 5000

    @property
    def controller_configured(self) -> bool:
        return bool(self.controller_url and self.api_key)


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise UnifiConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_number(name: str, value: str, cast=float):
    try:
        number = cast(value)
    except ValueError as e:
        raise UnifiConfigurationError(f"{name} must be a number, got {value!r}") from e
    if number <= 0:
        raise UnifiConfigurationError(f"{name} must be positive, got {value!r}")
    return number


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build a Settings instance from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        Settings populated from the environment, with defaults for unset values.

    Raises:
        UnifiConfigurationError: If a boolean or numeric variable cannot be parsed.
    """
    if environ is None:
        environ = os.environ

    controller_url = environ.get("UNIFI_CONTROLLER_URL", "").strip() or None
    if controller_url:
        controller_url = controller_url.rstrip("/")

    settings = Settings(
        controller_url=controller_url,
        api_key=environ.get("UNIFI_API_KEY", "").strip() or None,
        site=environ.get("UNIFI_SITE", "").strip() or DEFAULT_SITE,
        database_url=environ.get("DATABASE_URL", "").strip() or DEFAULT_DATABASE_URL,
        log_level=environ.get("LOG_LEVEL", "").strip() or "INFO",
        host=environ.get("HOST", "").strip() or "127.0.0.1",
    )

    if "UNIFI_VERIFY_SSL" in environ:
        settings.verify_ssl = _parse_bool("UNIFI_VERIFY_SSL", environ["UNIFI_VERIFY_SSL"])
    if environ.get("UNIFI_SESSION_TIMEOUT"):
        settings.session_timeout = _parse_number(
            "UNIFI_SESSION_TIMEOUT", environ["UNIFI_SESSION_TIMEOUT"])
    if environ.get("UNIFI_REQUEST_TIMEOUT"):
        settings.request_timeout = _parse_number(
            "UNIFI_REQUEST_TIMEOUT", environ["UNIFI_REQUEST_TIMEOUT"])
    if environ.get("PORT"):
        settings.port = _parse_number("PORT", environ["PORT"], cast=int)

    if not settings.controller_configured:
        logger.warning(
            f"UniFi controller not configured (url set: {bool(settings.controller_url)}, "
            f"api key set: {bool(settings.api_key)})")

    return settings
