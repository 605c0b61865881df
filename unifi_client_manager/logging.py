import logging
import json
from typing import Any, Dict, List, Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the appropriate name.

    Args:
        name: Optional specific logger name. If not provided, uses the package logger.

    Returns:
        A logger instance for the specified name
    """
    if name is None:
        return logging.getLogger("unifi_client_manager")
    elif name.startswith("unifi_client_manager"):
        return logging.getLogger(name)
    else:
        return logging.getLogger(f"unifi_client_manager.{name}")


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Install a stream handler on the root logger for the CLI and the web server.

    Args:
        level: Log level name (e.g. 'DEBUG') or numeric level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)
    get_logger().setLevel(level)


def log_api_response(
    logger: logging.Logger,
    url: str,
    response_data: Union[Dict[str, Any], List[Any], None],
    status_code: int,
    truncate: bool = True,
    max_length: int = 500,
):
    """
    Log API response data using the provided logger.

    Args:
        logger: Logger to use
        url: The API URL that was called.
        response_data: The decoded response body.
        status_code: HTTP status code.
        truncate: Whether to truncate large response values. Default is True.
        max_length: Maximum length for response in the log if truncated. Default is 500.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    try:
        response_str = json.dumps(response_data)
        if truncate and len(response_str) > max_length:
            response_str = response_str[:max_length] + "... [truncated]"

        logger.debug(
            f"API Response from {url} (Status: {status_code}):\n{response_str}"
        )
    except (TypeError, ValueError) as e:
        logger.debug(
            f"API Response from {url} (Status: {status_code}) - Error serializing: {e}"
        )


def summarize_blocked(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Reduce blocked client records to the fields worth logging."""
    return [
        {
            "mac": record.get("mac"),
            "name": record.get("name") or record.get("hostname"),
            "blocked": record.get("blocked"),
        }
        for record in records
        if record.get("blocked")
    ]
