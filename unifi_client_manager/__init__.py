"""
Dashboard backend for UniFi controller clients.

This package lists the clients of a UniFi controller, lets an administrator
tag them, hide them and block or unblock their network access, and keeps the
tags and hidden/blocked state in a local store keyed by MAC address.
"""

__version__ = "0.1.0"

from .api_client import UnifiController
from .models import UnifiClient, ClientMetadata, MergedClient
from .store import ClientStore
from .service import ClientService, merge_clients, filter_clients
from .export import export_csv, export_json, to_dict_list
from .exceptions import (
    UnifiManagerError,
    UnifiConfigurationError,
    UnifiAuthenticationError,
    UnifiRetrievalError,
    UnifiOperationError,
    UnifiValidationError,
)

__all__ = [
    "UnifiController",
    "UnifiClient",
    "ClientMetadata",
    "MergedClient",
    "ClientStore",
    "ClientService",
    "merge_clients",
    "filter_clients",
    "export_csv",
    "export_json",
    "to_dict_list",
    "UnifiManagerError",
    "UnifiConfigurationError",
    "UnifiAuthenticationError",
    "UnifiRetrievalError",
    "UnifiOperationError",
    "UnifiValidationError",
]
