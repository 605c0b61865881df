"""
Data models for clients, their local metadata and the merged dashboard view.

.. warning::
    ``UnifiClient`` is built from the UniFi Controller's **undocumented** private
    API responses. Field presence varies between controller versions and between
    the listing endpoints, so every field has a fallback chain applied by
    ``UnifiClient.from_api`` rather than being read verbatim.
"""

from .client import UnifiClient
from .metadata import ClientMetadata
from .merged import MergedClient

__all__ = [
    "UnifiClient",
    "ClientMetadata",
    "MergedClient",
]
