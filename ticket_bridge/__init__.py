"""
Ticket Sync Bridge

Bidirectional synchronization of tickets between a hub ticket system and an
external ticket system, with per-tenant mapping of status, priority and users.
"""

import importlib.metadata

__version__ = importlib.metadata.version("ticket-sync-bridge")

from .core.bridge import Bridge, build_bridge
from .core.sync_adapter import SyncAdapter
from .errors import (
    BridgeError,
    ConfigUnavailableError,
    MappingError,
    TransportError,
    ValidationError,
)
from .external.store import ExternalTicketStore
from .mapping.config_store import MappingConfigStore
from .schemas.ticket import Attachment, Comment, MappingConfig, Ticket, UserIdMapping

__all__ = [
    "Attachment",
    "Bridge",
    "BridgeError",
    "Comment",
    "ConfigUnavailableError",
    "ExternalTicketStore",
    "MappingConfig",
    "MappingConfigStore",
    "MappingError",
    "SyncAdapter",
    "Ticket",
    "TransportError",
    "UserIdMapping",
    "ValidationError",
    "build_bridge",
]
