"""
Collaborators of the bridge: the hub, the config service and the sync-type gate.
"""

from .hub_http import ConfigHttpClient, HubHttpClient
from .memory import (
    InMemoryConfigService,
    InMemoryHub,
    StaticSyncTypeGate,
    sample_mapping_config,
)
from .protocols import ConfigCollaborator, HubCollaborator, SyncTypeGate

__all__ = [
    "ConfigCollaborator",
    "ConfigHttpClient",
    "HubCollaborator",
    "HubHttpClient",
    "InMemoryConfigService",
    "InMemoryHub",
    "StaticSyncTypeGate",
    "SyncTypeGate",
    "sample_mapping_config",
]
