"""
Tenant mapping configs and the field mapper that applies them.
"""

from .config_store import MappingConfigStore
from .field_mapper import (
    map_external_to_hub,
    map_hub_to_external,
    map_priority_outbound,
    map_status_inbound,
    map_status_outbound,
    map_user_inbound,
    map_user_outbound,
)

__all__ = [
    "MappingConfigStore",
    "map_external_to_hub",
    "map_hub_to_external",
    "map_priority_outbound",
    "map_status_inbound",
    "map_status_outbound",
    "map_user_inbound",
    "map_user_outbound",
]
