"""
Per-tenant mapping config cache.

Configs are fetched lazily from the config collaborator on first reference
and cached until the collaborator pushes a replacement. A failed retrieval
caches nothing, so the next call retries.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from ..data.models.events import EventTypes
from ..errors import ConfigUnavailableError
from ..schemas.ticket import MappingConfig

logger = logging.getLogger(__name__)


class MappingConfigStore:
    """
    Cache of MappingConfig objects keyed by tenant id.

    The store is owned by whoever builds the bridge and is handed to the
    SyncAdapter; there is no process-wide instance.

    Concurrent misses for the same tenant share a single retrieval (one
    asyncio.Lock per tenant). Misses for different tenants proceed in
    parallel.
    """

    def __init__(self, collaborator, telemetry=None):
        self.collaborator = collaborator
        self.telemetry = telemetry
        self._configs: Dict[str, MappingConfig] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._subscribed: set = set()
        self.retrievals = 0

    async def get_config(self, tenant_id: str) -> MappingConfig:
        """Return the tenant's config, fetching it on a cache miss."""
        config = self._configs.get(tenant_id)
        if config is not None:
            return config

        lock = self._locks.setdefault(tenant_id, asyncio.Lock())
        async with lock:
            # Another caller may have filled the entry while we waited
            config = self._configs.get(tenant_id)
            if config is not None:
                return config

            self.retrievals += 1
            try:
                config = await self.collaborator.retrieve_config(tenant_id)
            except ConfigUnavailableError:
                raise
            except Exception as e:
                logger.warning(f"Failed to retrieve mapping config for tenant {tenant_id}: {e}")
                raise ConfigUnavailableError(tenant_id, str(e)) from e

            if config is None:
                raise ConfigUnavailableError(tenant_id, "no config returned")

            self._configs[tenant_id] = config
            logger.info(f"Cached mapping config for tenant {tenant_id}")
            self._subscribe(tenant_id)
            return config

    def replace_config(self, tenant_id: str, config: MappingConfig) -> None:
        """Overwrite a tenant's cached config (push path)."""
        self._configs[tenant_id] = config
        logger.info(f"Replaced mapping config for tenant {tenant_id}")
        if self.telemetry is not None:
            self.telemetry.emit(EventTypes.CONFIG_REPLACED, "config_store", tenant_id=tenant_id)

    def invalidate(self, tenant_id: str) -> Optional[MappingConfig]:
        """Drop a cached entry so the next lookup re-fetches it."""
        return self._configs.pop(tenant_id, None)

    def cached_tenants(self) -> List[str]:
        return sorted(self._configs)

    def _subscribe(self, tenant_id: str) -> None:
        if tenant_id in self._subscribed:
            return
        self._subscribed.add(tenant_id)
        self.collaborator.subscribe_config_updates(
            tenant_id, lambda config: self.replace_config(tenant_id, config)
        )
