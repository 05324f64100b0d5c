"""
HTTP clients for the hub and the config service.

The hub receives pushed tickets at ``POST {hub_url}/api/tickets/sync`` and is
asked for tenant sync types at ``GET {hub_url}/api/tenants/{id}/sync-type``.
The config service serves ``GET {config_url}/api/tenants/{id}/mapping-config``;
config changes come back through the bridge API's push endpoint rather than
a long-lived subscription.
"""

import httpx
from typing import Dict, List, Optional
import logging

from ..errors import ConfigUnavailableError, TransportError
from ..schemas.ticket import MappingConfig, Ticket
from .protocols import ConfigListener, TicketHandler


logger = logging.getLogger(__name__)


def _client(api_key: Optional[str], timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"Authorization": f"Bearer {api_key}"} if api_key else {}
    )


class HubHttpClient:
    """
    Client for pushing ticket updates to the hub over HTTP.
    """

    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout: float = 30.0):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.client = _client(api_key, timeout)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def push_update(self, ticket: Ticket) -> None:
        """Send a mapped ticket to the hub."""
        try:
            response = await self.client.post(
                f"{self.base_url}/api/tickets/sync",
                json=ticket.model_dump(mode="json"),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to push ticket {ticket.hub_id} to the hub: {e}")
            raise TransportError(f"Hub push failed: {e}") from e

    def subscribe_updates(self, adapter_id: str, handler: TicketHandler) -> None:
        """Nothing to register: the hub delivers mutations to ``POST /tickets/sync``."""
        logger.info(f"Adapter {adapter_id} subscribed to hub updates")

    async def get_sync_type(self, tenant_id: str, source: str) -> Optional[str]:
        """Ask the hub which sync type a tenant uses for ``source``."""
        try:
            response = await self.client.get(
                f"{self.base_url}/api/tenants/{tenant_id}/sync-type",
                params={"source": source},
            )
            response.raise_for_status()
            return response.json().get("sync_type")
        except httpx.HTTPError as e:
            logger.error(f"Failed to get sync type for tenant {tenant_id}: {e}")
            raise TransportError(f"Sync type lookup failed: {e}") from e


class ConfigHttpClient:
    """
    Client for retrieving tenant mapping configs over HTTP.
    """

    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout: float = 30.0):
        self.base_url = base_url.rstrip('/')
        self.client = _client(api_key, timeout)
        self.listeners: Dict[str, List[ConfigListener]] = {}

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def retrieve_config(self, tenant_id: str) -> MappingConfig:
        try:
            response = await self.client.get(
                f"{self.base_url}/api/tenants/{tenant_id}/mapping-config"
            )
            response.raise_for_status()
            return MappingConfig.model_validate(response.json())
        except httpx.HTTPError as e:
            logger.error(f"Failed to retrieve mapping config for tenant {tenant_id}: {e}")
            raise ConfigUnavailableError(tenant_id, str(e)) from e

    def subscribe_config_updates(self, tenant_id: str, on_update: ConfigListener) -> None:
        self.listeners.setdefault(tenant_id, []).append(on_update)
