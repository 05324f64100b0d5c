"""
Interfaces of the systems the bridge talks to.

The bridge only depends on these call shapes; the in-memory implementations
in ``memory`` and the HTTP clients in ``hub_http`` both satisfy them.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Protocol, runtime_checkable

from ..schemas.ticket import MappingConfig, Ticket

ConfigListener = Callable[[MappingConfig], None]
TicketHandler = Callable[[Ticket], Awaitable[Ticket]]


@runtime_checkable
class ConfigCollaborator(Protocol):
    """Source of per-tenant mapping configs."""

    async def retrieve_config(self, tenant_id: str) -> MappingConfig:
        ...

    def subscribe_config_updates(self, tenant_id: str, on_update: ConfigListener) -> None:
        ...


@runtime_checkable
class HubCollaborator(Protocol):
    """The hub side: receives pushed tickets and delivers hub mutations."""

    async def push_update(self, ticket: Ticket) -> None:
        ...

    def subscribe_updates(self, adapter_id: str, handler: TicketHandler) -> None:
        ...


@runtime_checkable
class SyncTypeGate(Protocol):
    """Tells which sync type a tenant is configured for."""

    async def get_sync_type(self, tenant_id: str, source: str) -> Optional[str]:
        ...
