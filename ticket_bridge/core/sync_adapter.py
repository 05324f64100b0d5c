"""
Sync adapter: moves tickets between the hub and the external system.

Inbound (hub -> external):
1. Validate the ticket at the boundary
2. Optionally check the tenant's sync type
3. Fetch the tenant's mapping config
4. Map fields into the external vocabulary
5. Hand the ticket to the external store, which assigns the external id
6. Return the accepted ticket to the hub

Outbound (external -> hub), invoked by the store's propagation tasks:
1. Validate the ticket at the boundary
2. Fetch the tenant's mapping config
3. Map fields into the hub vocabulary
4. Stamp the tenant id onto the ticket
5. Push the ticket to the hub

A failure in either direction aborts that single attempt and surfaces as a
BridgeError. The shared config cache and the external store are never left
half-updated: mapping always happens on a copy of the incoming ticket.
"""

from typing import Any, Awaitable, Dict, Optional, TypeVar
import asyncio
import logging

from ..data.models.events import EventSeverity, EventTypes
from ..errors import BridgeError, TransportError
from ..external.store import ExternalTicketStore
from ..mapping.config_store import MappingConfigStore
from ..mapping.field_mapper import map_external_to_hub, map_hub_to_external
from ..policy.ticket_gate import check_sync_type, validate
from ..schemas.ticket import Ticket, utc_now
from .telemetry import Telemetry


logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncAdapter:
    """
    Bridge between the hub and the external ticket store.

    The adapter owns no global state: the config store, hub collaborator and
    external store are all injected, and ``stop`` tears down every
    propagation task the store started.
    """

    source = "sync_adapter"

    def __init__(
        self,
        config_store: MappingConfigStore,
        hub: Any,
        store: ExternalTicketStore,
        adapter_id: str = "ticket-sync-bridge",
        telemetry: Optional[Telemetry] = None,
        sync_type_gate: Any = None,
        sync_type: str = "bidirectional",
        sync_timeout: Optional[float] = None,
    ):
        self.config_store = config_store
        self.hub = hub
        self.store = store
        self.adapter_id = adapter_id
        self.telemetry = telemetry or store.telemetry
        self.sync_type_gate = sync_type_gate
        self.sync_type = sync_type
        self.sync_timeout = sync_timeout

        self.is_running = False
        self.started_at = None
        self.inbound_count = 0
        self.outbound_count = 0
        self.error_count = 0
        self.last_error: Optional[str] = None

        self.store.set_update_callback(self.sync_outbound)

    async def start(self) -> None:
        """Subscribe to hub updates. Safe to call more than once."""
        if self.is_running:
            return
        logger.info(f"Starting sync adapter {self.adapter_id}")
        self.store.registry.reopen()
        self.hub.subscribe_updates(self.adapter_id, self.sync_inbound)
        self.is_running = True
        self.started_at = utc_now()
        self.telemetry.emit(EventTypes.ADAPTER_STARTED, self.source, {"adapter_id": self.adapter_id})
        logger.info("Sync adapter started successfully")

    async def stop(self) -> None:
        """
        Cancel every propagation task and wait for them to exit.

        The external store refuses new tickets until the adapter is started
        again.
        """
        logger.info(f"Stopping sync adapter {self.adapter_id}")
        await self.store.registry.drain()
        if self.is_running:
            self.telemetry.emit(EventTypes.ADAPTER_STOPPED, self.source, {"adapter_id": self.adapter_id})
        self.is_running = False
        self.started_at = None
        logger.info("Sync adapter stopped successfully")

    async def sync_inbound(self, ticket: Ticket) -> Ticket:
        """
        Forward a hub ticket to the external system.

        Args:
            ticket: Ticket as created or updated in the hub. Not modified.

        Returns:
            The accepted ticket carrying both hub and external identifiers

        Raises:
            ValidationError: The ticket is incomplete or its tenant is not
                configured for this adapter
            MappingError: A referenced user has no external mapping
            ConfigUnavailableError: The tenant's config could not be fetched
            TransportError: The external store did not accept the ticket or
                has been shut down
        """
        try:
            accepted = await self._bounded(self._sync_inbound(ticket))
        except BridgeError as e:
            self._record_error(EventTypes.INBOUND_REJECTED, ticket, e)
            logger.warning(f"Failed to sync ticket {ticket.hub_id if ticket else None} to the external system: {e}")
            raise

        self.inbound_count += 1
        return accepted

    async def sync_outbound(self, ticket: Ticket, tenant_id: str) -> None:
        """
        Push an external ticket change to the hub.

        Args:
            ticket: Ticket in external vocabulary. Mapped on a copy.
            tenant_id: Tenant the ticket belongs to

        Raises:
            BridgeError: If validation, config retrieval, mapping or the push fails
        """
        try:
            await self._bounded(self._sync_outbound(ticket, tenant_id))
        except BridgeError as e:
            self._record_error(EventTypes.OUTBOUND_FAILED, ticket, e, tenant_id)
            raise

        self.outbound_count += 1

    async def _sync_inbound(self, ticket: Ticket) -> Ticket:
        validate(ticket)
        tenant_id = ticket.customer_id

        if self.sync_type_gate is not None:
            await check_sync_type(tenant_id, self.sync_type_gate, self.adapter_id, self.sync_type)

        config = await self.config_store.get_config(tenant_id)
        external_ticket = map_hub_to_external(ticket.model_copy(deep=True), config)

        try:
            return await self.store.accept(external_ticket)
        except BridgeError:
            raise
        except Exception as e:
            raise TransportError(f"External system did not accept ticket {ticket.hub_id}: {e}") from e

    async def _sync_outbound(self, ticket: Ticket, tenant_id: str) -> None:
        validate(ticket)
        config = await self.config_store.get_config(tenant_id)

        hub_ticket = map_external_to_hub(ticket.model_copy(deep=True), config)
        hub_ticket.customer_id = tenant_id

        try:
            await self.hub.push_update(hub_ticket)
        except BridgeError:
            raise
        except Exception as e:
            raise TransportError(f"Hub did not accept ticket {hub_ticket.hub_id}: {e}") from e

        self.telemetry.emit(
            EventTypes.TICKET_PUSHED,
            self.source,
            {"status": hub_ticket.status, "priority": hub_ticket.priority},
            ticket_id=hub_ticket.external_id,
            tenant_id=tenant_id,
        )

    async def _bounded(self, coro: Awaitable[T]) -> T:
        if self.sync_timeout is None:
            return await coro
        try:
            return await asyncio.wait_for(coro, timeout=self.sync_timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Sync did not complete within {self.sync_timeout}s", code="SYNC_TIMEOUT"
            ) from e

    def _record_error(
        self,
        event_type: str,
        ticket: Optional[Ticket],
        error: BridgeError,
        tenant_id: Optional[str] = None,
    ) -> None:
        self.error_count += 1
        self.last_error = str(error)
        self.telemetry.emit(
            event_type,
            self.source,
            error.to_dict(),
            severity=EventSeverity.WARNING,
            ticket_id=(ticket.external_id or ticket.hub_id) if ticket else None,
            tenant_id=tenant_id or (ticket.customer_id if ticket else None),
        )

    def get_status(self) -> Dict[str, Any]:
        """Get the current status of the adapter."""
        uptime = None
        if self.started_at:
            uptime = (utc_now() - self.started_at).total_seconds()

        return {
            "adapter_id": self.adapter_id,
            "is_running": self.is_running,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "uptime_seconds": uptime,
            "tickets": len(self.store),
            "propagation_tasks": len(self.store.registry),
            "cached_tenants": self.config_store.cached_tenants(),
            "inbound_count": self.inbound_count,
            "outbound_count": self.outbound_count,
            "error_count": self.error_count,
            "last_error": self.last_error,
            "timestamp": utc_now().isoformat(),
        }
