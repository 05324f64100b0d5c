"""
In-memory collaborators.

These stand in for the hub and the config service when the bridge runs
without them (local development, the ``demo`` command and tests).
"""

from typing import Dict, List, Optional
import logging

from ..errors import ConfigUnavailableError, TransportError, ValidationError
from ..policy.ticket_gate import validate
from ..schemas.ticket import MappingConfig, Ticket, UserIdMapping
from .protocols import ConfigListener, TicketHandler


logger = logging.getLogger(__name__)


def sample_mapping_config() -> MappingConfig:
    """Mapping config of the sample tenant used by the demo and local runs."""
    return MappingConfig(
        ticket_source_config={
            "url": "http://instance.io",
            "api_path": "/api/ticket",
            "login": "jsmith",
        },
        # keys are hub priorities, values are external priorities
        priority_hub_to_external={
            "Critical": "10",
            "Major": "5",
            "Minor": "3",
            "Informational": "1",
        },
        # keys are external users, values are hub users
        user_external_to_hub={
            "jdoe": "john.doe@acme.com",
            "psmith": "peter.smith@acme.com",
        },
        user_hub_to_external={
            "john.doe@acme.com": UserIdMapping(external_id="jdoe", id_kind="username"),
            "peter.smith@acme.com": UserIdMapping(external_id="psmith", id_kind="username"),
        },
        status_external_to_hub={
            "New": "Open",
            "In progress": "Open",
            "On hold": "Open",
            "Canceled": "Close",
            "Resolved": "Close",
            "Closed": "Close",
        },
        status_hub_to_external={
            "Open": "In progress",
            "Close": "Closed",
            "ClosePending": "Resolved",
        },
    )


class InMemoryConfigService:
    """
    Config collaborator backed by a dict.

    Tenants without an explicit entry get ``default`` if one is set;
    otherwise retrieval fails with ConfigUnavailableError.
    """

    def __init__(
        self,
        configs: Optional[Dict[str, MappingConfig]] = None,
        default: Optional[MappingConfig] = None,
    ):
        self.configs: Dict[str, MappingConfig] = dict(configs or {})
        self.default = default
        self.listeners: Dict[str, List[ConfigListener]] = {}
        self.calls: List[str] = []

    async def retrieve_config(self, tenant_id: str) -> MappingConfig:
        self.calls.append(tenant_id)
        config = self.configs.get(tenant_id, self.default)
        if config is None:
            raise ConfigUnavailableError(tenant_id, "tenant is not configured")
        return config.model_copy(deep=True)

    def subscribe_config_updates(self, tenant_id: str, on_update: ConfigListener) -> None:
        self.listeners.setdefault(tenant_id, []).append(on_update)

    def publish(self, tenant_id: str, config: MappingConfig) -> None:
        """Store a new config for a tenant and notify its subscribers."""
        self.configs[tenant_id] = config
        for listener in self.listeners.get(tenant_id, []):
            listener(config.model_copy(deep=True))


class InMemoryHub:
    """
    Hub collaborator that records pushed tickets.

    Pushes are checked with the same boundary rules the bridge applies, so a
    ticket that slipped past the bridge unvalidated is refused here too.
    """

    def __init__(self):
        self.pushed: List[Ticket] = []
        self.handlers: Dict[str, TicketHandler] = {}

    async def push_update(self, ticket: Ticket) -> None:
        if ticket is None:
            raise TransportError("ticket must not be null")
        try:
            validate(ticket)
        except ValidationError as e:
            raise TransportError(f"Hub refused ticket: {e.message}", code="HUB_REJECTED") from e
        self.pushed.append(ticket.model_copy(deep=True))
        logger.info(f"Hub received update for ticket {ticket.hub_id}")

    def subscribe_updates(self, adapter_id: str, handler: TicketHandler) -> None:
        self.handlers[adapter_id] = handler

    async def submit(self, ticket: Ticket, adapter_id: Optional[str] = None) -> List[Ticket]:
        """Deliver a hub-side mutation to subscribed adapters."""
        targets = [self.handlers[adapter_id]] if adapter_id else list(self.handlers.values())
        return [await handler(ticket) for handler in targets]

    def pushed_for(self, hub_id: str) -> List[Ticket]:
        return [t for t in self.pushed if t.hub_id == hub_id]


class StaticSyncTypeGate:
    """Sync-type gate answering from a fixed tenant table."""

    def __init__(self, sync_types: Dict[str, str], default: Optional[str] = None):
        self.sync_types = dict(sync_types)
        self.default = default

    async def get_sync_type(self, tenant_id: str, source: str) -> Optional[str]:
        return self.sync_types.get(tenant_id, self.default)
