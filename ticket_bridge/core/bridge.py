"""
Wiring of a complete bridge from settings.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, List, Optional

import structlog

from ..config import Settings, get_settings
from ..external.store import ExternalTicketStore
from ..integrations.hub_http import ConfigHttpClient, HubHttpClient
from ..integrations.memory import InMemoryConfigService, InMemoryHub, sample_mapping_config
from ..mapping.config_store import MappingConfigStore
from .sync_adapter import SyncAdapter
from .tasks import PropagationRegistry
from .telemetry import Telemetry

logger = structlog.get_logger()


@dataclass
class Bridge:
    """Everything one running bridge owns."""

    adapter: SyncAdapter
    store: ExternalTicketStore
    config_store: MappingConfigStore
    hub: Any
    config_service: Any
    telemetry: Telemetry
    http_clients: List[Any] = field(default_factory=list)

    async def start(self) -> None:
        await self.adapter.start()

    async def stop(self) -> None:
        await self.adapter.stop()
        for client in self.http_clients:
            await client.close()


def build_bridge(
    settings: Optional[Settings] = None,
    hub: Any = None,
    config_service: Any = None,
    sync_type_gate: Any = None,
    rng: Optional[random.Random] = None,
) -> Bridge:
    """
    Build a bridge from settings.

    Collaborators passed in explicitly win over settings. Otherwise a hub URL
    selects the HTTP hub client and a config service URL the HTTP config
    client; without them the in-memory implementations are used, with the
    sample mapping config served for every tenant.
    """
    settings = settings or get_settings()
    http_clients: List[Any] = []

    if hub is None:
        if settings.hub_url:
            hub = HubHttpClient(
                settings.hub_url, settings.hub_api_key, settings.http_timeout_seconds
            )
            http_clients.append(hub)
        else:
            hub = InMemoryHub()

    if config_service is None:
        if settings.config_service_url:
            config_service = ConfigHttpClient(
                settings.config_service_url,
                settings.config_service_api_key,
                settings.http_timeout_seconds,
            )
            http_clients.append(config_service)
        else:
            config_service = InMemoryConfigService(default=sample_mapping_config())

    if sync_type_gate is None and settings.enable_sync_type_gate:
        if not hasattr(hub, "get_sync_type"):
            raise ValueError("Sync-type gate enabled but the hub cannot report sync types")
        sync_type_gate = hub

    telemetry = Telemetry()
    store = ExternalTicketStore(
        base_url=settings.external_base_url,
        max_update_delay=settings.max_update_delay_seconds,
        registry=PropagationRegistry(),
        telemetry=telemetry,
        rng=rng,
    )
    config_store = MappingConfigStore(config_service, telemetry=telemetry)
    adapter = SyncAdapter(
        config_store,
        hub,
        store,
        adapter_id=settings.adapter_id,
        telemetry=telemetry,
        sync_type_gate=sync_type_gate,
        sync_type=settings.adapter_sync_type,
        sync_timeout=settings.sync_timeout_seconds,
    )

    logger.info(
        "bridge_built",
        adapter_id=settings.adapter_id,
        hub=type(hub).__name__,
        config_service=type(config_service).__name__,
        sync_type_gate=sync_type_gate is not None,
    )
    return Bridge(
        adapter=adapter,
        store=store,
        config_store=config_store,
        hub=hub,
        config_service=config_service,
        telemetry=telemetry,
        http_clients=http_clients,
    )
