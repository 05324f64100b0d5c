"""Test configuration and fixtures."""

import asyncio
import random
from typing import Callable

import pytest
import pytest_asyncio

from ticket_bridge.core.sync_adapter import SyncAdapter
from ticket_bridge.core.tasks import PropagationRegistry
from ticket_bridge.core.telemetry import Telemetry
from ticket_bridge.external.store import ExternalTicketStore
from ticket_bridge.integrations.memory import InMemoryConfigService, InMemoryHub
from ticket_bridge.mapping.config_store import MappingConfigStore
from ticket_bridge.schemas.ticket import (
    Attachment,
    Comment,
    MappingConfig,
    Ticket,
    UserIdMapping,
)

TENANT = "T1"


@pytest.fixture
def mapping_config() -> MappingConfig:
    """Mapping config of tenant T1."""
    return MappingConfig(
        status_hub_to_external={"Open": "In progress", "Close": "Closed"},
        status_external_to_hub={"Resolved": "Close", "In progress": "Open"},
        priority_hub_to_external={"Critical": "10", "Major": "5"},
        user_hub_to_external={
            "john.doe@acme.com": UserIdMapping(external_id="jdoe"),
            "peter.smith@acme.com": UserIdMapping(external_id="psmith"),
            "legacy@acme.com": UserIdMapping(external_id=""),
        },
        user_external_to_hub={
            "jdoe": "john.doe@acme.com",
            "psmith": "peter.smith@acme.com",
        },
    )


@pytest.fixture
def make_ticket() -> Callable[..., Ticket]:
    """Factory for a valid hub ticket with optional overrides."""

    def factory(**overrides) -> Ticket:
        defaults = {
            "hub_id": "hub-1001",
            "hub_link": "https://hub.example.com/tickets/hub-1001",
            "customer_id": TENANT,
            "subject": "Projector does not turn on",
            "description": "Power LED blinks red",
            "status": "Open",
            "priority": "Major",
            "requester": "john.doe@acme.com",
            "assigned_to": "peter.smith@acme.com",
            "comments": [
                Comment(hub_id="c-1", creator="john.doe@acme.com", text="Tried a power cycle")
            ],
            "attachments": [
                Attachment(
                    hub_id="a-1",
                    name="photo.jpg",
                    creator="peter.smith@acme.com",
                    link="https://hub.example.com/files/photo.jpg",
                    size=2048,
                )
            ],
        }
        defaults.update(overrides)
        return Ticket(**defaults)

    return factory


@pytest.fixture
def config_service(mapping_config) -> InMemoryConfigService:
    return InMemoryConfigService({TENANT: mapping_config})


@pytest.fixture
def hub() -> InMemoryHub:
    return InMemoryHub()


@pytest.fixture
def telemetry() -> Telemetry:
    return Telemetry()


def make_store(telemetry: Telemetry, max_update_delay: float = 60.0, **kwargs) -> ExternalTicketStore:
    return ExternalTicketStore(
        max_update_delay=max_update_delay,
        registry=PropagationRegistry(),
        telemetry=telemetry,
        rng=random.Random(7),
        **kwargs,
    )


@pytest.fixture
def store(telemetry) -> ExternalTicketStore:
    """External store whose tickets stay put for the duration of a test."""
    return make_store(telemetry)


@pytest_asyncio.fixture
async def adapter(config_service, hub, store, telemetry):
    """Started adapter over a slow-moving external store."""
    sync_adapter = SyncAdapter(
        MappingConfigStore(config_service),
        hub,
        store,
        adapter_id="test-adapter",
        telemetry=telemetry,
    )
    await sync_adapter.start()
    yield sync_adapter
    await sync_adapter.stop()


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it holds or ``timeout`` seconds pass."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)
