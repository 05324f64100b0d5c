"""Tests for event models and the telemetry sink."""

from datetime import datetime

from ticket_bridge.core.telemetry import Telemetry
from ticket_bridge.data.models.events import Event, EventSeverity, EventTypes
from ticket_bridge.integrations import (
    ConfigCollaborator,
    HubCollaborator,
    InMemoryConfigService,
    InMemoryHub,
)


class TestEvent:
    """Test cases for the Event class."""

    def test_event_creation(self):
        event = Event(
            event_type=EventTypes.TICKET_PUSHED,
            source="test",
            data={"status": "Close"},
            ticket_id="e-1",
            tenant_id="T1",
        )

        assert event.type == EventTypes.TICKET_PUSHED
        assert event.source == "test"
        assert event.data == {"status": "Close"}
        assert event.severity == EventSeverity.INFO
        assert event.id is not None
        assert isinstance(event.created_at, datetime)

    def test_event_defaults(self):
        event = Event("custom.event", "test")

        assert event.data == {}
        assert event.ticket_id is None
        assert event.tenant_id is None

    def test_to_dict_and_back(self):
        event = Event(
            EventTypes.OUTBOUND_FAILED,
            "sync_adapter",
            {"code": "HUB_REJECTED"},
            severity=EventSeverity.WARNING,
            ticket_id="e-2",
        )

        data = event.to_dict()
        assert data["severity"] == "warning"
        assert data["type"] == "outbound.failed"

        restored = Event.from_dict(data)
        assert restored.id == event.id
        assert restored.severity == EventSeverity.WARNING
        assert restored.created_at == event.created_at
        assert restored.data == {"code": "HUB_REJECTED"}

    def test_str(self):
        event = Event("test.event", "test", ticket_id="e-3")
        assert "test.event" in str(event)
        assert "e-3" in repr(event)


class TestTelemetry:
    """Test cases for the Telemetry sink."""

    def test_emit_records_and_counts(self):
        telemetry = Telemetry()

        telemetry.emit(EventTypes.TICKET_ACCEPTED, "test", ticket_id="e-1")
        telemetry.emit(EventTypes.TICKET_ACCEPTED, "test", ticket_id="e-2")
        telemetry.emit(EventTypes.TICKET_MUTATED, "test", ticket_id="e-1")

        assert telemetry.count(EventTypes.TICKET_ACCEPTED) == 2
        assert telemetry.count(EventTypes.TICKET_PUSHED) == 0
        assert len(telemetry.events_of_type(EventTypes.TICKET_ACCEPTED, ticket_id="e-2")) == 1

    def test_history_is_bounded(self):
        telemetry = Telemetry(max_events=3)
        for _ in range(5):
            telemetry.emit(EventTypes.TICKET_MUTATED, "test")

        assert len(telemetry.events) == 3
        assert telemetry.count(EventTypes.TICKET_MUTATED) == 5

    def test_failing_listener_is_skipped(self):
        telemetry = Telemetry()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        telemetry.subscribe(broken)
        telemetry.subscribe(received.append)
        event = telemetry.emit(EventTypes.ADAPTER_STARTED, "test")

        assert received == [event]


class TestCollaboratorProtocols:
    """The in-memory collaborators satisfy the bridge's interfaces."""

    def test_in_memory_implementations(self):
        assert isinstance(InMemoryConfigService(), ConfigCollaborator)
        assert isinstance(InMemoryHub(), HubCollaborator)
