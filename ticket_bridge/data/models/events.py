"""
Telemetry event models for the ticket sync bridge.
"""

from typing import Dict, Any, Optional
from datetime import datetime
from enum import Enum
import uuid

from ...schemas.ticket import utc_now


class EventSeverity(Enum):
    """Event severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Event:
    """
    Represents something that happened to a ticket while it was synchronized.

    Events are recorded by the bridge's Telemetry so that operators and tests
    can observe outcomes that are otherwise silent, such as a propagation
    task ending because its wait was interrupted.
    """

    def __init__(
        self,
        event_type: str,
        source: str,
        data: Optional[Dict[str, Any]] = None,
        severity: EventSeverity = EventSeverity.INFO,
        ticket_id: Optional[str] = None,
        tenant_id: Optional[str] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type
        self.source = source
        self.data = data or {}
        self.severity = severity
        self.ticket_id = ticket_id
        self.tenant_id = tenant_id
        self.created_at = utc_now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the event to a dictionary."""
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "data": self.data,
            "severity": self.severity.value,
            "ticket_id": self.ticket_id,
            "tenant_id": self.tenant_id,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Create an event from a dictionary."""
        event = cls(
            event_type=data["type"],
            source=data["source"],
            data=data.get("data"),
            severity=EventSeverity(data["severity"]),
            ticket_id=data.get("ticket_id"),
            tenant_id=data.get("tenant_id"),
        )

        event.id = data["id"]
        event.created_at = datetime.fromisoformat(data["created_at"])
        return event

    def __str__(self) -> str:
        return f"Event(id={self.id[:8]}, type={self.type}, ticket={self.ticket_id})"

    def __repr__(self) -> str:
        return self.__str__()


# Event types emitted by the bridge
class EventTypes:
    """Event types used in the bridge."""

    # Hub -> external
    TICKET_ACCEPTED = "ticket.accepted"
    TICKET_UPDATED = "ticket.updated"
    INBOUND_REJECTED = "inbound.rejected"

    # External -> hub
    TICKET_MUTATED = "ticket.mutated"
    TICKET_PUSHED = "ticket.pushed"
    OUTBOUND_FAILED = "outbound.failed"

    # Propagation task lifecycle
    PROPAGATION_STARTED = "propagation.started"
    PROPAGATION_INTERRUPTED = "propagation.interrupted"

    # Config
    CONFIG_REPLACED = "config.replaced"

    # Adapter lifecycle
    ADAPTER_STARTED = "adapter.started"
    ADAPTER_STOPPED = "adapter.stopped"
