"""
In-process telemetry sink for bridge events.
"""

from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional
import logging

from ..data.models.events import Event, EventSeverity


logger = logging.getLogger(__name__)


class Telemetry:
    """
    Keeps a bounded history of bridge events and fans them out to listeners.

    Listeners are plain callables; a failing listener is logged and skipped.
    """

    def __init__(self, max_events: int = 1000):
        self.events: Deque[Event] = deque(maxlen=max_events)
        self.counters: Dict[str, int] = {}
        self._listeners: List[Callable[[Event], None]] = []

    def emit(
        self,
        event_type: str,
        source: str,
        data: Optional[Dict[str, Any]] = None,
        severity: EventSeverity = EventSeverity.INFO,
        ticket_id: Optional[str] = None,
        tenant_id: Optional[str] = None,
    ) -> Event:
        """Record an event and notify listeners."""
        event = Event(
            event_type,
            source,
            data,
            severity=severity,
            ticket_id=ticket_id,
            tenant_id=tenant_id,
        )
        self.events.append(event)
        self.counters[event_type] = self.counters.get(event_type, 0) + 1
        logger.debug(f"Emitted event: {event}")

        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Telemetry listener failed for {event.type}: {e}")
        return event

    def subscribe(self, listener: Callable[[Event], None]) -> None:
        self._listeners.append(listener)

    def events_of_type(self, event_type: str, ticket_id: Optional[str] = None) -> List[Event]:
        """Return recorded events of a type, optionally for one ticket."""
        return [
            e for e in self.events
            if e.type == event_type and (ticket_id is None or e.ticket_id == ticket_id)
        ]

    def count(self, event_type: str) -> int:
        return self.counters.get(event_type, 0)
