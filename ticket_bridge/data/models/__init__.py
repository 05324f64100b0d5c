"""
Data models for the ticket sync bridge.
"""

from .events import Event, EventSeverity, EventTypes

__all__ = [
    "Event",
    "EventSeverity",
    "EventTypes",
]
