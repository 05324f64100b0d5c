"""
Ticket and mapping config models exchanged across the bridge boundary.

The same Ticket model is used for both the hub and the external system; only
the vocabulary of status, priority and user fields differs between the two
sides. Fields are optional at construction so that incomplete tickets can be
represented and rejected by the boundary validator (see policy.ticket_gate).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class Comment(BaseModel):
    """A comment attached to a ticket."""

    hub_id: Optional[str] = Field(None, description="Comment id in the hub")
    external_id: Optional[str] = Field(
        None, description="Comment id in the external system"
    )
    creator: Optional[str] = Field(None, description="User who wrote the comment")
    text: Optional[str] = None
    last_modified: Optional[datetime] = None


class Attachment(BaseModel):
    """A file attached to a ticket."""

    hub_id: Optional[str] = None
    external_id: Optional[str] = None
    name: Optional[str] = None
    creator: Optional[str] = None
    link: Optional[str] = None
    size: Optional[int] = Field(None, ge=0, description="Size in bytes")


class Ticket(BaseModel):
    """
    Canonical ticket record.

    hub_id/external_id form the identifier pair. Once the external store has
    assigned external_id the pair never changes.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "hub_id": "f5b2c6a4-1d0e-4a4b-9c1e-33d7f0c1a2b3",
                "hub_link": "https://hub.example.com/tickets/1001",
                "customer_id": "e8ab4178-81fb-43c9-8eae-1a61d609a991",
                "subject": "Projector in room 4 is not turning on",
                "description": "Power LED blinks red, no image.",
                "status": "Open",
                "priority": "Major",
                "requester": "john.doe@acme.com",
                "assigned_to": "peter.smith@acme.com",
                "comments": [
                    {"creator": "john.doe@acme.com", "text": "Tried a power cycle."}
                ],
                "attachments": [],
            }
        }
    )

    hub_id: Optional[str] = Field(None, description="Ticket id in the hub")
    hub_link: Optional[str] = Field(None, description="Deep link into the hub")
    external_id: Optional[str] = Field(
        None, description="Ticket id assigned by the external system"
    )
    external_link: Optional[str] = Field(
        None, description="Deep link into the external system"
    )
    customer_id: Optional[str] = Field(
        None, description="Tenant id selecting the mapping config"
    )

    subject: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None

    requester: Optional[str] = None
    assigned_to: Optional[str] = None

    last_modified: Optional[datetime] = None

    comments: List[Comment] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"Ticket(hub_id={self.hub_id}, external_id={self.external_id}, "
            f"status={self.status}, priority={self.priority})"
        )


class UserIdMapping(BaseModel):
    """How a hub user is identified in the external system."""

    external_id: Optional[str] = None
    id_kind: str = Field("username", description="Kind of external identifier")


class MappingConfig(BaseModel):
    """
    Per-tenant translation tables.

    The tables are directional and independent. status_external_to_hub is not
    expected to be the inverse of status_hub_to_external, and neither is
    derived from the other. Priorities are only mapped outward.
    """

    status_hub_to_external: Dict[str, str] = Field(default_factory=dict)
    status_external_to_hub: Dict[str, str] = Field(default_factory=dict)
    priority_hub_to_external: Dict[str, str] = Field(default_factory=dict)
    user_hub_to_external: Dict[str, UserIdMapping] = Field(default_factory=dict)
    user_external_to_hub: Dict[str, str] = Field(default_factory=dict)

    # Connection properties of the external system (url, api path, login, ...)
    ticket_source_config: Dict[str, str] = Field(default_factory=dict)
