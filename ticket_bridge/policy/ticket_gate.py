"""
Boundary gate for tickets crossing the bridge.

This module implements a pure, testable gate that every ticket must pass
before it is mapped or transmitted, in either direction. It either returns
the ticket untouched or raises a ValidationError naming the first offending
field.

Rules:
- hub_id, hub_link, subject, customer_id, description, priority and status
  must be non-empty (checked in that order)
- every comment needs a creator and text
- every attachment needs a name, creator, link and size

Validation is fail-fast: violations are not aggregated.

An optional tenant sync-type gate can additionally reject tickets whose tenant
is not configured for this adapter instance (see check_sync_type).
"""

from __future__ import annotations

from typing import Any, Optional

from ticket_bridge.errors import ValidationError
from ticket_bridge.schemas.ticket import Ticket

# Required ticket fields, in the order they are checked
REQUIRED_TICKET_FIELDS = (
    "hub_id",
    "hub_link",
    "subject",
    "customer_id",
    "description",
    "priority",
    "status",
)

REQUIRED_COMMENT_FIELDS = ("creator", "text")
REQUIRED_ATTACHMENT_FIELDS = ("name", "creator", "link", "size")


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _require(value: Any, field: str) -> None:
    if _is_blank(value):
        raise ValidationError(field)


def _validate_comments(ticket: Ticket) -> None:
    for comment in ticket.comments or []:
        for name in REQUIRED_COMMENT_FIELDS:
            _require(getattr(comment, name), f"comment.{name}")


def _validate_attachments(ticket: Ticket) -> None:
    for attachment in ticket.attachments or []:
        for name in REQUIRED_ATTACHMENT_FIELDS:
            _require(getattr(attachment, name), f"attachment.{name}")


def validate(ticket: Optional[Ticket]) -> Ticket:
    """
    Check a ticket for structural completeness.

    This is a pure function: no I/O, and the ticket is not modified.

    Args:
        ticket: The ticket about to cross the boundary

    Returns:
        The same ticket, for chaining

    Raises:
        ValidationError: On the first missing or empty required field
    """
    if ticket is None:
        raise ValidationError("ticket", "Ticket must not be null")

    for attr in REQUIRED_TICKET_FIELDS:
        _require(getattr(ticket, attr), attr)

    _validate_comments(ticket)
    _validate_attachments(ticket)

    return ticket


async def check_sync_type(
    tenant_id: str,
    gate: Any,
    source: str,
    expected: str,
) -> None:
    """
    Reject a tenant that is not configured for this adapter instance.

    Args:
        tenant_id: Tenant owning the ticket
        gate: Collaborator exposing ``get_sync_type(tenant_id, source)``
        source: Identifier of this adapter as known to the gate
        expected: Sync type this adapter serves

    Raises:
        ValidationError: If the tenant's sync type differs from ``expected``
    """
    sync_type = await gate.get_sync_type(tenant_id, source)
    if sync_type != expected:
        raise ValidationError(
            "customer_id",
            f"Tenant '{tenant_id}' is configured for sync type "
            f"'{sync_type}', this adapter serves '{expected}'",
            code="SYNC_TYPE_MISMATCH",
        )
