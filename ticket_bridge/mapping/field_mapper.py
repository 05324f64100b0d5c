"""
Field mapping between hub and external ticket vocabularies.

Mapping:
    hub -> external: status, priority, requester, assignee, comment and
                     attachment creators
    external -> hub: status, requester, assignee, comment and attachment
                     creators

Unknown statuses and priorities pass through unchanged. Unknown users are
treated differently per direction: an outbound user without a mapping is a
MappingError (the external system cannot represent them), while an inbound
user without a mapping yields None and the ticket keeps its original id.

All functions operate in place on the ticket passed in and return it. They
never perform I/O; callers that must not modify their input pass a copy.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..errors import MappingError
from ..schemas.ticket import MappingConfig, Ticket


def map_status_outbound(ticket: Ticket, config: MappingConfig) -> Ticket:
    """Translate a hub status into the external vocabulary."""
    mapped = config.status_hub_to_external.get(ticket.status)
    if mapped is not None:
        ticket.status = mapped
    return ticket


def map_status_inbound(ticket: Ticket, config: MappingConfig) -> Ticket:
    """Translate an external status into the hub vocabulary."""
    mapped = config.status_external_to_hub.get(ticket.status)
    if mapped is not None:
        ticket.status = mapped
    return ticket


def map_priority_outbound(ticket: Ticket, config: MappingConfig) -> Ticket:
    """Translate a hub priority into the external vocabulary."""
    mapped = config.priority_hub_to_external.get(ticket.priority)
    if mapped is not None:
        ticket.priority = mapped
    return ticket


def map_user_outbound(user_id: Optional[str], config: MappingConfig) -> Optional[str]:
    """
    Map a hub user id to its external id.

    Raises:
        MappingError: If the user has no entry in the outbound user table
    """
    if user_id is None:
        return None

    mapping = config.user_hub_to_external.get(user_id)
    if mapping is None:
        raise MappingError(user_id)

    if not mapping.external_id:
        return user_id
    return mapping.external_id


def map_user_inbound(user_id: Optional[str], config: MappingConfig) -> Optional[str]:
    """Map an external username to a hub identity, or None if unmapped."""
    if user_id is None:
        return None
    return config.user_external_to_hub.get(user_id)


def _apply_user_mapping(ticket: Ticket, map_user: Callable[[Optional[str]], Optional[str]]) -> None:
    """Run ``map_user`` over every user reference on the ticket."""

    def mapped_or_original(user_id: Optional[str]) -> Optional[str]:
        mapped = map_user(user_id)
        return user_id if mapped is None else mapped

    ticket.requester = mapped_or_original(ticket.requester)
    ticket.assigned_to = mapped_or_original(ticket.assigned_to)
    for comment in ticket.comments:
        comment.creator = mapped_or_original(comment.creator)
    for attachment in ticket.attachments:
        attachment.creator = mapped_or_original(attachment.creator)


def map_hub_to_external(ticket: Ticket, config: MappingConfig) -> Ticket:
    """
    Convert a hub ticket into the external representation.

    Args:
        ticket: ticket in hub vocabulary, modified in place
        config: tenant mapping config

    Returns:
        The mapped ticket

    Raises:
        MappingError: If any referenced user cannot be mapped
    """
    map_status_outbound(ticket, config)
    map_priority_outbound(ticket, config)
    _apply_user_mapping(ticket, lambda user_id: map_user_outbound(user_id, config))
    return ticket


def map_external_to_hub(ticket: Ticket, config: MappingConfig) -> Ticket:
    """Convert an external ticket into the hub representation, in place."""
    map_status_inbound(ticket, config)
    _apply_user_mapping(ticket, lambda user_id: map_user_inbound(user_id, config))
    return ticket
