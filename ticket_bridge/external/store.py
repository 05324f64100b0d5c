"""
In-memory external ticket system.

The store accepts tickets forwarded by the bridge, assigns them an external
identifier and link, and then keeps changing them on its own: each accepted
ticket gets a propagation task that, after a random pause, moves the ticket
to another status and priority and reports the change back through the
outbound callback. The loop repeats until the task is cancelled.

Flow per accepted ticket:
1. Wait: sleep uniform(0, max_update_delay) seconds
2. Mutate: pick another status and priority, stamp last_modified
3. Sync: hand a copy of the ticket to the outbound callback
4. Repeat

A task cancelled while waiting exits without mutating or syncing and records
a propagation.interrupted event. It is not restarted.
"""
from __future__ import annotations

import asyncio
import logging
import random
import uuid
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from ..core.tasks import PropagationRegistry
from ..core.telemetry import Telemetry
from ..data.models.events import EventSeverity, EventTypes
from ..errors import BridgeError, TransportError
from ..schemas.ticket import Ticket, utc_now

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://somewhere/tickets"
DEFAULT_MAX_UPDATE_DELAY_SECONDS = 180.0  # 3 min

PRIORITIES = ("Critical", "Major", "Minor", "Informational")
STATUSES = ("Open", "In progress", "On hold", "Resolved", "Closed", "Canceled")

# Assigned once on first acceptance, never overwritten by later updates
IDENTITY_FIELDS = {"hub_id", "external_id", "external_link"}

OutboundCallback = Callable[[Ticket, str], Awaitable[None]]


def generate_ticket_id() -> str:
    return str(uuid.uuid4())


class ExternalTicketStore:
    """Ticket repository of the external system."""

    source = "external_store"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        max_update_delay: float = DEFAULT_MAX_UPDATE_DELAY_SECONDS,
        statuses: Sequence[str] = STATUSES,
        priorities: Sequence[str] = PRIORITIES,
        registry: Optional[PropagationRegistry] = None,
        telemetry: Optional[Telemetry] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the store.

        Args:
            base_url: Prefix of external ticket links
            max_update_delay: Upper bound in seconds of the pause between mutations
            statuses: Status vocabulary of the external system
            priorities: Priority vocabulary of the external system
            registry: Where propagation tasks are registered
            telemetry: Event sink
            rng: Random source for delays and mutations
        """
        if not statuses or not priorities:
            raise ValueError("Status and priority vocabularies must not be empty")

        self.base_url = base_url.rstrip("/")
        self.max_update_delay = max_update_delay
        self.statuses = list(statuses)
        self.priorities = list(priorities)
        self.registry = registry or PropagationRegistry()
        self.telemetry = telemetry or Telemetry()
        self.rng = rng or random.Random()

        self.on_update: Optional[OutboundCallback] = None

        self._tickets: List[Ticket] = []
        self._by_external_id: Dict[str, Ticket] = {}
        self._by_hub_id: Dict[str, str] = {}
        self._tenants: Dict[str, str] = {}

    def set_update_callback(self, callback: OutboundCallback) -> None:
        """Register the function invoked with each mutated ticket."""
        self.on_update = callback

    async def accept(self, ticket: Ticket) -> Ticket:
        """
        Accept a new or updated ticket.

        A ticket whose hub id is unknown gets a fresh external id and link and
        a propagation task. A known ticket is updated in place and keeps its
        identifier pair.

        Returns:
            A copy of the stored ticket, carrying both identifiers

        Raises:
            TransportError: If the store is shut down, or the ticket names an
                external id that does not belong to its hub id
        """
        # No awaits below: the checks and the insert are atomic within the event loop
        if self.registry.is_closed:
            raise TransportError(
                f"External system is shut down, ticket {ticket.hub_id} not accepted",
                code="STORE_CLOSED",
            )

        external_id = self._by_hub_id.get(ticket.hub_id)
        if ticket.external_id and ticket.external_id != external_id:
            raise TransportError(
                f"Ticket {ticket.hub_id} refers to unknown external id {ticket.external_id}",
                code="EXTERNAL_ID_MISMATCH",
            )

        if external_id is None:
            stored = self._insert(ticket)
            self.telemetry.emit(
                EventTypes.TICKET_ACCEPTED,
                self.source,
                {"hub_id": stored.hub_id},
                ticket_id=stored.external_id,
                tenant_id=stored.customer_id,
            )
        else:
            stored = self._update(external_id, ticket)
            self.telemetry.emit(
                EventTypes.TICKET_UPDATED,
                self.source,
                {"hub_id": stored.hub_id},
                ticket_id=external_id,
                tenant_id=stored.customer_id,
            )

        if not self.registry.is_running(stored.external_id):
            self.initiate_ticket_update(stored.external_id)

        return stored.model_copy(deep=True)

    def initiate_ticket_update(self, external_id: str) -> asyncio.Task:
        """Start the propagation task of a stored ticket."""
        logger.info(f"Initiating eventual ticket update for {external_id}")
        task = self.registry.spawn(external_id, self._propagate(external_id))
        self.telemetry.emit(
            EventTypes.PROPAGATION_STARTED,
            self.source,
            ticket_id=external_id,
            tenant_id=self._tenants.get(external_id),
        )
        return task

    def get(self, external_id: str) -> Optional[Ticket]:
        """Return a copy of a stored ticket, or None."""
        ticket = self._by_external_id.get(external_id)
        return ticket.model_copy(deep=True) if ticket else None

    def find_by_hub_id(self, hub_id: str) -> Optional[Ticket]:
        external_id = self._by_hub_id.get(hub_id)
        return self.get(external_id) if external_id else None

    def tickets(self) -> List[Ticket]:
        return [t.model_copy(deep=True) for t in self._tickets]

    def __len__(self) -> int:
        return len(self._tickets)

    def _insert(self, ticket: Ticket) -> Ticket:
        stored = ticket.model_copy(deep=True)
        stored.external_id = generate_ticket_id()
        stored.external_link = f"{self.base_url}/{stored.external_id}"
        self._provision_children(stored)

        self._tickets.append(stored)
        self._by_external_id[stored.external_id] = stored
        self._by_hub_id[stored.hub_id] = stored.external_id
        self._tenants[stored.external_id] = stored.customer_id
        return stored

    def _update(self, external_id: str, ticket: Ticket) -> Ticket:
        stored = self._by_external_id[external_id]
        known = {
            item.hub_id: item.external_id
            for item in [*stored.comments, *stored.attachments]
            if item.hub_id
        }

        incoming = ticket.model_copy(deep=True)
        for name in Ticket.model_fields:
            if name not in IDENTITY_FIELDS:
                setattr(stored, name, getattr(incoming, name))
        self._provision_children(stored, known)
        if stored.customer_id:
            self._tenants[external_id] = stored.customer_id
        return stored

    def _provision_children(self, ticket: Ticket, known: Optional[Dict[str, str]] = None) -> None:
        """Give comments and attachments an external id if they lack one.

        Items already provisioned under the same hub id keep their external id.
        """
        known = known or {}
        for item in [*ticket.comments, *ticket.attachments]:
            if not item.external_id:
                item.external_id = known.get(item.hub_id) or generate_ticket_id()

    def _next_delay(self) -> float:
        return self.rng.uniform(0, self.max_update_delay)

    def _pick_other(self, vocabulary: List[str], current: Optional[str]) -> str:
        candidates = [v for v in vocabulary if v != current] or vocabulary
        return self.rng.choice(candidates)

    def _mutate(self, ticket: Ticket) -> None:
        ticket.priority = self._pick_other(self.priorities, ticket.priority)
        ticket.status = self._pick_other(self.statuses, ticket.status)
        ticket.last_modified = utc_now()

    async def _wait_before_update(self, external_id: str) -> bool:
        try:
            await asyncio.sleep(self._next_delay())
            return True
        except asyncio.CancelledError:
            logger.info(f"Waiting before the update of {external_id} was interrupted")
            self.telemetry.emit(
                EventTypes.PROPAGATION_INTERRUPTED,
                self.source,
                ticket_id=external_id,
                tenant_id=self._tenants.get(external_id),
            )
            return False

    async def _propagate(self, external_id: str) -> None:
        """Mutate and re-sync one ticket until cancelled."""
        while await self._wait_before_update(external_id):
            ticket = self._by_external_id[external_id]
            tenant_id = self._tenants.get(external_id)

            self._mutate(ticket)
            self.telemetry.emit(
                EventTypes.TICKET_MUTATED,
                self.source,
                {"status": ticket.status, "priority": ticket.priority},
                ticket_id=external_id,
                tenant_id=tenant_id,
            )

            if self.on_update is None:
                continue

            try:
                await self.on_update(ticket.model_copy(deep=True), tenant_id)
            except BridgeError as e:
                # already recorded by the adapter
                logger.warning(f"Failed to sync ticket {external_id} back to the hub: {e}")
            except Exception as e:
                logger.error(f"Unexpected error syncing ticket {external_id}: {e}")
                self._record_failure(external_id, tenant_id, {"error": str(e)})

    def _record_failure(self, external_id: str, tenant_id: Optional[str], data: dict) -> None:
        self.telemetry.emit(
            EventTypes.OUTBOUND_FAILED,
            self.source,
            data,
            severity=EventSeverity.ERROR,
            ticket_id=external_id,
            tenant_id=tenant_id,
        )
