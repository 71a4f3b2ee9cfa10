"""
Support Ticket Service

Ticket lifecycle on top of a TicketStore:
1. Open a ticket as a signed-in user or anonymous session
2. Thread replies; the replying side determines the next status
3. Track read state per side
4. Admin listing, updates and statistics
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from healthtracker.config.logging_config import get_logger
from healthtracker.domain.enums import TicketPriority, TicketStatus
from healthtracker.domain.models.ticket import (
    CreateReplyData,
    CreateTicketData,
    Ticket,
    TicketFilter,
    TicketReply,
    TicketStats,
    UpdateTicketData,
)
from healthtracker.infrastructure.metrics import TICKET_REPLIES_TOTAL, TICKETS_CREATED_TOTAL

logger = get_logger(__name__)

SECONDS_PER_HOUR = 3600.0


class TicketStore(Protocol):
    """Persistence used by the service (see TicketRepository)."""

    async def get(self, ticket_id: str) -> Optional[Ticket]:
        ...

    async def add(self, ticket: Ticket) -> Ticket:
        ...

    async def save(self, ticket: Ticket) -> Ticket:
        ...

    async def find(self, ticket_filter: Optional[TicketFilter] = None) -> list[Ticket]:
        ...


class TicketError(Exception):
    """Base error for ticket operations."""


class TicketNotFoundError(TicketError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__("Ticket not found")
        self.ticket_id = ticket_id


class TicketValidationError(TicketError):
    """Rejected ticket or reply content."""


@dataclass(frozen=True)
class TicketOwner:
    """Who is acting on the user side: Firebase uid if signed in, always a session."""

    session_id: str
    user_id: Optional[str] = None


def compute_ticket_stats(tickets: Iterable[Ticket]) -> TicketStats:
    """
    Aggregate status counts and timings.

    Response time is creation to first admin reply; resolution time is
    creation to last update of resolved/closed tickets. Both in hours,
    zero without samples.
    """
    stats = TicketStats()
    response_hours: list[float] = []
    resolution_hours: list[float] = []

    for ticket in tickets:
        stats.total += 1
        if ticket.status == TicketStatus.OPEN:
            stats.open += 1
        elif ticket.status == TicketStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif ticket.status == TicketStatus.WAITING_FOR_RESPONSE:
            stats.waiting_for_response += 1
        elif ticket.status == TicketStatus.RESOLVED:
            stats.resolved += 1
        elif ticket.status == TicketStatus.CLOSED:
            stats.closed += 1

        first_reply = ticket.first_admin_reply()
        if first_reply is not None:
            elapsed = first_reply.created_at - ticket.created_at
            response_hours.append(elapsed.total_seconds() / SECONDS_PER_HOUR)

        if ticket.status.is_finished:
            elapsed = ticket.updated_at - ticket.created_at
            resolution_hours.append(elapsed.total_seconds() / SECONDS_PER_HOUR)

    if response_hours:
        stats.average_response_time = sum(response_hours) / len(response_hours)
    if resolution_hours:
        stats.average_resolution_time = sum(resolution_hours) / len(resolution_hours)
    return stats


class TicketService:
    """
    Support ticket operations.

    Usage:
        service = TicketService(TicketRepository(session))
        ticket = await service.create_ticket(data, owner)
    """

    def __init__(self, store: TicketStore) -> None:
        self._store = store

    async def create_ticket(self, data: CreateTicketData, owner: TicketOwner) -> Ticket:
        """
        Open a ticket.

        Raises:
            TicketValidationError: Empty subject or message
        """
        subject = data.subject.strip()
        message = data.message.strip()
        if not subject or not message:
            raise TicketValidationError("Subject and message are required")

        ticket = Ticket(
            subject=subject,
            message=message,
            session_id=owner.session_id,
            user_id=owner.user_id,
            priority=data.priority or TicketPriority.NORMAL,
            tags=list(data.tags or []),
        )
        await self._store.add(ticket)

        TICKETS_CREATED_TOTAL.labels(owner_type="user" if owner.user_id else "anonymous").inc()
        logger.info("Ticket created", ticket_id=ticket.id, priority=ticket.priority.value)
        return ticket

    async def list_user_tickets(self, owner: TicketOwner) -> list[Ticket]:
        """Tickets of the signed-in user, or of the anonymous session."""
        if owner.user_id:
            ticket_filter = TicketFilter(user_id=owner.user_id)
        else:
            ticket_filter = TicketFilter(session_id=owner.session_id)
        tickets = await self._store.find(ticket_filter)
        return sorted(tickets, key=lambda t: t.updated_at, reverse=True)

    async def list_tickets(self, ticket_filter: Optional[TicketFilter] = None) -> list[Ticket]:
        tickets = await self._store.find(ticket_filter)
        return sorted(tickets, key=lambda t: t.updated_at, reverse=True)

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self._store.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    async def get_owned_ticket(self, ticket_id: str, owner: TicketOwner) -> Ticket:
        """Fetch a ticket the caller owns; other tickets look absent."""
        ticket = await self.get_ticket(ticket_id)
        if not ticket.is_owned_by(owner.user_id, owner.session_id):
            raise TicketNotFoundError(ticket_id)
        return ticket

    async def add_reply(self, data: CreateReplyData) -> TicketReply:
        """
        Append a reply and update the ticket status.

        Raises:
            TicketNotFoundError: Unknown ticket
            TicketValidationError: Empty message
        """
        message = data.message.strip()
        if not message:
            raise TicketValidationError("Reply message is required")

        ticket = await self.get_ticket(data.ticket_id)
        reply = ticket.add_reply(TicketReply(
            ticket_id=ticket.id,
            message=message,
            is_from_admin=data.is_from_admin,
            author_id=data.author_id,
            author_name=data.author_name,
        ))
        await self._store.save(ticket)

        TICKET_REPLIES_TOTAL.labels(author="admin" if data.is_from_admin else "user").inc()
        logger.info(
            "Ticket reply added",
            ticket_id=ticket.id,
            from_admin=data.is_from_admin,
            status=ticket.status.value,
        )
        return reply

    async def update_ticket(self, ticket_id: str, update: UpdateTicketData) -> Ticket:
        ticket = await self.get_ticket(ticket_id)
        ticket.apply_update(update)
        await self._store.save(ticket)
        logger.info("Ticket updated", ticket_id=ticket_id, status=ticket.status.value)
        return ticket

    async def mark_read(self, ticket_id: str, is_admin: bool = False) -> Ticket:
        ticket = await self.get_ticket(ticket_id)
        ticket.mark_read(is_admin=is_admin)
        await self._store.save(ticket)
        return ticket

    async def get_stats(self) -> TicketStats:
        return compute_ticket_stats(await self._store.find())
