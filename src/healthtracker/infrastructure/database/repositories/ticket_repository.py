"""
Ticket Repository

Persists support tickets and maps between ORM rows and the domain
Ticket/TicketReply dataclasses.
"""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from healthtracker.domain.enums import TicketPriority, TicketStatus
from healthtracker.domain.models.ticket import (
    Ticket,
    TicketAttachment,
    TicketFilter,
    TicketReply,
)
from healthtracker.infrastructure.database.models.ticket_model import TicketModel, TicketReplyModel
from healthtracker.infrastructure.database.repositories.base import BaseRepository


def _reply_to_domain(model: TicketReplyModel) -> TicketReply:
    return TicketReply(
        id=model.id,
        ticket_id=model.ticket_id,
        message=model.message,
        is_from_admin=model.is_from_admin,
        author_id=model.author_id,
        author_name=model.author_name,
        created_at=model.created_at,
        is_read=model.is_read,
        attachments=[TicketAttachment.from_dict(a) for a in model.attachments or []],
    )


def _to_domain(model: TicketModel) -> Ticket:
    return Ticket(
        id=model.id,
        subject=model.subject,
        message=model.message,
        status=TicketStatus(model.status),
        priority=TicketPriority(model.priority),
        user_id=model.user_id,
        session_id=model.session_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
        replies=[_reply_to_domain(r) for r in model.replies],
        tags=list(model.tags or []),
        assigned_to=model.assigned_to,
        is_read=model.is_read,
        user_last_read=model.user_last_read,
        admin_last_read=model.admin_last_read,
    )


def _to_model(ticket: Ticket) -> TicketModel:
    return TicketModel(
        id=ticket.id,
        subject=ticket.subject,
        message=ticket.message,
        status=ticket.status.value,
        priority=ticket.priority.value,
        user_id=ticket.user_id,
        session_id=ticket.session_id,
        tags=list(ticket.tags),
        assigned_to=ticket.assigned_to,
        is_read=ticket.is_read,
        user_last_read=ticket.user_last_read,
        admin_last_read=ticket.admin_last_read,
        created_at=ticket.created_at,
        updated_at=ticket.updated_at,
        replies=[
            TicketReplyModel(
                id=r.id,
                ticket_id=ticket.id,
                message=r.message,
                is_from_admin=r.is_from_admin,
                author_id=r.author_id,
                author_name=r.author_name,
                is_read=r.is_read,
                attachments=[a.to_dict() for a in r.attachments],
                created_at=r.created_at,
            )
            for r in ticket.replies
        ],
    )


class TicketRepository(BaseRepository[TicketModel]):
    """Ticket persistence returning domain objects."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(TicketModel, session)

    async def get(self, ticket_id: str) -> Optional[Ticket]:
        model = await self.get_by_id(ticket_id)
        return _to_domain(model) if model else None

    async def add(self, ticket: Ticket) -> Ticket:
        await self.create(_to_model(ticket))
        return ticket

    async def save(self, ticket: Ticket) -> Ticket:
        """Write back a ticket and its full reply thread."""
        await self.update(_to_model(ticket))
        return ticket

    async def find(self, ticket_filter: Optional[TicketFilter] = None) -> list[Ticket]:
        """
        Tickets matching the filter, most recently updated first.

        Column constraints run in SQL; tag overlap is checked on the
        mapped domain objects.
        """
        query = select(TicketModel).order_by(TicketModel.updated_at.desc())
        f = ticket_filter or TicketFilter()

        if f.status is not None:
            query = query.where(TicketModel.status == f.status.value)
        if f.priority is not None:
            query = query.where(TicketModel.priority == f.priority.value)
        if f.assigned_to is not None:
            query = query.where(TicketModel.assigned_to == f.assigned_to)
        if f.user_id is not None:
            query = query.where(TicketModel.user_id == f.user_id)
        if f.session_id is not None:
            query = query.where(TicketModel.session_id == f.session_id)
        if f.search:
            pattern = f"%{f.search}%"
            query = query.where(
                or_(TicketModel.subject.ilike(pattern), TicketModel.message.ilike(pattern))
            )
        if f.date_from is not None:
            query = query.where(TicketModel.created_at >= f.date_from)
        if f.date_to is not None:
            query = query.where(TicketModel.created_at <= f.date_to)

        tickets = [_to_domain(m) for m in await self.scalars(query)]
        return [t for t in tickets if f.matches(t)]
