"""
Support Ticket Endpoints

User side (signed-in or anonymous via X-Ticket-Session) and admin side.
Tickets the caller does not own are reported as not found.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from healthtracker.api.dependencies import get_ticket_owner, get_ticket_service, require_admin
from healthtracker.config.logging_config import get_logger
from healthtracker.domain.enums.ticket_enums import TicketPriority, TicketStatus
from healthtracker.domain.models.ticket import (
    CreateReplyData,
    CreateTicketData,
    TicketFilter,
    UpdateTicketData,
)
from healthtracker.services.tickets import (
    TicketNotFoundError,
    TicketOwner,
    TicketService,
    TicketValidationError,
)

logger = get_logger(__name__)

router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])


# Request Models

class CreateTicketRequest(BaseModel):
    subject: str = Field(..., max_length=200)
    message: str = Field(..., max_length=5000)
    priority: Optional[TicketPriority] = None
    tags: Optional[list[str]] = None


class CreateReplyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., max_length=5000)
    author_name: Optional[str] = Field(None, alias="authorName", max_length=100)


class UpdateTicketRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to: Optional[str] = Field(None, alias="assignedTo")
    tags: Optional[list[str]] = None


def _not_found(e: TicketNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _invalid(e: TicketValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# User routes

@router.post("", status_code=status.HTTP_201_CREATED, summary="Open a support ticket")
async def create_ticket(
    request: CreateTicketRequest,
    owner: TicketOwner = Depends(get_ticket_owner),
    service: TicketService = Depends(get_ticket_service),
) -> dict:
    try:
        ticket = await service.create_ticket(
            CreateTicketData(
                subject=request.subject,
                message=request.message,
                priority=request.priority,
                tags=request.tags,
            ),
            owner,
        )
    except TicketValidationError as e:
        raise _invalid(e) from e
    return {"ticket": ticket.to_dict()}


@router.get("", summary="List the caller's tickets")
async def list_my_tickets(
    owner: TicketOwner = Depends(get_ticket_owner),
    service: TicketService = Depends(get_ticket_service),
) -> dict:
    tickets = await service.list_user_tickets(owner)
    return {"tickets": [t.to_dict() for t in tickets]}


@router.get("/{ticket_id}", summary="Get one of the caller's tickets")
async def get_my_ticket(
    ticket_id: str,
    owner: TicketOwner = Depends(get_ticket_owner),
    service: TicketService = Depends(get_ticket_service),
) -> dict:
    try:
        ticket = await service.get_owned_ticket(ticket_id, owner)
    except TicketNotFoundError as e:
        raise _not_found(e) from e
    return {"ticket": ticket.to_dict()}


@router.post(
    "/{ticket_id}/replies",
    status_code=status.HTTP_201_CREATED,
    summary="Reply to one of the caller's tickets",
)
async def reply_to_my_ticket(
    ticket_id: str,
    request: CreateReplyRequest,
    owner: TicketOwner = Depends(get_ticket_owner),
    service: TicketService = Depends(get_ticket_service),
) -> dict:
    try:
        await service.get_owned_ticket(ticket_id, owner)
        reply = await service.add_reply(CreateReplyData(
            ticket_id=ticket_id,
            message=request.message,
            is_from_admin=False,
            author_id=owner.user_id,
            author_name=request.author_name or "User",
        ))
    except TicketNotFoundError as e:
        raise _not_found(e) from e
    except TicketValidationError as e:
        raise _invalid(e) from e
    return {"reply": reply.to_dict()}


@router.post("/{ticket_id}/read", summary="Mark one of the caller's tickets read")
async def mark_my_ticket_read(
    ticket_id: str,
    owner: TicketOwner = Depends(get_ticket_owner),
    service: TicketService = Depends(get_ticket_service),
) -> dict:
    try:
        await service.get_owned_ticket(ticket_id, owner)
        ticket = await service.mark_read(ticket_id, is_admin=False)
    except TicketNotFoundError as e:
        raise _not_found(e) from e
    return {"ticket": ticket.to_dict()}


# Admin routes

@admin_router.get("", summary="List and filter all tickets")
async def admin_list_tickets(
    ticket_status: Optional[TicketStatus] = Query(None, alias="status"),
    priority: Optional[TicketPriority] = None,
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    user_id: Optional[str] = Query(None, alias="userId"),
    search: Optional[str] = None,
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    tags: Optional[list[str]] = Query(None),
    service: TicketService = Depends(get_ticket_service),
) -> dict:
    tickets = await service.list_tickets(TicketFilter(
        status=ticket_status,
        priority=priority,
        assigned_to=assigned_to,
        user_id=user_id,
        search=search,
        date_from=date_from,
        date_to=date_to,
        tags=tags,
    ))
    return {"tickets": [t.to_dict() for t in tickets]}


@admin_router.get("/stats", summary="Ticket counts and average timings")
async def admin_ticket_stats(
    service: TicketService = Depends(get_ticket_service),
) -> dict:
    stats = await service.get_stats()
    return {"stats": stats.to_dict()}


@admin_router.patch("/{ticket_id}", summary="Update status, priority, assignee or tags")
async def admin_update_ticket(
    ticket_id: str,
    request: UpdateTicketRequest,
    service: TicketService = Depends(get_ticket_service),
) -> dict:
    try:
        ticket = await service.update_ticket(ticket_id, UpdateTicketData(
            status=request.status,
            priority=request.priority,
            assigned_to=request.assigned_to,
            tags=request.tags,
        ))
    except TicketNotFoundError as e:
        raise _not_found(e) from e
    return {"ticket": ticket.to_dict()}


@admin_router.post(
    "/{ticket_id}/replies",
    status_code=status.HTTP_201_CREATED,
    summary="Reply as the admin",
)
async def admin_reply(
    ticket_id: str,
    request: CreateReplyRequest,
    admin: dict = Depends(require_admin),
    service: TicketService = Depends(get_ticket_service),
) -> dict:
    try:
        reply = await service.add_reply(CreateReplyData(
            ticket_id=ticket_id,
            message=request.message,
            is_from_admin=True,
            author_id=admin.get("uid"),
            author_name=request.author_name or "Support Team",
        ))
    except TicketNotFoundError as e:
        raise _not_found(e) from e
    except TicketValidationError as e:
        raise _invalid(e) from e
    return {"reply": reply.to_dict()}


@admin_router.post("/{ticket_id}/read", summary="Mark a ticket read by the admin")
async def admin_mark_read(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
) -> dict:
    try:
        ticket = await service.mark_read(ticket_id, is_admin=True)
    except TicketNotFoundError as e:
        raise _not_found(e) from e
    return {"ticket": ticket.to_dict()}
