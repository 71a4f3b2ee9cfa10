"""Support ticket services package."""

from healthtracker.services.tickets.ticket_service import (
    TicketError,
    TicketNotFoundError,
    TicketOwner,
    TicketService,
    TicketStore,
    TicketValidationError,
    compute_ticket_stats,
)

__all__ = [
    "TicketError",
    "TicketNotFoundError",
    "TicketOwner",
    "TicketService",
    "TicketStore",
    "TicketValidationError",
    "compute_ticket_stats",
]
