"""Domain enums package."""

from healthtracker.domain.enums.ticket_enums import TicketPriority, TicketStatus

__all__ = ["TicketPriority", "TicketStatus"]
