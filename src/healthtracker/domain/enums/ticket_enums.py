"""
Support Ticket Enumerations

Status and priority values shared by the ticket domain model,
the persistence layer and the API.
"""

from enum import StrEnum


class TicketStatus(StrEnum):
    """
    Support ticket lifecycle status.

    Replies drive the status automatically: an admin reply hands the
    ticket back to the user, a user reply re-opens it.
    """

    OPEN = "open"
    """Awaiting admin attention."""

    IN_PROGRESS = "in_progress"
    """An admin is working on the ticket."""

    WAITING_FOR_RESPONSE = "waiting_for_response"
    """Admin replied; waiting on the user."""

    RESOLVED = "resolved"
    """Issue addressed."""

    CLOSED = "closed"
    """No further action."""

    @property
    def is_finished(self) -> bool:
        """Whether the ticket counts toward resolution-time statistics."""
        return self in (TicketStatus.RESOLVED, TicketStatus.CLOSED)


class TicketPriority(StrEnum):
    """Support ticket priority."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"
