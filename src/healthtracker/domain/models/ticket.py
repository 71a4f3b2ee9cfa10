"""
Support Ticket Domain Model

Tickets are opened by authenticated users (identified by Firebase uid)
or anonymous visitors (identified by a generated session id), and
answered by the admin. Replies are embedded in the ticket.
"""

import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from healthtracker.domain.enums.ticket_enums import TicketPriority, TicketStatus

_BASE36 = string.digits + string.ascii_lowercase


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC; aware ones are converted."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _timestamped_id(prefix: str) -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def generate_session_id() -> str:
    """Generate an anonymous ticket session id (session_<ms>_<9 chars>)."""
    return _timestamped_id("session")


def generate_reply_id() -> str:
    """Generate a reply id (reply_<ms>_<9 chars>)."""
    return _timestamped_id("reply")


@dataclass
class TicketAttachment:
    """File attached to a reply."""

    id: str
    name: str
    url: str
    size: int
    type: str
    uploaded_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "size": self.size,
            "type": self.type,
            "uploadedAt": self.uploaded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TicketAttachment":
        uploaded_at = data.get("uploadedAt")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            url=data.get("url", ""),
            size=int(data.get("size", 0)),
            type=data.get("type", ""),
            uploaded_at=datetime.fromisoformat(uploaded_at) if uploaded_at else utc_now(),
        )


@dataclass
class TicketReply:
    """A single message in a ticket thread."""

    ticket_id: str
    message: str
    is_from_admin: bool
    author_name: str
    id: str = field(default_factory=generate_reply_id)
    author_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    is_read: bool = False
    attachments: list[TicketAttachment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticketId": self.ticket_id,
            "message": self.message,
            "isFromAdmin": self.is_from_admin,
            "authorId": self.author_id,
            "authorName": self.author_name,
            "createdAt": self.created_at.isoformat(),
            "isRead": self.is_read,
            "attachments": [a.to_dict() for a in self.attachments],
        }


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Ticket:
    """
    Support ticket entity.

    Attributes:
        id: Ticket identifier
        subject: Short summary
        message: Initial message body
        status: Lifecycle status
        priority: Priority
        session_id: Anonymous session that opened the ticket
        user_id: Firebase uid when opened by a signed-in user
        replies: Thread of replies, oldest first
        tags: Free-form labels
        assigned_to: Admin uid handling the ticket
        is_read: Whether the latest activity has been read
    """

    subject: str
    message: str
    session_id: str
    id: str = field(default_factory=lambda: str(uuid4()))
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.NORMAL
    user_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    replies: list[TicketReply] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    assigned_to: Optional[str] = None
    is_read: bool = False
    user_last_read: Optional[datetime] = None
    admin_last_read: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Serialize for the API (camelCase, ISO-8601 timestamps)."""
        return {
            "id": self.id,
            "subject": self.subject,
            "message": self.message,
            "status": self.status.value,
            "priority": self.priority.value,
            "userId": self.user_id,
            "sessionId": self.session_id,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "replies": [r.to_dict() for r in self.replies],
            "tags": list(self.tags),
            "assignedTo": self.assigned_to,
            "isRead": self.is_read,
            "userLastRead": _iso(self.user_last_read),
            "adminLastRead": _iso(self.admin_last_read),
        }

    def add_reply(self, reply: TicketReply) -> TicketReply:
        """
        Append a reply and move the ticket to the side that must act next.

        Admin replies wait on the user; user replies re-open the ticket.
        """
        now = reply.created_at
        self.replies.append(reply)
        self.updated_at = now

        if reply.is_from_admin:
            self.status = TicketStatus.WAITING_FOR_RESPONSE
            self.admin_last_read = now
        else:
            self.status = TicketStatus.OPEN
            self.user_last_read = now

        return reply

    def mark_read(self, is_admin: bool = False) -> None:
        """Mark the ticket read by the admin or the owner."""
        now = utc_now()
        self.is_read = True
        self.updated_at = now
        if is_admin:
            self.admin_last_read = now
        else:
            self.user_last_read = now

    def apply_update(self, update: "UpdateTicketData") -> None:
        """Apply an admin update; only provided fields change."""
        if update.status is not None:
            self.status = update.status
        if update.priority is not None:
            self.priority = update.priority
        if update.assigned_to is not None:
            self.assigned_to = update.assigned_to
        if update.tags is not None:
            self.tags = list(update.tags)
        self.updated_at = utc_now()

    def first_admin_reply(self) -> Optional[TicketReply]:
        return next((r for r in self.replies if r.is_from_admin), None)

    def is_owned_by(self, user_id: Optional[str], session_id: Optional[str]) -> bool:
        """Owner check: uid wins when the ticket has one, else the session."""
        if self.user_id:
            return user_id == self.user_id
        return session_id is not None and session_id == self.session_id


@dataclass
class TicketFilter:
    """Admin-side ticket query. Unset fields do not constrain."""

    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to: Optional[str] = None
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    search: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    tags: Optional[list[str]] = None

    def __post_init__(self) -> None:
        # Query strings such as dateFrom=2020-01-01 parse without an offset
        self.date_from = as_utc(self.date_from)
        self.date_to = as_utc(self.date_to)

    def matches(self, ticket: Ticket) -> bool:
        if self.status is not None and ticket.status != self.status:
            return False
        if self.priority is not None and ticket.priority != self.priority:
            return False
        if self.assigned_to is not None and ticket.assigned_to != self.assigned_to:
            return False
        if self.user_id is not None and ticket.user_id != self.user_id:
            return False
        if self.session_id is not None and ticket.session_id != self.session_id:
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in ticket.subject.lower() and needle not in ticket.message.lower():
                return False
        if self.date_from is not None and ticket.created_at < self.date_from:
            return False
        if self.date_to is not None and ticket.created_at > self.date_to:
            return False
        if self.tags and not set(self.tags) & set(ticket.tags):
            return False
        return True


@dataclass
class TicketStats:
    """Aggregate ticket counts and timings (hours)."""

    total: int = 0
    open: int = 0
    in_progress: int = 0
    waiting_for_response: int = 0
    resolved: int = 0
    closed: int = 0
    average_response_time: float = 0.0
    average_resolution_time: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "open": self.open,
            "inProgress": self.in_progress,
            "waitingForResponse": self.waiting_for_response,
            "resolved": self.resolved,
            "closed": self.closed,
            "averageResponseTime": self.average_response_time,
            "averageResolutionTime": self.average_resolution_time,
        }


@dataclass
class CreateTicketData:
    subject: str
    message: str
    priority: Optional[TicketPriority] = None
    tags: Optional[list[str]] = None


@dataclass
class CreateReplyData:
    ticket_id: str
    message: str
    is_from_admin: bool
    author_name: str
    author_id: Optional[str] = None


@dataclass
class UpdateTicketData:
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to: Optional[str] = None
    tags: Optional[list[str]] = None
