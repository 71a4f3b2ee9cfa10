"""
Support Ticket Database Models

Tickets and their reply thread. Tags and attachments are stored as
JSONB; everything queried by the admin panel is a real column.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from healthtracker.infrastructure.database.connection import Base


class TicketModel(Base):
    """
    Ticket table ORM model.

    Table: tickets
    """

    __tablename__ = "tickets"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, doc="Ticket identifier")

    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[str] = mapped_column(
        String(32),
        default="open",
        nullable=False,
        index=True,
        doc="open, in_progress, waiting_for_response, resolved, closed",
    )
    priority: Mapped[str] = mapped_column(
        String(16),
        default="normal",
        nullable=False,
        index=True,
        doc="low, normal, high, urgent",
    )

    # Ownership: Firebase uid for signed-in users, session id always
    user_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    tags: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    user_last_read: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    admin_last_read: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
        index=True,
    )

    replies: Mapped[list["TicketReplyModel"]] = relationship(
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="TicketReplyModel.created_at",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_tickets_status_updated", "status", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<TicketModel(id={self.id}, status={self.status})>"


class TicketReplyModel(Base):
    """
    Ticket reply ORM model.

    Table: ticket_replies
    """

    __tablename__ = "ticket_replies"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    ticket_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("tickets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_from_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    author_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    author_name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    attachments: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
    )

    ticket: Mapped[TicketModel] = relationship(back_populates="replies")

    def __repr__(self) -> str:
        return f"<TicketReplyModel(id={self.id}, ticket_id={self.ticket_id})>"
