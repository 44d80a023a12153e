"""
Ticket Infrastructure Models
=============================

SQLAlchemy ORM models for tickets, comments and the audit timeline.

These are the database representations of the domain entities.
They belong in the infrastructure layer, not the domain layer.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.config import TicketPriority, TicketStatus
from helpdesk.core.clock import utc_now
from helpdesk.infrastructure.database import Base, UTCDateTime

# SQLite only autoincrements INTEGER PRIMARY KEY columns
EventId = BigInteger().with_variant(Integer(), "sqlite")


class TicketModel(Base):
    """
    Database model for Ticket entity.

    Maps to the 'tickets' table. Rows are never deleted.
    """
    __tablename__ = "tickets"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Content
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Workflow
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=TicketStatus.OPEN.value)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default=TicketPriority.MEDIUM.value)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # People
    creator_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    assignee_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True, index=True)

    # SLA tracking
    sla_due_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    sla_breached: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Latest comment summary (list views, search)
    latest_comment_excerpt: Mapped[Optional[str]] = mapped_column(String(280), nullable=True)
    latest_comment_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    # Optimistic concurrency
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)

    __table_args__ = (
        Index("ix_tickets_created_at", "created_at"),
        Index("ix_tickets_sla_sweep", "sla_breached", "sla_due_at"),
    )


class CommentModel(Base):
    """
    Database model for Comment entity.

    ``parent_comment_id`` is not a foreign key. A reply to an unknown
    comment is stored as given and rendered as a top-level comment.
    """
    __tablename__ = "ticket_comments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    ticket_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("tickets.id"), nullable=False)
    author_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    parent_comment_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)

    __table_args__ = (
        Index("ix_ticket_comments_ticket_created", "ticket_id", "created_at"),
    )


class TicketEventModel(Base):
    """
    Database model for the append-only ticket timeline.

    The integer id orders events recorded within the same instant.
    """
    __tablename__ = "ticket_events"

    id: Mapped[int] = mapped_column(EventId, primary_key=True, autoincrement=True)
    ticket_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("tickets.id"), nullable=False)
    actor_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    payload: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)

    __table_args__ = (
        Index("ix_ticket_events_ticket_created", "ticket_id", "created_at", "id"),
    )
