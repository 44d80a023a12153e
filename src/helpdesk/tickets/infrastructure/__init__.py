"""
Ticket Infrastructure Layer
============================

- Models: tickets, ticket_comments and ticket_events tables
- Repositories: ticket storage, comment storage and the event recorder
"""

from helpdesk.tickets.infrastructure.models import CommentModel, TicketEventModel, TicketModel
from helpdesk.tickets.infrastructure.repositories import (
    SQLAlchemyCommentRepository,
    SQLAlchemyEventRecorder,
    SQLAlchemyTicketRepository,
)

__all__ = [
    "CommentModel",
    "TicketEventModel",
    "TicketModel",
    "SQLAlchemyCommentRepository",
    "SQLAlchemyEventRecorder",
    "SQLAlchemyTicketRepository",
]
