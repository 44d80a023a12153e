"""
Ticket Application Layer
=========================

Contains:
- Services: the ticket store (create, read, update, comment)
- DTOs: request/response models and presenters
- Timeline: human-readable event descriptions
"""

from helpdesk.tickets.application.dto import (
    CommentCreateRequest,
    TicketCreateRequest,
    TicketData,
    TicketDetailResponse,
    TicketListResponse,
    TicketSummaryResponse,
    TicketUpdateRequest,
    to_detail_response,
    to_list_response,
)
from helpdesk.tickets.application.services import TicketService
from helpdesk.tickets.application.timeline import describe_event

__all__ = [
    "CommentCreateRequest",
    "TicketCreateRequest",
    "TicketData",
    "TicketDetailResponse",
    "TicketListResponse",
    "TicketSummaryResponse",
    "TicketUpdateRequest",
    "to_detail_response",
    "to_list_response",
    "TicketService",
    "describe_event",
]
