"""
Ticket Domain Layer
===================

Contains:
- Entities: Ticket, Comment, TicketEvent and read models
- Event payloads: one model per timeline event type
- Comment tree: flat comments to threaded replies
- Access policy: role and ownership rules

This layer has no dependencies on infrastructure.
"""

from helpdesk.tickets.domain.access_policy import (
    can_access,
    ensure_can_access,
    ensure_workflow_fields_allowed,
)
from helpdesk.tickets.domain.comment_tree import CommentNode, build_comment_tree
from helpdesk.tickets.domain.entities import (
    Comment,
    Participant,
    Ticket,
    TicketDetail,
    TicketEvent,
    TicketFilters,
    TicketPage,
    UpdatePlan,
    plan_update,
)
from helpdesk.tickets.domain.events import build_payload

__all__ = [
    "can_access",
    "ensure_can_access",
    "ensure_workflow_fields_allowed",
    "CommentNode",
    "build_comment_tree",
    "Comment",
    "Participant",
    "Ticket",
    "TicketDetail",
    "TicketEvent",
    "TicketFilters",
    "TicketPage",
    "UpdatePlan",
    "plan_update",
    "build_payload",
]
