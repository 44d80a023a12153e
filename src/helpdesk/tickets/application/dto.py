"""
Ticket Application DTOs
========================

Data Transfer Objects for the ticket API.

Requests accept camelCase keys; responses are emitted in camelCase.
Status and priority arrive as plain strings so the service can reject
unknown values with INVALID_STATUS / INVALID_PRIORITY instead of a
generic validation error.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional
from uuid import UUID

from pydantic import BeforeValidator, Field

from helpdesk.shared.api.schemas import CamelModel
from helpdesk.tickets.application.timeline import (
    SYSTEM_ACTOR,
    UNKNOWN_USER,
    describe_event,
)
from helpdesk.tickets.domain.comment_tree import CommentNode, build_comment_tree
from helpdesk.tickets.domain.entities import Participant, Ticket, TicketDetail, TicketEvent, TicketPage


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


Text = Annotated[str, BeforeValidator(_strip)]


# ========== Request DTOs ==========

class TicketCreateRequest(CamelModel):
    """Body for POST /tickets."""
    title: Text = Field(..., min_length=3, max_length=200, description="Short summary")
    description: Text = Field(..., min_length=10, description="Full problem statement")
    priority: Optional[str] = Field(None, description="low | medium | high | urgent (agents/admins only, default medium)")
    category: Optional[Text] = Field(None, max_length=100, description="Free-form category")
    assignee_id: Optional[UUID] = Field(None, description="Assignee user id (agents/admins only)")

    def supplied_fields(self) -> List[str]:
        """Wire names of the keys present in the request body."""
        return [type(self).model_fields[name].alias or name for name in self.model_fields_set]


class TicketUpdateRequest(CamelModel):
    """
    Body for PATCH /tickets/{id}.

    Keys that are absent are left unchanged. ``category: null`` and
    ``assigneeId: null`` clear the value.
    """
    title: Optional[Text] = Field(None, min_length=3, max_length=200)
    description: Optional[Text] = Field(None, min_length=10)
    status: Optional[str] = Field(None, description="open | in_progress | resolved | closed")
    priority: Optional[str] = Field(None, description="low | medium | high | urgent")
    category: Optional[Text] = Field(None, max_length=100)
    assignee_id: Optional[UUID] = None
    version: int = Field(..., ge=0, description="Version the client last read")

    def supplied_fields(self) -> List[str]:
        return [
            type(self).model_fields[name].alias or name
            for name in self.model_fields_set
            if name != "version"
        ]

    def changes(self) -> Dict[str, Any]:
        """Supplied fields keyed by attribute name, ids as strings."""
        changes = {}
        for name in self.model_fields_set:
            if name == "version":
                continue
            value = getattr(self, name)
            if isinstance(value, UUID):
                value = str(value)
            changes[name] = value
        return changes


class CommentCreateRequest(CamelModel):
    """Body for POST /tickets/{id}/comments."""
    body: Text = Field(..., min_length=1, description="Comment text")
    parent_comment_id: Optional[UUID] = Field(None, description="Comment being replied to")


# ========== Response DTOs ==========

class ParticipantResponse(CamelModel):
    id: str
    full_name: str
    role: str


class CommentResponse(CamelModel):
    id: str
    body: str
    author_id: str
    author_name: str
    author_role: str
    parent_comment_id: Optional[str] = None
    created_at: datetime
    replies: List["CommentResponse"] = Field(default_factory=list)


class TimelineEventResponse(CamelModel):
    id: int
    actor_id: Optional[str] = None
    actor_name: str
    actor_role: str
    type: str
    description: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class TicketSummaryResponse(CamelModel):
    """List item: everything but the description and related collections."""
    id: str
    title: str
    status: str
    priority: str
    category: Optional[str] = None
    creator_id: str
    creator_name: Optional[str] = None
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    sla_due_at: datetime
    sla_breached: bool
    latest_comment_excerpt: Optional[str] = None
    latest_comment_at: Optional[datetime] = None
    version: int
    created_at: datetime
    updated_at: datetime


class TicketDetailResponse(TicketSummaryResponse):
    description: str
    participants: Dict[str, ParticipantResponse] = Field(default_factory=dict)
    comments: List[CommentResponse] = Field(default_factory=list)
    timeline: List[TimelineEventResponse] = Field(default_factory=list)


class TicketData(CamelModel):
    ticket: TicketDetailResponse


class TicketListResponse(CamelModel):
    items: List[TicketSummaryResponse]
    next_offset: Optional[int] = None


# ========== Presenters ==========

def _summary_fields(ticket: Ticket) -> Dict[str, Any]:
    return dict(
        id=ticket.id,
        title=ticket.title,
        status=ticket.status,
        priority=ticket.priority,
        category=ticket.category,
        creator_id=ticket.creator_id,
        creator_name=ticket.creator_name,
        assignee_id=ticket.assignee_id,
        assignee_name=ticket.assignee_name,
        sla_due_at=ticket.sla_due_at,
        sla_breached=ticket.sla_breached,
        latest_comment_excerpt=ticket.latest_comment_excerpt,
        latest_comment_at=ticket.latest_comment_at,
        version=ticket.version,
        created_at=ticket.created_at,
        updated_at=ticket.updated_at,
    )


def _comment_response(node: CommentNode, participants: Dict[str, Participant]) -> CommentResponse:
    # Iterative so deep reply chains cannot hit the recursion limit
    root = _comment_shell(node, participants)
    stack = [(node, root)]
    while stack:
        current, response = stack.pop()
        for reply in current.replies:
            child = _comment_shell(reply, participants)
            response.replies.append(child)
            stack.append((reply, child))
    return root


def _comment_shell(node: CommentNode, participants: Dict[str, Participant]) -> CommentResponse:
    comment = node.comment
    author = participants.get(comment.author_id)
    return CommentResponse(
        id=comment.id,
        body=comment.body,
        author_id=comment.author_id,
        author_name=author.full_name if author else UNKNOWN_USER,
        author_role=author.role if author else "unknown",
        parent_comment_id=comment.parent_comment_id,
        created_at=comment.created_at,
    )


def _timeline_response(event: TicketEvent, participants: Dict[str, Participant]) -> TimelineEventResponse:
    actor = participants.get(event.actor_id) if event.actor_id else None
    if event.actor_id is None:
        actor_name, actor_role = SYSTEM_ACTOR, "system"
    elif actor is None:
        actor_name, actor_role = UNKNOWN_USER, "unknown"
    else:
        actor_name, actor_role = actor.full_name, actor.role
    return TimelineEventResponse(
        id=event.id,
        actor_id=event.actor_id,
        actor_name=actor_name,
        actor_role=actor_role,
        type=event.type,
        description=describe_event(event, participants),
        payload=event.payload,
        created_at=event.created_at,
    )


def to_summary_response(ticket: Ticket) -> TicketSummaryResponse:
    return TicketSummaryResponse(**_summary_fields(ticket))


def to_detail_response(detail: TicketDetail) -> TicketDetailResponse:
    participants = detail.participants
    return TicketDetailResponse(
        **_summary_fields(detail.ticket),
        description=detail.ticket.description,
        participants={
            user_id: ParticipantResponse(id=p.id, full_name=p.full_name, role=p.role)
            for user_id, p in participants.items()
        },
        comments=[_comment_response(node, participants) for node in build_comment_tree(detail.comments)],
        timeline=[_timeline_response(event, participants) for event in detail.events],
    )


def to_list_response(page: TicketPage) -> TicketListResponse:
    return TicketListResponse(
        items=[to_summary_response(ticket) for ticket in page.items],
        next_offset=page.next_offset,
    )
