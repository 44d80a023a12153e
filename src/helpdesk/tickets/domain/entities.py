"""
Ticket Domain Entities
=======================

Core business objects for the ticket lifecycle.

Entities are plain dataclasses; persistence lives in the infrastructure
layer. ``plan_update`` holds the field-diff rules for versioned updates.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from helpdesk.config import EventType
from helpdesk.sla.domain.value_objects import SLACalculator

# Fields an update may carry, in the order their events are recorded
UPDATABLE_FIELDS = ("title", "description", "status", "priority", "category", "assignee_id")

# Absent or null means "leave unchanged" for these
NON_NULLABLE_FIELDS = ("title", "description", "status", "priority")


@dataclass
class Participant:
    """Someone who appears on a ticket: creator, assignee, commenter or event actor."""
    id: str
    full_name: str
    role: str


@dataclass
class Ticket:
    """
    A support request.

    ``version`` starts at 0 and increases by one on every applied update.
    """
    id: str
    title: str
    description: str
    status: str
    priority: str
    category: Optional[str]
    creator_id: str
    assignee_id: Optional[str]
    sla_due_at: datetime
    sla_breached: bool
    latest_comment_excerpt: Optional[str]
    latest_comment_at: Optional[datetime]
    version: int
    created_at: datetime
    updated_at: datetime
    creator_name: Optional[str] = None
    assignee_name: Optional[str] = None


@dataclass
class Comment:
    """An immutable message on a ticket, optionally replying to another comment."""
    id: str
    ticket_id: str
    author_id: str
    body: str
    parent_comment_id: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass
class TicketEvent:
    """One entry of the append-only audit timeline. ``actor_id`` is None for system actions."""
    id: int
    ticket_id: str
    actor_id: Optional[str]
    type: str
    payload: Dict[str, Any]
    created_at: datetime


@dataclass
class TicketDetail:
    """Read model for a single ticket."""
    ticket: Ticket
    comments: List[Comment] = field(default_factory=list)
    events: List[TicketEvent] = field(default_factory=list)
    participants: Dict[str, Participant] = field(default_factory=dict)


@dataclass
class TicketPage:
    items: List[Ticket]
    next_offset: Optional[int]


@dataclass
class TicketFilters:
    """List filters; ``restrict_to_user_id`` scopes results to tickets a requester may see."""
    status: Optional[str] = None
    assignee_id: Optional[str] = None
    breached: Optional[bool] = None
    q: Optional[str] = None
    restrict_to_user_id: Optional[str] = None
    limit: int = 20
    offset: int = 0


@dataclass
class UpdatePlan:
    """Column values to write and the events that describe them."""
    values: Dict[str, Any] = field(default_factory=dict)
    events: List[Tuple[EventType, Dict[str, Any]]] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.events


def plan_update(ticket: Ticket, changes: Dict[str, Any], now: datetime) -> UpdatePlan:
    """
    Diff supplied changes against the current ticket.

    Only keys present in ``changes`` are considered. ``None`` clears
    ``category`` and ``assignee_id`` and is ignored for the other fields.
    A priority change moves the SLA deadline to ``now`` plus the new
    window and clears the breach flag.
    """
    plan = UpdatePlan()

    for name in UPDATABLE_FIELDS:
        if name not in changes:
            continue
        new = changes[name]
        if new is None and name in NON_NULLABLE_FIELDS:
            continue
        old = getattr(ticket, name)
        if new == old:
            continue

        plan.values[name] = new
        if name == "title":
            plan.events.append((EventType.TITLE_UPDATED, {"title": new}))
        elif name == "description":
            plan.events.append((EventType.DESCRIPTION_UPDATED, {}))
        elif name == "status":
            plan.events.append((EventType.STATUS_CHANGED, {"from": old, "to": new}))
        elif name == "priority":
            plan.values["sla_due_at"] = SLACalculator.due(new, now)
            plan.values["sla_breached"] = False
            plan.events.append((EventType.PRIORITY_CHANGED, {"from": old, "to": new}))
        elif name == "category":
            plan.events.append((EventType.CATEGORY_CHANGED, {"category": new}))
        elif name == "assignee_id":
            plan.events.append((EventType.ASSIGNEE_CHANGED, {"from": old, "to": new}))

    return plan
