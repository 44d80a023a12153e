"""Human-readable rendering of timeline events."""

from typing import Any, Dict, Mapping, Optional

from helpdesk.config import EventType
from helpdesk.tickets.domain.entities import Participant, TicketEvent

SYSTEM_ACTOR = "System"
UNKNOWN_USER = "Unknown user"
UNASSIGNED = "Unassigned"


def humanize(value: Optional[str]) -> str:
    """``in_progress`` -> ``in progress``; empty values read as Unassigned."""
    if not value:
        return UNASSIGNED
    return str(value).replace("_", " ")


def participant_name(user_id: Optional[str], participants: Mapping[str, Participant], empty: str) -> str:
    if not user_id:
        return empty
    participant = participants.get(user_id)
    return participant.full_name if participant else UNKNOWN_USER


def describe_event(event: TicketEvent, participants: Mapping[str, Participant]) -> str:
    actor = participant_name(event.actor_id, participants, SYSTEM_ACTOR)
    payload: Dict[str, Any] = event.payload or {}

    if event.type == EventType.TICKET_CREATED.value:
        return f"{actor} created the ticket"
    if event.type == EventType.STATUS_CHANGED.value:
        return f"{actor} changed status from {humanize(payload.get('from'))} to {humanize(payload.get('to'))}"
    if event.type == EventType.PRIORITY_CHANGED.value:
        return f"{actor} changed priority from {humanize(payload.get('from'))} to {humanize(payload.get('to'))}"
    if event.type == EventType.ASSIGNEE_CHANGED.value:
        previous = participant_name(payload.get("from"), participants, UNASSIGNED)
        current = participant_name(payload.get("to"), participants, UNASSIGNED)
        return f"{actor} reassigned the ticket from {previous} to {current}"
    if event.type == EventType.CATEGORY_CHANGED.value:
        return f"{actor} set category to {humanize(payload.get('category'))}"
    if event.type == EventType.TITLE_UPDATED.value:
        return f"{actor} updated the title"
    if event.type == EventType.DESCRIPTION_UPDATED.value:
        return f"{actor} updated the description"
    if event.type == EventType.COMMENT_ADDED.value:
        return f"{actor} added a comment"
    return f"{actor} recorded {humanize(event.type)}"
