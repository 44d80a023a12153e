"""Tests for event payload models and timeline descriptions."""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from helpdesk.tickets.application import describe_event
from helpdesk.tickets.domain import Participant, TicketEvent, build_payload
from helpdesk.tickets.domain.events import StatusChangedPayload

NOW = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)

PARTICIPANTS = {
    "u-agent": Participant(id="u-agent", full_name="Alex Agent", role="agent"),
    "u-admin": Participant(id="u-admin", full_name="Ada Admin", role="admin"),
}


def _event(event_type, payload=None, actor_id="u-agent"):
    return TicketEvent(
        id=1,
        ticket_id="t-1",
        actor_id=actor_id,
        type=event_type,
        payload=payload or {},
        created_at=NOW,
    )


# =============================================================================
# Payload models
# =============================================================================

def test_status_payload_uses_wire_keys():
    payload = build_payload("STATUS_CHANGED", {"from": "open", "to": "resolved"})
    assert isinstance(payload, StatusChangedPayload)
    assert payload.to_json() == {"from": "open", "to": "resolved"}


def test_comment_payload_is_camel_cased():
    payload = build_payload("COMMENT_ADDED", {"commentId": "c-1", "parentCommentId": None})
    assert payload.to_json() == {"commentId": "c-1", "parentCommentId": None}


def test_payload_rejects_unknown_keys():
    with pytest.raises(ValidationError):
        build_payload("TITLE_UPDATED", {"title": "New", "extra": True})


def test_unknown_event_type_is_rejected():
    with pytest.raises(KeyError):
        build_payload("TICKET_DELETED", {})


# =============================================================================
# Descriptions
# =============================================================================

def test_created():
    assert describe_event(_event("TICKET_CREATED"), PARTICIPANTS) == "Alex Agent created the ticket"


def test_status_change_is_humanized():
    event = _event("STATUS_CHANGED", {"from": "open", "to": "in_progress"})
    assert describe_event(event, PARTICIPANTS) == "Alex Agent changed status from open to in progress"


def test_priority_change():
    event = _event("PRIORITY_CHANGED", {"from": "low", "to": "urgent"}, actor_id="u-admin")
    assert describe_event(event, PARTICIPANTS) == "Ada Admin changed priority from low to urgent"


def test_reassignment_resolves_names():
    event = _event("ASSIGNEE_CHANGED", {"from": None, "to": "u-admin"})
    assert describe_event(event, PARTICIPANTS) == "Alex Agent reassigned the ticket from Unassigned to Ada Admin"


def test_reassignment_to_unknown_user():
    event = _event("ASSIGNEE_CHANGED", {"from": "u-admin", "to": "u-gone"})
    assert describe_event(event, PARTICIPANTS) == "Alex Agent reassigned the ticket from Ada Admin to Unknown user"


def test_category_cleared():
    event = _event("CATEGORY_CHANGED", {"category": None})
    assert describe_event(event, PARTICIPANTS) == "Alex Agent set category to Unassigned"


def test_system_actor():
    event = _event("TICKET_CREATED", actor_id=None)
    assert describe_event(event, PARTICIPANTS) == "System created the ticket"


def test_unknown_actor():
    event = _event("COMMENT_ADDED", {"commentId": "c-1"}, actor_id="u-gone")
    assert describe_event(event, PARTICIPANTS) == "Unknown user added a comment"


def test_unrecognized_type_still_renders():
    assert describe_event(_event("TICKET_MERGED"), PARTICIPANTS) == "Alex Agent recorded TICKET MERGED"
