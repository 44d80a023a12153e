"""
Ticket Event Payloads
======================

One payload model per event type. Stored JSON uses the wire key names
(``from``, ``to``, ``commentId``, ...), so the timeline can be returned to
clients without reshaping.
"""

from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from helpdesk.config import EventType


class EventPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class TicketCreatedPayload(EventPayload):
    priority: str
    assignee_id: Optional[str] = None


class TitleUpdatedPayload(EventPayload):
    title: str


class DescriptionUpdatedPayload(EventPayload):
    """The new description is on the ticket; the event only marks the edit."""


class StatusChangedPayload(EventPayload):
    from_: str = Field(alias="from")
    to: str


class PriorityChangedPayload(EventPayload):
    from_: str = Field(alias="from")
    to: str


class CategoryChangedPayload(EventPayload):
    category: Optional[str] = None


class AssigneeChangedPayload(EventPayload):
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None


class CommentAddedPayload(EventPayload):
    comment_id: str
    parent_comment_id: Optional[str] = None


PAYLOAD_MODELS: Dict[str, Type[EventPayload]] = {
    EventType.TICKET_CREATED.value: TicketCreatedPayload,
    EventType.TITLE_UPDATED.value: TitleUpdatedPayload,
    EventType.DESCRIPTION_UPDATED.value: DescriptionUpdatedPayload,
    EventType.STATUS_CHANGED.value: StatusChangedPayload,
    EventType.PRIORITY_CHANGED.value: PriorityChangedPayload,
    EventType.CATEGORY_CHANGED.value: CategoryChangedPayload,
    EventType.ASSIGNEE_CHANGED.value: AssigneeChangedPayload,
    EventType.COMMENT_ADDED.value: CommentAddedPayload,
}


def build_payload(event_type: Union[EventType, str], data: Dict[str, Any]) -> EventPayload:
    """
    Validate raw payload data for an event type.

    Raises:
        KeyError: unknown event type
        pydantic.ValidationError: data does not fit the type's payload
    """
    key = event_type.value if isinstance(event_type, EventType) else event_type
    return PAYLOAD_MODELS[key].model_validate(data)
