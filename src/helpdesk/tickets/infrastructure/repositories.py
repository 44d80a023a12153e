"""
Ticket Infrastructure Repositories
===================================

SQLAlchemy data access for tickets, comments and timeline events.

Repositories flush but never commit; TicketService owns the transaction.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID, uuid4

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from helpdesk.config import EventType
from helpdesk.identity.infrastructure.models import UserModel
from helpdesk.identity.infrastructure.repositories import parse_uuid
from helpdesk.tickets.domain.entities import Comment, Ticket, TicketEvent, TicketFilters
from helpdesk.tickets.domain.events import EventPayload, build_payload
from helpdesk.tickets.infrastructure.models import CommentModel, TicketEventModel, TicketModel

Creator = aliased(UserModel, name="creator")
Assignee = aliased(UserModel, name="assignee")


def _str_or_none(value: Optional[UUID]) -> Optional[str]:
    return str(value) if value is not None else None


def to_ticket(
    model: TicketModel,
    creator_name: Optional[str] = None,
    assignee_name: Optional[str] = None,
) -> Ticket:
    return Ticket(
        id=str(model.id),
        title=model.title,
        description=model.description,
        status=model.status,
        priority=model.priority,
        category=model.category,
        creator_id=str(model.creator_id),
        assignee_id=_str_or_none(model.assignee_id),
        sla_due_at=model.sla_due_at,
        sla_breached=model.sla_breached,
        latest_comment_excerpt=model.latest_comment_excerpt,
        latest_comment_at=model.latest_comment_at,
        version=model.version,
        created_at=model.created_at,
        updated_at=model.updated_at,
        creator_name=creator_name,
        assignee_name=assignee_name,
    )


def to_comment(model: CommentModel) -> Comment:
    return Comment(
        id=str(model.id),
        ticket_id=str(model.ticket_id),
        author_id=str(model.author_id),
        body=model.body,
        parent_comment_id=_str_or_none(model.parent_comment_id),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def to_event(model: TicketEventModel) -> TicketEvent:
    return TicketEvent(
        id=model.id,
        ticket_id=str(model.ticket_id),
        actor_id=_str_or_none(model.actor_id),
        type=model.type,
        payload=dict(model.payload or {}),
        created_at=model.created_at,
    )


class SQLAlchemyTicketRepository:
    """
    SQLAlchemy implementation of ticket storage.

    Handles persistence of Ticket entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    def _named_select(self):
        return (
            select(TicketModel, Creator.full_name, Assignee.full_name)
            .join(Creator, Creator.id == TicketModel.creator_id)
            .outerjoin(Assignee, Assignee.id == TicketModel.assignee_id)
            # Bulk breach updates bypass the identity map
            .execution_options(populate_existing=True)
        )

    async def get(self, ticket_id: str) -> Optional[Ticket]:
        """Ticket with creator and assignee names, or None (including malformed ids)."""
        ticket_uuid = parse_uuid(ticket_id)
        if ticket_uuid is None:
            return None

        result = await self._session.execute(self._named_select().where(TicketModel.id == ticket_uuid))
        row = result.first()
        if row is None:
            return None
        model, creator_name, assignee_name = row
        return to_ticket(model, creator_name, assignee_name)

    async def lock(self, ticket_id: str) -> Optional[TicketModel]:
        """
        Load a ticket row under ``SELECT ... FOR UPDATE``.

        The lock is held until the surrounding transaction ends.
        """
        ticket_uuid = parse_uuid(ticket_id)
        if ticket_uuid is None:
            return None

        stmt = (
            select(TicketModel)
            .where(TicketModel.id == ticket_uuid)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
        self,
        title: str,
        description: str,
        priority: str,
        status: str,
        category: Optional[str],
        creator_id: str,
        assignee_id: Optional[str],
        sla_due_at: datetime,
        now: datetime,
    ) -> TicketModel:
        model = TicketModel(
            id=uuid4(),
            title=title,
            description=description,
            status=status,
            priority=priority,
            category=category,
            creator_id=UUID(creator_id),
            assignee_id=parse_uuid(assignee_id),
            sla_due_at=sla_due_at,
            sla_breached=False,
            version=0,
            created_at=now,
            updated_at=now,
        )
        self._session.add(model)
        await self._session.flush()
        return model

    def apply(self, model: TicketModel, values: Dict[str, Any], now: datetime) -> None:
        """Write changed fields onto a locked row and bump its version."""
        for name, value in values.items():
            if name == "assignee_id":
                value = parse_uuid(value)
            setattr(model, name, value)
        model.updated_at = now
        model.version = model.version + 1

    async def list(self, filters: TicketFilters) -> List[Ticket]:
        """
        Newest first. Fetches ``limit + 1`` rows so the caller can tell
        whether another page exists.
        """
        stmt = self._named_select()

        if filters.restrict_to_user_id:
            user_uuid = parse_uuid(filters.restrict_to_user_id)
            stmt = stmt.where(or_(TicketModel.creator_id == user_uuid, TicketModel.assignee_id == user_uuid))

        if filters.status:
            stmt = stmt.where(TicketModel.status == filters.status)

        if filters.assignee_id:
            stmt = stmt.where(TicketModel.assignee_id == parse_uuid(filters.assignee_id))

        if filters.breached is not None:
            stmt = stmt.where(TicketModel.sla_breached.is_(filters.breached))

        if filters.q:
            needle = filters.q.lower()
            stmt = stmt.where(
                or_(
                    func.lower(TicketModel.title).contains(needle, autoescape=True),
                    func.lower(TicketModel.description).contains(needle, autoescape=True),
                    func.lower(TicketModel.latest_comment_excerpt).contains(needle, autoescape=True),
                )
            )

        stmt = (
            stmt.order_by(TicketModel.created_at.desc(), TicketModel.id.desc())
            .limit(filters.limit + 1)
            .offset(filters.offset)
        )
        result = await self._session.execute(stmt)
        return [to_ticket(model, creator_name, assignee_name) for model, creator_name, assignee_name in result.all()]


class SQLAlchemyCommentRepository:
    """Comment storage. Comments are insert-only."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(
        self,
        ticket_id: str,
        author_id: str,
        body: str,
        parent_comment_id: Optional[str],
        now: datetime,
    ) -> Comment:
        model = CommentModel(
            id=uuid4(),
            ticket_id=UUID(ticket_id),
            author_id=UUID(author_id),
            parent_comment_id=parse_uuid(parent_comment_id),
            body=body,
            created_at=now,
            updated_at=now,
        )
        self._session.add(model)
        await self._session.flush()
        return to_comment(model)

    async def list_for_ticket(self, ticket_id: str) -> List[Comment]:
        """Oldest first; comments posted in the same instant are ordered by id."""
        stmt = (
            select(CommentModel)
            .where(CommentModel.ticket_id == UUID(ticket_id))
            .order_by(CommentModel.created_at.asc(), CommentModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [to_comment(model) for model in result.scalars().all()]


class SQLAlchemyEventRecorder:
    """
    Appends timeline events inside the caller's transaction.

    There is no update or delete: the timeline is append-only.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def record(
        self,
        ticket_id: str,
        actor_id: Optional[str],
        event_type: EventType,
        payload: Union[EventPayload, Dict[str, Any]],
        now: datetime,
    ) -> TicketEvent:
        if not isinstance(payload, EventPayload):
            payload = build_payload(event_type, payload)

        model = TicketEventModel(
            ticket_id=UUID(ticket_id),
            actor_id=parse_uuid(actor_id),
            type=event_type.value,
            payload=payload.to_json(),
            created_at=now,
        )
        self._session.add(model)
        await self._session.flush()
        return to_event(model)

    async def list_for_ticket(self, ticket_id: str) -> List[TicketEvent]:
        """Oldest first; the id breaks ties between events recorded in the same instant."""
        stmt = (
            select(TicketEventModel)
            .where(TicketEventModel.ticket_id == UUID(ticket_id))
            .order_by(TicketEventModel.created_at.asc(), TicketEventModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [to_event(model) for model in result.scalars().all()]
