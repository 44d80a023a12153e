"""
Ticket Application Services
============================

The ticket store: creation, reads, versioned updates and comments.

Every public method is one unit of work. Mutations lock the ticket row
(``SELECT ... FOR UPDATE``) for the whole read-check-write-record
sequence and commit once, so the row change and its timeline events land
together or not at all.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import (
    COMMENT_EXCERPT_LENGTH,
    VALID_PRIORITIES,
    VALID_STATUSES,
    EventType,
    TicketPriority,
    TicketStatus,
)
from helpdesk.core.clock import Clock, utc_now
from helpdesk.core.exceptions import (
    InvalidPriorityException,
    InvalidStatusException,
    TicketNotFoundException,
    ValidationException,
    VersionConflictException,
)
from helpdesk.identity.domain.entities import Principal
from helpdesk.identity.infrastructure.repositories import SQLAlchemyUserRepository, parse_uuid
from helpdesk.shared.infrastructure.logging import get_logger
from helpdesk.sla.application.services import SLABreachService
from helpdesk.sla.domain.value_objects import SLACalculator
from helpdesk.sla.infrastructure.repositories import SQLAlchemySLABreachRepository
from helpdesk.tickets.domain.access_policy import ensure_can_access, ensure_workflow_fields_allowed
from helpdesk.tickets.domain.entities import (
    Participant,
    TicketDetail,
    TicketFilters,
    TicketPage,
    plan_update,
)
from helpdesk.tickets.infrastructure.repositories import (
    SQLAlchemyCommentRepository,
    SQLAlchemyEventRecorder,
    SQLAlchemyTicketRepository,
    to_ticket,
)

logger = get_logger(__name__)


def validate_status(status: Optional[str]) -> None:
    if status is not None and status not in VALID_STATUSES:
        raise InvalidStatusException(status)


def validate_priority(priority: Optional[str]) -> None:
    if priority is not None and priority not in VALID_PRIORITIES:
        raise InvalidPriorityException(priority)


class TicketService:
    """
    Service for the ticket lifecycle.

    Coordinates the access policy, SLA rules and the ticket, comment and
    event repositories within one session.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utc_now):
        self._session = session
        self._clock = clock
        self._tickets = SQLAlchemyTicketRepository(session)
        self._comments = SQLAlchemyCommentRepository(session)
        self._events = SQLAlchemyEventRecorder(session)
        self._users = SQLAlchemyUserRepository(session)
        self._sla = SLABreachService(SQLAlchemySLABreachRepository(session), clock)

    @asynccontextmanager
    async def _transaction(self):
        try:
            yield
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

    async def _ensure_assignee_exists(self, assignee_id: Optional[str]) -> None:
        if assignee_id and not await self._users.exists(assignee_id):
            raise ValidationException("Assignee does not exist", field="assigneeId")

    # ========== Commands ==========

    async def create_ticket(
        self,
        principal: Principal,
        title: str,
        description: str,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        assignee_id: Optional[str] = None,
    ) -> TicketDetail:
        """
        Open a ticket at version 0 with status ``open``.

        Raises:
            ForbiddenException: a requester supplied priority or assignee
            InvalidPriorityException: priority outside the enumerated set
            ValidationException: assignee does not exist
        """
        ensure_workflow_fields_allowed(
            principal,
            [name for name, value in (("priority", priority), ("assigneeId", assignee_id)) if value is not None],
        )
        priority = priority or TicketPriority.MEDIUM.value
        validate_priority(priority)

        async with self._transaction():
            await self._ensure_assignee_exists(assignee_id)

            now = self._clock()
            model = await self._tickets.create(
                title=title,
                description=description,
                priority=priority,
                status=TicketStatus.OPEN.value,
                category=category,
                creator_id=principal.user_id,
                assignee_id=assignee_id,
                sla_due_at=SLACalculator.due(priority, now),
                now=now,
            )
            ticket_id = str(model.id)
            await self._events.record(
                ticket_id,
                principal.user_id,
                EventType.TICKET_CREATED,
                {"priority": priority, "assigneeId": assignee_id},
                now,
            )

        logger.info(
            "Ticket created",
            extra={"ticket_id": ticket_id, "priority": priority, "creator_id": principal.user_id}
        )
        return await self.get_ticket(ticket_id, principal)

    async def update_ticket(
        self,
        ticket_id: str,
        changes: Dict[str, Any],
        expected_version: int,
        principal: Principal,
    ) -> TicketDetail:
        """
        Apply a partial update if ``expected_version`` is still current.

        Only fields present in ``changes`` are compared. When nothing
        differs the ticket is left untouched: no write, no event, same
        version.

        Raises:
            ForbiddenException: a requester changed status, priority or assignee
            InvalidStatusException / InvalidPriorityException: before any storage access
            TicketNotFoundException: unknown or malformed id
            ForbiddenException: principal may not access the ticket
            VersionConflictException: stored version differs
            ValidationException: assignee does not exist
        """
        ensure_workflow_fields_allowed(principal, [to_camel(name) for name in changes])
        validate_status(changes.get("status"))
        validate_priority(changes.get("priority"))

        async with self._transaction():
            model = await self._tickets.lock(ticket_id)
            if model is None:
                raise TicketNotFoundException(ticket_id)

            ticket = to_ticket(model)
            ensure_can_access(principal, ticket)

            if model.version != expected_version:
                logger.warning(
                    "Ticket version conflict",
                    extra={
                        "ticket_id": ticket.id,
                        "expected_version": expected_version,
                        "current_version": model.version,
                        "actor_id": principal.user_id,
                    }
                )
                raise VersionConflictException(ticket.id, expected_version, model.version)

            await self._ensure_assignee_exists(changes.get("assignee_id"))

            now = self._clock()
            plan = plan_update(ticket, changes, now)
            if not plan.is_noop:
                self._tickets.apply(model, plan.values, now)
                await self._session.flush()
                for event_type, payload in plan.events:
                    await self._events.record(ticket.id, principal.user_id, event_type, payload, now)

        if plan.is_noop:
            logger.debug("Ticket update had no changes", extra={"ticket_id": ticket.id})
        else:
            logger.info(
                "Ticket updated",
                extra={
                    "ticket_id": ticket.id,
                    "version": expected_version + 1,
                    "changed_fields": sorted(plan.values),
                    "actor_id": principal.user_id,
                }
            )
        return await self.get_ticket(ticket.id, principal)

    async def add_comment(
        self,
        ticket_id: str,
        principal: Principal,
        body: str,
        parent_comment_id: Optional[str] = None,
    ) -> TicketDetail:
        """
        Append a comment and refresh the ticket's latest-comment summary.

        The ticket's ``version`` is not incremented.
        """
        async with self._transaction():
            model = await self._tickets.lock(ticket_id)
            if model is None:
                raise TicketNotFoundException(ticket_id)

            ticket = to_ticket(model)
            ensure_can_access(principal, ticket)

            now = self._clock()
            comment = await self._comments.add(ticket.id, principal.user_id, body, parent_comment_id, now)

            model.latest_comment_excerpt = body[:COMMENT_EXCERPT_LENGTH]
            model.latest_comment_at = now
            model.updated_at = now

            await self._events.record(
                ticket.id,
                principal.user_id,
                EventType.COMMENT_ADDED,
                {"commentId": comment.id, "parentCommentId": comment.parent_comment_id},
                now,
            )

        logger.info(
            "Comment added",
            extra={"ticket_id": ticket.id, "comment_id": comment.id, "author_id": principal.user_id}
        )
        return await self.get_ticket(ticket.id, principal)

    # ========== Queries ==========

    async def get_ticket(self, ticket_id: str, principal: Principal) -> TicketDetail:
        """
        Ticket with comments, timeline and participant directory.

        Overdue tickets are flagged before reading.
        """
        async with self._transaction():
            await self._sla.sweep()
            detail = await self._load_detail(ticket_id)

        if detail is None:
            raise TicketNotFoundException(ticket_id)
        ensure_can_access(principal, detail.ticket)
        return detail

    async def list_tickets(self, principal: Principal, filters: TicketFilters) -> TicketPage:
        """
        Newest tickets first, one page at a time.

        Requesters only see tickets they created or are assigned to.
        """
        validate_status(filters.status)
        if filters.assignee_id and parse_uuid(filters.assignee_id) is None:
            raise ValidationException("assigneeId must be a valid id", field="assigneeId")
        if principal.is_requester:
            filters.restrict_to_user_id = principal.user_id

        async with self._transaction():
            await self._sla.sweep()
            rows = await self._tickets.list(filters)

        has_more = len(rows) > filters.limit
        return TicketPage(
            items=rows[:filters.limit],
            next_offset=filters.offset + filters.limit if has_more else None,
        )

    async def _load_detail(self, ticket_id: str) -> Optional[TicketDetail]:
        ticket = await self._tickets.get(ticket_id)
        if ticket is None:
            return None

        comments = await self._comments.list_for_ticket(ticket.id)
        events = await self._events.list_for_ticket(ticket.id)

        participant_ids = {ticket.creator_id}
        if ticket.assignee_id:
            participant_ids.add(ticket.assignee_id)
        participant_ids.update(comment.author_id for comment in comments)
        participant_ids.update(event.actor_id for event in events if event.actor_id)

        users = await self._users.get_many(participant_ids)
        participants = {
            user.id: Participant(id=user.id, full_name=user.full_name, role=user.role)
            for user in users
        }
        return TicketDetail(ticket=ticket, comments=comments, events=events, participants=participants)
