"""
Ticket Controllers (API Routes)
================================

FastAPI routes for tickets and comments.

Controllers are thin - they authenticate, apply the workflow-field rule
and delegate to TicketService.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import SUPPORT_ROLES
from helpdesk.core.clock import Clock
from helpdesk.identity.application import (
    SupportMemberResponse,
    SupportTeamResponse,
    UserService,
)
from helpdesk.identity.domain.entities import Principal
from helpdesk.identity.interfaces.dependencies import get_current_principal, require_roles
from helpdesk.infrastructure.database import get_session
from helpdesk.shared.api.dependencies import get_clock
from helpdesk.shared.api.schemas import ERROR_RESPONSES, Envelope
from helpdesk.shared.infrastructure.logging import get_logger
from helpdesk.tickets.application import (
    CommentCreateRequest,
    TicketCreateRequest,
    TicketData,
    TicketListResponse,
    TicketService,
    TicketUpdateRequest,
    to_detail_response,
    to_list_response,
)
from helpdesk.tickets.domain.access_policy import ensure_workflow_fields_allowed
from helpdesk.tickets.domain.entities import TicketFilters

logger = get_logger(__name__)
router = APIRouter(prefix="/tickets", tags=["Tickets"], responses=ERROR_RESPONSES)


# ========== Example payloads for Swagger ==========

TICKET_CREATE_EXAMPLE = {
    "title": "VPN drops every 10 minutes",
    "description": "Since this morning the office VPN disconnects roughly every ten minutes.",
    "priority": "high",
    "category": "network",
}

TICKET_UPDATE_EXAMPLE = {
    "status": "in_progress",
    "assigneeId": "9b2f8f0e-3c1a-4c55-9a43-0c6f1f0b8a11",
    "version": 0,
}


# ========== Dependencies ==========

async def get_ticket_service(
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> TicketService:
    return TicketService(session, clock)


# ========== Route Handlers ==========

@router.post(
    "",
    response_model=Envelope[TicketData],
    status_code=status.HTTP_201_CREATED,
    summary="Create a ticket",
    description="""
    Open a new ticket. It starts at **version 0** with status `open`, and the
    SLA deadline is computed from the priority:

    | Priority | Window |
    |----------|--------|
    | urgent   | 2h     |
    | high     | 6h     |
    | medium   | 12h    |
    | low      | 24h    |

    Requesters may not set `priority` or `assigneeId`; their tickets are
    created at `medium`.

    Send an `Idempotency-Key` header to make retries safe.
    """,
    openapi_extra={"requestBody": {"content": {"application/json": {"example": TICKET_CREATE_EXAMPLE}}}},
)
async def create_ticket(
    payload: TicketCreateRequest,
    principal: Principal = Depends(get_current_principal),
    service: TicketService = Depends(get_ticket_service),
):
    ensure_workflow_fields_allowed(principal, payload.supplied_fields())
    detail = await service.create_ticket(
        principal,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        category=payload.category,
        assignee_id=str(payload.assignee_id) if payload.assignee_id else None,
    )
    return Envelope(data=TicketData(ticket=to_detail_response(detail)))


@router.get(
    "",
    response_model=Envelope[TicketListResponse],
    summary="List tickets",
    description="""
    Newest first. `nextOffset` is set when another page exists.

    Requesters only see tickets they created or are assigned to.
    `q` matches title, description and the latest comment, case-insensitively.
    """,
)
async def list_tickets(
    limit: int = Query(20, ge=1, le=50, description="Page size"),
    offset: int = Query(0, ge=0, description="Rows to skip"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    assignee_id: Optional[str] = Query(None, alias="assigneeId", description="Filter by assignee"),
    breached: Optional[bool] = Query(None, description="Filter by SLA breach flag"),
    q: Optional[str] = Query(None, max_length=200, description="Free-text search"),
    principal: Principal = Depends(get_current_principal),
    service: TicketService = Depends(get_ticket_service),
):
    filters = TicketFilters(
        status=status_filter or None,
        assignee_id=assignee_id or None,
        breached=breached,
        q=(q or "").strip() or None,
        limit=limit,
        offset=offset,
    )
    page = await service.list_tickets(principal, filters)
    logger.debug(
        "Tickets listed",
        extra={"user_id": principal.user_id, "count": len(page.items), "offset": offset}
    )
    return Envelope(data=to_list_response(page))


@router.get(
    "/support-team",
    response_model=Envelope[SupportTeamResponse],
    summary="Agents and admins available for assignment",
)
async def support_team(
    principal: Principal = Depends(require_roles(*SUPPORT_ROLES)),
    session: AsyncSession = Depends(get_session),
):
    members = await UserService(session).list_support_team()
    return Envelope(data=SupportTeamResponse(members=[
        SupportMemberResponse(id=m.id, full_name=m.full_name, email=m.email, role=m.role)
        for m in members
    ]))


@router.get(
    "/{ticket_id}",
    response_model=Envelope[TicketData],
    summary="Ticket detail",
    description="Ticket with threaded comments, timeline and participant directory.",
)
async def get_ticket(
    ticket_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TicketService = Depends(get_ticket_service),
):
    detail = await service.get_ticket(ticket_id, principal)
    return Envelope(data=TicketData(ticket=to_detail_response(detail)))


@router.patch(
    "/{ticket_id}",
    response_model=Envelope[TicketData],
    summary="Update a ticket",
    description="""
    Partial update guarded by optimistic concurrency: send the `version` you
    last read. A stale version returns `409 VERSION_MISMATCH`; refetch and
    retry.

    Only supplied fields are compared. An update that changes nothing keeps
    the version as is.
    """,
    openapi_extra={"requestBody": {"content": {"application/json": {"example": TICKET_UPDATE_EXAMPLE}}}},
)
async def update_ticket(
    ticket_id: str,
    payload: TicketUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    service: TicketService = Depends(get_ticket_service),
):
    ensure_workflow_fields_allowed(principal, payload.supplied_fields())
    detail = await service.update_ticket(ticket_id, payload.changes(), payload.version, principal)
    return Envelope(data=TicketData(ticket=to_detail_response(detail)))


@router.post(
    "/{ticket_id}/comments",
    response_model=Envelope[TicketData],
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
    description="Post a comment, optionally as a reply via `parentCommentId`. Returns the refreshed ticket.",
)
async def add_comment(
    ticket_id: str,
    payload: CommentCreateRequest,
    principal: Principal = Depends(get_current_principal),
    service: TicketService = Depends(get_ticket_service),
):
    detail = await service.add_comment(
        ticket_id,
        principal,
        payload.body,
        str(payload.parent_comment_id) if payload.parent_comment_id else None,
    )
    return Envelope(data=TicketData(ticket=to_detail_response(detail)))
