#!/usr/bin/env python3
"""
Seed Demo Data
==============

Creates one account per role and a sample ticket with a short
conversation, so a fresh database has something to click through.

Usage:
    DATABASE_URL=sqlite+aiosqlite:///./helpdesk.db python scripts/seed.py

Safe to run twice: existing accounts are reused and the sample ticket is
only created when the requester has none.
"""

import asyncio

from helpdesk.config import Role, settings
from helpdesk.identity.domain import Principal
from helpdesk.identity.infrastructure import SQLAlchemyUserRepository
from helpdesk.identity.infrastructure.security import hash_password
from helpdesk.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)
from helpdesk.tickets.application import TicketService
from helpdesk.tickets.domain import TicketFilters

DEMO_PASSWORD = "helpdesk-demo"

DEMO_USERS = [
    ("admin@helpdesk.io", "Ada Admin", Role.ADMIN.value),
    ("agent@helpdesk.io", "Alex Agent", Role.AGENT.value),
    ("requester@helpdesk.io", "Rita Requester", Role.REQUESTER.value),
]


async def ensure_users() -> dict[str, Principal]:
    principals = {}
    async with get_session_context() as session:
        users = SQLAlchemyUserRepository(session)
        for email, full_name, role in DEMO_USERS:
            model = await users.get_by_email(email)
            if model is None:
                model = await users.create(
                    email=email,
                    full_name=full_name,
                    role=role,
                    password_hash=hash_password(DEMO_PASSWORD),
                )
                print(f"Created {role}: {email}")
            else:
                print(f"Exists  {model.role}: {email}")
            principals[role] = Principal(user_id=str(model.id), role=model.role)
    return principals


async def ensure_sample_ticket(principals: dict[str, Principal]) -> None:
    requester = principals[Role.REQUESTER.value]
    agent = principals[Role.AGENT.value]

    async with get_session_context() as session:
        service = TicketService(session)
        page = await service.list_tickets(requester, TicketFilters(limit=1))
        if page.items:
            print("Sample ticket already present")
            return

        detail = await service.create_ticket(
            requester,
            title="Cannot connect to office Wi-Fi",
            description="My laptop sees the network but fails to obtain an IP address.",
            category="network",
        )
        ticket_id = detail.ticket.id

        detail = await service.update_ticket(
            ticket_id,
            {"status": "in_progress", "priority": "high", "assignee_id": agent.user_id},
            detail.ticket.version,
            agent,
        )
        detail = await service.add_comment(ticket_id, agent, "Could you forget the network and reconnect?")
        await service.add_comment(
            ticket_id,
            requester,
            "Tried that, same result.",
            parent_comment_id=detail.comments[0].id,
        )

    print(f"Created sample ticket {ticket_id}")


async def main():
    """Create tables, demo accounts and a sample ticket."""
    init_database(settings)
    try:
        await create_tables()
        principals = await ensure_users()
        await ensure_sample_ticket(principals)
    finally:
        await close_database()

    print(f"\nDemo password for every account: {DEMO_PASSWORD}")


if __name__ == "__main__":
    asyncio.run(main())
