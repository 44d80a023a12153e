"""Tests for the breach sweep service and its scheduler."""
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest
from sqlalchemy import select

from helpdesk.config import TicketStatus
from helpdesk.sla.application import ISLABreachRepository, SLABreachService
from helpdesk.sla.domain import SLACalculator
from helpdesk.sla.infrastructure import SLAScheduler, SQLAlchemySLABreachRepository, run_breach_sweep
from helpdesk.tickets.infrastructure.models import TicketModel
from helpdesk.tickets.application import TicketService


class RecordingRepository(ISLABreachRepository):
    def __init__(self, changed: int):
        self.changed = changed
        self.calls = []

    async def mark_breached(self, now: datetime) -> int:
        self.calls.append(now)
        return self.changed


@pytest.mark.asyncio
async def test_sweep_uses_the_injected_clock(clock):
    repository = RecordingRepository(changed=2)

    changed = await SLABreachService(repository, clock).sweep()

    assert changed == 2
    assert repository.calls == [clock.now]


@pytest.mark.asyncio
async def test_scheduled_sweep_flags_overdue_tickets(db, clock, agent):
    # The fixture clock is well in the past, so the job's wall clock is past every deadline
    service = TicketService(db, clock)
    overdue = await service.create_ticket(agent.principal, "Server room too hot", "Thermometer reads 35C.", "urgent")
    done = await service.create_ticket(agent.principal, "Old request", "Nothing left to do here.", "urgent")
    await service.update_ticket(done.ticket.id, {"status": "closed"}, 0, agent.principal)

    changed = await run_breach_sweep()

    assert changed == 1
    assert (await service.get_ticket(overdue.ticket.id, agent.principal)).ticket.sla_breached is True
    assert (await service.get_ticket(done.ticket.id, agent.principal)).ticket.sla_breached is False
    assert datetime.now(timezone.utc) > overdue.ticket.sla_due_at


@pytest.mark.asyncio
async def test_scheduler_lifecycle():
    scheduler = SLAScheduler(interval_seconds=3600)
    assert scheduler.is_running is False

    async def job():
        return 0

    await scheduler.start(job_func=job)
    assert scheduler.is_running is True

    await scheduler.stop()
    assert scheduler.is_running is False


@pytest.mark.asyncio
async def test_sweep_agrees_with_breach_predicate(db, clock, agent):
    now = clock()
    offsets = [timedelta(hours=-1), timedelta(0), timedelta(seconds=1)]
    expected = {}
    for status in TicketStatus:
        for offset in offsets:
            row = TicketModel(
                title=f"{status.value} {offset}",
                description="Seeded for the breach sweep.",
                status=status.value,
                creator_id=UUID(agent.user_id),
                sla_due_at=now + offset,
                created_at=now,
                updated_at=now,
            )
            db.add(row)
            await db.flush()
            expected[row.id] = SLACalculator.is_breached(row.sla_due_at, status.value, now)
    await db.commit()

    changed = await SQLAlchemySLABreachRepository(db).mark_breached(now)
    await db.commit()

    rows = (await db.execute(select(TicketModel).execution_options(populate_existing=True))).scalars().all()
    assert {row.id: row.sla_breached for row in rows} == expected
    assert changed == sum(expected.values())
