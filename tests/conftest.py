"""
Test configuration and fixtures.

Provides:
- A fresh SQLite database per test (file-backed, same locking as runtime)
- A controllable clock injected through the ``get_clock`` dependency
- Requester, agent and admin accounts with bearer tokens
- HTTPX AsyncClient bound to the ASGI app
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Dict

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import Role, Settings
from helpdesk.identity.domain.entities import Principal
from helpdesk.identity.infrastructure.repositories import SQLAlchemyUserRepository
from helpdesk.identity.infrastructure.security import create_access_token, hash_password
from helpdesk.infrastructure.database import (
    close_database,
    create_tables,
    get_session_maker,
    init_database,
)
from helpdesk.main import create_app
from helpdesk.shared.api.dependencies import get_clock

TEST_PASSWORD = "correct-horse-battery"


# =============================================================================
# Clock
# =============================================================================

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="function")
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc))


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def test_settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        jwt_secret="test-signing-secret-for-the-helpdesk-suite",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'helpdesk.db'}",
        rate_limit_per_minute=0,
        sla_sweep_interval_seconds=0,
    )


@pytest.fixture(scope="function")
async def database(test_settings: Settings) -> AsyncGenerator[None, None]:
    """Schema on a throwaway database file; disposed after the test."""
    init_database(test_settings)
    await create_tables()
    yield
    await close_database()


@pytest.fixture(scope="function")
async def db(database) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and calling services directly."""
    async with get_session_maker()() as session:
        yield session


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    __test__ = False

    user_id: str
    email: str
    full_name: str
    role: str
    token: str

    @property
    def principal(self) -> Principal:
        return Principal(user_id=self.user_id, role=self.role)

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


async def make_user(
    session: AsyncSession,
    settings: Settings,
    email: str,
    full_name: str,
    role: str,
) -> TestAuth:
    model = await SQLAlchemyUserRepository(session).create(
        email=email,
        full_name=full_name,
        role=role,
        password_hash=hash_password(TEST_PASSWORD),
    )
    await session.commit()
    user_id = str(model.id)
    return TestAuth(
        user_id=user_id,
        email=email,
        full_name=full_name,
        role=role,
        token=create_access_token(user_id, role, settings),
    )


@pytest.fixture(scope="function")
def password() -> str:
    """Password shared by every fixture account."""
    return TEST_PASSWORD


@pytest.fixture(scope="function")
async def requester(db: AsyncSession, test_settings: Settings) -> TestAuth:
    return await make_user(db, test_settings, "rita@helpdesk.io", "Rita Requester", Role.REQUESTER.value)


@pytest.fixture(scope="function")
async def other_requester(db: AsyncSession, test_settings: Settings) -> TestAuth:
    return await make_user(db, test_settings, "oscar@helpdesk.io", "Oscar Outsider", Role.REQUESTER.value)


@pytest.fixture(scope="function")
async def agent(db: AsyncSession, test_settings: Settings) -> TestAuth:
    return await make_user(db, test_settings, "alex@helpdesk.io", "Alex Agent", Role.AGENT.value)


@pytest.fixture(scope="function")
async def admin(db: AsyncSession, test_settings: Settings) -> TestAuth:
    return await make_user(db, test_settings, "ada@helpdesk.io", "Ada Admin", Role.ADMIN.value)


# =============================================================================
# HTTP Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def app(test_settings: Settings, clock: FakeClock, database):
    application = create_app(test_settings)
    application.dependency_overrides[get_clock] = lambda: clock
    yield application
    application.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
