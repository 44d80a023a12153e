"""
Authentication and user management API tests.
"""
import pytest
from httpx import ASGITransport, AsyncClient

from helpdesk.core.exceptions import UnauthorizedException
from helpdesk.identity.infrastructure.security import create_access_token, decode_access_token
from helpdesk.main import create_app


# =============================================================================
# Registration & login
# =============================================================================

@pytest.mark.asyncio
async def test_register_then_me(client):
    response = await client.post(
        "/auth/register",
        json={"email": "Sam@Helpdesk.io", "fullName": "  Sam Sender ", "password": "s3cret-pass"},
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["email"] == "sam@helpdesk.io"
    assert data["user"]["fullName"] == "Sam Sender"
    assert data["user"]["role"] == "requester"
    assert data["user"]["roleLabel"] == "Requester"

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["id"] == data["user"]["id"]


@pytest.mark.asyncio
async def test_duplicate_email_is_case_insensitive(client, requester):
    response = await client.post(
        "/auth/register",
        json={"email": "RITA@helpdesk.io", "fullName": "Rita Again", "password": "another-pass"},
    )

    assert response.status_code == 409
    assert response.json()["error"] == {
        "code": "EMAIL_TAKEN",
        "message": "Email already registered",
        "field": "email",
    }


@pytest.mark.asyncio
async def test_register_rejects_short_password(client):
    response = await client.post(
        "/auth/register",
        json={"email": "short@helpdesk.io", "fullName": "Short", "password": "1234"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["field"] == "password"


@pytest.mark.asyncio
async def test_login(client, agent, password):
    response = await client.post("/auth/login", json={"email": agent.email, "password": password})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["role"] == "agent"
    assert data["token"]


@pytest.mark.asyncio
async def test_login_with_wrong_password(client, agent):
    response = await client.post("/auth/login", json={"email": agent.email, "password": "wrong-password"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_login_unknown_email(client, database):
    response = await client.post("/auth/login", json={"email": "nobody@helpdesk.io", "password": "whatever1"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/auth/me")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


# =============================================================================
# Role management
# =============================================================================

@pytest.mark.asyncio
async def test_admin_promotes_requester(client, admin, requester):
    response = await client.patch(
        f"/users/{requester.user_id}/role",
        json={"role": "agent"},
        headers=admin.headers,
    )

    assert response.status_code == 200
    assert response.json()["data"]["role"] == "agent"
    assert response.json()["data"]["roleLabel"] == "Agent"

    team = await client.get("/tickets/support-team", headers=admin.headers)
    assert requester.user_id in {member["id"] for member in team.json()["data"]["members"]}


@pytest.mark.asyncio
async def test_agent_cannot_change_roles(client, agent, requester):
    response = await client.patch(
        f"/users/{requester.user_id}/role",
        json={"role": "admin"},
        headers=agent.headers,
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_role_change_for_unknown_user(client, admin):
    response = await client.patch(
        "/users/00000000-0000-0000-0000-000000000001/role",
        json={"role": "agent"},
        headers=admin.headers,
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_role_must_be_known(client, admin, requester):
    response = await client.patch(
        f"/users/{requester.user_id}/role",
        json={"role": "superuser"},
        headers=admin.headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["field"] == "role"


# =============================================================================
# Signing settings
# =============================================================================

@pytest.fixture(scope="function")
async def rotated_client(test_settings, database):
    settings = test_settings.model_copy(update={"jwt_secret": "rotated-secret-used-by-this-app-only"})
    app = create_app(settings)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c, settings


@pytest.mark.asyncio
async def test_tokens_follow_the_app_signing_secret(rotated_client, requester):
    client, settings = rotated_client
    own_token = create_access_token(requester.user_id, requester.role, settings)

    accepted = await client.get("/auth/me", headers={"Authorization": f"Bearer {own_token}"})
    rejected = await client.get("/auth/me", headers=requester.headers)

    assert accepted.status_code == 200
    assert accepted.json()["data"]["id"] == requester.user_id
    assert rejected.status_code == 401
    assert rejected.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_login_signs_with_the_app_secret(rotated_client, requester, password, test_settings):
    client, settings = rotated_client

    response = await client.post("/auth/login", json={"email": requester.email, "password": password})
    token = response.json()["data"]["token"]

    assert decode_access_token(token, settings).user_id == requester.user_id
    with pytest.raises(UnauthorizedException):
        decode_access_token(token, test_settings)
