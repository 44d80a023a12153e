"""
Ticket API tests.

End-to-end through the HTTP layer: envelopes, camelCase payloads,
role rules, optimistic concurrency, comments and list filters.
"""
import pytest

NEW_TICKET = {
    "title": "Cannot reach the shared drive",
    "description": "Mapping \\\\files\\shared fails with error 0x80070035 since Monday.",
    "category": "network",
}


async def create_ticket(client, auth, **overrides):
    body = {**NEW_TICKET, **overrides}
    response = await client.post("/tickets", json=body, headers=auth.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["ticket"]


# =============================================================================
# Create
# =============================================================================

@pytest.mark.asyncio
async def test_create_ticket_returns_detail_envelope(client, requester):
    response = await client.post("/tickets", json=NEW_TICKET, headers=requester.headers)

    assert response.status_code == 201
    ticket = response.json()["data"]["ticket"]
    assert ticket["version"] == 0
    assert ticket["status"] == "open"
    assert ticket["priority"] == "medium"
    assert ticket["slaBreached"] is False
    assert ticket["creatorId"] == requester.user_id
    assert ticket["creatorName"] == "Rita Requester"
    assert ticket["comments"] == []
    assert ticket["participants"][requester.user_id]["fullName"] == "Rita Requester"
    assert ticket["timeline"][0]["type"] == "TICKET_CREATED"
    assert ticket["timeline"][0]["description"] == "Rita Requester created the ticket"


@pytest.mark.asyncio
async def test_create_requires_authentication(client):
    response = await client.post("/tickets", json=NEW_TICKET)

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client):
    response = await client.get("/tickets", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_short_title_is_a_validation_error(client, requester):
    response = await client.post("/tickets", json={**NEW_TICKET, "title": "  x "}, headers=requester.headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["field"] == "title"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["priority", "assigneeId"])
async def test_requester_cannot_set_workflow_fields_on_create(client, requester, agent, field):
    value = "high" if field == "priority" else agent.user_id
    response = await client.post("/tickets", json={**NEW_TICKET, field: value}, headers=requester.headers)

    assert response.status_code == 403
    assert response.json()["error"] == {
        "code": "FORBIDDEN",
        "message": f"Requesters cannot set {field}",
        "field": field,
    }


@pytest.mark.asyncio
async def test_agent_creates_assigned_ticket(client, agent, admin):
    ticket = await create_ticket(client, agent, priority="urgent", assigneeId=admin.user_id)

    assert ticket["priority"] == "urgent"
    assert ticket["assigneeId"] == admin.user_id
    assert ticket["assigneeName"] == "Ada Admin"


@pytest.mark.asyncio
async def test_invalid_priority(client, agent):
    response = await client.post("/tickets", json={**NEW_TICKET, "priority": "critical"}, headers=agent.headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_PRIORITY"


# =============================================================================
# Read
# =============================================================================

@pytest.mark.asyncio
async def test_get_unknown_ticket(client, agent):
    for ticket_id in ("00000000-0000-0000-0000-000000000001", "not-a-uuid"):
        response = await client.get(f"/tickets/{ticket_id}", headers=agent.headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TICKET_NOT_FOUND"


@pytest.mark.asyncio
async def test_requester_cannot_read_foreign_ticket(client, requester, other_requester):
    ticket = await create_ticket(client, requester)

    response = await client.get(f"/tickets/{ticket['id']}", headers=other_requester.headers)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_breach_is_visible_after_deadline(client, clock, agent):
    ticket = await create_ticket(client, agent, priority="urgent")
    clock.advance(hours=2, minutes=1)

    response = await client.get(f"/tickets/{ticket['id']}", headers=agent.headers)

    assert response.json()["data"]["ticket"]["slaBreached"] is True


# =============================================================================
# Update
# =============================================================================

@pytest.mark.asyncio
async def test_update_flow_with_version_conflict(client, requester, agent):
    ticket = await create_ticket(client, requester)
    url = f"/tickets/{ticket['id']}"

    response = await client.patch(
        url,
        json={"status": "in_progress", "assigneeId": agent.user_id, "version": 0},
        headers=agent.headers,
    )
    assert response.status_code == 200
    updated = response.json()["data"]["ticket"]
    assert updated["version"] == 1
    assert updated["status"] == "in_progress"
    descriptions = [event["description"] for event in updated["timeline"]]
    assert descriptions[1:] == [
        "Alex Agent changed status from open to in progress",
        "Alex Agent reassigned the ticket from Unassigned to Alex Agent",
    ]

    stale = await client.patch(url, json={"status": "resolved", "version": 0}, headers=agent.headers)
    assert stale.status_code == 409
    assert stale.json()["error"] == {
        "code": "VERSION_MISMATCH",
        "message": "Ticket has been modified by another process",
        "field": "version",
    }


@pytest.mark.asyncio
async def test_update_requires_version(client, agent):
    ticket = await create_ticket(client, agent)

    response = await client.patch(f"/tickets/{ticket['id']}", json={"status": "resolved"}, headers=agent.headers)

    assert response.status_code == 400
    assert response.json()["error"]["field"] == "version"


@pytest.mark.asyncio
async def test_requester_edits_content_but_not_status(client, requester):
    ticket = await create_ticket(client, requester)
    url = f"/tickets/{ticket['id']}"

    forbidden = await client.patch(url, json={"status": "closed", "version": 0}, headers=requester.headers)
    assert forbidden.status_code == 403
    assert forbidden.json()["error"]["field"] == "status"

    allowed = await client.patch(
        url,
        json={"title": "Shared drive unreachable", "category": None, "version": 0},
        headers=requester.headers,
    )
    assert allowed.status_code == 200
    body = allowed.json()["data"]["ticket"]
    assert body["title"] == "Shared drive unreachable"
    assert body["category"] is None
    assert body["version"] == 1


@pytest.mark.asyncio
async def test_invalid_status_on_update(client, agent):
    ticket = await create_ticket(client, agent)

    response = await client.patch(
        f"/tickets/{ticket['id']}",
        json={"status": "done", "version": 0},
        headers=agent.headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_STATUS"


@pytest.mark.asyncio
async def test_noop_update_keeps_version(client, agent):
    ticket = await create_ticket(client, agent)

    response = await client.patch(
        f"/tickets/{ticket['id']}",
        json={"title": ticket["title"], "version": 0},
        headers=agent.headers,
    )

    assert response.status_code == 200
    assert response.json()["data"]["ticket"]["version"] == 0


# =============================================================================
# Comments
# =============================================================================

@pytest.mark.asyncio
async def test_threaded_comments(client, clock, requester, agent):
    ticket = await create_ticket(client, requester)
    url = f"/tickets/{ticket['id']}/comments"

    first = await client.post(url, json={"body": "Which office are you in?"}, headers=agent.headers)
    assert first.status_code == 201
    parent_id = first.json()["data"]["ticket"]["comments"][0]["id"]
    clock.advance(minutes=2)

    reply = await client.post(
        url,
        json={"body": "  Berlin, third floor.  ", "parentCommentId": parent_id},
        headers=requester.headers,
    )

    assert reply.status_code == 201
    detail = reply.json()["data"]["ticket"]
    assert detail["version"] == 0
    assert detail["latestCommentExcerpt"] == "Berlin, third floor."
    assert len(detail["comments"]) == 1
    root = detail["comments"][0]
    assert root["authorName"] == "Alex Agent"
    assert root["authorRole"] == "agent"
    assert root["replies"][0]["body"] == "Berlin, third floor."
    assert root["replies"][0]["parentCommentId"] == parent_id
    assert detail["timeline"][-1]["description"] == "Rita Requester added a comment"


@pytest.mark.asyncio
async def test_blank_comment_is_rejected(client, requester):
    ticket = await create_ticket(client, requester)

    response = await client.post(f"/tickets/{ticket['id']}/comments", json={"body": "   "}, headers=requester.headers)

    assert response.status_code == 400
    assert response.json()["error"]["field"] == "body"


# =============================================================================
# List
# =============================================================================

@pytest.mark.asyncio
async def test_list_pagination_and_search(client, clock, agent):
    for title in ("Printer jam", "Monitor flicker", "Printer offline"):
        await create_ticket(client, agent, title=title)
        clock.advance(minutes=1)

    page = await client.get("/tickets", params={"limit": 2}, headers=agent.headers)
    data = page.json()["data"]
    assert [item["title"] for item in data["items"]] == ["Printer offline", "Monitor flicker"]
    assert data["nextOffset"] == 2
    assert "description" not in data["items"][0]

    rest = await client.get("/tickets", params={"limit": 2, "offset": 2}, headers=agent.headers)
    assert [item["title"] for item in rest.json()["data"]["items"]] == ["Printer jam"]
    assert rest.json()["data"]["nextOffset"] is None

    search = await client.get("/tickets", params={"q": "PRINTER"}, headers=agent.headers)
    assert [item["title"] for item in search.json()["data"]["items"]] == ["Printer offline", "Printer jam"]


@pytest.mark.asyncio
async def test_list_filters_by_status_and_assignee(client, agent, admin):
    assigned = await create_ticket(client, agent, assigneeId=admin.user_id)
    await create_ticket(client, agent)

    by_assignee = await client.get("/tickets", params={"assigneeId": admin.user_id}, headers=agent.headers)
    assert [item["id"] for item in by_assignee.json()["data"]["items"]] == [assigned["id"]]

    resolved = await client.get("/tickets", params={"status": "resolved"}, headers=agent.headers)
    assert resolved.json()["data"]["items"] == []

    invalid = await client.get("/tickets", params={"status": "done"}, headers=agent.headers)
    assert invalid.status_code == 400
    assert invalid.json()["error"]["code"] == "INVALID_STATUS"


@pytest.mark.asyncio
async def test_list_limit_out_of_range(client, agent):
    response = await client.get("/tickets", params={"limit": 51}, headers=agent.headers)

    assert response.status_code == 400
    assert response.json()["error"]["field"] == "limit"


@pytest.mark.asyncio
async def test_requester_list_is_scoped(client, requester, other_requester):
    mine = await create_ticket(client, requester)
    await create_ticket(client, other_requester)

    response = await client.get("/tickets", headers=requester.headers)

    assert [item["id"] for item in response.json()["data"]["items"]] == [mine["id"]]


# =============================================================================
# Support team
# =============================================================================

@pytest.mark.asyncio
async def test_support_team_lists_agents_and_admins(client, requester, agent, admin):
    response = await client.get("/tickets/support-team", headers=agent.headers)

    assert response.status_code == 200
    members = response.json()["data"]["members"]
    assert [member["fullName"] for member in members] == ["Ada Admin", "Alex Agent"]
    assert {member["role"] for member in members} == {"agent", "admin"}


@pytest.mark.asyncio
async def test_support_team_is_hidden_from_requesters(client, requester):
    response = await client.get("/tickets/support-team", headers=requester.headers)

    assert response.status_code == 403
