"""System endpoints, correlation ids and error envelopes."""
import logging

import pytest

from helpdesk.shared.infrastructure.logging import CustomJsonFormatter


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["checks"]["sla_scheduler"] == "stopped"


@pytest.mark.asyncio
async def test_meta(client):
    response = await client.get("/_meta")

    assert response.json()["service"] == "helpdesk"
    assert response.json()["environment"] == "test"


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "req-42"})
    assert response.headers["X-Correlation-ID"] == "req-42"

    generated = await client.get("/health")
    assert generated.headers["X-Correlation-ID"]


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/nope")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_wrong_method_uses_error_envelope(client):
    response = await client.delete("/tickets")

    assert response.status_code == 405
    assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"


def test_json_formatter_redacts_secrets():
    formatter = CustomJsonFormatter(environment="test")
    record = logging.LogRecord("helpdesk", logging.INFO, __file__, 1, "login", None, None)
    record.password = "hunter22"
    record.user_id = "u-1"

    output = formatter.format(record)

    assert "hunter22" not in output
    assert '"user_id": "u-1"' in output
    assert '"environment": "test"' in output


@pytest.mark.asyncio
async def test_openapi_documents_error_envelope(client):
    schema = (await client.get("/openapi.json")).json()

    assert "ErrorEnvelope" in schema["components"]["schemas"]
    assert "409" in schema["paths"]["/tickets/{ticket_id}"]["patch"]["responses"]
