"""
Tests for the FastAPI HTTP transport.
"""

import json

import pytest
from fastapi.testclient import TestClient

from cloudstore_mcp.mcp import INVALID_REQUEST, METHOD_NOT_FOUND, PARSE_ERROR
from cloudstore_mcp.server import create_app, heartbeat_events, sse_event
from tests.helpers import rpc, tool_call


def _client(dispatcher, settings) -> TestClient:
    return TestClient(create_app(dispatcher, settings))


@pytest.fixture
def client(dispatcher, settings):
    with _client(dispatcher, settings) as test_client:
        yield test_client


# ============================================================================
# HEALTH
# ============================================================================


class TestHealth:
    def test_health(self, client) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["backend"] == "memory"
        assert body["tools"] == 11

    def test_root_info(self, client) -> None:
        assert client.get("/").json()["rpc"] == "/rpc"

    def test_security_headers(self, client) -> None:
        response = client.get("/health")
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert len(response.headers["x-request-id"]) == 32
        # debug settings disable HSTS
        assert "strict-transport-security" not in response.headers


# ============================================================================
# JSON-RPC OVER POST
# ============================================================================


class TestRpcEndpoint:
    @pytest.mark.parametrize("path", ["/rpc", "/mcp", "/"])
    def test_ping_on_every_path(self, client, path) -> None:
        response = client.post(path, json=rpc("ping", id=9))
        assert response.status_code == 200
        assert response.json() == {"jsonrpc": "2.0", "id": 9, "result": {}}

    def test_tool_call(self, client) -> None:
        response = client.post(
            "/rpc",
            json=tool_call("manage_folders", {"action": "create", "folders": [{"path": "Web"}]}),
        )
        result = response.json()["result"]
        assert result["success"] is True
        assert result["results"][0]["path"] == "/Web"

    def test_batch(self, client) -> None:
        response = client.post("/rpc", json=[rpc("ping", id=1), rpc("missing", id=2)])
        body = response.json()
        assert [r["id"] for r in body] == [1, 2]
        assert body[1]["error"]["code"] == METHOD_NOT_FOUND

    def test_notification_is_accepted_without_body(self, client) -> None:
        response = client.post("/rpc", json={"jsonrpc": "2.0", "method": "ping"})
        assert response.status_code == 202
        assert response.content == b""

    def test_malformed_json(self, client) -> None:
        response = client.post(
            "/rpc", content=b"{oops", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["id"] is None
        assert body["error"]["code"] == PARSE_ERROR

    def test_payload_too_large(self, dispatcher, settings) -> None:
        small = settings.model_copy(update={"max_json_payload_size": 16})
        with _client(dispatcher, small) as client:
            response = client.post("/rpc", json=rpc("ping"))
        assert response.status_code == 413
        assert response.json()["error"]["code"] == INVALID_REQUEST


# ============================================================================
# AUTHENTICATION
# ============================================================================


class TestBearerAuth:
    @pytest.fixture
    def secured(self, dispatcher, settings):
        with _client(dispatcher, settings.model_copy(update={"auth_token": "secret"})) as client:
            yield client

    def test_missing_token(self, secured) -> None:
        response = secured.post("/rpc", json=rpc("ping"))
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_wrong_token(self, secured) -> None:
        response = secured.post(
            "/rpc", json=rpc("ping"), headers={"Authorization": "Bearer nope"}
        )
        assert response.status_code == 401

    def test_valid_token(self, secured) -> None:
        response = secured.post(
            "/rpc", json=rpc("ping"), headers={"Authorization": "Bearer secret"}
        )
        assert response.status_code == 200
        assert response.json()["result"] == {}

    def test_health_needs_no_token(self, secured) -> None:
        assert secured.get("/health").status_code == 200


# ============================================================================
# SSE HEARTBEAT
# ============================================================================


class TestHeartbeat:
    def test_sse_event_format(self) -> None:
        assert sse_event("ping", {"a": 1}) == 'event: ping\ndata: {"a": 1}\n\n'

    async def test_ready_then_heartbeats(self) -> None:
        delays: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            delays.append(seconds)

        events = [e async for e in heartbeat_events(5.0, limit=2, sleep=fake_sleep)]
        assert len(events) == 3
        assert events[0].startswith("event: ready\n")
        payloads = [json.loads(e.split("data: ", 1)[1]) for e in events[1:]]
        assert [p["seq"] for p in payloads] == [1, 2]
        assert all(p["type"] == "heartbeat" for p in payloads)
        assert delays == [5.0, 5.0]
