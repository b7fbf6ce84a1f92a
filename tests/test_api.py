"""
RoMod - API Tests
=================

HTTP and WebSocket surface: auth, scope, error format and routing.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from src.api.app import create_app
from src.api.config import APIConfig, set_api_config
from src.api.dependencies import get_cases, get_history, get_store
from src.api.services.auth import get_auth_service, reset_auth_service
from src.api.services.websocket import reset_ws_manager
from src.services.aggregator import CrossServerAggregator
from src.services.cases import CaseService

PREFIX = "/api/romod"


@pytest.fixture
def client(test_db, publisher):
    """TestClient over a fresh app bound to the test database."""
    set_api_config(APIConfig(jwt_secret="test-secret"))
    reset_auth_service()
    reset_ws_manager()

    app = create_app()
    app.dependency_overrides[get_cases] = lambda: CaseService(test_db, publisher=publisher)
    app.dependency_overrides[get_history] = lambda: CrossServerAggregator(test_db)
    app.dependency_overrides[get_store] = lambda: test_db

    yield TestClient(app)

    set_api_config(None)
    reset_auth_service()
    reset_ws_manager()


def _token(staff_id="mod-1", servers=("100", "200")) -> str:
    token, _ = get_auth_service().generate_token(staff_id, servers)
    return token


def _auth(staff_id="mod-1", servers=("100", "200")) -> dict:
    return {"Authorization": f"Bearer {_token(staff_id, servers)}"}


def _issue(client, headers, **overrides):
    body = {"server_id": "100", "player_id": "42", "kind": "permanent", "reason": "Exploiting"}
    body.update(overrides)
    return client.post(f"{PREFIX}/bans", json=body, headers=headers)


class TestAuth:
    """Tests for bearer token handling."""

    def test_missing_token(self, client):
        response = client.get(f"{PREFIX}/bans")

        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTH_MISSING_TOKEN"

    def test_bad_token(self, client):
        response = client.get(f"{PREFIX}/bans", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTH_INVALID_TOKEN"

    def test_health_is_public(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get(f"{PREFIX}/health").status_code == 200

    def test_servers_lists_scope(self, client):
        response = client.get(f"{PREFIX}/servers", headers=_auth())

        assert response.json()["data"] == ["100", "200"]


class TestBansEndpoints:
    """Tests for the ban routes."""

    def test_issue_ban(self, client):
        response = _issue(client, _auth(), kind="temporary", duration="7d")

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["active"] is True
        assert data["issued_by"] == "mod-1"
        assert data["expires_at"] - data["issued_at"] == pytest.approx(7 * 86400, abs=5)

    def test_out_of_scope_is_not_found(self, client):
        ban_id = _issue(client, _auth()).json()["data"]["id"]

        response = client.get(f"{PREFIX}/bans/{ban_id}", headers=_auth("mod-2", ["300"]))

        assert response.status_code == 404
        assert response.json()["error_code"] == "CASE_NOT_FOUND"

    def test_unban_twice_is_invalid_state(self, client):
        headers = _auth()
        ban_id = _issue(client, headers).json()["data"]["id"]

        first = client.post(f"{PREFIX}/bans/{ban_id}/unban", json={"note": "Served"}, headers=headers)
        second = client.post(f"{PREFIX}/bans/{ban_id}/unban", headers=headers)

        assert first.status_code == 200
        assert first.json()["data"]["deactivation_reason"] == "unban"
        assert second.status_code == 409
        body = second.json()
        assert body["success"] is False
        assert body["error_code"] == "CASE_INVALID_STATE"
        assert body["details"]["ban_id"] == ban_id

    def test_domain_validation_is_400(self, client):
        response = _issue(client, _auth(), kind="temporary", duration="soon")

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_request_shape_is_422(self, client):
        response = client.post(f"{PREFIX}/bans", json={"server_id": "100"}, headers=_auth())

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_FAILED"

    def test_list_is_paginated(self, client):
        headers = _auth()
        _issue(client, headers, player_id="1")
        _issue(client, headers, player_id="2")
        _issue(client, headers, player_id="3", server_id="200")

        response = client.get(f"{PREFIX}/bans", params={"per_page": 2}, headers=headers)

        body = response.json()
        assert len(body["data"]) == 2
        assert body["pagination"]["total"] == 3
        assert body["pagination"]["has_next"] is True


class TestOtherEndpoints:
    """Smoke tests across the remaining routers."""

    def test_appeal_flow(self, client):
        headers = _auth()
        ban_id = _issue(client, headers).json()["data"]["id"]

        appeal = client.post(
            f"{PREFIX}/appeals",
            json={"ban_id": ban_id, "submitter_id": "42", "text": "Sorry"},
            headers=headers,
        )
        appeal_id = appeal.json()["data"]["id"]
        reviewed = client.post(
            f"{PREFIX}/appeals/{appeal_id}/review",
            json={"decision": "approved"},
            headers=headers,
        )

        assert appeal.status_code == 201
        assert reviewed.json()["data"]["status"] == "approved"
        assert client.get(f"{PREFIX}/bans/{ban_id}", headers=headers).json()["data"]["active"] is False

    def test_ticket_claim_conflict(self, client):
        ticket = client.post(f"{PREFIX}/tickets", json={
            "server_id": "100", "submitter_id": "42", "title": "Help", "description": "Stuck",
        }, headers=_auth()).json()["data"]

        client.post(f"{PREFIX}/tickets/{ticket['id']}/claim", headers=_auth())
        response = client.post(f"{PREFIX}/tickets/{ticket['id']}/claim", headers=_auth("mod-3", ["100"]))

        assert response.status_code == 409
        assert response.json()["error_code"] == "CASE_CONFLICT"

    def test_disabled_tickets_is_invalid_state(self, client):
        headers = _auth()
        client.put(f"{PREFIX}/servers/100/settings", json={"tickets": {"enabled": False}}, headers=headers)

        response = client.post(f"{PREFIX}/tickets", json={
            "server_id": "100", "submitter_id": "42", "title": "Help", "description": "Stuck",
        }, headers=headers)

        assert response.status_code == 409
        assert response.json()["error_code"] == "CASE_INVALID_STATE"

    def test_player_history(self, client):
        headers = _auth()
        _issue(client, headers)

        response = client.get(f"{PREFIX}/players/42", headers=headers)

        data = response.json()["data"]
        assert data["is_banned"] is True
        assert len(data["active"]) == 1

    def test_settings_round_trip(self, client):
        headers = _auth()

        saved = client.put(
            f"{PREFIX}/servers/100/settings",
            json={"roblox": {"api_key": "secret", "universe_id": "1"}},
            headers=headers,
        )
        fetched = client.get(f"{PREFIX}/servers/100/settings", headers=headers)

        assert saved.status_code == 200
        assert fetched.json()["data"]["roblox"] == {
            "api_key": "****", "universe_id": "1", "exclude_alt_accounts": False,
        }

    def test_settings_unknown_key(self, client):
        response = client.put(
            f"{PREFIX}/servers/100/settings", json={"bogus": {}}, headers=_auth(),
        )

        assert response.status_code == 400

    def test_settings_out_of_scope(self, client):
        response = client.get(f"{PREFIX}/servers/300/settings", headers=_auth())

        assert response.status_code == 404


class TestWebSocketEndpoint:
    """Tests for the realtime endpoint."""

    def test_rejects_missing_token(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(f"{PREFIX}/ws") as ws:
                ws.receive_json()

    def test_subscribe_flow(self, client):
        with client.websocket_connect(f"{PREFIX}/ws?token={_token()}") as ws:
            hello = ws.receive_json()
            assert hello["type"] == "connected"
            assert hello["data"]["servers"] == ["100", "200"]

            ws.send_json({"subscribe": "100"})
            assert ws.receive_json()["type"] == "subscribed"

            ws.send_json({"subscribe": "300"})
            denied = ws.receive_json()
            assert denied["type"] == "error"
            assert denied["data"]["error_code"] == "WS_SCOPE_DENIED"

            ws.send_json({"action": "ping"})
            assert ws.receive_json()["type"] == "pong"

    def test_bad_json_frame(self, client):
        with client.websocket_connect(f"{PREFIX}/ws?token={_token()}") as ws:
            ws.receive_json()
            ws.send_text("{not json")

            assert ws.receive_json()["data"]["error_code"] == "WS_INVALID_MESSAGE"
