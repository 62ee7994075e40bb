"""Tests for the FastAPI assembly API.

WHY: Validates that every endpoint behaves correctly: happy paths,
error cases, and the WebSocket stream. Uses FastAPI TestClient for
synchronous in-process testing.

HOW: Each test function exercises one endpoint behavior. The module's
session store is switched to the immediate animation executor and
cleared before each test, so no test waits on animation timelines or
sees another test's sessions.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Each test is independent (the session store is reset per test)
- Tests cover: happy paths, 404 not found, 422 invalid, 429 limit, 500 failure
"""

from __future__ import annotations

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from ui_assembly.server.app import app, session_store

from conftest import RecordingExecutor

BROWSE = {
    "type": "product_browse",
    "confidence": 0.75,
    "entities": {"color": "black"},
    "context": {"urgency": "high"},
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_session_store():
    """Clear all sessions and use instant animations for each test."""
    previous = session_store.executor_key, session_store.max_sessions
    session_store.executor_key = "immediate"
    session_store.clear()
    yield
    session_store.clear()
    session_store.executor_key, session_store.max_sessions = previous


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def session_id(client):
    return client.post("/sessions").json()["id"]


def _add_payload(component_id="grid-1", component_type="ProductGrid"):
    return {
        "action": "add",
        "components": [{
            "id": component_id,
            "type": component_type,
            "props": {"initialProducts": 12},
            "position": {"area": "main", "order": 0},
        }],
        "animation": {"enter": "fadeIn", "exit": "fadeOut", "duration": 0.2},
    }


# ---------------------------------------------------------------------------
# Stateless mapping
# ---------------------------------------------------------------------------


class TestMap:

    def test_browse_intent(self, client):
        resp = client.post("/map", json=BROWSE)
        assert resp.status_code == 200
        instruction = resp.json()["instruction"]
        assert [c["type"] for c in instruction["components"]] == ["ProductGrid", "FilterPanel"]
        assert instruction["animation"]["duration"] == 0.3
        assert instruction["meta"]["props"]["priority"] == "high"

    def test_unmatched_intent_falls_back(self, client):
        resp = client.post("/map", json={"type": "mystery", "confidence": 0.1})
        instruction = resp.json()["instruction"]
        assert [c["type"] for c in instruction["components"]] == ["HelpPanel"]
        assert instruction["layout"] == "centered"

    def test_confidence_out_of_range(self, client):
        resp = client.post("/map", json={"type": "greeting", "confidence": 1.2})
        assert resp.status_code == 422

    def test_does_not_create_sessions(self, client):
        client.post("/map", json=BROWSE)
        assert session_store.list_sessions() == []


class TestComponents:

    def test_lists_catalog(self, client):
        resp = client.get("/components")
        assert resp.status_code == 200
        by_name = {c["name"]: c for c in resp.json()}
        assert "HelpPanel" in by_name
        assert by_name["FilterPanel"]["required_props"] == ["availableFilters"]


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class TestSessions:

    def test_create_returns_201(self, client):
        resp = client.post("/sessions")
        assert resp.status_code == 201
        body = resp.json()
        assert body["component_count"] == 0
        assert body["layout"] == "default"

    def test_limit_returns_429(self, client):
        session_store.max_sessions = 1
        client.post("/sessions")
        resp = client.post("/sessions")
        assert resp.status_code == 429
        assert "Maximum" in resp.json()["detail"]

    def test_get_and_delete(self, client, session_id):
        assert client.get("/sessions/{}".format(session_id)).status_code == 200
        assert client.delete("/sessions/{}".format(session_id)).status_code == 204
        assert client.get("/sessions/{}".format(session_id)).status_code == 404

    def test_delete_missing(self, client):
        assert client.delete("/sessions/nope").status_code == 404

    def test_state_of_missing_session(self, client):
        resp = client.get("/sessions/nope/state")
        assert resp.status_code == 404
        assert "nope" in resp.json()["detail"]


class TestIntents:

    def test_applies_and_reorganizes(self, client, session_id):
        resp = client.post("/sessions/{}/intents".format(session_id), json=BROWSE)
        assert resp.status_code == 200
        state = resp.json()["state"]
        assert state["layout"] == "two-column"
        assert {c["type"]: c["position"]["area"] for c in state["components"]} == {
            "ProductGrid": "main",
            "FilterPanel": "sidebar",
        }
        assert {c["status"] for c in state["components"]} == {"mounted"}

    def test_components_accumulate_across_turns(self, client, session_id):
        client.post("/sessions/{}/intents".format(session_id), json={"type": "greeting", "confidence": 0.9})
        client.post("/sessions/{}/intents".format(session_id), json=BROWSE)
        body = client.get("/sessions/{}".format(session_id)).json()
        assert body["component_count"] == 4

    def test_unknown_session(self, client):
        assert client.post("/sessions/nope/intents", json=BROWSE).status_code == 404


class TestInstructions:

    def test_add_then_remove(self, client, session_id):
        url = "/sessions/{}/instructions".format(session_id)
        resp = client.post(url, json=_add_payload())
        assert resp.status_code == 200
        assert [c["id"] for c in resp.json()["components"]] == ["grid-1"]

        resp = client.post(url, json={"action": "remove", "componentIds": ["grid-1"]})
        assert resp.json()["components"] == []

    def test_update_merges_props(self, client, session_id):
        url = "/sessions/{}/instructions".format(session_id)
        client.post(url, json=_add_payload())
        resp = client.post(url, json={
            "action": "update",
            "updates": [{"id": "grid-1", "props": {"enableInfiniteScroll": True}}],
        })
        assert resp.json()["components"][0]["props"] == {
            "initialProducts": 12,
            "enableInfiniteScroll": True,
        }

    def test_unregistered_type_skipped(self, client, session_id):
        resp = client.post(
            "/sessions/{}/instructions".format(session_id),
            json=_add_payload(component_type="Hologram"),
        )
        assert resp.status_code == 200
        assert resp.json()["components"] == []

    def test_schema_violation_returns_422(self, client, session_id):
        resp = client.post(
            "/sessions/{}/instructions".format(session_id),
            json={"action": "add", "components": [{"id": "x"}]},
        )
        assert resp.status_code == 422
        assert "AssemblyInstruction" in resp.json()["detail"]

    def test_unknown_action_is_accepted(self, client, session_id):
        resp = client.post("/sessions/{}/instructions".format(session_id), json={"action": "teleport"})
        assert resp.status_code == 200

    def test_animation_failure_returns_500(self, client, session_id, monkeypatch):
        executor = RecordingExecutor()
        executor.fail_ids.add("grid-1")
        monkeypatch.setattr(session_store.get_session(session_id).engine, "_executor", executor)
        resp = client.post("/sessions/{}/instructions".format(session_id), json=_add_payload())
        assert resp.status_code == 500
        assert "grid-1" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# WebSocket stream
# ---------------------------------------------------------------------------


class TestStream:

    def test_initial_snapshot_then_updates(self, client, session_id):
        with client.websocket_connect("/sessions/{}/stream".format(session_id)) as ws:
            initial = ws.receive_json()
            assert initial["components"] == []

            ws.send_json(_add_payload())
            update = ws.receive_json()
            assert [c["id"] for c in update["components"]] == ["grid-1"]

    def test_invalid_message_answered_with_error(self, client, session_id):
        with client.websocket_connect("/sessions/{}/stream".format(session_id)) as ws:
            ws.receive_json()
            ws.send_text("{not json")
            assert "Malformed JSON" in ws.receive_json()["error"]

    def test_error_and_update_arrive_in_order(self, client, session_id):
        with client.websocket_connect("/sessions/{}/stream".format(session_id)) as ws:
            ws.receive_json()
            ws.send_text("{not json")
            ws.send_json(_add_payload())
            assert "error" in ws.receive_json()
            update = ws.receive_json()
            assert [c["id"] for c in update["components"]] == ["grid-1"]

    def test_animation_failure_answered_on_stream(self, client, session_id, monkeypatch):
        executor = RecordingExecutor()
        executor.fail_ids.add("grid-1")
        monkeypatch.setattr(session_store.get_session(session_id).engine, "_executor", executor)
        with client.websocket_connect("/sessions/{}/stream".format(session_id)) as ws:
            ws.receive_json()
            ws.send_json(_add_payload())
            assert "grid-1" in ws.receive_json()["error"]

    def test_http_changes_are_streamed(self, client, session_id):
        with client.websocket_connect("/sessions/{}/stream".format(session_id)) as ws:
            ws.receive_json()
            client.post("/sessions/{}/instructions".format(session_id), json=_add_payload())
            update = ws.receive_json()
            assert [c["id"] for c in update["components"]] == ["grid-1"]

    def test_unknown_session_closed(self, client):
        with pytest.raises(WebSocketDisconnect) as excinfo:
            with client.websocket_connect("/sessions/nope/stream") as ws:
                ws.receive_json()
        assert excinfo.value.code == 4404


class TestHealth:

    def test_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
