import time

import pytest
from fastapi.testclient import TestClient

from feedback_hub.api import create_app
from feedback_hub.errors import TextGenerationError


def _wait_for_run(client, run_id, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        body = client.get(f"/api/feedback/runs/{run_id}").json()
        if body["status"] in ("completed", "failed"):
            return body
        time.sleep(0.02)
    raise AssertionError(f"run {run_id} did not finish")


@pytest.fixture
def client(make_hub):
    hub = make_hub({"response": "Argo outage summary."})
    with TestClient(create_app(hub)) as c:
        yield c


def test_submit_feedback_end_to_end(client):
    resp = client.post(
        "/api/feedback",
        json={"message": "Argo routing down", "source": "GitHub", "product": "Argo Smart Routing"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    run = _wait_for_run(client, body["runId"])
    assert run["status"] == "completed"

    listing = client.get("/api/feedback", params={"product": "Argo Smart Routing"}).json()
    assert len(listing["items"]) == 1
    item = listing["items"][0]
    assert item["id"] == run["recordId"]
    assert item["summary"] == "Argo outage summary."
    assert listing["aggregates"]["countBySource"] == {"GitHub": 1}


@pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": "   "}])
def test_submit_feedback_requires_message(client, payload):
    resp = client.post("/api/feedback", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "message required"}


def test_unknown_run_is_404(client):
    assert client.get("/api/feedback/runs/nope").status_code == 404


def test_list_all_when_empty(client):
    body = client.get("/api/feedback", params={"product": "all"}).json()
    assert body["items"] == []
    assert body["aggregates"]["total"] == 0


def test_chat(client):
    resp = client.post("/api/chat", json={"message": "What broke?"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "response": "Argo outage summary."}


def test_chat_requires_message(client):
    resp = client.post("/api/chat", json={"message": " "})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_chat_failure_is_soft(make_hub):
    hub = make_hub(TextGenerationError("Workers AI unavailable"))
    with TestClient(create_app(hub)) as c:
        resp = c.post("/api/chat", json={"message": "What broke?"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert "Error" in body["response"]
    assert "unavailable" in body["response"]
