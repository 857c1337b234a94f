from fastapi.testclient import TestClient

from api_server import app
from config.settings import settings
from services.costs import track_cost

client = TestClient(app)


def test_capabilities_default_enabled():
    assert client.get("/api/capabilities").json() == {"audioModeEnabled": True}


def test_cron_requires_secret(monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")
    assert client.post("/api/cron/enforce-cost-cap").status_code == 403
    assert client.post("/api/cron/reset-audio-mode", headers={"X-Cron-Secret": "nope"}).status_code == 403


def test_cron_rejects_when_secret_unset():
    assert client.post("/api/cron/enforce-cost-cap", headers={"X-Cron-Secret": ""}).status_code == 403


def test_cost_cap_cycle(monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")
    headers = {"X-Cron-Secret": "s3cret"}

    track_cost("gpt-4o", 300.0)
    resp = client.post("/api/cron/enforce-cost-cap", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["audioEnabled"] is False
    assert client.get("/api/capabilities").json() == {"audioModeEnabled": False}

    reset = client.post("/api/cron/reset-audio-mode", headers=headers)
    assert reset.json() == {"success": True}
    assert client.get("/api/capabilities").json() == {"audioModeEnabled": True}


def test_reviewer_transcript_endpoint(fake_models, monkeypatch):
    monkeypatch.setattr(settings, "REVIEWER_IDS", ["rev-9"])
    session_id = client.post("/api/sessions", json={"mode": "text", "questionCount": 3}).json()["sessionId"]
    questions = client.post(f"/api/sessions/{session_id}/questions").json()["questions"]
    for question in questions:
        client.post(
            "/api/answers",
            json={"sessionId": session_id, "questionId": question["id"], "text": "A thorough STAR answer here."},
        )
    client.post(f"/api/sessions/{session_id}/coaching")

    assert client.get(f"/api/admin/transcripts/{session_id}").status_code == 403
    resp = client.get(f"/api/admin/transcripts/{session_id}", headers={"X-User-Id": "rev-9"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["avgScore"] == 4.25
    assert len(body["answers"]) == 3
