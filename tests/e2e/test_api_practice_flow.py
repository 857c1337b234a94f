from fastapi.testclient import TestClient

from api_server import app
from config.registry import COACH_KEY, bind_model
from conftest import coaching_reply

client = TestClient(app)

ANSWER = "I organised a blameless review and we halved incident volume."


def _start(headers=None, **body):
    payload = {"mode": "audio", "questionCount": 3}
    payload.update(body)
    return client.post("/api/sessions", json=payload, headers=headers or {})


def test_full_practice_flow(fake_models):
    created = _start(lowAnxietyEnabled=True)
    assert created.status_code == 201
    session = created.json()
    assert session["lowAnxietyEnabled"] is True
    session_id = session["sessionId"]

    questions = client.post(f"/api/sessions/{session_id}/questions").json()["questions"]
    assert [q["order"] for q in questions] == [1, 2, 3]

    saved = client.post(f"/api/sessions/{session_id}/draft", json={"currentIndex": 1, "mode": "audio"})
    assert saved.status_code == 200
    assert "updatedAt" in saved.json()["draft"]

    for question in questions:
        resp = client.post(
            "/api/answers",
            json={
                "sessionId": session_id,
                "questionId": question["id"],
                "text": ANSWER,
                "durationSeconds": 95,
            },
        )
        assert resp.status_code == 201
        assert resp.json()["success"] is True

    coaching = client.post(f"/api/sessions/{session_id}/coaching")
    assert coaching.status_code == 200
    body = coaching.json()
    assert body["completed"] is True
    report_id = body["reportId"]

    report = client.get(f"/api/reports/{report_id}").json()
    assert report["isGuest"] is True
    assert report["avgScore"] == 4.25
    assert len(report["perQuestionFeedback"]) == 3
    assert report["perQuestionFeedback"][0]["scores"]["impactTag"] == "high_impact"

    assert client.get(f"/api/sessions/{session_id}/draft").json() == {"draft": None}

    pdf = client.get(f"/api/reports/{report_id}/pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")

    again = client.post(f"/api/sessions/{session_id}/coaching").json()
    assert again["reportId"] == report_id
    assert again["state"] == "already_reported"


def test_validation_errors_map_to_400():
    resp = _start(lowAnxietyEnabled=True, questionCount=5)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Low-Anxiety Mode requires exactly 3 questions"}

    malformed = client.post("/api/sessions", json={"mode": "video", "questionCount": "many"})
    assert malformed.status_code == 400
    assert malformed.json()["error"] == "Invalid request"


def test_duplicate_answer_conflicts():
    session_id = _start(mode="text").json()["sessionId"]
    question = client.post(f"/api/sessions/{session_id}/questions").json()["questions"][0]
    body = {"sessionId": session_id, "questionId": question["id"], "text": ANSWER}
    assert client.post("/api/answers", json=body).status_code == 201
    resp = client.post("/api/answers", json=body)
    assert resp.status_code == 409
    short = client.post("/api/answers", json={**body, "text": "too short"})
    assert short.status_code == 400


def test_owned_sessions_and_daily_limit():
    owner = {"X-User-Id": "user-42"}
    session_id = _start(headers=owner).json()["sessionId"]
    assert client.post(f"/api/sessions/{session_id}/questions").status_code == 403
    assert client.post(f"/api/sessions/{session_id}/questions", headers={"X-User-Id": "other"}).status_code == 403
    assert client.post(f"/api/sessions/{session_id}/questions", headers=owner).status_code == 200

    assert _start(headers=owner).status_code == 201
    limited = _start(headers=owner)
    assert limited.status_code == 429
    assert "Come back tomorrow" in limited.json()["error"]


def test_missing_resources_are_404():
    assert client.post("/api/sessions/missing/questions").status_code == 404
    assert client.get("/api/reports/missing").status_code == 404


def test_coaching_without_answers_and_upstream_failure(fake_models):
    session_id = _start(mode="text").json()["sessionId"]
    questions = client.post(f"/api/sessions/{session_id}/questions").json()["questions"]
    assert client.post(f"/api/sessions/{session_id}/coaching").status_code == 400

    client.post("/api/answers", json={"sessionId": session_id, "questionId": questions[0]["id"], "text": ANSWER})

    def broken(**_):
        raise RuntimeError("provider down")

    bind_model(COACH_KEY, broken)
    assert client.post(f"/api/sessions/{session_id}/coaching").status_code == 502

    bind_model(COACH_KEY, lambda **_: coaching_reply())
    assert client.post(f"/api/sessions/{session_id}/coaching").status_code == 200
