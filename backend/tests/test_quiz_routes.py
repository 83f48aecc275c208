from __future__ import annotations

import importlib

from app.core.config import settings


def _start(client, name="alice"):
    r = client.post("/api/start-quiz", json={"name": name})
    assert r.status_code == 201, r.text
    return r.json()["data"]["sessionId"]


def _admin_token(client):
    r = client.post("/api/admin/authenticate", json={"name": settings.ADMIN_NAME})
    assert r.status_code == 200, r.text
    return r.json()["data"]["adminToken"]


def test_full_quiz_flow(client):
    r = client.post("/api/start-quiz", json={"name": "  alice "})
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Quiz started successfully"
    assert body["data"]["name"] == "alice"
    assert body["data"]["baseMinutes"] == settings.QUIZ_BASE_MINUTES
    sid = body["data"]["sessionId"]

    r = client.get("/api/questions", params={"sessionId": sid})
    assert r.status_code == 200
    questions = r.json()["data"]["questions"]
    assert len(questions) == 5
    for q in questions:
        assert "correct_option_index" not in q
        assert "answer" not in q

    r = client.post("/api/save-answers", json={"sessionId": sid, "answers": {"1": 0, "2": 1}})
    assert r.status_code == 200
    assert r.json()["savedCount"] == 2

    r = client.post("/api/select-bonus", json={"sessionId": sid, "bonusMinutes": 15})
    assert r.status_code == 200
    assert r.json()["data"] == {"bonusMinutes": 15, "penalty": -3}

    r = client.post("/api/submit-quiz", json={"sessionId": sid})
    assert r.status_code == 200
    result = r.json()["data"]
    assert result["totalQuestions"] == 5
    assert result["totalCorrect"] == 1
    assert result["totalScore"] == 0
    assert result["bonusPenalty"] == -3

    r = client.post("/api/submit-quiz", json={"sessionId": sid})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Quiz already submitted"
    assert body["error"]["code"] == "ALREADY_SUBMITTED"

    r = client.get("/api/session-status", params={"sessionId": sid})
    assert r.json()["data"]["state"] == "submitted"


def test_start_quiz_rejects_short_name(client):
    r = client.post("/api/start-quiz", json={"name": "a"})
    assert r.status_code == 400
    assert r.json()["message"] == "Name must be at least 2 characters long"


def test_missing_and_unknown_session(client):
    r = client.get("/api/questions")
    assert r.status_code == 400
    assert r.json()["message"] == "Session ID required"

    r = client.get("/api/questions", params={"sessionId": "nope"})
    assert r.status_code == 404
    assert r.json()["message"] == "Invalid session"

    r = client.get("/api/session-status", params={"sessionId": "nope"})
    assert r.status_code == 404
    assert r.json()["message"] == "Session not found"


def test_save_answers_rejects_bad_payloads(client):
    sid = _start(client)

    r = client.post("/api/save-answers", json={"sessionId": sid, "answers": {"abc": 1}})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"

    r = client.post("/api/save-answers", json={"sessionId": sid, "answers": {"1": 9}})
    assert r.status_code == 400

    r = client.get("/api/session-status", params={"sessionId": sid})
    assert r.json()["data"]["answeredCount"] == 0


def test_bonus_selection_errors(client):
    sid = _start(client)

    for minutes in (10, "15", None):
        r = client.post("/api/select-bonus", json={"sessionId": sid, "bonusMinutes": minutes})
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid bonus time selection"

    assert client.post("/api/select-bonus", json={"sessionId": sid, "bonusMinutes": 20}).status_code == 200

    r = client.post("/api/select-bonus", json={"sessionId": sid, "bonusMinutes": 30})
    assert r.status_code == 400
    assert r.json()["message"] == "Bonus time already selected"

    r = client.get("/api/session-status", params={"sessionId": sid})
    data = r.json()["data"]
    assert data["state"] == "active_bonus"
    assert data["bonusMinutes"] == 20


def test_admin_authentication(client):
    r = client.post("/api/admin/authenticate", json={"name": "Sam Altman"})
    assert r.status_code == 401
    assert r.json()["message"] == "Unauthorized. Invalid credentials."

    r = client.post("/api/admin/authenticate", json={"name": settings.ADMIN_NAME})
    assert r.status_code == 200
    assert r.json()["data"]["isAdmin"] is True


def test_participants_require_admin_token(client):
    r = client.get("/api/admin/participants")
    assert r.status_code == 403
    assert r.json()["message"] == "Forbidden. Admin access required."

    r = client.get("/api/admin/participants", params={"adminToken": "admin-123"})
    assert r.status_code == 403


def test_participants_leaderboard(client):
    for name, answers in (("low", {"1": 1}), ("high", {"1": 0, "2": 2, "3": 1})):
        sid = _start(client, name)
        client.post("/api/save-answers", json={"sessionId": sid, "answers": answers})
        client.post("/api/submit-quiz", json={"sessionId": sid})
    _start(client, "unfinished")

    token = _admin_token(client)
    r = client.get("/api/admin/participants", params={"adminToken": token, "sortBy": "score"})

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["total"] == 2
    assert [(p["rank"], p["name"], p["totalScore"]) for p in data["participants"]] == [
        (1, "high", 3),
        (2, "low", 0),
    ]


def test_seed_endpoint(client, monkeypatch):
    token = _admin_token(client)
    monkeypatch.setattr(settings, "QUIZ_TOTAL_QUESTIONS", 50)

    assert client.post("/api/admin/seed").status_code == 403

    r = client.post("/api/admin/seed", params={"adminToken": token})
    assert r.status_code == 200
    assert r.json()["data"] == {"inserted": 50}

    r = client.get("/api/health")
    assert r.json()["data"] == {"status": "ok", "questions": 50}


def test_unknown_route(client):
    r = client.get("/api/does-not-exist")
    assert r.status_code == 404
    assert r.json()["message"] == "Route not found"
    assert r.json()["success"] is False


def test_request_id_is_echoed(client):
    r = client.get("/api/health", headers={"X-Request-ID": "req-42"})
    assert r.status_code == 200
    assert r.headers["X-Request-ID"] == "req-42"
    assert r.json()["request_id"] == "req-42"
    assert r.json()["data"]["questions"] == 5


def test_app_imports_and_mounts_routes():
    main = importlib.import_module("app.main")
    paths = {route.path for route in main.app.routes}
    assert {"/api/start-quiz", "/api/submit-quiz", "/api/admin/participants", "/api/health"} <= paths


def test_save_answers_does_not_coerce_values(client):
    sid = _start(client)

    for answers in ({"1": "2"}, {"2": True}, {"3": 1.0}, {"1": 0, "4": "3"}):
        r = client.post("/api/save-answers", json={"sessionId": sid, "answers": answers})
        assert r.status_code == 400, answers
        assert r.json()["error"]["code"] == "VALIDATION_ERROR"

    r = client.get("/api/session-status", params={"sessionId": sid})
    assert r.json()["data"]["answeredCount"] == 0
