from datetime import timedelta

from bloombuddies.services.window import utcnow


def test_validate_token_requires_token(client):
    resp = client.post("/api/validate-token", json={})
    assert resp.status_code == 400
    assert resp.get_json()["valid"] is False


def test_validate_token_unknown(client):
    resp = client.post("/api/validate-token", json={"token": "nope"})
    assert resp.status_code == 404


def test_validate_token_inside_window(client, make_candidate):
    record = make_candidate(appointment_time=utcnow() + timedelta(minutes=2))
    resp = client.post("/api/validate-token", json={"token": "tok-jane"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["valid"] is True
    assert body["candidate"]["id"] == record.id
    assert body["timeInfo"]["valid"] is True


def test_validate_token_too_early(client, make_candidate):
    make_candidate(appointment_time=utcnow() + timedelta(days=2))
    resp = client.post("/api/validate-token", json={"token": "tok-jane"})
    body = resp.get_json()
    assert resp.status_code == 403
    assert body["timeInfo"]["tooEarly"] is True
    assert body["timeInfo"]["countdown"]["days"] in (1, 2)


def test_validate_token_too_late(client, make_candidate):
    make_candidate(appointment_time=utcnow() - timedelta(hours=2))
    body = client.post("/api/validate-token", json={"token": "tok-jane"}).get_json()
    assert body["timeInfo"]["tooLate"] is True


def test_validate_token_already_used(client, make_candidate):
    make_candidate(interview_completed=True)
    resp = client.post("/api/validate-token", json={"token": "tok-jane"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Interview has already been completed"


def test_mark_started_once_then_conflict(client, make_candidate):
    make_candidate(appointment_time=utcnow())
    first = client.post("/api/mark-interview-started", json={"token": "tok-jane"})
    assert first.status_code == 200
    assert first.get_json() == {"success": True, "callAttempts": 1}

    second = client.post("/api/mark-interview-started", json={"token": "tok-jane"})
    assert second.status_code == 409
    assert second.get_json()["callAttempts"] == 1

    status = client.get("/api/check-interview-status?token=tok-jane").get_json()
    assert status["completed"] is True
    assert status["callAttempts"] == 1


def test_mark_started_unknown_token(client):
    assert client.post("/api/mark-interview-started", json={"token": "x"}).status_code == 404


def test_check_status_does_not_consume(client, make_candidate):
    make_candidate()
    for _ in range(3):
        body = client.get("/api/check-interview-status?token=tok-jane").get_json()
        assert body["completed"] is False
        assert body["callAttempts"] == 0
    assert client.get("/api/check-interview-status").status_code == 400


def test_vapi_credentials_only_inside_window(client, make_candidate):
    make_candidate(appointment_time=utcnow())
    resp = client.post("/api/get-vapi-credentials", json={"token": "tok-jane"})
    assert resp.status_code == 200
    assert resp.get_json() == {"vapiKey": "vapi-public-test", "vapiAssistantId": "assistant-test", "success": True}

    make_candidate(token="later", management_token="m2", appointment_time=utcnow() + timedelta(hours=3))
    assert client.post("/api/get-vapi-credentials", json={"token": "later"}).status_code == 403


def test_vapi_credentials_not_configured(app, client, make_candidate):
    make_candidate(appointment_time=utcnow())
    app.config["VAPI_PUBLIC_KEY"] = None
    resp = client.post("/api/get-vapi-credentials", json={"token": "tok-jane"})
    assert resp.status_code == 500


def test_health_and_banner(client):
    assert client.get("/health").get_json()["status"] == "OK"
    assert client.get("/").status_code == 200


def test_non_string_token_is_rejected(client):
    for path in ("/api/validate-token", "/api/mark-interview-started", "/api/get-vapi-credentials"):
        for token in (12345, 4.5, {"t": 1}):
            assert client.post(path, json={"token": token}).status_code == 400


def test_token_whitespace_is_ignored(client, make_candidate):
    make_candidate(appointment_time=utcnow())
    assert client.post("/api/validate-token", json={"token": "  tok-jane\n"}).status_code == 200
    resp = client.post("/api/mark-interview-started", json={"token": " tok-jane "})
    assert resp.get_json() == {"success": True, "callAttempts": 1}
    assert client.get("/api/check-interview-status?token=%20tok-jane").get_json()["callAttempts"] == 1


def test_cancelled_booking_cannot_enter(client, make_candidate):
    make_candidate(appointment_time=utcnow(), status="cancelled")
    resp = client.post("/api/validate-token", json={"token": "tok-jane"})
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "This interview was cancelled"
    assert client.post("/api/get-vapi-credentials", json={"token": "tok-jane"}).status_code == 403
    assert client.post("/api/mark-interview-started", json={"token": "tok-jane"}).status_code == 403
    assert client.get("/api/check-interview-status?token=tok-jane").get_json()["callAttempts"] == 0
