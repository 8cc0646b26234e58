import pytest

from bloombuddies.services.dashboard import canonical_status, normalize_status, score_category, statistics


@pytest.fixture
def roster(make_candidate):
    return [
        make_candidate(name="Ada High", email="ada@example.com", token="t1", management_token="m1",
                       status="pending", overall_score=9, recommendation="Strong hire"),
        make_candidate(name="Bo Mid", email="bo@example.com", token="t2", management_token="m2",
                       status="accepted", overall_score=6),
        make_candidate(name="Cy Low", email="cy@example.com", token="t3", management_token="m3",
                       status="Interview personally", overall_score=3),
    ]


def test_requires_login(client):
    resp = client.get("/api/candidates")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Authentication required"


def test_rejects_forged_bearer_token(client):
    resp = client.get("/api/candidates", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401


def test_list_with_stats_and_filters(client, staff_headers, roster):
    body = client.get("/api/candidates", headers=staff_headers).get_json()
    assert body["count"] == 3
    assert body["stats"] == {"total": 3, "pending": 2, "accepted": 1, "rejected": 0, "averageScore": 6.0}

    high = client.get("/api/candidates?score=high", headers=staff_headers).get_json()
    assert [c["candidateName"] for c in high["candidates"]] == ["Ada High"]

    pending = client.get("/api/candidates?status=pending&sort=overallScore&order=asc",
                         headers=staff_headers).get_json()
    assert [c["candidateName"] for c in pending["candidates"]] == ["Cy Low", "Ada High"]
    # stats describe the whole roster, not the filtered view
    assert pending["stats"]["total"] == 3

    found = client.get("/api/candidates?search=strong", headers=staff_headers).get_json()
    assert found["count"] == 1


def test_detail_and_missing(client, staff_headers, roster):
    body = client.get(f"/api/candidates/{roster[0].id}", headers=staff_headers).get_json()
    assert body["candidate"]["candidateName"] == "Ada High"
    assert "transcript" in body["candidate"]
    assert client.get("/api/candidates/9999", headers=staff_headers).status_code == 404


def test_accepting_sends_decision_email(client, staff_headers, store, roster, outbox):
    resp = client.put(f"/api/candidates/{roster[0].id}", json={"status": "accept"}, headers=staff_headers)
    assert resp.status_code == 200
    assert store.get(roster[0].id).status == "accepted"
    assert [m["to"] for m in outbox] == ["ada@example.com"]

    # same status again is not a new decision
    client.put(f"/api/candidates/{roster[0].id}", json={"status": "accepted"}, headers=staff_headers)
    assert len(outbox) == 1


def test_update_writes_only_sent_fields(client, staff_headers, store, roster, outbox):
    cid = roster[1].id
    resp = client.put(f"/api/candidates/{cid}", json={"nextAction": "Call back Monday"}, headers=staff_headers)
    assert resp.status_code == 200
    record = store.get(cid)
    assert record.next_action == "Call back Monday"
    assert record.status == "accepted"
    assert outbox == []


def test_update_rejects_unknown_status(client, staff_headers, roster):
    resp = client.put(f"/api/candidates/{roster[0].id}", json={"status": "promoted"}, headers=staff_headers)
    assert resp.status_code == 400
    assert "status" in resp.get_json()["errors"]


def test_update_with_nothing_to_write(client, staff_headers, roster):
    assert client.put(f"/api/candidates/{roster[0].id}", json={}, headers=staff_headers).status_code == 400


def test_status_webhook_posted_on_decision(app, client, staff_headers, roster, outbox, monkeypatch):
    calls = []

    class FakeResponse:
        status_code = 200

        def raise_for_status(self):
            pass

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json))
        return FakeResponse()

    app.config["STATUS_WEBHOOK_URL"] = "https://hooks.example.com/status"
    monkeypatch.setattr("bloombuddies.jobs.notify.requests.post", fake_post)
    client.put(f"/api/candidates/{roster[2].id}", json={"status": "rejected"}, headers=staff_headers)

    (url, payload), = calls
    assert url == "https://hooks.example.com/status"
    assert payload["action"] == "rejected"
    assert payload["candidate"]["id"] == roster[2].id


def test_delete_is_admin_only(client, staff_headers, admin_headers, store, roster):
    cid = roster[0].id
    assert client.delete(f"/api/candidates/{cid}", headers=staff_headers).status_code == 403
    assert client.delete(f"/api/candidates/{cid}", headers=admin_headers).status_code == 200
    assert store.get(cid) is None
    assert client.delete(f"/api/candidates/{cid}", headers=admin_headers).status_code == 404


def test_scheduling_link_for_candidate(client, staff_headers, roster):
    body = client.get(f"/api/candidates/{roster[0].id}/scheduling-link", headers=staff_headers).get_json()
    assert body["link"].startswith("https://interviews.example.com/schedule-interview.html?id=")


def test_status_helpers():
    assert canonical_status(" Hired ") == "accepted"
    assert normalize_status("scheduled") == "pending"
    assert normalize_status(None) == "pending"
    assert score_category(7) == "high"
    assert score_category(5) == "medium"
    assert score_category(None) == "low"
    assert statistics([]) == {"total": 0, "pending": 0, "accepted": 0, "rejected": 0, "averageScore": 0}
