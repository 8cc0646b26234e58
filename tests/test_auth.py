from urllib.parse import parse_qs, urlparse

from bloombuddies.models.user import User
from bloombuddies.services.tokens import decode_access_token


def _login(client, email="staff@example.com", password="correct-horse"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_login_issues_jwt(app, client, staff):
    resp = _login(client, email="STAFF@example.com")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["user"]["email"] == "staff@example.com"
    assert "password_hash" not in body["user"]
    assert decode_access_token(body["token"])["sub"] == str(staff.id)

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.get_json()["user"]["role"] == "user"


def test_bad_password_and_unknown_user(client, staff):
    assert _login(client, password="wrong-password").status_code == 401
    assert _login(client, email="ghost@example.com").status_code == 401
    assert client.post("/api/auth/login", json={"email": "not-an-email", "password": "x"}).status_code == 400


def test_lockout_after_repeated_failures(app, client, staff):
    for _ in range(app.config["MAX_LOGIN_ATTEMPTS"]):
        assert _login(client, password="wrong-password").status_code == 401
    # locked even with the right password
    assert _login(client).status_code == 429
    assert User.find_by_email("staff@example.com").is_locked()


def test_password_reset_flow(client, staff, outbox):
    resp = client.post("/api/auth/forgot-password", json={"email": "staff@example.com"})
    assert resp.status_code == 200
    (mail,) = outbox
    assert mail["to"] == "staff@example.com"

    link = next(part for part in mail["html"].split('"') if "reset-password.html" in part)
    raw = parse_qs(urlparse(link.replace("&amp;", "&")).query)["token"][0]
    assert User.find_by_email("staff@example.com").reset_token_hash != raw

    done = client.post("/api/auth/reset-password", json={"token": raw, "password": "brand-new-pass"})
    assert done.status_code == 200
    assert _login(client, password="brand-new-pass").status_code == 200
    # single use
    again = client.post("/api/auth/reset-password", json={"token": raw, "password": "another-pass"})
    assert again.status_code == 400
    assert outbox[-1]["subject"].startswith("Password Successfully Changed")


def test_forgot_password_does_not_reveal_accounts(client, outbox):
    resp = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert resp.status_code == 200
    assert outbox == []


def test_change_password(client, staff, staff_headers, outbox):
    wrong = client.post("/api/auth/change-password", headers=staff_headers,
                        json={"currentPassword": "nope", "password": "brand-new-pass"})
    assert wrong.status_code == 400
    ok = client.post("/api/auth/change-password", headers=staff_headers,
                     json={"currentPassword": "correct-horse", "password": "brand-new-pass"})
    assert ok.status_code == 200
    assert _login(client, password="brand-new-pass").status_code == 200
    assert len(outbox) == 1


def test_user_admin_endpoints(client, admin, admin_headers, staff_headers):
    assert client.get("/api/auth/users", headers=staff_headers).status_code == 403

    created = client.post("/api/auth/users", headers=admin_headers,
                          json={"email": "new@example.com", "password": "long-enough", "role": "user"})
    assert created.status_code == 201
    uid = created.get_json()["user"]["id"]
    dup = client.post("/api/auth/users", headers=admin_headers,
                      json={"email": "NEW@example.com", "password": "long-enough"})
    assert dup.status_code == 409

    updated = client.put(f"/api/auth/users/{uid}", headers=admin_headers, json={"role": "admin", "name": "New"})
    assert updated.get_json()["user"]["role"] == "admin"
    bad_role = client.put(f"/api/auth/users/{uid}", headers=admin_headers, json={"role": "owner"})
    assert bad_role.status_code == 400

    emails = {u["email"] for u in client.get("/api/auth/users", headers=admin_headers).get_json()["users"]}
    assert emails == {"admin@example.com", "staff@example.com", "new@example.com"}

    assert client.delete(f"/api/auth/users/{admin.id}", headers=admin_headers).status_code == 400
    assert client.delete(f"/api/auth/users/{uid}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/auth/users/{uid}", headers=admin_headers).status_code == 404
