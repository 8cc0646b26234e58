import os
import sys
from datetime import timedelta

import pytest
from flask import g

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from bloombuddies import create_app
from bloombuddies.extensions import db, get_store
from bloombuddies.models.user import User
from bloombuddies.services.tokens import issue_access_token
from bloombuddies.services.window import utcnow


@pytest.fixture
def app():
    app = create_app("config.TestConfig")

    @app.before_request
    def forget_cached_user():
        # requests share the fixture's app context, so g would keep the previous caller
        g.pop("_login_user", None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(monkeypatch):
    """Captures emails instead of calling SendGrid."""
    sent = []

    def fake_send(to_email, subject, html, text=None, attachments=None):
        sent.append({"to": to_email, "subject": subject, "html": html, "attachments": attachments or []})
        return 202, f"msg-{len(sent)}"

    monkeypatch.setattr("bloombuddies.jobs.notify.send_email", fake_send)
    return sent


@pytest.fixture
def store(app):
    return get_store()


@pytest.fixture
def make_candidate(store):
    def _make(**values):
        defaults = {
            "name": "Jane Doe",
            "email": "jane@example.com",
            "token": "tok-jane",
            "management_token": "mgmt-jane",
            "status": "scheduled",
            "appointment_time": utcnow() + timedelta(minutes=10),
        }
        defaults.update(values)
        return store.create(defaults)
    return _make


def _user(email, role, password="correct-horse"):
    user = User(email=email, name=email.split("@")[0], role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin(app):
    return _user("admin@example.com", "admin")


@pytest.fixture
def staff(app):
    return _user("staff@example.com", "user")


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {issue_access_token(admin)}"}


@pytest.fixture
def staff_headers(staff):
    return {"Authorization": f"Bearer {issue_access_token(staff)}"}
