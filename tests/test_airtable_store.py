from datetime import datetime, timezone

import pytest
import requests

from bloombuddies.errors import RecordNotFound, UpstreamFailure
from bloombuddies.services.admission import AdmissionControl, DenialReason
from bloombuddies.services.airtable import AirtableCandidateStore, equals_formula


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = str(self._payload)

    def json(self):
        return self._payload


class FakeSession:
    """Replays queued responses and records each request."""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, timeout=None, params=None, json=None):
        self.calls.append({"method": method, "url": url, "params": dict(params or {}), "json": json})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _store(*responses):
    session = FakeSession(*responses)
    return AirtableCandidateStore("key", "appBase", "Candidates", session=session), session


def _row(record_id="rec1", **fields):
    base = {"Token": "tok", "Candidate Name": "Jane", "Email": "jane@example.com",
            "Interview Time": "2024-01-01T10:00:00.000Z"}
    base.update(fields)
    return {"id": record_id, "createdTime": "2023-12-01T08:00:00.000Z", "fields": base}


def test_formula_values_are_escaped():
    assert equals_formula("Token", "x' OR '1'='1") == "{Token} = 'x\\' OR \\'1\\'=\\'1'"
    assert equals_formula("Token", "back\\slash") == "{Token} = 'back\\\\slash'"


def test_find_by_token_maps_fields():
    store, session = _store(FakeResponse(payload={"records": [_row(callAttempts="2", score=8.0)]}))
    record = store.find_by_token("tok")

    assert session.calls[0]["params"]["filterByFormula"] == "{Token} = 'tok'"
    assert session.calls[0]["url"] == "https://api.airtable.com/v0/appBase/Candidates"
    assert session.headers["Authorization"] == "Bearer key"
    assert record.name == "Jane"
    assert record.appointment_time == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    assert record.call_attempts == 2
    assert record.overall_score == 8
    assert record.interview_completed is False


def test_legacy_column_names_are_read():
    store, _ = _store(FakeResponse(payload=_row(**{"Candidate Name": None, "Name": "Old Jane",
                                                    "Interview Time": None,
                                                    "AppointmentTime": "2024-02-02T09:00:00Z"})))
    record = store.get("rec1")
    assert record.name == "Old Jane"
    assert record.appointment_time.month == 2


def test_missing_record_and_upstream_errors():
    store, _ = _store(FakeResponse(404), FakeResponse(422, {"error": "INVALID"}),
                      requests.ConnectionError("down"))
    assert store.get("recMissing") is None
    with pytest.raises(UpstreamFailure):
        store.find_by_token("tok")
    with pytest.raises(UpstreamFailure):
        store.find_by_token("tok")


def test_update_sends_typecast_patch():
    store, session = _store(FakeResponse(payload=_row(status="accepted")), FakeResponse(404))
    record = store.update("rec1", {"status": "accepted",
                                   "call_started_at": datetime(2024, 1, 1, 10, 1, tzinfo=timezone.utc)})
    call = session.calls[0]
    assert call["method"] == "PATCH"
    assert call["url"].endswith("/Candidates/rec1")
    assert call["json"] == {"fields": {"status": "accepted", "callStartedAt": "2024-01-01T10:01:00Z"},
                            "typecast": True}
    assert record.status == "accepted"
    with pytest.raises(RecordNotFound):
        store.update("recGone", {"status": "accepted"})


def test_list_follows_pagination():
    store, session = _store(
        FakeResponse(payload={"records": [_row("rec1")], "offset": "page2"}),
        FakeResponse(payload={"records": [_row("rec2", Token="tok2")]}),
    )
    assert [r.id for r in store.list()] == ["rec1", "rec2"]
    assert "offset" not in session.calls[0]["params"]
    assert session.calls[1]["params"]["offset"] == "page2"


def test_delete():
    store, session = _store(FakeResponse(payload={"id": "rec1", "deleted": True}))
    assert store.delete("rec1") is True
    assert session.calls[0]["method"] == "DELETE"


def test_admission_over_airtable_writes_one_update():
    appt = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    store, session = _store(
        FakeResponse(payload={"records": [_row()]}),
        FakeResponse(payload=_row(InterviewCompleted=True, callAttempts=1, action="interviewed")),
        FakeResponse(payload={"records": [_row(InterviewCompleted=True, callAttempts=1, action="interviewed")]}),
    )
    control = AdmissionControl(store, clock=lambda: appt)
    assert control.consume_access("tok").granted
    patch = session.calls[1]["json"]["fields"]
    assert patch["status"] == "pending"
    assert patch["InterviewCompleted"] is True
    assert patch["callAttempts"] == 1
    assert control.consume_access("tok").reason is DenialReason.ALREADY_STARTED


def test_requires_credentials():
    with pytest.raises(ValueError):
        AirtableCandidateStore(None, "appBase")
