"""Airtable-backed candidate store (REST API v0 over ``requests``)."""
import logging
from urllib.parse import quote

import requests

from ..errors import RecordNotFound, UpstreamFailure
from .store import (CandidateRecord, CandidateStore, DATETIME_FIELDS, RECORD_FIELDS,
                    check_writable)
from .window import isoformat, parse_timestamp

logger = logging.getLogger(__name__)

# record field -> Airtable column; the first name is the one written
FIELD_MAP = {
    "token": ("Token",),
    "management_token": ("Management Token",),
    "name": ("Candidate Name", "Name"),
    "email": ("Email",),
    "phone": ("Phone",),
    "appointment_time": ("Interview Time", "AppointmentTime"),
    "status": ("status", "Status"),
    "action": ("action",),
    "interview_completed": ("InterviewCompleted",),
    "call_attempts": ("callAttempts",),
    "call_started_at": ("callStartedAt",),
    "call_ended_at": ("callEndedAt",),
    "cancelled_at": ("Cancelled At",),
    "overall_score": ("score",),
    "communication": ("Communication",),
    "enthusiasm": ("enthusiasm",),
    "professionalism": ("professionalism",),
    "recommendation": ("Recommandation",),
    "summary": ("Interview Summary",),
    "analysis": ("Interview Analysis",),
    "transcript": ("Interview Transcript",),
    "interview_length": ("Interview Length",),
    "availability": ("availability",),
    "next_action": ("Next Action Recommendation",),
    "recording_url": ("Recording URL",),
    "ended_reason": ("Ended Reason",),
}
INT_FIELDS = {"call_attempts", "overall_score", "communication", "enthusiasm",
              "professionalism", "interview_length"}


def escape_formula_value(value):
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


def equals_formula(column, value):
    return f"{{{column}}} = '{escape_formula_value(value)}'"


def _int_or_none(value):
    if value in (None, ""):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def record_from_airtable(payload) -> CandidateRecord:
    raw = payload.get("fields") or {}
    values = {}
    for name in RECORD_FIELDS:
        if name in ("id", "created_at"):
            continue
        value = None
        for column in FIELD_MAP[name]:
            if raw.get(column) not in (None, ""):
                value = raw[column]
                break
        if name in DATETIME_FIELDS:
            try:
                value = parse_timestamp(value)
            except ValueError:
                logger.warning("unparseable %s on %s: %r", name, payload.get("id"), value)
                value = None
        elif name in INT_FIELDS:
            value = _int_or_none(value)
        values[name] = value
    values["interview_completed"] = bool(values.get("interview_completed"))
    values["call_attempts"] = values.get("call_attempts") or 0
    created = payload.get("createdTime")
    return CandidateRecord(id=payload["id"], created_at=parse_timestamp(created) if created else None, **values)


def fields_to_airtable(values: dict) -> dict:
    out = {}
    for name, value in values.items():
        if name in DATETIME_FIELDS:
            value = isoformat(parse_timestamp(value))
        out[FIELD_MAP[name][0]] = value
    return out


class AirtableCandidateStore(CandidateStore):
    atomic_mark_started = False

    def __init__(self, api_key, base_id, table_name="Candidates",
                 api_url="https://api.airtable.com/v0", timeout=10, session=None):
        if not api_key or not base_id:
            raise ValueError("AIRTABLE_API_KEY and AIRTABLE_BASE_ID are required for the airtable store")
        self.table_url = f"{api_url.rstrip('/')}/{base_id}/{quote(table_name, safe='')}"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def _request(self, method, path="", **kwargs):
        url = self.table_url + path
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.exception("Airtable %s %s failed", method, path or "/")
            raise UpstreamFailure(f"airtable {method} failed: {e}") from e
        if resp.status_code == 404:
            return None
        if resp.status_code >= 400:
            logger.error("Airtable %s %s returned %s: %s", method, path or "/", resp.status_code, resp.text[:500])
            raise UpstreamFailure(f"airtable {method} returned {resp.status_code}")
        return resp.json()

    def _find_one(self, name, value):
        if not value:
            return None
        data = self._request("GET", params={
            "filterByFormula": equals_formula(FIELD_MAP[name][0], value),
            "maxRecords": 1,
        })
        records = (data or {}).get("records") or []
        return record_from_airtable(records[0]) if records else None

    def get(self, record_id):
        if not record_id:
            return None
        data = self._request("GET", f"/{quote(str(record_id), safe='')}")
        return record_from_airtable(data) if data else None

    def find_by_token(self, token):
        return self._find_one("token", token)

    def find_by_management_token(self, token):
        return self._find_one("management_token", token)

    def list(self, status=None):
        params = {
            "pageSize": 100,
            "sort[0][field]": FIELD_MAP["appointment_time"][0],
            "sort[0][direction]": "desc",
        }
        if status:
            params["filterByFormula"] = equals_formula(FIELD_MAP["status"][0], status)
        out = []
        while True:
            data = self._request("GET", params=params) or {}
            out.extend(record_from_airtable(r) for r in data.get("records") or [])
            offset = data.get("offset")
            if not offset:
                return out
            params["offset"] = offset

    def create(self, values):
        check_writable(values)
        data = self._request("POST", json={"fields": fields_to_airtable(values), "typecast": True})
        if not data:
            raise UpstreamFailure("airtable create returned no record")
        return record_from_airtable(data)

    def update(self, record_id, values):
        check_writable(values)
        data = self._request("PATCH", f"/{quote(str(record_id), safe='')}",
                             json={"fields": fields_to_airtable(values), "typecast": True})
        if data is None:
            raise RecordNotFound(record_id)
        return record_from_airtable(data)

    def delete(self, record_id):
        data = self._request("DELETE", f"/{quote(str(record_id), safe='')}")
        return bool(data and data.get("deleted"))
