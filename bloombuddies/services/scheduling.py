"""Booking, scheduling links and candidate self-service."""
import hashlib
import hmac
import secrets
from datetime import datetime
from urllib.parse import urlencode

from ..errors import BookingConflict, RecordNotFound
from .window import utcnow


def mint_token():
    return secrets.token_urlsafe(24)


def scheduling_token(secret_key, email):
    digest = hmac.new(secret_key.encode("utf-8"), (email or "").strip().lower().encode("utf-8"),
                      hashlib.sha256).hexdigest()
    return digest[:32]


def verify_scheduling_token(secret_key, token, email):
    if not token or not email:
        return False
    return hmac.compare_digest(scheduling_token(secret_key, email), token)


def _link(base_url, page, **params):
    return f"{base_url.rstrip('/')}/{page}?{urlencode(params)}"


def scheduling_link(base_url, secret_key, record_id, email):
    return _link(base_url, "schedule-interview.html", id=record_id, token=scheduling_token(secret_key, email))


def interview_link(base_url, token):
    return _link(base_url, "interview.html", token=token)


def manage_link(base_url, management_token):
    return _link(base_url, "manage.html", token=management_token)


def _ensure_future(appointment_time: datetime, now=None):
    if appointment_time <= (now or utcnow()):
        raise ValueError("Appointment time must be in the future")


def register(store, name, email, appointment_time, phone=None, now=None):
    """Create a new booked candidate with both tokens minted."""
    _ensure_future(appointment_time, now)
    return store.create({
        "name": name,
        "email": email,
        "phone": phone,
        "appointment_time": appointment_time,
        "status": "scheduled",
        "token": mint_token(),
        "management_token": mint_token(),
        "interview_completed": False,
        "call_attempts": 0,
    })


def book_existing(store, record_id, appointment_time, now=None):
    """Book a time on a record reached through a scheduling link.

    Tokens already on the record are kept.
    """
    record = store.get(record_id)
    if record is None:
        raise RecordNotFound(record_id)
    if record.is_cancelled:
        raise BookingConflict("This interview was cancelled and cannot be rescheduled")
    if record.interview_started:
        raise BookingConflict("This interview has already started")
    _ensure_future(appointment_time, now)

    values = {"appointment_time": appointment_time, "status": "scheduled"}
    if not record.token:
        values["token"] = mint_token()
    if not record.management_token:
        values["management_token"] = mint_token()
    return store.update(record.id, values)


def _managed(store, management_token):
    record = store.find_by_management_token(management_token)
    if record is None:
        raise RecordNotFound(management_token)
    if record.is_cancelled:
        raise BookingConflict("This interview was cancelled")
    if record.interview_started:
        raise BookingConflict("This interview has already started")
    return record


def reschedule(store, management_token, appointment_time, now=None):
    record = _managed(store, management_token)
    _ensure_future(appointment_time, now)
    return store.update(record.id, {"appointment_time": appointment_time, "status": "rescheduled"})


def cancel(store, management_token, now=None):
    record = _managed(store, management_token)
    return store.update(record.id, {"status": "cancelled", "cancelled_at": now or utcnow()})
