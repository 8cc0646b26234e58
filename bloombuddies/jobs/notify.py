import time
from datetime import datetime, timedelta, timezone

import requests
from flask import current_app, render_template

from ..errors import MailNotConfigured
from ..extensions import db, rq
from ..models.notification import Notification
from ..services.ics import build_ics
from ..services.mail import send_email
from ..services.scheduling import interview_link, manage_link
from ..services.window import isoformat, parse_timestamp

SUBJECTS = {
    "confirmation": "Your Bloom Buddies interview is booked",
    "rescheduled": "Your Bloom Buddies interview has been rescheduled",
    "cancelled": "Your Bloom Buddies interview has been cancelled",
    "accepted": "Good news about your Bloom Buddies application",
    "rejected": "An update on your Bloom Buddies application",
    "password_reset": "Password Reset Request - Bloom Buddies Dashboard",
    "password_changed": "Password Successfully Changed - Bloom Buddies Dashboard",
}
INVITE_KINDS = {"confirmation", "rescheduled"}
INVITE_LENGTH = timedelta(minutes=30)


def _display_time(value):
    if value is None:
        return ""
    return value.astimezone(timezone.utc).strftime("%A, %B %d, %Y at %H:%M UTC")


def candidate_context(record):
    base_url = current_app.config["FRONTEND_URL"]
    return {
        "name": record.name or "there",
        "appointment_time": isoformat(record.appointment_time),
        "appointment_display": _display_time(record.appointment_time),
        "interview_link": interview_link(base_url, record.token) if record.token else None,
        "manage_link": manage_link(base_url, record.management_token) if record.management_token else None,
    }


def _attachments(kind, context):
    if kind not in INVITE_KINDS or not context.get("appointment_time"):
        return []
    start = parse_timestamp(context["appointment_time"])
    ics = build_ics(current_app.config["UID_DOMAIN"],
                    title="Bloom Buddies phone interview",
                    start=start,
                    end=start + INVITE_LENGTH,
                    location="Online",
                    description=context.get("interview_link") or "")
    return [("interview.ics", "text/calendar", ics.encode("utf-8"))]


def deliver_notification(kind: str, to_email: str, context: dict, candidate_ref: str = None):
    """Render and send one email, retrying a fixed number of times.

    Every delivery is logged as a Notification row; returns its id.
    """
    subject = SUBJECTS[kind]
    html = render_template(f"mail/{kind}.html", **context)
    attachments = _attachments(kind, context)
    max_attempts = max(1, int(current_app.config.get("NOTIFY_MAX_ATTEMPTS", 3)))
    delay = current_app.config.get("NOTIFY_RETRY_DELAY_SECONDS", 5)

    n = Notification(candidate_ref=candidate_ref, kind=kind, sent_to=to_email,
                     subject=subject, attempts=0)
    for attempt in range(1, max_attempts + 1):
        n.attempts = attempt
        try:
            status, message_id = send_email(to_email, subject, html, attachments=attachments)
        except MailNotConfigured as e:
            current_app.logger.warning("mail not configured, %s email to %s skipped", kind, to_email)
            n.status, n.error = "skipped", str(e)
            break
        except Exception as e:
            current_app.logger.warning("%s email to %s failed (attempt %d/%d): %s",
                                       kind, to_email, attempt, max_attempts, e)
            n.error = str(e)[:2000]
            if attempt < max_attempts and delay:
                time.sleep(delay)
            continue
        n.status, n.error = "sent", None
        n.provider_message_id = message_id
        n.sent_at = datetime.utcnow()
        current_app.logger.info("%s email sent to %s (status %s)", kind, to_email, status)
        break
    else:
        n.status = "failed"
        current_app.logger.error("%s email to %s failed after %d attempts", kind, to_email, max_attempts)

    db.session.add(n); db.session.commit()
    return n.id


def queue_candidate_email(kind, record, **extra):
    if not record.email:
        current_app.logger.warning("candidate %s has no email, %s notification dropped", record.id, kind)
        return None
    context = candidate_context(record)
    context.update(extra)
    return rq.enqueue(deliver_notification, kind, record.email, context, candidate_ref=record.id)


def queue_user_email(kind, user, **extra):
    context = {"name": user.name or user.email}
    context.update(extra)
    return rq.enqueue(deliver_notification, kind, user.email, context)


def post_status_webhook(action: str, record_id: str, fields: dict):
    """POST an accept/reject event to the configured automation webhook."""
    url = current_app.config.get("STATUS_WEBHOOK_URL")
    if not url:
        return None
    payload = {
        "action": action,
        "timestamp": isoformat(datetime.now(timezone.utc)),
        "candidate": {"id": record_id, "fields": fields},
    }
    resp = requests.post(url, json=payload, timeout=10)
    resp.raise_for_status()
    current_app.logger.info("status webhook sent for %s (%s)", record_id, action)
    return resp.status_code


def queue_decision(record, status):
    """Notify the candidate and the automation webhook of an accept/reject."""
    queue_candidate_email(status, record)
    if current_app.config.get("STATUS_WEBHOOK_URL"):
        fields = {"name": record.name, "email": record.email, "status": status,
                  "score": record.overall_score, "recommendation": record.recommendation}
        rq.enqueue(post_status_webhook, status, record.id, fields)
