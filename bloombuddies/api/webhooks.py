# bloombuddies/api/webhooks.py
import hmac

from flask import Blueprint, jsonify, current_app, request
from bloombuddies.extensions import get_store
from bloombuddies.services import vapi

bp = Blueprint("webhooks", __name__)


def _authorized():
    secret = current_app.config.get("VAPI_WEBHOOK_SECRET")
    if not secret:
        return True
    sent = request.headers.get("X-Vapi-Secret") or ""
    return hmac.compare_digest(sent.encode("utf-8"), secret.encode("utf-8"))


@bp.route("/api/webhooks/vapi", methods=["POST"])
def vapi_event():
    if not _authorized():
        return jsonify({"error": "unauthorized"}), 401

    message = vapi.unwrap(request.get_json(silent=True))
    kind = message.get("type")
    if kind != vapi.END_OF_CALL:
        # status-update, transcript, hang etc. are acknowledged only
        return jsonify({"received": True, "handled": False})

    token = vapi.session_token(message)
    store = get_store()
    record = store.find_by_token(token) if token else None
    if record is None:
        current_app.logger.warning("end-of-call report without a known session token")
        return jsonify({"error": "Candidate not found"}), 404

    values = vapi.report_fields(message)
    values["interview_completed"] = True
    store.update(record.id, values)
    current_app.logger.info("stored end-of-call report for %s (%s)", record.id, sorted(values))
    return jsonify({"received": True, "handled": True, "candidateId": record.id})
