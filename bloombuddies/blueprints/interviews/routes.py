from flask import current_app, jsonify, request
from . import bp
from .forms import TokenForm
from ...extensions import get_admission, get_store
from ...services.admission import DenialReason
from ...services.window import isoformat


def _candidate_brief(record, with_id=False):
    out = {
        "name": record.name,
        "email": record.email,
        "appointmentTime": isoformat(record.appointment_time),
    }
    if with_id:
        out["id"] = record.id
    return out


@bp.post("/validate-token")
def validate_token():
    form = TokenForm()
    if not form.validate_on_submit():
        return jsonify({"valid": False, "error": "Token is required"}), 400

    decision = get_admission().validate_access(form.token.data)
    if decision.granted:
        return jsonify({
            "valid": True,
            "message": "Access granted - proceed to interview",
            "candidate": _candidate_brief(decision.candidate, with_id=True),
            "timeInfo": decision.window.to_dict(),
        })

    if decision.reason is DenialReason.NOT_FOUND:
        return jsonify({"valid": False, "error": "Invalid token - candidate not found"}), 404
    if decision.reason is DenialReason.ALREADY_USED:
        return jsonify({
            "valid": False,
            "error": "Interview has already been completed",
            "candidate": {"name": decision.candidate.name, "email": decision.candidate.email},
        }), 400

    body = {"valid": False, "candidate": _candidate_brief(decision.candidate)}
    if decision.candidate.is_cancelled:
        body["error"] = "This interview was cancelled"
    elif decision.window is None:
        body["error"] = "No interview time has been booked for this token"
    else:
        body["error"] = decision.window.message
        body["timeInfo"] = decision.window.to_dict()
    return jsonify(body), 403


@bp.get("/check-interview-status")
def check_interview_status():
    token = request.args.get("token", "").strip()
    if not token:
        return jsonify({"error": "Token is required"}), 400
    record = get_store().find_by_token(token)
    if record is None:
        return jsonify({"error": "Invalid token - candidate not found"}), 404
    return jsonify({
        "completed": record.interview_started,
        "status": record.status,
        "action": record.action,
        "callAttempts": record.call_attempts,
    })


@bp.post("/mark-interview-started")
def mark_interview_started():
    form = TokenForm()
    if not form.validate_on_submit():
        return jsonify({"success": False, "error": "Token is required"}), 400

    decision = get_admission().consume_access(form.token.data)
    if decision.granted:
        return jsonify({"success": True, "callAttempts": decision.call_attempts})
    if decision.reason is DenialReason.NOT_FOUND:
        return jsonify({"success": False, "error": "Invalid token - candidate not found"}), 404
    if decision.reason is DenialReason.OUT_OF_WINDOW:
        return jsonify({"success": False, "error": "This interview was cancelled"}), 403
    return jsonify({
        "success": False,
        "error": "Interview has already been started with this link",
        "callAttempts": decision.call_attempts,
    }), 409


@bp.post("/get-vapi-credentials")
def get_vapi_credentials():
    form = TokenForm()
    if not form.validate_on_submit():
        return jsonify({"success": False, "error": "Token is required"}), 400

    key = current_app.config.get("VAPI_PUBLIC_KEY")
    assistant_id = current_app.config.get("VAPI_ASSISTANT_ID")
    if not key or not assistant_id:
        current_app.logger.error("VAPI credentials requested but not configured")
        return jsonify({"success": False, "error": "VAPI credentials not configured on server"}), 500

    decision = get_admission().validate_access(form.token.data)
    if not decision.granted:
        return jsonify({"success": False, "error": "Interview access is not open for this token"}), 403
    return jsonify({"vapiKey": key, "vapiAssistantId": assistant_id, "success": True})
