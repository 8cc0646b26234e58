from flask import current_app, jsonify, request
from . import bp
from .forms import RegisterForm, ScheduleForm
from ...errors import BookingConflict, RecordNotFound
from ...extensions import get_store
from ...jobs.notify import queue_candidate_email
from ...services import scheduling
from ...services.window import isoformat
from ...utils.forms import form_error


def _booking(record):
    return {
        "id": record.id,
        "name": record.name,
        "appointmentTime": isoformat(record.appointment_time),
        "status": record.status,
    }


@bp.post("/register")
def register():
    form = RegisterForm()
    if not form.validate_on_submit():
        return form_error(form)
    try:
        record = scheduling.register(
            get_store(),
            name=form.name.data.strip(),
            email=form.email.data.strip(),
            phone=(form.phone.data or "").strip() or None,
            appointment_time=form.appointmentTime.data,
        )
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    current_app.logger.info("registered candidate %s for %s", record.id, isoformat(record.appointment_time))
    queue_candidate_email("confirmation", record)
    return jsonify({"success": True, "candidate": _booking(record)}), 201


def _verified_record(record_id, token):
    record = get_store().get(record_id) if record_id else None
    if record is None or not scheduling.verify_scheduling_token(current_app.config["SECRET_KEY"], token, record.email):
        return None
    return record


@bp.get("/schedule/verify")
def verify_link():
    record = _verified_record(request.args.get("id"), request.args.get("token"))
    if record is None:
        return jsonify({"valid": False, "error": "Invalid scheduling link"}), 404
    return jsonify({
        "valid": True,
        "candidate": {"name": record.name, "email": record.email},
        "alreadyScheduled": record.appointment_time is not None,
        "appointmentTime": isoformat(record.appointment_time),
    })


@bp.post("/schedule")
def schedule():
    form = ScheduleForm()
    if not form.validate_on_submit():
        return form_error(form)
    record = _verified_record(form.id.data, form.token.data)
    if record is None:
        return jsonify({"success": False, "error": "Invalid scheduling link"}), 404

    was_booked = record.appointment_time is not None
    try:
        record = scheduling.book_existing(get_store(), record.id, form.appointmentTime.data)
    except BookingConflict as e:
        return jsonify({"success": False, "error": str(e)}), 409
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except RecordNotFound:
        return jsonify({"success": False, "error": "Invalid scheduling link"}), 404

    queue_candidate_email("rescheduled" if was_booked else "confirmation", record)
    return jsonify({"success": True, "candidate": _booking(record)})
