from flask import jsonify
from . import bp
from .forms import RescheduleForm
from ...errors import BookingConflict, RecordNotFound
from ...extensions import get_store
from ...jobs.notify import queue_candidate_email
from ...services import scheduling
from ...services.window import isoformat
from ...utils.forms import form_error

NOT_FOUND = ({"success": False, "error": "Invalid management link"}, 404)


def _summary(record):
    return {
        "name": record.name,
        "email": record.email,
        "appointmentTime": isoformat(record.appointment_time),
        "status": record.status,
        "cancelled": record.is_cancelled,
        "interviewStarted": record.interview_started,
        "canChange": not (record.is_cancelled or record.interview_started),
    }


@bp.get("/<management_token>")
def show(management_token):
    record = get_store().find_by_management_token(management_token)
    if record is None:
        return jsonify(NOT_FOUND[0]), NOT_FOUND[1]
    return jsonify({"success": True, "booking": _summary(record)})


@bp.post("/<management_token>/reschedule")
def reschedule(management_token):
    form = RescheduleForm()
    if not form.validate_on_submit():
        return form_error(form)
    try:
        record = scheduling.reschedule(get_store(), management_token, form.appointmentTime.data)
    except RecordNotFound:
        return jsonify(NOT_FOUND[0]), NOT_FOUND[1]
    except BookingConflict as e:
        return jsonify({"success": False, "error": str(e)}), 409
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    queue_candidate_email("rescheduled", record)
    return jsonify({"success": True, "booking": _summary(record)})


@bp.post("/<management_token>/cancel")
def cancel(management_token):
    try:
        record = scheduling.cancel(get_store(), management_token)
    except RecordNotFound:
        return jsonify(NOT_FOUND[0]), NOT_FOUND[1]
    except BookingConflict as e:
        return jsonify({"success": False, "error": str(e)}), 409

    queue_candidate_email("cancelled", record)
    return jsonify({"success": True, "booking": _summary(record)})
