from flask import current_app, jsonify, request
from flask_login import login_required, current_user
from . import bp
from .forms import CandidateUpdateForm
from ...errors import RecordNotFound
from ...extensions import get_store
from ...jobs.notify import queue_decision
from ...services import dashboard
from ...services.scheduling import scheduling_link
from ...services.window import utcnow
from ...utils.decorators import admin_required
from ...utils.forms import form_error

DECISIONS = ("accepted", "rejected")


def _not_found():
    return jsonify({"error": "Candidate not found"}), 404


@bp.get("")
@login_required
def list_candidates():
    # status filter is applied on the normalised UI status, not the raw store value
    now = utcnow()
    items = [dashboard.summarize(r, now) for r in get_store().list()]
    stats = dashboard.statistics(items)
    items = dashboard.filter_candidates(
        items,
        status=request.args.get("status"),
        score=request.args.get("score"),
        search=request.args.get("search"),
    )
    items = dashboard.sort_candidates(items, request.args.get("sort", "lastUpdated"),
                                      request.args.get("order", "desc"))
    return jsonify({"candidates": items, "stats": stats, "count": len(items)})


@bp.get("/<record_id>")
@login_required
def detail(record_id):
    record = get_store().get(record_id)
    if record is None:
        return _not_found()
    return jsonify({"candidate": dashboard.summarize(record, full=True)})


@bp.put("/<record_id>")
@login_required
def update_candidate(record_id):
    store = get_store()
    before = store.get(record_id)
    if before is None:
        return _not_found()

    form = CandidateUpdateForm()
    if not form.validate_on_submit():
        return form_error(form)

    # only fields present in the body are written
    sent = request.get_json(silent=True) or {}
    values = {}
    status = dashboard.canonical_status(form.status.data)
    if status:
        values["status"] = status
    if "nextAction" in sent:
        values["next_action"] = form.nextAction.data or None
    if "availability" in sent:
        values["availability"] = form.availability.data or None
    if not values:
        return jsonify({"error": "Nothing to update"}), 400

    try:
        record = store.update(record_id, values)
    except RecordNotFound:
        return _not_found()
    current_app.logger.info("candidate %s updated by %s: %s", record_id, current_user.email, sorted(values))

    if status in DECISIONS and dashboard.canonical_status(before.status) != status:
        queue_decision(record, status)
    return jsonify({"success": True, "candidate": dashboard.summarize(record, full=True)})


@bp.delete("/<record_id>")
@admin_required
def delete_candidate(record_id):
    if not get_store().delete(record_id):
        return _not_found()
    current_app.logger.info("candidate %s deleted by %s", record_id, current_user.email)
    return jsonify({"success": True})


@bp.get("/<record_id>/scheduling-link")
@login_required
def get_scheduling_link(record_id):
    record = get_store().get(record_id)
    if record is None:
        return _not_found()
    if not record.email:
        return jsonify({"error": "Candidate has no email address"}), 400
    link = scheduling_link(current_app.config["FRONTEND_URL"], current_app.config["SECRET_KEY"],
                           record.id, record.email)
    return jsonify({"link": link})
