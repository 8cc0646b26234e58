"""Mapping of VAPI ``end-of-call-report`` webhooks onto candidate fields.

Only the structured parts of the report are read: call variables, the
analysis block and the artifact. Free-text transcripts are stored as-is.
"""
from .window import parse_timestamp

END_OF_CALL = "end-of-call-report"

# structuredData key -> candidate field
STRUCTURED_KEYS = {
    "score": "overall_score",
    "overallScore": "overall_score",
    "communication": "communication",
    "enthusiasm": "enthusiasm",
    "professionalism": "professionalism",
    "recommendation": "recommendation",
    "availability": "availability",
    "nextAction": "next_action",
}
SCORE_FIELDS = {"overall_score", "communication", "enthusiasm", "professionalism"}


def session_token(message):
    call = message.get("call") or {}
    candidates = [
        (call.get("assistantOverrides") or {}).get("variableValues") or {},
        message.get("variableValues") or {},
        call.get("metadata") or {},
    ]
    for values in candidates:
        token = values.get("sessionToken") or values.get("token")
        if token:
            return token
    return None


def call_duration(message):
    """Duration in whole seconds, from the report or from its start/end stamps."""
    for source in (message, message.get("artifact") or {}, message.get("call") or {}):
        for key, scale in (("durationSeconds", 1), ("durationMs", 1000)):
            if source.get(key) is None:
                continue
            try:
                return max(0, int(round(float(source[key]) / scale)))
            except (TypeError, ValueError, OverflowError):
                continue
    try:
        started = parse_timestamp(message.get("startedAt"))
        ended = parse_timestamp(message.get("endedAt"))
    except ValueError:
        return None
    if started and ended:
        return max(0, int(round((ended - started).total_seconds())))
    return None


def _score(value):
    try:
        return max(0, min(10, int(round(float(value)))))
    except (TypeError, ValueError):
        return None


def report_fields(message):
    """Candidate updates carried by one end-of-call report."""
    analysis = message.get("analysis") or {}
    artifact = message.get("artifact") or {}
    structured = analysis.get("structuredData") or {}

    values = {}
    for key, field in STRUCTURED_KEYS.items():
        if structured.get(key) in (None, "") or field in values:
            continue
        raw = structured[key]
        values[field] = _score(raw) if field in SCORE_FIELDS else str(raw)
    values = {k: v for k, v in values.items() if v is not None}

    summary = analysis.get("summary") or message.get("summary")
    if summary:
        values["summary"] = summary
    evaluation = analysis.get("successEvaluation")
    if evaluation not in (None, ""):
        values["analysis"] = str(evaluation)
    transcript = artifact.get("transcript") or message.get("transcript")
    if transcript:
        values["transcript"] = transcript
    recording = message.get("recordingUrl") or artifact.get("recordingUrl")
    if recording:
        values["recording_url"] = recording
    if message.get("endedReason"):
        values["ended_reason"] = message["endedReason"]
    duration = call_duration(message)
    if duration is not None:
        values["interview_length"] = duration
    try:
        ended_at = parse_timestamp(message.get("endedAt"))
    except ValueError:
        ended_at = None
    if ended_at:
        values["call_ended_at"] = ended_at
    return values


def unwrap(payload):
    """Return the ``message`` object whether or not it arrives wrapped in ``body``."""
    if not isinstance(payload, dict):
        return {}
    body = payload.get("body") if isinstance(payload.get("body"), dict) else payload
    message = body.get("message")
    return message if isinstance(message, dict) else {}
