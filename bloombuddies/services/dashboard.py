"""Candidate views for the staff dashboard: status normalisation, filters, stats."""

from .window import as_utc, isoformat, utcnow

UI_STATUSES = ("pending", "accepted", "rejected")

# aliases accepted from staff and from older Airtable dropdown values
STATUS_ALIASES = {
    "accept": "accepted",
    "hired": "accepted",
    "reject": "rejected",
    "waiting for interview": "scheduled",
    "interview personally": "pending",
    "interviewed": "pending",
    "missed": "pending",
}

SORT_FIELDS = ("lastUpdated", "interviewDate", "candidateName", "overallScore", "status")


def canonical_status(value):
    """Map staff input or a legacy store value onto the stored status set."""
    if not value:
        return None
    s = value.strip().lower()
    return STATUS_ALIASES.get(s, s)


def normalize_status(value):
    """Collapse any stored status into the UI set {pending, accepted, rejected}."""
    s = canonical_status(value)
    if s in ("accepted", "rejected"):
        return s
    return "pending"


def score_category(score):
    score = score or 0
    if score >= 7:
        return "high"
    if score >= 5:
        return "medium"
    return "low"


def time_ago(when, now=None):
    if when is None:
        return "Unknown"
    seconds = (as_utc(now or utcnow()) - as_utc(when)).total_seconds()
    days, hours = int(seconds // 86400), int(seconds // 3600)
    if days > 0:
        return f"{days} day{'s' if days > 1 else ''} ago"
    if hours > 0:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    return "Recently"


def summarize(record, now=None, full=False):
    score = record.overall_score or 0
    out = {
        "id": record.id,
        "candidateName": record.name or "Unknown",
        "email": record.email or "",
        "status": normalize_status(record.status),
        "rawStatus": record.status or "",
        "overallScore": score,
        "communication": record.communication or 0,
        "enthusiasm": record.enthusiasm or 0,
        "professionalism": record.professionalism or 0,
        "interviewDate": isoformat(record.appointment_time),
        "interviewLength": record.interview_length or 0,
        "recommendation": record.recommendation or "",
        "summary": record.summary or "",
        "availability": record.availability or "",
        "nextAction": record.next_action or "",
        "interviewCompleted": record.interview_completed,
        "callAttempts": record.call_attempts,
        "lastUpdated": isoformat(record.created_at),
        "scoreCategory": score_category(score),
        "timeAgo": time_ago(record.created_at, now),
    }
    if full:
        out.update(
            analysis=record.analysis or "",
            transcript=record.transcript or "",
            phone=record.phone or "",
            action=record.action,
            callStartedAt=isoformat(record.call_started_at),
            callEndedAt=isoformat(record.call_ended_at),
            recordingUrl=record.recording_url,
            endedReason=record.ended_reason,
        )
    return out


def filter_candidates(items, status=None, score=None, search=None):
    out = []
    term = (search or "").strip().lower()
    for c in items:
        if status and status != "all" and c["status"] != status:
            continue
        if score and score != "all" and c["scoreCategory"] != score:
            continue
        if term:
            text = f"{c['candidateName']} {c['email']} {c['recommendation']}".lower()
            if term not in text:
                continue
        out.append(c)
    return out


def _sort_key(sort_by):
    def key(c):
        value = c.get(sort_by)
        if sort_by in ("lastUpdated", "interviewDate"):
            # ISO-8601 UTC strings sort chronologically; missing dates go first
            return value or ""
        if isinstance(value, str):
            return value.lower()
        return value if value is not None else 0
    return key


def sort_candidates(items, sort_by="lastUpdated", order="desc"):
    if sort_by not in SORT_FIELDS:
        sort_by = "lastUpdated"
    return sorted(items, key=_sort_key(sort_by), reverse=(order != "asc"))


def statistics(items):
    stats = {"total": len(items), "pending": 0, "accepted": 0, "rejected": 0, "averageScore": 0}
    total_score = 0
    for c in items:
        if c["status"] in UI_STATUSES:
            stats[c["status"]] += 1
        total_score += c["overallScore"]
    if items:
        stats["averageScore"] = round(total_score / len(items), 1)
    return stats
