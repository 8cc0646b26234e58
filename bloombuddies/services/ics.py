from datetime import datetime, timezone
from uuid import uuid4


def _escape(text):
    return (text or "").replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,").replace("\n", "\\n")


def build_ics(uid_domain, title, start, end, location="", description=""):
    uid = f"{uuid4()}@{uid_domain}"
    def to_dt(dt):
        if dt.tzinfo:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        return dt.strftime('%Y%m%dT%H%M%SZ')
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//BloomBuddies//Interview//EN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"DTSTAMP:{to_dt(datetime.now(timezone.utc))}",
        f"DTSTART:{to_dt(start)}",
        f"DTEND:{to_dt(end)}",
        f"SUMMARY:{_escape(title)}",
        f"LOCATION:{_escape(location)}",
        f"DESCRIPTION:{_escape(description)}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    # RFC 5545 wants CRLF line endings
    return "\r\n".join(lines) + "\r\n"
