"""Appointment-window validation.

A candidate may enter the live interview from ``opens_before`` minutes before
the appointment until ``closes_after`` minutes after it, both bounds inclusive.
Minute differences are floored, so 30 seconds early counts as -1.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

ONE_MINUTE = timedelta(minutes=1)


@dataclass(frozen=True)
class WindowPolicy:
    opens_before: int = 5
    closes_after: int = 30

    @classmethod
    def from_config(cls, config) -> "WindowPolicy":
        return cls(
            opens_before=int(config.get("WINDOW_OPENS_BEFORE_MINUTES", 5)),
            closes_after=int(config.get("WINDOW_CLOSES_AFTER_MINUTES", 30)),
        )


DEFAULT_POLICY = WindowPolicy()


@dataclass
class WindowResult:
    valid: bool
    diff_minutes: int
    appointment_time: datetime
    minutes_until: Optional[int] = None
    minutes_late: Optional[int] = None
    minutes_into_window: Optional[int] = None

    @property
    def too_early(self) -> bool:
        return self.minutes_until is not None

    @property
    def too_late(self) -> bool:
        return self.minutes_late is not None

    @property
    def countdown(self):
        """(days, hours, minutes) until the appointment, for too-early results."""
        if self.minutes_until is None:
            return None
        days, rest = divmod(self.minutes_until, 24 * 60)
        hours, minutes = divmod(rest, 60)
        return days, hours, minutes

    @property
    def message(self) -> str:
        if self.too_early:
            return f"Interview window opens in {_humanize(*self.countdown)}"
        if self.too_late:
            return f"Interview window closed {self.minutes_late} minutes ago"
        return "Interview window is active"

    def to_dict(self) -> dict:
        out = {
            "valid": self.valid,
            "message": self.message,
            "appointmentTime": isoformat(self.appointment_time),
        }
        if self.too_early:
            days, hours, minutes = self.countdown
            out.update(tooEarly=True, minutesUntil=self.minutes_until,
                       countdown={"days": days, "hours": hours, "minutes": minutes})
        elif self.too_late:
            out.update(tooLate=True, minutesLate=self.minutes_late)
        else:
            out["minutesIntoWindow"] = self.minutes_into_window
        return out


def _plural(n, unit):
    return f"{n} {unit}{'' if n == 1 else 's'}"


def _humanize(days, hours, minutes):
    parts = []
    if days:
        parts.append(_plural(days, "day"))
    if hours:
        parts.append(_plural(hours, "hour"))
    if minutes or not parts:
        parts.append(_plural(minutes, "minute"))
    return ", ".join(parts)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix allowed) or datetime into aware UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    s = str(value).strip()
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(s))


def isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return as_utc(value).isoformat().replace("+00:00", "Z")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def minutes_between(now: datetime, appointment_time: datetime) -> int:
    return (as_utc(now) - as_utc(appointment_time)) // ONE_MINUTE


def check_window(now: datetime, appointment_time: datetime,
                 policy: WindowPolicy = DEFAULT_POLICY) -> WindowResult:
    appointment_time = as_utc(appointment_time)
    diff = minutes_between(now, appointment_time)

    if diff < -policy.opens_before:
        return WindowResult(False, diff, appointment_time, minutes_until=abs(diff))
    if diff > policy.closes_after:
        return WindowResult(False, diff, appointment_time, minutes_late=diff - policy.closes_after)
    return WindowResult(True, diff, appointment_time,
                        minutes_into_window=diff + policy.opens_before)
