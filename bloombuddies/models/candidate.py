from ..extensions import db
from .base import TimestampMixin


class Candidate(db.Model, TimestampMixin):
    """Local mirror of the Airtable candidate table, used by the SQL store."""
    __tablename__ = "candidates"

    id = db.Column(db.Integer, primary_key=True)
    token = db.Column(db.String(64), unique=True, index=True)
    management_token = db.Column(db.String(64), unique=True, index=True)
    name = db.Column(db.String(120))
    email = db.Column(db.String(254), index=True)
    phone = db.Column(db.String(40))

    # scheduling / admission
    appointment_time = db.Column(db.DateTime)  # UTC, naive
    status = db.Column(db.String(30), index=True, default="scheduled")
    action = db.Column(db.String(30))
    interview_completed = db.Column(db.Boolean, nullable=False, default=False)
    call_attempts = db.Column(db.Integer, nullable=False, default=0)
    call_started_at = db.Column(db.DateTime)
    call_ended_at = db.Column(db.DateTime)
    cancelled_at = db.Column(db.DateTime)

    # results posted by the voice agent
    overall_score = db.Column(db.Integer)
    communication = db.Column(db.Integer)
    enthusiasm = db.Column(db.Integer)
    professionalism = db.Column(db.Integer)
    recommendation = db.Column(db.String(120))
    summary = db.Column(db.Text)
    analysis = db.Column(db.Text)
    transcript = db.Column(db.Text)
    interview_length = db.Column(db.Integer)  # seconds
    availability = db.Column(db.Text)
    next_action = db.Column(db.Text)
    recording_url = db.Column(db.String(500))
    ended_reason = db.Column(db.String(120))

    def __repr__(self) -> str:
        return f"<Candidate id={self.id} name={self.name!r} status={self.status!r}>"
