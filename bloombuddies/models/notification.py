from ..extensions import db
from .base import TimestampMixin


class Notification(db.Model, TimestampMixin):
    __tablename__ = "notifications"
    id = db.Column(db.Integer, primary_key=True)
    candidate_ref = db.Column(db.String(64), index=True)  # store record id, if any
    kind = db.Column(db.String(50))  # confirmation/rescheduled/cancelled/accepted/rejected/password_reset/...
    sent_to = db.Column(db.String(255))
    subject = db.Column(db.String(255))
    status = db.Column(db.String(20))  # sent/failed/skipped
    attempts = db.Column(db.Integer, default=0)
    provider_message_id = db.Column(db.String(255))
    error = db.Column(db.Text)
    sent_at = db.Column(db.DateTime)

    def __repr__(self) -> str:
        return f"<Notification id={self.id} kind={self.kind!r} status={self.status!r}>"
