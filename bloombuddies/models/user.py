from datetime import datetime, timedelta
import hashlib
import secrets

from ..extensions import db
from flask_login import UserMixin
from .base import TimestampMixin
from werkzeug.security import generate_password_hash, check_password_hash


def _digest(raw):
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class User(db.Model, UserMixin, TimestampMixin):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(120))
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(50), default="user")  # admin/user
    reset_token_hash = db.Column(db.String(64), index=True)
    reset_token_expires_at = db.Column(db.DateTime)
    failed_logins = db.Column(db.Integer, nullable=False, default=0)
    locked_until = db.Column(db.DateTime)
    last_login_at = db.Column(db.DateTime)

    @classmethod
    def find_by_email(cls, email):
        if not email:
            return None
        return cls.query.filter(db.func.lower(cls.email) == email.strip().lower()).first()

    @classmethod
    def find_by_reset_token(cls, raw, now=None):
        if not raw:
            return None
        user = cls.query.filter_by(reset_token_hash=_digest(raw)).first()
        if not user or not user.reset_token_expires_at:
            return None
        if user.reset_token_expires_at < (now or datetime.utcnow()):
            return None
        return user

    def set_password(self, raw):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw):
        return check_password_hash(self.password_hash, raw)

    def is_locked(self, now=None):
        return bool(self.locked_until and self.locked_until > (now or datetime.utcnow()))

    def record_login(self, success, max_attempts, lockout_minutes, now=None):
        now = now or datetime.utcnow()
        if success:
            self.failed_logins = 0
            self.locked_until = None
            self.last_login_at = now
            return
        self.failed_logins = (self.failed_logins or 0) + 1
        if self.failed_logins >= max_attempts:
            self.locked_until = now + timedelta(minutes=lockout_minutes)
            self.failed_logins = 0

    def issue_reset_token(self, ttl_minutes, now=None):
        """Store a hashed one-time reset token and return the raw value."""
        raw = secrets.token_urlsafe(32)
        self.reset_token_hash = _digest(raw)
        self.reset_token_expires_at = (now or datetime.utcnow()) + timedelta(minutes=ttl_minutes)
        return raw

    def clear_reset_token(self):
        self.reset_token_hash = None
        self.reset_token_expires_at = None

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name or self.email,
            "role": self.role,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "lastLogin": self.last_login_at.isoformat() if self.last_login_at else None,
        }

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
