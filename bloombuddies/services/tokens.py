from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

ALGORITHM = "HS256"


def issue_access_token(user, now=None):
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(minutes=current_app.config["JWT_EXPIRES_MINUTES"]),
    }
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm=ALGORITHM)


def decode_access_token(token):
    """Return the token payload, or None if it is malformed, forged or expired."""
    try:
        return jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=[ALGORITHM])
    except jwt.InvalidTokenError as e:
        current_app.logger.info("rejected access token: %s", e)
        return None


def bearer_token(request):
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()
