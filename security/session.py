import hashlib
import secrets
from datetime import timedelta
from flask import request, current_app

from models import db
from models.user_session import UserSession
from utils.clock import utcnow


def _digest(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def _client_ip():
    return request.headers.get("X-Forwarded-For", request.remote_addr)


def open_session(user_id: int) -> str:
    """
    Stores a new session row and returns the raw token for the cookie.
    Only its digest is persisted.
    """
    raw_token = secrets.token_urlsafe(32)
    lifetime = current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60)

    db.session.add(UserSession(
        user_id=user_id,
        token_hash=_digest(raw_token),
        expires_at=utcnow() + timedelta(seconds=lifetime),
        ip=_client_ip(),
    ))
    db.session.commit()
    return raw_token


def session_from_cookie():
    """Live session for the request cookie, or None. Refreshes last_seen_at."""
    raw_token = request.cookies.get(current_app.config["AUTH_COOKIE_NAME"])
    if not raw_token:
        return None

    sess = UserSession.query.filter_by(token_hash=_digest(raw_token), revoked=False).first()
    if sess is None:
        return None

    now = utcnow()
    idle = timedelta(seconds=current_app.config.get("IDLE_TIMEOUT_SECONDS", 30 * 60))
    if sess.expires_at <= now or sess.last_seen_at + idle <= now:
        return None

    sess.last_seen_at = now
    db.session.commit()
    return sess


def close_session(raw_token: str) -> bool:
    if not raw_token:
        return False
    sess = UserSession.query.filter_by(token_hash=_digest(raw_token)).first()
    if sess is None:
        return False
    sess.revoked = True
    db.session.commit()
    return True


def close_all_sessions(user_id: int) -> int:
    count = (
        UserSession.query
        .filter_by(user_id=user_id, revoked=False)
        .update({"revoked": True})
    )
    db.session.commit()
    return count
