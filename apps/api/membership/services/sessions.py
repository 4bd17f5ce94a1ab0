from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from membership.core.config import settings
from membership.core.errors import InvalidCredentials
from membership.core.logging import get_logger
from membership.models.entities import User, UserSession, utcnow
from membership.services.passwords import hash_password, needs_rehash, verify_password

logger = get_logger(__name__)


def _expiry_cutoff(now: datetime | None = None) -> datetime:
    return (now or utcnow()) - timedelta(days=settings.session_max_age_days)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def authenticate(db: Session, username: str, password: str) -> User:
    """
    Check a username/password pair.

    Unknown usernames and wrong passwords raise the same InvalidCredentials; the
    distinction only reaches the server log.
    """
    user = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if not verify_password(password, user.password_hash if user else None):
        logger.info("login rejected", username=username, reason="unknown user" if user is None else "bad password")
        raise InvalidCredentials()
    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
    return user


def create_session(db: Session, user_id: int) -> str:
    token = secrets.token_urlsafe(32)
    db.add(UserSession(token=token, user_id=user_id, created_at=utcnow()))
    db.flush()
    return token


def resolve_session(db: Session, token: str | None) -> User | None:
    """Read-only lookup; unknown or expired tokens resolve to None."""
    if not token:
        return None
    row = db.execute(
        select(UserSession, User).join(User, User.id == UserSession.user_id).where(UserSession.token == token)
    ).first()
    if row is None:
        return None
    session, user = row
    if _as_utc(session.created_at) <= _expiry_cutoff():
        return None
    return user


def destroy_session(db: Session, token: str | None) -> None:
    if not token:
        return
    db.execute(delete(UserSession).where(UserSession.token == token))


def purge_expired_sessions(db: Session) -> int:
    result = db.execute(delete(UserSession).where(UserSession.created_at <= _expiry_cutoff()))
    return result.rowcount or 0
