from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from membership.core.auth import AuthContext
from membership.core.errors import ConflictError, ValidationError
from membership.core.logging import get_logger
from membership.models.entities import RoleEnum, User
from membership.schemas.users import UserCreate, UserUpdate
from membership.services.access import require_user
from membership.services.passwords import hash_password
from membership.services.purge import purge_user

logger = get_logger(__name__)


def _username_taken(db: Session, username: str, exclude_id: int | None = None) -> bool:
    query = select(User.id).where(User.username == username)
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    return db.execute(query.limit(1)).first() is not None


def _commit_user(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("username already exists") from None


def list_users(db: Session) -> Sequence[User]:
    return db.execute(select(User).order_by(User.username.asc())).scalars().all()


def create_user(db: Session, payload: UserCreate, actor: AuthContext) -> User:
    if _username_taken(db, payload.username):
        raise ConflictError("username already exists")
    user = User(
        username=payload.username,
        name=payload.name,
        role=payload.role,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    _commit_user(db)
    db.refresh(user)
    logger.info("user created", user_id=user.id, username=user.username, role=user.role.value, actor=actor.username)
    return user


def update_user(db: Session, user_id: int, payload: UserUpdate, actor: AuthContext) -> User:
    user = require_user(db, user_id)
    if _username_taken(db, payload.username, exclude_id=user_id):
        raise ConflictError("username already exists")
    user.username = payload.username
    user.name = payload.name
    user.role = payload.role
    if payload.password:
        user.password_hash = hash_password(payload.password)
    _commit_user(db)
    db.refresh(user)
    logger.info(
        "user updated",
        user_id=user.id,
        role=user.role.value,
        password_changed=bool(payload.password),
        actor=actor.username,
    )
    return user


def delete_user(db: Session, user_id: int, actor: AuthContext) -> None:
    """Delete an account and its sessions. Nobody may delete their own account."""
    if user_id == actor.user_id:
        raise ValidationError("cannot delete your own account")
    user = require_user(db, user_id)
    username = user.username
    if username == actor.username:
        raise ValidationError("cannot delete your own account")
    purge_user(db, user_id)
    db.commit()
    logger.info("user deleted", user_id=user_id, username=username, actor=actor.username)


def bootstrap_superadmin(db: Session, username: str, name: str, password: str) -> User:
    """Seed or promote the first SUPERADMIN; used from the CLI only."""
    user = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if user is None:
        user = User(username=username, name=name, role=RoleEnum.superadmin, password_hash=hash_password(password))
        db.add(user)
    else:
        user.name = name
        user.role = RoleEnum.superadmin
        user.password_hash = hash_password(password)
    db.commit()
    db.refresh(user)
    logger.info("superadmin bootstrapped", user_id=user.id, username=user.username)
    return user
