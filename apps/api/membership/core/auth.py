from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from membership.core.config import settings
from membership.core.db import get_db
from membership.core.errors import Unauthorized
from membership.models.entities import RoleEnum, User
from membership.services.sessions import resolve_session


@dataclass(frozen=True)
class AuthContext:
    user_id: int
    username: str
    name: str
    role: RoleEnum

    @classmethod
    def from_user(cls, user: User) -> "AuthContext":
        return cls(user_id=user.id, username=user.username, name=user.name, role=user.role)


def session_token(request: Request) -> str | None:
    return request.cookies.get(settings.session_cookie_name) or None


def get_auth_context(request: Request, db: Session = Depends(get_db)) -> AuthContext | None:
    """
    Auth boundary.

    Every request resolves its identity from its own session cookie; nothing about
    the caller is kept between requests.
    """
    user = resolve_session(db, session_token(request))
    if user is None:
        return None
    return AuthContext.from_user(user)


def require_authenticated(ctx: AuthContext | None) -> AuthContext:
    if ctx is None:
        raise Unauthorized()
    return ctx


def require_role(ctx: AuthContext | None, minimum: RoleEnum) -> AuthContext:
    ctx = require_authenticated(ctx)
    if ctx.role.rank < minimum.rank:
        raise Unauthorized()
    return ctx


def require_auth(ctx: AuthContext | None = Depends(get_auth_context)) -> AuthContext:
    return require_authenticated(ctx)


def require_admin(ctx: AuthContext | None = Depends(get_auth_context)) -> AuthContext:
    return require_role(ctx, RoleEnum.admin)


def require_superadmin(ctx: AuthContext | None = Depends(get_auth_context)) -> AuthContext:
    return require_role(ctx, RoleEnum.superadmin)
