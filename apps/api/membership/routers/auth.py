from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from membership.core.auth import AuthContext, get_auth_context, require_auth, session_token
from membership.core.config import settings
from membership.core.db import get_db
from membership.core.logging import get_logger
from membership.schemas.families import DeleteResponse
from membership.schemas.users import LoginRequest, SessionStatus, UserResponse
from membership.services.sessions import authenticate, create_session, destroy_session, purge_expired_sessions

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


def _user_response(ctx: AuthContext) -> UserResponse:
    return UserResponse(id=ctx.user_id, username=ctx.username, name=ctx.name, role=ctx.role)


@router.post("/login", response_model=UserResponse)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = authenticate(db, payload.username, payload.password)
    purge_expired_sessions(db)
    token = create_session(db, user.id)
    db.commit()

    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )
    logger.info("login", user_id=user.id, username=user.username)
    return UserResponse.model_validate(user, from_attributes=True)


@router.post("/logout", response_model=DeleteResponse)
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    # Idempotent: a missing or already revoked cookie still clears cleanly.
    destroy_session(db, session_token(request))
    db.commit()
    logger.info("logout")
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return DeleteResponse()


@router.get("/session", response_model=SessionStatus)
def get_session(ctx: AuthContext | None = Depends(get_auth_context)):
    if ctx is None:
        return SessionStatus(authenticated=False)
    return SessionStatus(authenticated=True, user=_user_response(ctx))


@router.get("/me", response_model=UserResponse)
def get_me(ctx: AuthContext = Depends(require_auth)):
    return _user_response(ctx)
