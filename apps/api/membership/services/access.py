from __future__ import annotations

from sqlalchemy.orm import Session

from membership.core.errors import NotFound
from membership.models.entities import Family, User


def require_family(db: Session, family_id: int) -> Family:
    family = db.get(Family, family_id)
    if family is None:
        raise NotFound()
    return family


def require_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound()
    return user
