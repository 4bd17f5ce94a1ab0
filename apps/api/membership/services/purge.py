from __future__ import annotations

from sqlalchemy import delete
from sqlalchemy.orm import Session

from membership.models.entities import Family, Member, User, UserSession


def purge_family(db: Session, family_id: int) -> None:
    """
    Hard-delete a family and its members.

    Members go first so the statement order is valid even where the foreign key
    has no ON DELETE CASCADE (SQLite without the pragma, older installations).
    """
    db.execute(delete(Member).where(Member.family_id == family_id))
    db.execute(delete(Family).where(Family.id == family_id))


def purge_all_families(db: Session) -> None:
    db.execute(delete(Member))
    db.execute(delete(Family))


def purge_user(db: Session, user_id: int) -> None:
    db.execute(delete(UserSession).where(UserSession.user_id == user_id))
    db.execute(delete(User).where(User.id == user_id))
