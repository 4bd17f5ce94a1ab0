"""
Family/Member aggregate store.

A family owns its members outright: they are created, replaced and deleted only
through the family. Every mutation below is one unit of work committed once at the
end, so a failure part-way leaves the previous state untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload

from membership.core.auth import AuthContext
from membership.core.errors import NotFound
from membership.core.logging import get_logger
from membership.models.entities import Family, Member, utcnow
from membership.schemas.families import FamilyInput, MemberInput
from membership.services.access import require_family
from membership.services.purge import purge_family

logger = get_logger(__name__)

_SCALAR_FIELDS = ("name", "address", "phone", "email", "join_date", "status", "ai_summary")


def _hydrated():
    return select(Family).options(selectinload(Family.members))


def build_members(family_id: int, members: Iterable[MemberInput]) -> list[Member]:
    return [
        Member(
            family_id=family_id,
            first_name=m.first_name,
            last_name=m.last_name,
            birth_date=m.birth_date,
            role=m.role,
            gender=m.gender,
            notes=m.notes,
            email=m.email,
            phone=m.phone,
        )
        for m in members
    ]


def apply_scalars(family: Family, payload: FamilyInput) -> None:
    for field in _SCALAR_FIELDS:
        setattr(family, field, getattr(payload, field))


def list_families(db: Session) -> Sequence[Family]:
    return db.execute(_hydrated().order_by(Family.id.asc())).scalars().all()


def load_family(db: Session, family_id: int) -> Family:
    family = db.execute(
        _hydrated().where(Family.id == family_id).execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if family is None:
        raise NotFound()
    return family


def create_family(db: Session, payload: FamilyInput, actor: AuthContext) -> Family:
    now = utcnow()
    family = Family(membership_number=None, created_by=actor.username, created_at=now, updated_at=now)
    apply_scalars(family, payload)
    db.add(family)
    db.flush()  # the store assigns the id here

    db.add_all(build_members(family.id, payload.members))
    family.membership_number = str(family.id)
    db.commit()

    logger.info("family created", family_id=family.id, members=len(payload.members), actor=actor.username)
    return load_family(db, family.id)


def update_family(db: Session, family_id: int, payload: FamilyInput, actor: AuthContext) -> Family:
    """
    Replace a family with the submitted representation.

    Existing members are deleted and the submitted ones inserted fresh, so member
    ids change on every edit. Membership number and creation audit fields stay.
    """
    family = require_family(db, family_id)
    db.execute(delete(Member).where(Member.family_id == family_id))
    apply_scalars(family, payload)
    family.updated_at = utcnow()
    db.add_all(build_members(family_id, payload.members))
    db.commit()

    logger.info("family updated", family_id=family_id, members=len(payload.members), actor=actor.username)
    return load_family(db, family_id)


def delete_family(db: Session, family_id: int, actor: AuthContext) -> None:
    require_family(db, family_id)
    purge_family(db, family_id)
    db.commit()
    logger.info("family deleted", family_id=family_id, actor=actor.username)


def set_summary(db: Session, family_id: int, summary: str) -> Family:
    family = require_family(db, family_id)
    family.ai_summary = summary
    family.updated_at = utcnow()
    db.commit()
    return load_family(db, family_id)
