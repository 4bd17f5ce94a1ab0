from datetime import date, datetime, timezone
from enum import Enum

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from membership.models.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoleEnum(str, Enum):
    user = "USER"
    admin = "ADMIN"
    superadmin = "SUPERADMIN"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]


_ROLE_RANK = {RoleEnum.user: 0, RoleEnum.admin: 1, RoleEnum.superadmin: 2}


class FamilyStatusEnum(str, Enum):
    active = "ACTIVE"
    inactive = "INACTIVE"


class MemberRoleEnum(str, Enum):
    father = "FATHER"
    mother = "MOTHER"
    child = "CHILD"
    tutor = "TUTOR"


def _values_enum(enum_cls: type[Enum], name: str) -> SqlEnum:
    return SqlEnum(enum_cls, name=name, values_callable=lambda cls: [item.value for item in cls])


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[RoleEnum] = mapped_column(_values_enum(RoleEnum, "userroleenum"), nullable=False, default=RoleEnum.user)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class UserSession(Base):
    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    user: Mapped[User] = relationship()


class Family(Base):
    __tablename__ = "families"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # NULL only between insert and numbering inside the create transaction.
    membership_number: Mapped[str | None] = mapped_column(String(32), unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    join_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[FamilyStatusEnum] = mapped_column(
        _values_enum(FamilyStatusEnum, "familystatusenum"), nullable=False, default=FamilyStatusEnum.active
    )
    ai_summary: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=utcnow)
    created_by: Mapped[str | None] = mapped_column(String(255))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=utcnow)

    members: Mapped[list["Member"]] = relationship(
        back_populates="family",
        order_by="Member.id",
        passive_deletes=True,
    )


class Member(Base):
    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    family_id: Mapped[int] = mapped_column(ForeignKey("families.id", ondelete="CASCADE"), nullable=False)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date)
    role: Mapped[MemberRoleEnum] = mapped_column(_values_enum(MemberRoleEnum, "memberroleenum"), nullable=False)
    gender: Mapped[str | None] = mapped_column(String(32))
    notes: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(64))

    family: Mapped[Family] = relationship(back_populates="members")


Index("ix_members_family", Member.family_id)
Index("ix_sessions_user", UserSession.user_id)
