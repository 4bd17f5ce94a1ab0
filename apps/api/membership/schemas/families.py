from datetime import datetime

from pydantic import AliasChoices, Field

from membership.models.entities import FamilyStatusEnum, MemberRoleEnum
from membership.schemas.base import CamelModel, OptionalDate, OptionalText, Text


class MemberInput(CamelModel):
    first_name: str = Field(min_length=1, max_length=128)
    last_name: str = Field(min_length=1, max_length=255)
    birth_date: OptionalDate = None
    role: MemberRoleEnum
    gender: OptionalText = None
    notes: OptionalText = None
    email: OptionalText = None
    phone: OptionalText = None


class FamilyInput(CamelModel):
    """
    Full representation of a family as submitted by a client.

    Used for both create and update: an update stores exactly what is sent, so an
    omitted optional field goes back to its default. `id` and `membershipNumber`
    are never read from this payload.
    """

    name: str = Field(
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("name", "familyName", "family_name"),
    )
    address: Text = Field(default="", max_length=255)
    phone: Text = Field(default="", max_length=64)
    email: Text = Field(default="", max_length=255)
    join_date: OptionalDate = None
    status: FamilyStatusEnum = FamilyStatusEnum.active
    ai_summary: OptionalText = None
    members: list[MemberInput] = Field(default_factory=list)


class MemberResponse(CamelModel):
    id: int
    family_id: int
    first_name: str
    last_name: str
    birth_date: OptionalDate = None
    role: MemberRoleEnum
    gender: str | None = None
    notes: str | None = None
    email: str | None = None
    phone: str | None = None


class FamilyResponse(CamelModel):
    id: int
    membership_number: str | None
    name: str
    address: str
    phone: str
    email: str
    join_date: OptionalDate = None
    status: FamilyStatusEnum
    ai_summary: str | None = None
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    members: list[MemberResponse]


class DeleteResponse(CamelModel):
    success: bool = True
