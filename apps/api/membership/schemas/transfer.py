from pydantic import Field

from membership.schemas.base import CamelModel, OptionalText
from membership.schemas.families import FamilyInput, MemberInput


class ImportMember(MemberInput):
    id: int | None = Field(default=None, gt=0)


class ImportFamily(FamilyInput):
    """A family exactly as it will be written by an import, ids included."""

    id: int = Field(gt=0)
    membership_number: OptionalText = Field(default=None, max_length=32)
    created_by: OptionalText = None
    members: list[ImportMember] = Field(default_factory=list)


class ImportResult(CamelModel):
    ok: bool = True
