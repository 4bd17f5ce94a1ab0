from datetime import datetime

from membership.models.entities import MemberRoleEnum
from membership.schemas.base import CamelModel


class RecentFamilyResponse(CamelModel):
    id: int
    membership_number: str | None = None
    name: str
    is_new: bool
    touched_at: datetime


class DashboardStatsResponse(CamelModel):
    total_families: int
    active_families: int
    inactive_families: int
    active_share: float
    total_members: int
    total_children: int
    children_age_groups: dict[str, int]
    parent_age_groups: dict[str, int]
    families_by_children: dict[int, int]
    recent_activity: list[RecentFamilyResponse]


class CardPersonResponse(CamelModel):
    first_name: str
    last_name: str
    role: MemberRoleEnum


class CardEmailResponse(CamelModel):
    to: str
    subject: str
    body: str
    mailto_url: str
    gmail_url: str


class MembershipCardResponse(CamelModel):
    association: str
    membership_number: str
    family_name: str
    school_year: str
    qr_text: str
    parents: list[CardPersonResponse]
    children: list[CardPersonResponse]
    file_name: str
    email: CardEmailResponse
