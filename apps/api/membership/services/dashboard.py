from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from membership.models.entities import Family, FamilyStatusEnum, MemberRoleEnum, utcnow

CHILD_AGE_BUCKETS = ("0-3", "4-6", "7-12", "13-16", "17-18", "18+")
PARENT_AGE_BUCKETS = ("20-29", "30-39", "40-49", "50-59", "60+")
_PARENT_ROLES = (MemberRoleEnum.father, MemberRoleEnum.mother, MemberRoleEnum.tutor)
RECENT_WINDOW_DAYS = 7
RECENT_LIMIT = 10


@dataclass
class RecentFamily:
    id: int
    membership_number: str | None
    name: str
    is_new: bool
    touched_at: datetime


@dataclass
class DashboardStats:
    total_families: int = 0
    active_families: int = 0
    inactive_families: int = 0
    active_share: float = 0.0
    total_members: int = 0
    total_children: int = 0
    children_age_groups: dict[str, int] = field(default_factory=dict)
    parent_age_groups: dict[str, int] = field(default_factory=dict)
    families_by_children: dict[int, int] = field(default_factory=dict)
    recent_activity: list[RecentFamily] = field(default_factory=list)


def _child_bucket(age: int) -> str:
    if age <= 3:
        return "0-3"
    if age <= 6:
        return "4-6"
    if age <= 12:
        return "7-12"
    if age <= 16:
        return "13-16"
    if age <= 18:
        return "17-18"
    return "18+"


def _parent_bucket(age: int) -> str | None:
    if age < 20:
        return None
    if age >= 60:
        return "60+"
    low = age // 10 * 10
    return f"{low}-{low + 9}"


def _aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def compute_stats(families: Sequence[Family], now: datetime | None = None) -> DashboardStats:
    """
    Aggregate the figures shown on the dashboard.

    Ages are calendar-year differences (current year minus birth year); members
    without a birth date are left out of the age buckets.
    """
    now = now or utcnow()
    year = now.year
    stats = DashboardStats(
        total_families=len(families),
        children_age_groups={bucket: 0 for bucket in CHILD_AGE_BUCKETS},
        parent_age_groups={bucket: 0 for bucket in PARENT_AGE_BUCKETS},
    )
    by_children: Counter[int] = Counter()

    for family in families:
        if family.status == FamilyStatusEnum.active:
            stats.active_families += 1
        else:
            stats.inactive_families += 1
        stats.total_members += len(family.members)

        children = [m for m in family.members if m.role == MemberRoleEnum.child]
        stats.total_children += len(children)
        by_children[len(children)] += 1

        for member in family.members:
            if not isinstance(member.birth_date, date):
                continue
            age = year - member.birth_date.year
            if member.role == MemberRoleEnum.child:
                stats.children_age_groups[_child_bucket(age)] += 1
            elif member.role in _PARENT_ROLES:
                bucket = _parent_bucket(age)
                if bucket is not None:
                    stats.parent_age_groups[bucket] += 1

    if families:
        stats.active_share = round(stats.active_families / len(families), 4)
    stats.families_by_children = dict(sorted(by_children.items()))
    stats.recent_activity = recent_activity(families, now)
    return stats


def recent_activity(families: Sequence[Family], now: datetime) -> list[RecentFamily]:
    cutoff = now - timedelta(days=RECENT_WINDOW_DAYS)
    touched: list[RecentFamily] = []
    for family in families:
        created = _aware(family.created_at)
        updated = _aware(family.updated_at)
        stamps = [stamp for stamp in (created, updated) if stamp is not None]
        if not stamps or max(stamps) <= cutoff:
            continue
        touched.append(
            RecentFamily(
                id=family.id,
                membership_number=family.membership_number,
                name=family.name,
                is_new=updated is None or created == updated,
                touched_at=max(stamps),
            )
        )
    touched.sort(key=lambda item: item.touched_at, reverse=True)
    return touched[:RECENT_LIMIT]
