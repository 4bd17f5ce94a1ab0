from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from urllib.parse import quote, urlencode

from membership.core.config import settings
from membership.models.entities import Family, Member, MemberRoleEnum

_PARENT_ROLES = (MemberRoleEnum.father, MemberRoleEnum.mother, MemberRoleEnum.tutor)


@dataclass
class CardPerson:
    first_name: str
    last_name: str
    role: MemberRoleEnum


@dataclass
class CardEmail:
    to: str
    subject: str
    body: str
    mailto_url: str
    gmail_url: str


@dataclass
class MembershipCard:
    association: str
    membership_number: str
    family_name: str
    school_year: str
    qr_text: str
    parents: list[CardPerson]
    children: list[CardPerson]
    file_name: str
    email: CardEmail


def school_year(today: date | None = None) -> str:
    year = (today or date.today()).year
    return f"{year}-{year + 1}"


def _person(member: Member) -> CardPerson:
    return CardPerson(first_name=member.first_name, last_name=member.last_name, role=member.role)


def build_card(family: Family, today: date | None = None) -> MembershipCard:
    """Everything a printable/emailable card needs; layout is left to the client."""
    year = school_year(today)
    number = family.membership_number or str(family.id)
    file_name = f"Carnet_AMPA_{number}.pdf"

    qr_text = "\n".join(
        [settings.association_name.upper(), f"Socio: {number}", family.name, f"Curso: {year}"]
    )

    roster = "\n".join(f"• {m.first_name} {m.last_name} ({m.role.value})" for m in family.members)
    subject = f"Carnet Digital AMPA - Curso {year} - Familia {family.name}"
    body = (
        f"Estimada familia {family.name},\n\n"
        "Adjuntamos su carnet de socio.\n\n"
        f"INTEGRANTES:\n{roster}\n\n"
        f'* IMPORTANTE: adjunte el archivo "{file_name}".'
    )
    mailto = f"mailto:{family.email}?subject={quote(subject)}&body={quote(body)}"
    gmail = "https://mail.google.com/mail/?" + urlencode(
        {"view": "cm", "fs": "1", "to": family.email, "su": subject, "body": body}
    )

    return MembershipCard(
        association=settings.association_name,
        membership_number=number,
        family_name=family.name,
        school_year=year,
        qr_text=qr_text,
        parents=[_person(m) for m in family.members if m.role in _PARENT_ROLES],
        children=[_person(m) for m in family.members if m.role == MemberRoleEnum.child],
        file_name=file_name,
        email=CardEmail(to=family.email, subject=subject, body=body, mailto_url=mailto, gmail_url=gmail),
    )
