from datetime import date
from urllib.parse import parse_qs, urlparse

from conftest import family_payload
from membership.models.entities import Family, FamilyStatusEnum, Member, MemberRoleEnum
from membership.services.cards import build_card, school_year


def test_school_year_spans_two_calendar_years():
    assert school_year(date(2025, 10, 1)) == "2025-2026"


def test_build_card_splits_parents_and_children():
    family = Family(
        id=12,
        membership_number="12",
        name="Ortega",
        email="ortega@example.com",
        status=FamilyStatusEnum.active,
        members=[
            Member(first_name="Rosa", last_name="Ortega", role=MemberRoleEnum.tutor),
            Member(first_name="Dani", last_name="Ortega", role=MemberRoleEnum.child),
        ],
    )

    card = build_card(family, today=date(2025, 10, 1))

    assert card.membership_number == "12"
    assert card.school_year == "2025-2026"
    assert card.file_name == "Carnet_AMPA_12.pdf"
    assert card.qr_text.splitlines()[1:] == ["Socio: 12", "Ortega", "Curso: 2025-2026"]
    assert [p.first_name for p in card.parents] == ["Rosa"]
    assert [c.first_name for c in card.children] == ["Dani"]

    assert card.email.to == "ortega@example.com"
    assert card.email.mailto_url.startswith("mailto:ortega@example.com?subject=")
    gmail = parse_qs(urlparse(card.email.gmail_url).query)
    assert gmail["to"] == ["ortega@example.com"]
    assert gmail["su"] == [card.email.subject]
    assert "Dani Ortega (CHILD)" in gmail["body"][0]


def test_card_endpoint(admin_client, user_client):
    family_id = admin_client.post("/families", json=family_payload()).json()["id"]

    resp = user_client.get(f"/families/{family_id}/card")
    assert resp.status_code == 200
    body = resp.json()
    assert body["membershipNumber"] == str(family_id)
    assert body["familyName"] == "Garcia Lopez"
    assert [p["firstName"] for p in body["parents"]] == ["Ana", "Luis"]
    assert [c["firstName"] for c in body["children"]] == ["Sara"]
    assert body["email"]["gmailUrl"].startswith("https://mail.google.com/mail/?")

    assert user_client.get("/families/999/card").status_code == 404
