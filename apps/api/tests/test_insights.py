import asyncio
import json

import httpx

from conftest import family_payload
from membership.core.config import settings
from membership.models.entities import Family, Member, MemberRoleEnum
from membership.services.insights import build_prompt, generate_family_insights


def _family() -> Family:
    return Family(
        id=3,
        name="Navarro",
        address="Plaza Nueva 2",
        members=[
            Member(first_name="Irene", last_name="Navarro", role=MemberRoleEnum.mother),
            Member(first_name="Alba", last_name="Navarro", role=MemberRoleEnum.child),
        ],
    )


def test_prompt_mentions_family_facts():
    prompt = build_prompt(_family())
    assert "Navarro" in prompt
    assert "Padres: 1" in prompt
    assert "Hijos: 1" in prompt
    assert "Plaza Nueva 2" in prompt


def test_no_api_key_means_no_summary(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", "")
    assert asyncio.run(generate_family_insights(_family())) is None


def test_summary_is_read_from_first_candidate(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", "test-key")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "  Familia activa.  "}]}}]})

    summary = asyncio.run(generate_family_insights(_family(), transport=httpx.MockTransport(handler)))

    assert summary == "Familia activa."
    assert ":generateContent" in seen["url"]
    assert "key=test-key" in seen["url"]
    assert "Navarro" in seen["body"]["contents"][0]["parts"][0]["text"]


def test_upstream_failure_means_no_summary(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", "test-key")
    transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"error": "boom"}))
    assert asyncio.run(generate_family_insights(_family(), transport=transport)) is None


def test_summary_endpoint_reports_unavailable_without_key(admin_client, user_client, monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", "")
    family_id = admin_client.post("/families", json=family_payload()).json()["id"]

    assert user_client.post(f"/families/{family_id}/summary").status_code == 401

    resp = admin_client.post(f"/families/{family_id}/summary")
    assert resp.status_code == 503
    assert resp.json() == {"detail": "Summary service unavailable"}
    assert admin_client.get(f"/families/{family_id}").json()["aiSummary"] is None
