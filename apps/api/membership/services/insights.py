from __future__ import annotations

from datetime import date

import httpx

from membership.core.config import settings
from membership.core.logging import get_logger
from membership.models.entities import Family, MemberRoleEnum

logger = get_logger(__name__)


def _generate_url() -> str:
    return f"{settings.gemini_base_url.rstrip('/')}/models/{settings.gemini_model}:generateContent"


def build_prompt(family: Family, today: date | None = None) -> str:
    year = (today or date.today()).year
    parents = [m for m in family.members if m.role in (MemberRoleEnum.father, MemberRoleEnum.mother)]
    children = [m for m in family.members if m.role == MemberRoleEnum.child]
    ages = ", ".join(f"{year - c.birth_date.year} años" for c in children if c.birth_date) or "desconocidas"
    return (
        "Analiza esta familia para una asociación familiar:\n"
        f"- Nombre: {family.name}\n"
        f"- Padres: {len(parents)}\n"
        f"- Hijos: {len(children)} (Edades aprox: {ages})\n"
        f"- Ubicación: {family.address}\n\n"
        "Genera un resumen corto y amable del perfil de esta familia (máximo 2 párrafos) y sugiere "
        "3 actividades específicas que la asociación podría ofrecerles según las edades de los hijos.\n"
        "Formato: texto plano, tono profesional pero cercano."
    )


def _extract_text(payload: dict) -> str | None:
    for candidate in payload.get("candidates") or []:
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()
        if text:
            return text
    return None


async def generate_family_insights(
    family: Family,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str | None:
    """
    Ask Gemini for a short family profile.

    Returns None when no API key is configured or the call fails for any reason;
    callers treat the summary as optional.
    """
    if not settings.gemini_api_key:
        return None

    timeout = httpx.Timeout(settings.gemini_timeout_seconds, connect=5.0)
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            resp = await client.post(
                _generate_url(),
                params={"key": settings.gemini_api_key},
                json={"contents": [{"parts": [{"text": build_prompt(family)}]}]},
            )
            resp.raise_for_status()
            text = _extract_text(resp.json())
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("summary generation failed", family_id=family.id, error=type(exc).__name__)
        return None

    if text is None:
        logger.warning("summary generation returned no text", family_id=family.id)
    return text
