from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from membership.core.auth import AuthContext, require_admin, require_auth
from membership.core.db import get_db
from membership.core.errors import ServiceUnavailable
from membership.schemas.families import DeleteResponse, FamilyInput, FamilyResponse
from membership.schemas.reports import MembershipCardResponse
from membership.services import families as family_store
from membership.services.cards import build_card
from membership.services.insights import generate_family_insights

router = APIRouter(prefix="/families", tags=["families"])


def _response(family) -> FamilyResponse:
    return FamilyResponse.model_validate(family, from_attributes=True)


@router.get("", response_model=list[FamilyResponse])
def list_families(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_auth),
):
    return [_response(item) for item in family_store.list_families(db)]


@router.post("", response_model=FamilyResponse, status_code=201)
def create_family(
    payload: FamilyInput,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    return _response(family_store.create_family(db, payload, ctx))


@router.get("/{family_id}", response_model=FamilyResponse)
def get_family(
    family_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_auth),
):
    return _response(family_store.load_family(db, family_id))


@router.put("/{family_id}", response_model=FamilyResponse)
def update_family(
    family_id: int,
    payload: FamilyInput,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    return _response(family_store.update_family(db, family_id, payload, ctx))


@router.delete("/{family_id}", response_model=DeleteResponse)
def delete_family(
    family_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    family_store.delete_family(db, family_id, ctx)
    return DeleteResponse()


@router.get("/{family_id}/card", response_model=MembershipCardResponse)
def get_card(
    family_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_auth),
):
    card = build_card(family_store.load_family(db, family_id))
    return MembershipCardResponse.model_validate(card, from_attributes=True)


@router.post("/{family_id}/summary", response_model=FamilyResponse)
async def generate_summary(
    family_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    family = family_store.load_family(db, family_id)
    summary = await generate_family_insights(family)
    if summary is None:
        raise ServiceUnavailable("Summary service unavailable")
    return _response(family_store.set_summary(db, family_id, summary))
