from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from membership.core.auth import AuthContext, require_auth
from membership.core.db import get_db
from membership.schemas.reports import DashboardStatsResponse
from membership.services.dashboard import compute_stats
from membership.services.families import list_families

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
def get_stats(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_auth),
):
    stats = compute_stats(list_families(db))
    return DashboardStatsResponse.model_validate(stats, from_attributes=True)
