from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from membership.core.auth import AuthContext, require_admin, require_auth
from membership.core.db import get_db
from membership.core.errors import ValidationError
from membership.schemas.transfer import ImportFamily, ImportResult
from membership.services.csv_transfer import commit_import, export_filename, export_rows, parse_preview, render_csv
from membership.services.families import list_families

router = APIRouter(tags=["transfer"])


@router.get("/export/csv")
def export_csv(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_auth),
):
    body = render_csv(export_rows(list_families(db)))
    return Response(
        content=body.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.get("/export/rows", response_model=list[dict[str, str]])
def export_json_rows(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_auth),
):
    return export_rows(list_families(db))


@router.post("/import/csv/preview", response_model=list[ImportFamily])
async def preview_import(request: Request):
    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError("CSV must be UTF-8 encoded") from None
    return parse_preview(text)


@router.post("/import/csv", response_model=ImportResult)
def commit_csv_import(
    payload: list[ImportFamily],
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    commit_import(db, payload, ctx)
    return ImportResult()
