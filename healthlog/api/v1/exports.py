from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from healthlog.api.deps import get_db, require_user
from healthlog.core.export import export_filename, export_health_csv, parse_month

router = APIRouter(prefix="/users/{user_id}/exports", tags=["exports"])


@router.get("/health.csv")
def export_health(user_id: str, month: str = Query(..., description="YYYY-MM"), db: Session = Depends(get_db)):
    try:
        parse_month(month)
    except ValueError as e:
        raise HTTPException(400, str(e))

    require_user(db, user_id)
    content = export_health_csv(db, user_id, month)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(month)}"'},
    )
