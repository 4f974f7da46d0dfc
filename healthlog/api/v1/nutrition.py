from datetime import date as DateType

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from healthlog.api.deps import get_db, require_user
from healthlog.core.nutrition import calculate_daily_nutrition_summary
from healthlog.schemas.backup import DailyNutritionSummaryRow

router = APIRouter(prefix="/users/{user_id}/nutrition", tags=["nutrition"])


@router.post("/daily/{date}", response_model=DailyNutritionSummaryRow)
def recalculate_daily_summary(user_id: str, date: str, db: Session = Depends(get_db)):
    try:
        d = DateType.fromisoformat(date)
    except ValueError:
        raise HTTPException(400, f"Invalid date format: {date}, expected YYYY-MM-DD")

    require_user(db, user_id)
    summary = calculate_daily_nutrition_summary(db, user_id, d)
    return DailyNutritionSummaryRow.model_validate(summary)
