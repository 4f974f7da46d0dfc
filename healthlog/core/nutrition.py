import logging
from datetime import date as DateType, datetime, time as TimeType, timedelta

from sqlalchemy.orm import Session

from healthlog.core.db import utcnow
from healthlog.models.entries import FoodEntry
from healthlog.models.fitbit import FitbitFood
from healthlog.models.nutrition import DailyNutritionSummary, FoodNutrition

logger = logging.getLogger(__name__)

TOTALS = ("calories", "carbs", "protein", "fat", "fiber", "sugar", "sodium")


def calculate_daily_nutrition_summary(db: Session, user_id: str, day: DateType) -> DailyNutritionSummary:
    """
    Recompute the user's nutrition totals for ``day`` and upsert them.

    Manual nutrition facts count on the day their food entry was created.
    Fitbit food logs contribute calories only.
    """
    lower = datetime.combine(day - timedelta(days=1), TimeType.min)
    upper = datetime.combine(day + timedelta(days=2), TimeType.min)
    rows = (
        db.query(FoodNutrition, FoodEntry.created_at)
        .join(FoodEntry, FoodEntry.id == FoodNutrition.food_entry_id)
        .filter(FoodNutrition.user_id == user_id)
        .filter(FoodEntry.created_at >= lower)
        .filter(FoodEntry.created_at < upper)
        .all()
    )

    totals = {name: 0.0 for name in TOTALS}
    for facts, created_at in rows:
        if created_at is None or created_at.date() != day:
            continue
        for name in TOTALS:
            totals[name] += getattr(facts, name) or 0.0

    fitbit_days = (
        db.query(FitbitFood)
        .filter(FitbitFood.user_id == user_id)
        .filter(FitbitFood.date == day)
        .all()
    )
    totals["calories"] += sum(f.calories or 0 for f in fitbit_days)

    summary = (
        db.query(DailyNutritionSummary)
        .filter(DailyNutritionSummary.user_id == user_id)
        .filter(DailyNutritionSummary.date == day)
        .one_or_none()
    )
    if summary is None:
        summary = DailyNutritionSummary(user_id=user_id, date=day)
        db.add(summary)

    for name, value in totals.items():
        setattr(summary, f"total_{name}", round(value, 2))
    summary.last_updated = utcnow()

    db.commit()
    db.refresh(summary)
    logger.info("Nutrition summary for %s on %s: %.0f kcal", user_id, day, summary.total_calories)
    return summary
