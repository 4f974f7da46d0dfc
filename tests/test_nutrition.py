from __future__ import annotations

from datetime import date

from healthlog.core.nutrition import calculate_daily_nutrition_summary
from healthlog.models import DailyNutritionSummary, FitbitFood, FoodNutrition
from tests.factories import add_food_entries

DAY = date(2024, 3, 1)


def _facts(db, user_id: str, food_entry_id: str, **values) -> FoodNutrition:
    facts = FoodNutrition(user_id=user_id, food_entry_id=food_entry_id, **values)
    db.add(facts)
    db.commit()
    return facts


def test_sums_the_days_food_and_fitbit_calories(db, user):
    oats, soup = add_food_entries(db, user.id, ["oats", "soup"], day=DAY)
    [yesterday] = add_food_entries(db, user.id, ["cake"], day=date(2024, 2, 29))
    _facts(db, user.id, oats.id, calories=300, carbs=54, protein=10, fat=5, fiber=8, sugar=1, sodium=10)
    _facts(db, user.id, soup.id, calories=200, carbs=20, protein=12, fat=7, fiber=3, sugar=4, sodium=800)
    _facts(db, user.id, yesterday.id, calories=450, sugar=40)
    db.add(FitbitFood(user_id=user.id, date=DAY, calories=250))
    db.commit()

    summary = calculate_daily_nutrition_summary(db, user.id, DAY)

    assert summary.date == DAY
    assert summary.total_calories == 750
    assert summary.total_carbs == 74
    assert summary.total_protein == 22
    assert summary.total_sugar == 5
    assert summary.total_sodium == 810
    assert summary.calorie_goal == 2000
    assert summary.last_updated is not None


def test_recalculation_updates_the_same_row(db, user):
    [oats] = add_food_entries(db, user.id, ["oats"], day=DAY)
    _facts(db, user.id, oats.id, calories=300)
    first = calculate_daily_nutrition_summary(db, user.id, DAY)

    [apple] = add_food_entries(db, user.id, ["apple"], day=DAY, first_hour=15)
    _facts(db, user.id, apple.id, calories=95)
    second = calculate_daily_nutrition_summary(db, user.id, DAY)

    assert second.id == first.id
    assert second.total_calories == 395
    assert db.query(DailyNutritionSummary).filter(DailyNutritionSummary.user_id == user.id).count() == 1


def test_empty_day_is_all_zero(db, user):
    summary = calculate_daily_nutrition_summary(db, user.id, DAY)

    assert summary.total_calories == 0
    assert summary.total_fat == 0
