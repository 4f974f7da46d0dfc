from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String, UniqueConstraint

from healthlog.core.db import Base, new_id, utcnow


class FoodNutrition(Base):
    """Nutrition facts for one food entry (grams unless noted)."""

    __tablename__ = "food_nutrition"

    id = Column(String(36), primary_key=True, default=new_id)
    food_entry_id = Column(String(36), ForeignKey("food_entries.id", ondelete="CASCADE"))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    calories = Column(Float, default=0)
    serving_size = Column(String(64))
    serving_unit = Column(String(32), default="serving")

    # Macronutrients
    carbs = Column(Float, default=0)
    protein = Column(Float, default=0)
    fat = Column(Float, default=0)
    fiber = Column(Float, default=0)
    sugar = Column(Float, default=0)

    # Micronutrients (mg, vitamin D in IU)
    sodium = Column(Float, default=0)
    potassium = Column(Float, default=0)
    calcium = Column(Float, default=0)
    iron = Column(Float, default=0)
    vitamin_c = Column(Float, default=0)
    vitamin_d = Column(Float, default=0)

    cholesterol = Column(Float, default=0)
    saturated_fat = Column(Float, default=0)
    trans_fat = Column(Float, default=0)

    data_source = Column(String(32), default="manual")  # manual | fitbit | usda
    fitbit_food_id = Column(String(64))

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class DailyNutritionSummary(Base):
    __tablename__ = "daily_nutrition_summary"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_nutrition_summary_user_date"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    # Daily totals
    total_calories = Column(Float, default=0)
    total_carbs = Column(Float, default=0)
    total_protein = Column(Float, default=0)
    total_fat = Column(Float, default=0)
    total_fiber = Column(Float, default=0)
    total_sugar = Column(Float, default=0)
    total_sodium = Column(Float, default=0)

    # Goals
    calorie_goal = Column(Float, default=2000)
    carb_goal = Column(Float, default=250)
    protein_goal = Column(Float, default=50)
    fat_goal = Column(Float, default=65)
    fiber_goal = Column(Float, default=25)
    sodium_limit = Column(Float, default=2300)

    last_updated = Column(DateTime(timezone=True), default=utcnow)
    created_at = Column(DateTime(timezone=True), default=utcnow)
