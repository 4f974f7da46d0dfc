"""
Registry of every per-user table that goes into a backup.

``BACKUP_TABLES`` is in insert order: a table only references tables that
come before it. Deletion walks the same list backwards.
"""

from dataclasses import dataclass
from typing import Type

from pydantic import BaseModel

from healthlog.core.db import Base
from healthlog.models import (
    ActivityEntry,
    BloodPressureReading,
    DailyNutritionSummary,
    Diagnosis,
    FitbitActivity,
    FitbitFood,
    FitbitSleep,
    FitbitWeight,
    FoodEntry,
    FoodNutrition,
    HealthEntry,
    HealthVitals,
    HeartburnEntry,
    HeartburnFoodCorrelation,
    LabResult,
    Medication,
    MenstrualEntry,
    MentalHealthEntry,
    PremenopausalEntry,
    ReportTemplate,
    SeizureEntry,
    UserIntegration,
    WaterIntake,
    WeightGoal,
)
from healthlog.schemas import backup as rows


# summary groups
CORE = "core"
FITBIT = "fitbit_data"
WOMENS_HEALTH = "womens_health"
LAB = "lab_results"
MEDICAL = "medical"
OTHER = "other"


@dataclass(frozen=True)
class BackupTable:
    name: str
    model: Type[Base]
    row: Type[BaseModel]
    group: str


BACKUP_TABLES: tuple[BackupTable, ...] = (
    BackupTable("user_integrations", UserIntegration, rows.UserIntegrationRow, OTHER),
    BackupTable("health_entries", HealthEntry, rows.HealthEntryRow, CORE),
    BackupTable("food_entries", FoodEntry, rows.FoodEntryRow, CORE),
    BackupTable("activity_entries", ActivityEntry, rows.ActivityEntryRow, CORE),
    BackupTable("fitbit_activities", FitbitActivity, rows.FitbitActivityRow, FITBIT),
    BackupTable("fitbit_weights", FitbitWeight, rows.FitbitWeightRow, FITBIT),
    BackupTable("fitbit_foods", FitbitFood, rows.FitbitFoodRow, FITBIT),
    BackupTable("fitbit_sleep", FitbitSleep, rows.FitbitSleepRow, FITBIT),
    BackupTable("health_vitals", HealthVitals, rows.HealthVitalsRow, OTHER),
    BackupTable("water_intake", WaterIntake, rows.WaterIntakeRow, OTHER),
    BackupTable("food_nutrition", FoodNutrition, rows.FoodNutritionRow, OTHER),
    BackupTable("daily_nutrition_summary", DailyNutritionSummary, rows.DailyNutritionSummaryRow, OTHER),
    BackupTable("menstrual_entries", MenstrualEntry, rows.MenstrualEntryRow, WOMENS_HEALTH),
    BackupTable("premenopausal_entries", PremenopausalEntry, rows.PremenopausalEntryRow, WOMENS_HEALTH),
    BackupTable("lab_results", LabResult, rows.LabResultRow, LAB),
    BackupTable("heartburn_entries", HeartburnEntry, rows.HeartburnEntryRow, MEDICAL),
    BackupTable("heartburn_food_correlations", HeartburnFoodCorrelation, rows.HeartburnFoodCorrelationRow, MEDICAL),
    BackupTable("seizure_entries", SeizureEntry, rows.SeizureEntryRow, MEDICAL),
    BackupTable("mental_health_entries", MentalHealthEntry, rows.MentalHealthEntryRow, MEDICAL),
    BackupTable("blood_pressure_readings", BloodPressureReading, rows.BloodPressureReadingRow, MEDICAL),
    BackupTable("medications", Medication, rows.MedicationRow, MEDICAL),
    BackupTable("diagnoses", Diagnosis, rows.DiagnosisRow, MEDICAL),
    BackupTable("weight_goals", WeightGoal, rows.WeightGoalRow, MEDICAL),
    BackupTable("report_templates", ReportTemplate, rows.ReportTemplateRow, MEDICAL),
)

INSERT_ORDER = BACKUP_TABLES
DELETE_ORDER = tuple(reversed(BACKUP_TABLES))

TABLES_BY_NAME = {t.name: t for t in BACKUP_TABLES}


def table_names() -> list[str]:
    return [t.name for t in BACKUP_TABLES]
