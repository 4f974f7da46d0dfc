from healthlog.models.user import User, UserIntegration
from healthlog.models.entries import HealthEntry, FoodEntry, ActivityEntry
from healthlog.models.fitbit import FitbitActivity, FitbitWeight, FitbitFood, FitbitSleep
from healthlog.models.vitals import HealthVitals, WaterIntake
from healthlog.models.nutrition import FoodNutrition, DailyNutritionSummary
from healthlog.models.womens_health import MenstrualEntry, PremenopausalEntry
from healthlog.models.lab import LabResult
from healthlog.models.medical import (
    Medication,
    Diagnosis,
    SeizureEntry,
    MentalHealthEntry,
    BloodPressureReading,
    WeightGoal,
)
from healthlog.models.heartburn import HeartburnEntry, HeartburnFoodCorrelation
from healthlog.models.report_template import ReportTemplate
from healthlog.models.backup import BackupSnapshotRecord, BackupSummaryList, AutoBackupMarker

__all__ = [
    "User",
    "UserIntegration",
    "HealthEntry",
    "FoodEntry",
    "ActivityEntry",
    "FitbitActivity",
    "FitbitWeight",
    "FitbitFood",
    "FitbitSleep",
    "HealthVitals",
    "WaterIntake",
    "FoodNutrition",
    "DailyNutritionSummary",
    "MenstrualEntry",
    "PremenopausalEntry",
    "LabResult",
    "Medication",
    "Diagnosis",
    "SeizureEntry",
    "MentalHealthEntry",
    "BloodPressureReading",
    "WeightGoal",
    "HeartburnEntry",
    "HeartburnFoodCorrelation",
    "ReportTemplate",
    "BackupSnapshotRecord",
    "BackupSummaryList",
    "AutoBackupMarker",
]
