"""
Typed backup payloads.

Every backed-up table has an explicit row schema so a snapshot's shape is
checked when it is built from ORM rows and again when an uploaded artifact is
parsed. ``SnapshotData`` holds one list per table.
"""

from __future__ import annotations

from datetime import date as DateType, datetime, time as TimeType
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

SNAPSHOT_FORMAT_VERSION = 1


class BackupType(str, Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"


class Row(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str


# ---------- core entries ----------

class HealthEntryRow(Row):
    date: DateType
    mood: int | None = None
    energy: int | None = None
    anxiety_level: int | None = None
    sleep_hours: float | None = None
    sleep_quality: int | None = None
    weight: float | None = None
    notes: str | None = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FoodEntryRow(Row):
    health_entry_id: str | None = None
    name: str
    time: TimeType | None = None
    category: str = "snack"
    notes: str | None = ""
    created_at: datetime | None = None


class ActivityEntryRow(Row):
    health_entry_id: str | None = None
    name: str
    duration: int
    intensity: str = "moderate"
    time: TimeType | None = None
    created_at: datetime | None = None


class UserIntegrationRow(Row):
    provider: str
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None
    last_sync: datetime | None = None
    is_active: bool | None = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------- fitbit ----------

class FitbitActivityRow(Row):
    date: DateType
    steps: int | None = 0
    distance: float | None = 0
    calories: int | None = 0
    active_minutes: int | None = 0
    activities: list[Any] | None = None
    synced_at: datetime | None = None


class FitbitWeightRow(Row):
    date: DateType
    weight: float
    bmi: float | None = None
    fat_percentage: float | None = None
    synced_at: datetime | None = None


class FitbitFoodRow(Row):
    date: DateType
    calories: int | None = 0
    foods: list[Any] | None = None
    water: float | None = 0
    synced_at: datetime | None = None


class FitbitSleepRow(Row):
    date: DateType
    duration: int
    efficiency: int | None = 0
    start_time: datetime | None = None
    end_time: datetime | None = None
    stages: dict[str, Any] | None = None
    synced_at: datetime | None = None


# ---------- vitals / nutrition ----------

class HealthVitalsRow(Row):
    date: DateType
    blood_pressure_systolic: int | None = None
    blood_pressure_diastolic: int | None = None
    blood_sugar: float | None = None
    heart_rate: int | None = None
    temperature: float | None = None
    notes: str | None = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class WaterIntakeRow(Row):
    date: DateType
    amount_ml: float = 0
    source: str | None = "manual"
    logged_time: datetime | None = None
    created_at: datetime | None = None


class FoodNutritionRow(Row):
    food_entry_id: str | None = None
    calories: float | None = 0
    serving_size: str | None = None
    serving_unit: str | None = "serving"
    carbs: float | None = 0
    protein: float | None = 0
    fat: float | None = 0
    fiber: float | None = 0
    sugar: float | None = 0
    sodium: float | None = 0
    potassium: float | None = 0
    calcium: float | None = 0
    iron: float | None = 0
    vitamin_c: float | None = 0
    vitamin_d: float | None = 0
    cholesterol: float | None = 0
    saturated_fat: float | None = 0
    trans_fat: float | None = 0
    data_source: str | None = "manual"
    fitbit_food_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DailyNutritionSummaryRow(Row):
    date: DateType
    total_calories: float | None = 0
    total_carbs: float | None = 0
    total_protein: float | None = 0
    total_fat: float | None = 0
    total_fiber: float | None = 0
    total_sugar: float | None = 0
    total_sodium: float | None = 0
    calorie_goal: float | None = 2000
    carb_goal: float | None = 250
    protein_goal: float | None = 50
    fat_goal: float | None = 65
    fiber_goal: float | None = 25
    sodium_limit: float | None = 2300
    last_updated: datetime | None = None
    created_at: datetime | None = None


# ---------- women's health / labs ----------

class MenstrualEntryRow(Row):
    date: DateType
    cycle_day: int | None = None
    flow_intensity: str | None = None
    symptoms: list[str] | None = None
    cycle_phase: str | None = None
    notes: str | None = ""
    created_at: datetime | None = None


class PremenopausalEntryRow(Row):
    date: DateType
    hot_flashes: int | None = 0
    night_sweats: bool | None = False
    mood_swings: int | None = 5
    irregular_periods: bool | None = False
    sleep_disturbances: bool | None = False
    joint_aches: bool | None = False
    brain_fog: int | None = 5
    weight_changes: bool | None = False
    notes: str | None = ""
    created_at: datetime | None = None


class LabResultRow(Row):
    test_date: DateType
    test_name: str
    test_category: str | None = "other"
    result_value: float
    result_unit: str | None = None
    reference_range_min: float | None = None
    reference_range_max: float | None = None
    status: str | None = "normal"
    doctor_notes: str | None = None
    lab_name: str | None = None
    created_at: datetime | None = None


# ---------- medical management ----------

class HeartburnEntryRow(Row):
    date: DateType
    time: TimeType
    severity: int
    duration_minutes: int | None = 0
    triggers: list[str] | None = None
    relief_methods: list[str] | None = None
    medication_taken: str | None = None
    notes: str | None = ""
    created_at: datetime | None = None


class HeartburnFoodCorrelationRow(Row):
    heartburn_entry_id: str
    food_entry_id: str
    time_between_hours: float | None = None
    correlation_strength: float | None = 0.5
    created_at: datetime | None = None


class SeizureEntryRow(Row):
    date: DateType
    time: TimeType | None = None
    seizure_type: str = "unknown"
    duration_seconds: int | None = None
    severity: str | None = "mild"
    triggers: list[str] | None = None
    warning_signs: list[str] | None = None
    post_seizure_effects: list[str] | None = None
    location: str | None = None
    witnesses: list[str] | None = None
    emergency_services_called: bool | None = False
    medication_taken: str | None = None
    recovery_time_minutes: int | None = None
    notes: str | None = ""
    created_at: datetime | None = None


class MentalHealthEntryRow(Row):
    date: DateType
    time: TimeType | None = None
    suicidal_thoughts: bool | None = False
    thoughts_intensity: int | None = None
    thoughts_duration: str | None = None
    triggers: list[str] | None = None
    coping_mechanisms_used: list[str] | None = None
    support_contacted: bool | None = False
    support_person: str | None = None
    safety_plan_followed: bool | None = False
    mood_before: int | None = None
    mood_after: int | None = None
    is_crisis: bool | None = False
    notes: str | None = ""
    created_at: datetime | None = None


class BloodPressureReadingRow(Row):
    date: DateType
    time: TimeType | None = None
    systolic: int
    diastolic: int
    heart_rate: int | None = None
    position: str | None = "sitting"
    arm: str | None = "left"
    cuff_size: str | None = "standard"
    notes: str | None = ""
    created_at: datetime | None = None


class MedicationRow(Row):
    medication_name: str
    dosage: str | None = ""
    frequency: str | None = ""
    prescribed_by: str | None = None
    prescribed_date: DateType | None = None
    status: str | None = "active"
    start_date: DateType | None = None
    end_date: DateType | None = None
    side_effects: list[str] | None = None
    effectiveness_rating: int | None = None
    notes: str | None = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DiagnosisRow(Row):
    diagnosis_name: str
    diagnosis_code: str | None = None
    diagnosed_date: DateType | None = None
    diagnosed_by: str | None = None
    severity: str | None = "mild"
    is_active: bool | None = True
    notes: str | None = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class WeightGoalRow(Row):
    goal_type: str = "maintain"
    start_weight: float
    target_weight: float
    target_date: DateType | None = None
    weekly_goal: float | None = None
    start_date: DateType
    is_active: bool | None = True
    notes: str | None = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ReportTemplateRow(Row):
    template_name: str
    report_type: str = "doctor"
    template_content: dict[str, Any] | None = None
    is_default: bool | None = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------- snapshot ----------

class SnapshotData(BaseModel):
    health_entries: list[HealthEntryRow] = Field(default_factory=list)
    food_entries: list[FoodEntryRow] = Field(default_factory=list)
    activity_entries: list[ActivityEntryRow] = Field(default_factory=list)
    user_integrations: list[UserIntegrationRow] = Field(default_factory=list)
    fitbit_activities: list[FitbitActivityRow] = Field(default_factory=list)
    fitbit_weights: list[FitbitWeightRow] = Field(default_factory=list)
    fitbit_foods: list[FitbitFoodRow] = Field(default_factory=list)
    fitbit_sleep: list[FitbitSleepRow] = Field(default_factory=list)
    health_vitals: list[HealthVitalsRow] = Field(default_factory=list)
    water_intake: list[WaterIntakeRow] = Field(default_factory=list)
    food_nutrition: list[FoodNutritionRow] = Field(default_factory=list)
    daily_nutrition_summary: list[DailyNutritionSummaryRow] = Field(default_factory=list)
    menstrual_entries: list[MenstrualEntryRow] = Field(default_factory=list)
    premenopausal_entries: list[PremenopausalEntryRow] = Field(default_factory=list)
    lab_results: list[LabResultRow] = Field(default_factory=list)
    heartburn_entries: list[HeartburnEntryRow] = Field(default_factory=list)
    heartburn_food_correlations: list[HeartburnFoodCorrelationRow] = Field(default_factory=list)
    seizure_entries: list[SeizureEntryRow] = Field(default_factory=list)
    mental_health_entries: list[MentalHealthEntryRow] = Field(default_factory=list)
    blood_pressure_readings: list[BloodPressureReadingRow] = Field(default_factory=list)
    medications: list[MedicationRow] = Field(default_factory=list)
    diagnoses: list[DiagnosisRow] = Field(default_factory=list)
    weight_goals: list[WeightGoalRow] = Field(default_factory=list)
    report_templates: list[ReportTemplateRow] = Field(default_factory=list)


class BackupSnapshot(BaseModel):
    id: str
    user_id: str
    backup_name: str
    backup_type: BackupType
    data: SnapshotData
    created_at: datetime
    file_size: int
    format_version: int = SNAPSHOT_FORMAT_VERSION


class RecordCounts(BaseModel):
    health_entries: int = 0
    food_entries: int = 0
    activity_entries: int = 0
    fitbit_data: int = 0
    womens_health: int = 0
    lab_results: int = 0
    medical: int = 0
    total: int = 0
    # Per-table counts, zeros included
    tables: dict[str, int] = Field(default_factory=dict)


class BackupSummary(BaseModel):
    id: str
    user_id: str
    backup_name: str
    backup_type: BackupType
    created_at: datetime
    file_size: int
    record_counts: RecordCounts
