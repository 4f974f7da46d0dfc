"""
Doctor-visit report: pull one user's records for a date range, reduce them
to simple statistics and lay them out as plain text, one block per template
section.
"""

import logging
from collections import Counter
from datetime import date as DateType, datetime
from typing import Callable, Iterable

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from healthlog.core.db import utcnow
from healthlog.core.errors import DefaultTemplateError, TemplateNotFoundError
from healthlog.core.heartburn import TriggerStat, top_triggers
from healthlog.models.entries import HealthEntry
from healthlog.models.medical import (
    BloodPressureReading,
    Diagnosis,
    Medication,
    MentalHealthEntry,
    SeizureEntry,
)
from healthlog.models.report_template import ReportTemplate
from healthlog.models.user import User
from healthlog.schemas.backup import DiagnosisRow, MedicationRow

logger = logging.getLogger(__name__)

TOP_N = 3

DEFAULT_TEMPLATES = [
    {
        "template_name": "Standard Doctor Visit",
        "report_type": "doctor",
        "template_content": {
            "sections": [
                "patient_info",
                "health_summary",
                "medications",
                "diagnoses",
                "seizures",
                "mental_health",
                "blood_pressure",
                "weight_trends",
                "questions",
            ],
            "include_charts": True,
            "include_raw_data": False,
        },
        "is_default": True,
    },
    {
        "template_name": "Mental Health Check-in",
        "report_type": "mental_health",
        "template_content": {
            "sections": [
                "patient_info",
                "mental_health",
                "medications",
                "mood_patterns",
                "coping_strategies",
                "crisis_episodes",
                "support_systems",
            ],
            "include_charts": True,
            "include_raw_data": False,
        },
        "is_default": False,
    },
    {
        "template_name": "Neurologist Visit",
        "report_type": "specialist",
        "template_content": {
            "sections": [
                "patient_info",
                "seizures",
                "medications",
                "triggers",
                "sleep_patterns",
                "mood_correlation",
                "emergency_episodes",
            ],
            "include_charts": True,
            "include_raw_data": True,
        },
        "is_default": False,
    },
]

NEW_TEMPLATE_SECTIONS = ["patient_info", "health_summary", "medications"]
REPORT_TYPES = ("doctor", "mental_health", "specialist", "emergency", "routine_checkup")


# ---------- report data ----------

class DoctorInfo(BaseModel):
    name: str | None = None
    appointment_date: DateType | None = None
    notes: str | None = None


class FrequencyItem(BaseModel):
    label: str
    count: int


class HealthSummary(BaseModel):
    total_entries: int = 0
    avg_mood: float | None = None
    avg_energy: float | None = None
    avg_anxiety: float | None = None
    avg_sleep_hours: float | None = None
    avg_sleep_quality: float | None = None
    min_mood: int | None = None
    max_mood: int | None = None
    min_sleep_hours: float | None = None
    max_sleep_hours: float | None = None
    weight_start: float | None = None
    weight_end: float | None = None
    weight_change: float | None = None


class SeizureSummary(BaseModel):
    total: int = 0
    avg_duration_seconds: float | None = None
    max_duration_seconds: int | None = None
    types: list[FrequencyItem] = Field(default_factory=list)
    triggers: list[FrequencyItem] = Field(default_factory=list)
    emergency_count: int = 0
    emergency_dates: list[DateType] = Field(default_factory=list)


class MentalHealthSummary(BaseModel):
    total_entries: int = 0
    suicidal_thoughts_count: int = 0
    crisis_count: int = 0
    crisis_dates: list[DateType] = Field(default_factory=list)
    support_contacted_count: int = 0
    safety_plan_followed_count: int = 0
    avg_mood_before: float | None = None
    avg_mood_after: float | None = None
    coping: list[FrequencyItem] = Field(default_factory=list)
    triggers: list[FrequencyItem] = Field(default_factory=list)
    support_people: list[FrequencyItem] = Field(default_factory=list)


class BloodPressureSummary(BaseModel):
    total_readings: int = 0
    avg_systolic: int | None = None
    avg_diastolic: int | None = None
    avg_heart_rate: int | None = None
    min_systolic: int | None = None
    max_systolic: int | None = None
    min_diastolic: int | None = None
    max_diastolic: int | None = None


class MoodCorrelation(BaseModel):
    seizure_days: int = 0
    avg_mood_seizure_days: float | None = None
    avg_mood_other_days: float | None = None


class HealthReport(BaseModel):
    patient_name: str
    generated_at: datetime
    start: DateType
    end: DateType
    doctor: DoctorInfo = Field(default_factory=DoctorInfo)
    sections: list[str]

    health: HealthSummary
    seizures: SeizureSummary
    mental_health: MentalHealthSummary
    blood_pressure: BloodPressureSummary
    mood_correlation: MoodCorrelation
    medications: list[MedicationRow] = Field(default_factory=list)
    diagnoses: list[DiagnosisRow] = Field(default_factory=list)
    heartburn_triggers: list[TriggerStat] = Field(default_factory=list)


# ---------- statistics helpers ----------

def _avg(values: Iterable[float | None]) -> float | None:
    nums = [v for v in values if v is not None]
    if not nums:
        return None
    return sum(nums) / len(nums)


def _round(value: float | None, digits: int = 1) -> float | None:
    return round(value, digits) if value is not None else None


def _round_int(value: float | None) -> int | None:
    return int(round(value)) if value is not None else None


def _present(values: Iterable):
    return [v for v in values if v is not None]


def frequencies(labels: Iterable[str]) -> list[FrequencyItem]:
    """Count labels; most frequent first, ties alphabetical."""
    counts = Counter(label for label in labels if label)
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [FrequencyItem(label=label, count=count) for label, count in ordered]


def summarize_health(entries: list[HealthEntry]) -> HealthSummary:
    moods = _present(e.mood for e in entries)
    sleep = _present(e.sleep_hours for e in entries)
    weighed = sorted((e for e in entries if e.weight is not None), key=lambda e: e.date)

    summary = HealthSummary(
        total_entries=len(entries),
        avg_mood=_round(_avg(moods)),
        avg_energy=_round(_avg(e.energy for e in entries)),
        avg_anxiety=_round(_avg(e.anxiety_level for e in entries)),
        avg_sleep_hours=_round(_avg(sleep)),
        avg_sleep_quality=_round(_avg(e.sleep_quality for e in entries)),
        min_mood=min(moods) if moods else None,
        max_mood=max(moods) if moods else None,
        min_sleep_hours=min(sleep) if sleep else None,
        max_sleep_hours=max(sleep) if sleep else None,
    )
    if weighed:
        summary.weight_start = weighed[0].weight
        summary.weight_end = weighed[-1].weight
        summary.weight_change = round(weighed[-1].weight - weighed[0].weight, 1)
    return summary


def summarize_seizures(entries: list[SeizureEntry]) -> SeizureSummary:
    durations = _present(e.duration_seconds for e in entries)
    emergencies = [e for e in entries if e.emergency_services_called]
    return SeizureSummary(
        total=len(entries),
        avg_duration_seconds=_round(_avg(durations)),
        max_duration_seconds=max(durations) if durations else None,
        types=frequencies(e.seizure_type for e in entries),
        triggers=frequencies(t for e in entries for t in (e.triggers or [])),
        emergency_count=len(emergencies),
        emergency_dates=sorted({e.date for e in emergencies}),
    )


def summarize_mental_health(entries: list[MentalHealthEntry]) -> MentalHealthSummary:
    crises = [e for e in entries if e.is_crisis]
    return MentalHealthSummary(
        total_entries=len(entries),
        suicidal_thoughts_count=sum(1 for e in entries if e.suicidal_thoughts),
        crisis_count=len(crises),
        crisis_dates=sorted({e.date for e in crises}),
        support_contacted_count=sum(1 for e in entries if e.support_contacted),
        safety_plan_followed_count=sum(1 for e in entries if e.safety_plan_followed),
        avg_mood_before=_round(_avg(e.mood_before for e in entries)),
        avg_mood_after=_round(_avg(e.mood_after for e in entries)),
        coping=frequencies(c for e in entries for c in (e.coping_mechanisms_used or [])),
        triggers=frequencies(t for e in entries for t in (e.triggers or [])),
        support_people=frequencies(e.support_person for e in entries if e.support_contacted),
    )


def summarize_blood_pressure(readings: list[BloodPressureReading]) -> BloodPressureSummary:
    systolic = [r.systolic for r in readings]
    diastolic = [r.diastolic for r in readings]
    return BloodPressureSummary(
        total_readings=len(readings),
        avg_systolic=_round_int(_avg(systolic)),
        avg_diastolic=_round_int(_avg(diastolic)),
        avg_heart_rate=_round_int(_avg(r.heart_rate for r in readings)),
        min_systolic=min(systolic) if systolic else None,
        max_systolic=max(systolic) if systolic else None,
        min_diastolic=min(diastolic) if diastolic else None,
        max_diastolic=max(diastolic) if diastolic else None,
    )


def correlate_mood_with_seizures(entries: list[HealthEntry], seizures: list[SeizureEntry]) -> MoodCorrelation:
    seizure_days = {s.date for s in seizures}
    return MoodCorrelation(
        seizure_days=len(seizure_days),
        avg_mood_seizure_days=_round(_avg(e.mood for e in entries if e.date in seizure_days)),
        avg_mood_other_days=_round(_avg(e.mood for e in entries if e.date not in seizure_days)),
    )


# ---------- building ----------

def _in_range(db: Session, model, user_id: str, start: DateType, end: DateType) -> list:
    return (
        db.query(model)
        .filter(model.user_id == user_id)
        .filter(model.date >= start)
        .filter(model.date <= end)
        .order_by(model.date.asc())
        .all()
    )


def build_report(
    db: Session,
    user: User,
    sections: list[str],
    start: DateType,
    end: DateType,
    doctor: DoctorInfo | None = None,
    generated_at: datetime | None = None,
) -> HealthReport:
    if start > end:
        raise ValueError(f"Report start {start} is after end {end}")

    health_entries = _in_range(db, HealthEntry, user.id, start, end)
    seizures = _in_range(db, SeizureEntry, user.id, start, end)
    mental = _in_range(db, MentalHealthEntry, user.id, start, end)
    readings = _in_range(db, BloodPressureReading, user.id, start, end)

    medications = (
        db.query(Medication)
        .filter(Medication.user_id == user.id)
        .filter(Medication.status == "active")
        .order_by(Medication.medication_name.asc())
        .all()
    )
    diagnoses = (
        db.query(Diagnosis)
        .filter(Diagnosis.user_id == user.id)
        .filter(Diagnosis.is_active.is_(True))
        .order_by(Diagnosis.diagnosis_name.asc())
        .all()
    )

    report = HealthReport(
        patient_name=user.name,
        generated_at=generated_at or utcnow(),
        start=start,
        end=end,
        doctor=doctor or DoctorInfo(),
        sections=list(sections),
        health=summarize_health(health_entries),
        seizures=summarize_seizures(seizures),
        mental_health=summarize_mental_health(mental),
        blood_pressure=summarize_blood_pressure(readings),
        mood_correlation=correlate_mood_with_seizures(health_entries, seizures),
        medications=[MedicationRow.model_validate(m) for m in medications],
        diagnoses=[DiagnosisRow.model_validate(d) for d in diagnoses],
        heartburn_triggers=top_triggers(db, user.id, start=start, end=end),
    )
    logger.info(
        "Report for user %s (%s to %s): %d health entries, %d seizures, %d check-ins, %d BP readings",
        user.id,
        start,
        end,
        len(health_entries),
        len(seizures),
        len(mental),
        len(readings),
    )
    return report


# ---------- rendering ----------

def _long_date(d: DateType) -> str:
    return f"{d:%B} {d.day}, {d.year}"


def _short_date(d: DateType) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def _na(value, suffix: str = "") -> str:
    return f"{value}{suffix}" if value is not None else "n/a"


def _top(items: list[FrequencyItem], n: int = TOP_N) -> str:
    if not items:
        return "none recorded"
    return ", ".join(f"{i.label} ({i.count}x)" for i in items[:n])


def _dates(days: list[DateType]) -> str:
    return ", ".join(_short_date(d) for d in days) if days else "none"


def _patient_info(r: HealthReport) -> list[str]:
    days = (r.end - r.start).days + 1
    return [
        "=== PATIENT INFORMATION ===",
        f"• Name: {r.patient_name}",
        f"• Reporting period: {days} days",
    ]


def _health_summary(r: HealthReport) -> list[str]:
    h = r.health
    return [
        "=== HEALTH SUMMARY ===",
        f"• Total health entries: {h.total_entries}",
        f"• Average mood: {_na(h.avg_mood, '/10')}",
        f"• Average energy: {_na(h.avg_energy, '/10')}",
        f"• Average anxiety: {_na(h.avg_anxiety, '/10')}",
        f"• Average sleep: {_na(h.avg_sleep_hours, ' hours')}",
        f"• Weight change: {_na(h.weight_change, ' lbs')}",
    ]


def _medications(r: HealthReport) -> list[str]:
    lines = ["=== CURRENT MEDICATIONS ==="]
    if not r.medications:
        lines.append("• None recorded")
    for med in r.medications:
        lines.append(f"• {med.medication_name} {med.dosage or ''} - {med.frequency or ''}".rstrip(" -"))
        rating = med.effectiveness_rating if med.effectiveness_rating is not None else "Not rated"
        lines.append(f"    Effectiveness: {rating}/10")
        lines.append(f"    Prescribed by: {med.prescribed_by or 'Unknown'}")
        if med.side_effects:
            lines.append(f"    Side effects: {', '.join(med.side_effects)}")
    return lines


def _diagnoses(r: HealthReport) -> list[str]:
    lines = ["=== ACTIVE DIAGNOSES ==="]
    if not r.diagnoses:
        lines.append("• None recorded")
    for diag in r.diagnoses:
        lines.append(f"• {diag.diagnosis_name} ({diag.severity or 'unspecified'})")
        if diag.diagnosis_code:
            lines.append(f"    Code: {diag.diagnosis_code}")
        if diag.diagnosed_by:
            lines.append(f"    Diagnosed by: {diag.diagnosed_by}")
        if diag.diagnosed_date:
            lines.append(f"    Date: {_short_date(diag.diagnosed_date)}")
    return lines


def _seizures(r: HealthReport) -> list[str]:
    s = r.seizures
    types = ", ".join(f"{t.label}: {t.count}" for t in s.types) or "none recorded"
    avg = _round_int(s.avg_duration_seconds)
    return [
        "=== SEIZURE ACTIVITY ===",
        f"• Total seizures: {s.total}",
        f"• Average duration: {_na(avg, ' seconds')}",
        f"• Types: {types}",
        f"• Common triggers: {_top(s.triggers)}",
    ]


def _mental_health(r: HealthReport) -> list[str]:
    m = r.mental_health
    return [
        "=== MENTAL HEALTH ===",
        f"• Total check-ins: {m.total_entries}",
        f"• Entries with suicidal thoughts: {m.suicidal_thoughts_count}",
        f"• Crisis situations: {m.crisis_count}",
        f"• Times support was contacted: {m.support_contacted_count}",
        f"• Most effective coping strategies: {_top(m.coping)}",
    ]


def _blood_pressure(r: HealthReport) -> list[str]:
    bp = r.blood_pressure
    lines = [
        "=== BLOOD PRESSURE ===",
        f"• Total readings: {bp.total_readings}",
    ]
    if bp.total_readings:
        lines.append(f"• Average: {bp.avg_systolic}/{bp.avg_diastolic} mmHg")
        lines.append(f"• Range: {bp.min_systolic}-{bp.max_systolic} / {bp.min_diastolic}-{bp.max_diastolic} mmHg")
    if bp.avg_heart_rate is not None:
        lines.append(f"• Average heart rate: {bp.avg_heart_rate} bpm")
    return lines


def _weight_trends(r: HealthReport) -> list[str]:
    h = r.health
    return [
        "=== WEIGHT TRENDS ===",
        f"• Starting weight: {_na(h.weight_start, ' lbs')}",
        f"• Latest weight: {_na(h.weight_end, ' lbs')}",
        f"• Change: {_na(h.weight_change, ' lbs')}",
    ]


def _questions(r: HealthReport) -> list[str]:
    return [
        "=== QUESTIONS FOR DOCTOR ===",
        r.doctor.notes or "(Add your questions and concerns here)",
    ]


def _mood_patterns(r: HealthReport) -> list[str]:
    h, m = r.health, r.mental_health
    mood_range = f"{h.min_mood}-{h.max_mood}/10" if h.min_mood is not None else "n/a"
    return [
        "=== MOOD PATTERNS ===",
        f"• Average mood: {_na(h.avg_mood, '/10')}",
        f"• Mood range: {mood_range}",
        f"• Average anxiety: {_na(h.avg_anxiety, '/10')}",
        f"• Mood before check-ins: {_na(m.avg_mood_before, '/10')}",
        f"• Mood after check-ins: {_na(m.avg_mood_after, '/10')}",
    ]


def _coping_strategies(r: HealthReport) -> list[str]:
    lines = ["=== COPING STRATEGIES ==="]
    coping = r.mental_health.coping[:TOP_N]
    if not coping:
        lines.append("• None recorded")
    lines.extend(f"• {c.label} (used {c.count}x)" for c in coping)
    return lines


def _crisis_episodes(r: HealthReport) -> list[str]:
    m = r.mental_health
    return [
        "=== CRISIS EPISODES ===",
        f"• Crisis situations: {m.crisis_count}",
        f"• Dates: {_dates(m.crisis_dates)}",
        f"• Entries with suicidal thoughts: {m.suicidal_thoughts_count}",
    ]


def _support_systems(r: HealthReport) -> list[str]:
    m = r.mental_health
    return [
        "=== SUPPORT SYSTEMS ===",
        f"• Times support was contacted: {m.support_contacted_count}",
        f"• Safety plan followed: {m.safety_plan_followed_count}",
        f"• Support contacts: {_top(m.support_people)}",
    ]


def _triggers(r: HealthReport) -> list[str]:
    foods = ", ".join(t.food_name for t in r.heartburn_triggers[:TOP_N]) or "none recorded"
    return [
        "=== TRIGGERS ===",
        f"• Seizure triggers: {_top(r.seizures.triggers)}",
        f"• Mental health triggers: {_top(r.mental_health.triggers)}",
        f"• Heartburn foods: {foods}",
    ]


def _sleep_patterns(r: HealthReport) -> list[str]:
    h = r.health
    sleep_range = f"{h.min_sleep_hours}-{h.max_sleep_hours} hours" if h.min_sleep_hours is not None else "n/a"
    return [
        "=== SLEEP PATTERNS ===",
        f"• Average sleep: {_na(h.avg_sleep_hours, ' hours')}",
        f"• Sleep range: {sleep_range}",
        f"• Average sleep quality: {_na(h.avg_sleep_quality, '/10')}",
    ]


def _mood_correlation(r: HealthReport) -> list[str]:
    c = r.mood_correlation
    return [
        "=== MOOD AND SEIZURE CORRELATION ===",
        f"• Days with seizures: {c.seizure_days}",
        f"• Average mood on seizure days: {_na(c.avg_mood_seizure_days, '/10')}",
        f"• Average mood on other days: {_na(c.avg_mood_other_days, '/10')}",
    ]


def _emergency_episodes(r: HealthReport) -> list[str]:
    s, m = r.seizures, r.mental_health
    return [
        "=== EMERGENCY EPISODES ===",
        f"• Seizures requiring emergency services: {s.emergency_count}",
        f"• Dates: {_dates(s.emergency_dates)}",
        f"• Mental health crises: {m.crisis_count}",
    ]


def _heartburn(r: HealthReport) -> list[str]:
    lines = ["=== HEARTBURN TRIGGERS ==="]
    if not r.heartburn_triggers:
        lines.append("• None identified")
    for t in r.heartburn_triggers:
        lines.append(
            f"• {t.food_name}: {t.episode_count} episodes, "
            f"~{t.avg_time_to_heartburn}h before onset, severity {t.avg_severity}/10"
        )
    return lines


SECTION_RENDERERS: dict[str, Callable[[HealthReport], list[str]]] = {
    "patient_info": _patient_info,
    "health_summary": _health_summary,
    "medications": _medications,
    "diagnoses": _diagnoses,
    "seizures": _seizures,
    "mental_health": _mental_health,
    "blood_pressure": _blood_pressure,
    "weight_trends": _weight_trends,
    "questions": _questions,
    "mood_patterns": _mood_patterns,
    "coping_strategies": _coping_strategies,
    "crisis_episodes": _crisis_episodes,
    "support_systems": _support_systems,
    "triggers": _triggers,
    "sleep_patterns": _sleep_patterns,
    "mood_correlation": _mood_correlation,
    "emergency_episodes": _emergency_episodes,
    "heartburn": _heartburn,
}


def render_report(report: HealthReport) -> str:
    header = [
        f"HEALTH REPORT FOR {report.patient_name.upper()}",
        f"Generated: {_long_date(report.generated_at.date())}",
        f"Period: {report.start:%b} {report.start.day} - {_short_date(report.end)}",
    ]
    if report.doctor.name:
        header.append(f"Doctor: {report.doctor.name}")
    if report.doctor.appointment_date:
        header.append(f"Appointment: {_short_date(report.doctor.appointment_date)}")

    blocks = ["\n".join(header)]
    for section in report.sections:
        renderer = SECTION_RENDERERS.get(section)
        if renderer is None:
            logger.debug("Skipping unknown report section %r", section)
            continue
        blocks.append("\n".join(renderer(report)))

    blocks.append(
        "=== NOTES ===\n"
        "This report was generated automatically from health tracking data.\n"
        "Please review with your healthcare provider and discuss any concerns."
    )
    return "\n\n".join(blocks)


def report_filename(user_name: str, day: DateType) -> str:
    return f"health-report-{user_name.lower()}-{day.isoformat()}.txt"


# ---------- templates ----------

def list_templates(db: Session, user_id: str) -> list[ReportTemplate]:
    return (
        db.query(ReportTemplate)
        .filter(ReportTemplate.user_id == user_id)
        .order_by(ReportTemplate.is_default.desc(), ReportTemplate.template_name.asc())
        .all()
    )


def ensure_default_templates(db: Session, user_id: str) -> list[ReportTemplate]:
    """Give a user with no templates the three stock ones."""
    existing = list_templates(db, user_id)
    if existing:
        return existing

    for stock in DEFAULT_TEMPLATES:
        db.add(
            ReportTemplate(
                user_id=user_id,
                template_name=stock["template_name"],
                report_type=stock["report_type"],
                template_content={**stock["template_content"], "sections": list(stock["template_content"]["sections"])},
                is_default=stock["is_default"],
            )
        )
    db.commit()
    logger.info("Created default report templates for user %s", user_id)
    return list_templates(db, user_id)


def get_template(db: Session, user_id: str, template_id: str) -> ReportTemplate:
    template = (
        db.query(ReportTemplate)
        .filter(ReportTemplate.user_id == user_id)
        .filter(ReportTemplate.id == template_id)
        .one_or_none()
    )
    if template is None:
        raise TemplateNotFoundError(template_id)
    return template


def template_sections(template: ReportTemplate) -> list[str]:
    content = template.template_content or {}
    return list(content.get("sections") or [])


def create_template(
    db: Session,
    user_id: str,
    template_name: str,
    report_type: str = "doctor",
    sections: list[str] | None = None,
) -> ReportTemplate:
    if report_type not in REPORT_TYPES:
        raise ValueError(f"Unknown report type: {report_type}")
    template = ReportTemplate(
        user_id=user_id,
        template_name=template_name,
        report_type=report_type,
        template_content={
            "sections": list(sections or NEW_TEMPLATE_SECTIONS),
            "include_charts": True,
            "include_raw_data": False,
        },
        is_default=False,
    )
    db.add(template)
    db.commit()
    db.refresh(template)
    return template


def rename_template(db: Session, user_id: str, template_id: str, template_name: str) -> ReportTemplate:
    template = get_template(db, user_id, template_id)
    template.template_name = template_name
    db.commit()
    db.refresh(template)
    return template


def delete_template(db: Session, user_id: str, template_id: str) -> None:
    template = get_template(db, user_id, template_id)
    if template.is_default:
        raise DefaultTemplateError(f"Template {template.template_name!r} is a default template")
    db.delete(template)
    db.commit()
